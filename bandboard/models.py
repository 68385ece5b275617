"""Domain models for the Bandboard catalogue and its user accounts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class User:
    """A registered account as shown to templates; never carries the hash."""

    id: int
    name: str
    first_name: Optional[str]
    last_name: Optional[str]
    email: str


@dataclass(frozen=True)
class StoredUser:
    """A user row including its password hash, used only while logging in."""

    id: int
    name: str
    email: str
    password_hash: str


@dataclass(frozen=True)
class NewUser:
    name: str
    email: str
    password_hash: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


@dataclass(frozen=True)
class Band:
    id: int
    name: str
    picture: Optional[str]
    description: Optional[str]


@dataclass(frozen=True)
class Artist:
    id: int
    name: str
    picture: Optional[str]
    role: Optional[str]
    band_id: Optional[int]


@dataclass(frozen=True)
class Channels:
    """Social and streaming links published for a band."""

    id: int
    band_id: int
    youtube_url: Optional[str]
    spotify_url: Optional[str]
    facebook_url: Optional[str]
    instagram_url: Optional[str]
    tiktok_url: Optional[str]


@dataclass(frozen=True)
class SongSubmission:
    song_name: str
    artist_name: str
    youtube_url: str
    release_date: str
    spotify_url: Optional[str] = None


__all__ = ["Artist", "Band", "Channels", "NewUser", "SongSubmission", "StoredUser", "User"]
