"""SQLite-backed persistence for user accounts and the band catalogue."""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Mapping, Optional, Tuple

from .config import resolve_database_path
from .models import Artist, Band, Channels, NewUser, SongSubmission, StoredUser, User

SEARCH_LIMIT = 25

_CHANNEL_COLUMNS: Tuple[str, ...] = (
    "youtube_url",
    "spotify_url",
    "facebook_url",
    "instagram_url",
    "tiktok_url",
)


class DatabaseError(RuntimeError):
    """Raised when the underlying store cannot complete a query."""


class DuplicateEmailError(ValueError):
    """Raised when inserting a user whose email is already registered."""


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


class Database:
    """Simple wrapper around SQLite for users, bands, artists and songs."""

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self._path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise DatabaseError(f"Unable to open database at {self._path}") from exc
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise DatabaseError("Database query failed") from exc
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    first_name TEXT,
                    last_name TEXT,
                    email TEXT NOT NULL UNIQUE,
                    password TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS bands_database (
                    id_bands INTEGER PRIMARY KEY AUTOINCREMENT,
                    band_name TEXT NOT NULL,
                    band_picture TEXT,
                    description TEXT
                );

                CREATE TABLE IF NOT EXISTS artist_database (
                    id_artist INTEGER PRIMARY KEY AUTOINCREMENT,
                    artist_name TEXT NOT NULL,
                    artist_picture TEXT,
                    role TEXT,
                    id_bands INTEGER REFERENCES bands_database(id_bands) ON DELETE SET NULL
                );

                CREATE TABLE IF NOT EXISTS channels_database (
                    id_channel INTEGER PRIMARY KEY AUTOINCREMENT,
                    id_bands INTEGER NOT NULL REFERENCES bands_database(id_bands) ON DELETE CASCADE,
                    youtube_url TEXT,
                    spotify_url TEXT,
                    facebook_url TEXT,
                    instagram_url TEXT,
                    tiktok_url TEXT
                );

                CREATE TABLE IF NOT EXISTS submit_song (
                    id_song INTEGER PRIMARY KEY AUTOINCREMENT,
                    song_name TEXT NOT NULL,
                    artist_name TEXT NOT NULL,
                    youtube_url TEXT NOT NULL,
                    spotify_url TEXT,
                    release_date TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_artist_id_bands ON artist_database(id_bands);
                CREATE INDEX IF NOT EXISTS idx_channels_id_bands ON channels_database(id_bands);
                """
            )

    # ------------------------------------------------------------------
    # Credential store
    # ------------------------------------------------------------------
    def insert_user(self, user: NewUser) -> int:
        """Persist a new user and return the id assigned by the store."""

        with self._connect() as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO users (first_name, last_name, name, email, password)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (user.first_name, user.last_name, user.name, user.email, user.password_hash),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateEmailError("A user with that email already exists") from exc
            return int(cursor.lastrowid)

    def count_users_by_email(self, email: str) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) AS total FROM users WHERE email = ?", (email,)).fetchone()
        return int(row["total"])

    def email_exists(self, email: str) -> bool:
        return self.count_users_by_email(email) > 0

    def find_user_by_email(self, email: str) -> Optional[StoredUser]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, name, email, password FROM users WHERE email = ?",
                (email,),
            ).fetchone()
        if row is None:
            return None
        return StoredUser(id=row["id"], name=row["name"], email=row["email"], password_hash=row["password"])

    def get_user(self, user_id: int) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, name, first_name, last_name, email FROM users WHERE id = ?",
                (user_id,),
            ).fetchone()
        if row is None:
            return None
        return User(
            id=row["id"],
            name=row["name"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
        )

    # ------------------------------------------------------------------
    # Catalogue
    # ------------------------------------------------------------------
    def create_band(self, name: str, *, picture: Optional[str] = None, description: Optional[str] = None) -> Band:
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO bands_database (band_name, band_picture, description) VALUES (?, ?, ?)",
                (name, picture, description),
            )
            band_id = int(cursor.lastrowid)
        return Band(id=band_id, name=name, picture=picture, description=description)

    def create_artist(
        self,
        name: str,
        *,
        band_id: Optional[int] = None,
        picture: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Artist:
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO artist_database (artist_name, artist_picture, role, id_bands) VALUES (?, ?, ?, ?)",
                (name, picture, role, band_id),
            )
            artist_id = int(cursor.lastrowid)
        return Artist(id=artist_id, name=name, picture=picture, role=role, band_id=band_id)

    def create_channels(self, band_id: int, links: Mapping[str, Optional[str]]) -> Channels:
        values = {key: links.get(key) for key in _CHANNEL_COLUMNS}
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO channels_database (
                    id_bands, youtube_url, spotify_url, facebook_url, instagram_url, tiktok_url
                )
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (band_id, *(values[key] for key in _CHANNEL_COLUMNS)),
            )
            channel_id = int(cursor.lastrowid)
        return Channels(id=channel_id, band_id=band_id, **values)

    def list_artists(self) -> List[Artist]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM artist_database ORDER BY id_artist").fetchall()
        return [self._row_to_artist(row) for row in rows]

    def list_bands(self) -> List[Band]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM bands_database ORDER BY id_bands").fetchall()
        return [self._row_to_band(row) for row in rows]

    def get_band(self, band_id: int) -> Optional[Band]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM bands_database WHERE id_bands = ?", (band_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_band(row)

    def list_band_artists(self, band_id: int) -> List[Artist]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM artist_database WHERE id_bands = ? ORDER BY id_artist",
                (band_id,),
            ).fetchall()
        return [self._row_to_artist(row) for row in rows]

    def get_band_channels(self, band_id: int) -> Optional[Channels]:
        """Return the first channel row published for a band, if any."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM channels_database WHERE id_bands = ? ORDER BY id_channel LIMIT 1",
                (band_id,),
            ).fetchone()
        if row is None:
            return None
        return Channels(
            id=row["id_channel"],
            band_id=row["id_bands"],
            **{key: row[key] for key in _CHANNEL_COLUMNS},
        )

    def search_bands(self, term: str, *, limit: int = SEARCH_LIMIT) -> List[Band]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT id_bands, band_name, band_picture, description
                FROM bands_database
                WHERE band_name LIKE ?
                ORDER BY id_bands
                LIMIT ?
                """,
                (f"%{term}%", limit),
            ).fetchall()
        return [self._row_to_band(row) for row in rows]

    def insert_song(self, song: SongSubmission) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO submit_song (song_name, artist_name, youtube_url, spotify_url, release_date)
                VALUES (?, ?, ?, ?, ?)
                """,
                (song.song_name, song.artist_name, song.youtube_url, song.spotify_url, song.release_date),
            )
            return int(cursor.lastrowid)

    def list_songs(self) -> List[SongSubmission]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM submit_song ORDER BY id_song").fetchall()
        return [
            SongSubmission(
                song_name=row["song_name"],
                artist_name=row["artist_name"],
                youtube_url=row["youtube_url"],
                spotify_url=row["spotify_url"],
                release_date=row["release_date"],
            )
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _row_to_band(row: sqlite3.Row) -> Band:
        return Band(
            id=row["id_bands"],
            name=row["band_name"],
            picture=row["band_picture"],
            description=row["description"],
        )

    @staticmethod
    def _row_to_artist(row: sqlite3.Row) -> Artist:
        return Artist(
            id=row["id_artist"],
            name=row["artist_name"],
            picture=row["artist_picture"],
            role=row["role"],
            band_id=row["id_bands"],
        )


__all__ = [
    "Database",
    "DatabaseError",
    "DuplicateEmailError",
    "SEARCH_LIMIT",
    "resolve_database_path",
]
