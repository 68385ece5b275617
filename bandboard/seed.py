"""Load bands, their members and channels from a YAML catalogue file."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import yaml

from .database import Database
from .models import Band

_CHANNEL_KEYS = ("youtube_url", "spotify_url", "facebook_url", "instagram_url", "tiktok_url")


def load_catalog(database: Database, catalog_path: Path) -> List[Band]:
    """Insert every band described in ``catalog_path`` and return the created rows.

    The file is expected to look like::

        bands:
          - name: The Example
            picture: example.jpg
            artists:
              - {name: Alice, role: vocals}
            channels:
              youtube_url: https://youtube.com/@example
    """
    with catalog_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    bands_raw = raw.get("bands") if isinstance(raw, dict) else None
    if not bands_raw:
        raise ValueError("Catalogue file must define at least one band under the 'bands' key")

    created: List[Band] = []
    for entry in bands_raw:
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ValueError("Each band entry needs a 'name'")
        band = database.create_band(
            str(entry["name"]),
            picture=_optional_text(entry.get("picture")),
            description=_optional_text(entry.get("description")),
        )
        for artist in entry.get("artists") or []:
            if isinstance(artist, str):
                artist = {"name": artist}
            if not isinstance(artist, dict) or not artist.get("name"):
                raise ValueError(f"Artist entries for band '{band.name}' need a 'name'")
            database.create_artist(
                str(artist["name"]),
                band_id=band.id,
                picture=_optional_text(artist.get("picture")),
                role=_optional_text(artist.get("role")),
            )
        channels = entry.get("channels")
        if channels:
            if not isinstance(channels, dict):
                raise ValueError(f"Channels for band '{band.name}' must be a mapping of link names to URLs")
            links: Dict[str, str] = {key: str(channels[key]) for key in _CHANNEL_KEYS if channels.get(key)}
            database.create_channels(band.id, links)
        created.append(band)
    return created


def _optional_text(value: object):
    if value is None:
        return None
    text = str(value).strip()
    return text or None


__all__ = ["load_catalog"]
