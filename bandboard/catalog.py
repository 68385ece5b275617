"""Public catalogue pages: artists, bands, channels, search and song submissions."""

from __future__ import annotations

import logging
from typing import Optional

import anyio
from fastapi import APIRouter, Form, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from .database import Database
from .models import Band, SongSubmission

logger = logging.getLogger("bandboard.catalog")

BAND_NOT_FOUND = "Band not found"
SONG_FIELDS_REQUIRED = "All fields are required!"
NO_SEARCH_RESULTS = "No bands match your search."

_STATIC_PAGES = {
    "/information": "information.html",
    "/song": "song.html",
    "/webboard": "webboard.html",
    "/Create_post": "create_post.html",
}


def build_catalog_router(*, database: Database, templates: Jinja2Templates) -> APIRouter:
    """Return the router serving the read-only catalogue and the song form."""

    router = APIRouter(include_in_schema=False)

    async def _require_band(raw_id: str) -> Band:
        band = None
        if raw_id.isdigit():
            band = await anyio.to_thread.run_sync(database.get_band, int(raw_id))
        if band is None:
            logger.info("Band %r not found", raw_id)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BAND_NOT_FOUND)
        return band

    @router.get("/", response_class=HTMLResponse, name="index")
    async def index(request: Request):
        artists = await anyio.to_thread.run_sync(database.list_artists)
        return templates.TemplateResponse(request, "index.html", {"artists": artists})

    @router.get("/bands", response_class=HTMLResponse, name="bands")
    async def bands(request: Request):
        rows = await anyio.to_thread.run_sync(database.list_bands)
        return templates.TemplateResponse(request, "bands.html", {"bands": rows})

    @router.get("/band/{band_id}", response_class=HTMLResponse, name="band_detail")
    async def band_detail(request: Request, band_id: str):
        band = await _require_band(band_id)
        artists = await anyio.to_thread.run_sync(database.list_band_artists, band.id)
        return templates.TemplateResponse(request, "artist.html", {"band": band, "artists": artists})

    @router.get("/Tracking_channel/{band_id}", response_class=HTMLResponse, name="tracking_channel")
    async def tracking_channel(request: Request, band_id: str):
        band = await _require_band(band_id)
        artists = await anyio.to_thread.run_sync(database.list_band_artists, band.id)
        channels = await anyio.to_thread.run_sync(database.get_band_channels, band.id)
        return templates.TemplateResponse(
            request,
            "tracking_channel.html",
            {"band": band, "artists": artists, "channels": channels},
        )

    @router.get("/webboard/{band_id}", response_class=HTMLResponse, name="band_webboard")
    async def band_webboard(request: Request, band_id: str):
        band = await _require_band(band_id)
        return templates.TemplateResponse(request, "webboard.html", {"band": band})

    @router.get("/search", response_class=HTMLResponse, name="search")
    async def search(request: Request, q: Optional[str] = Query(None)):
        term = q or ""
        results = await anyio.to_thread.run_sync(database.search_bands, term)
        return templates.TemplateResponse(
            request,
            "search.html",
            {
                "bands": results,
                "searchTerm": term,
                "message": None if results else NO_SEARCH_RESULTS,
            },
        )

    @router.get("/submit_song", response_class=HTMLResponse, name="submit_song")
    async def submit_song_form(request: Request):
        return templates.TemplateResponse(request, "submit_song.html", {})

    @router.post("/submit_song", name="process_submit_song")
    async def process_submit_song(
        request: Request,
        song_name: str = Form(""),
        artist_name: str = Form(""),
        youtube_url: str = Form(""),
        spotify_url: str = Form(""),
        release_date: str = Form(""),
    ):
        old_data = {
            "song_name": song_name,
            "artist_name": artist_name,
            "youtube_url": youtube_url,
            "spotify_url": spotify_url,
            "release_date": release_date,
        }
        if not (song_name and artist_name and youtube_url and release_date):
            return templates.TemplateResponse(
                request,
                "submit_song.html",
                {"error": SONG_FIELDS_REQUIRED, "old_data": old_data},
            )

        song = SongSubmission(
            song_name=song_name,
            artist_name=artist_name,
            youtube_url=youtube_url,
            spotify_url=spotify_url or None,
            release_date=release_date,
        )
        song_id = await anyio.to_thread.run_sync(database.insert_song, song)
        logger.info("Stored song submission #%s", song_id)
        return RedirectResponse(request.url_for("login"), status_code=status.HTTP_302_FOUND)

    def _static_page(template_name: str):
        async def render(request: Request):
            return templates.TemplateResponse(request, template_name, {})

        return render

    for path, template_name in _STATIC_PAGES.items():
        router.add_api_route(
            path,
            _static_page(template_name),
            methods=["GET"],
            response_class=HTMLResponse,
            name=template_name.rsplit(".", 1)[0],
        )

    return router


__all__ = ["build_catalog_router"]
