"""Tests for the public catalogue pages and song submissions."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from bandboard.application import NOT_FOUND_BODY
from bandboard.catalog import BAND_NOT_FOUND, NO_SEARCH_RESULTS, SONG_FIELDS_REQUIRED
from bandboard.database import SEARCH_LIMIT, Database
from bandboard.models import Band


@pytest.fixture()
def band(database: Database) -> Band:
    band = database.create_band("Paper Planes", picture="planes.jpg", description="Indie rock from Bangkok")
    database.create_artist("Mali", band_id=band.id, role="vocals")
    database.create_artist("Ton", band_id=band.id, role="guitar")
    return band


def test_index_lists_artists(client: TestClient, band: Band) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert "Mali" in response.text
    assert "Ton" in response.text


def test_bands_page_links_to_detail(client: TestClient, band: Band) -> None:
    response = client.get("/bands")

    assert response.status_code == 200
    assert f'href="/band/{band.id}"' in response.text


def test_band_detail_lists_members(client: TestClient, band: Band) -> None:
    response = client.get(f"/band/{band.id}")

    assert response.status_code == 200
    assert "Indie rock from Bangkok" in response.text
    assert "Mali (vocals)" in response.text


@pytest.mark.parametrize("path", ["/band/999", "/band/not-a-number", "/Tracking_channel/999", "/webboard/999"])
def test_unknown_band_returns_not_found(client: TestClient, path: str) -> None:
    response = client.get(path)

    assert response.status_code == 404
    assert response.text == BAND_NOT_FOUND


def test_tracking_channel_shows_first_channel_row(client: TestClient, database: Database, band: Band) -> None:
    database.create_channels(band.id, {"youtube_url": "https://youtube.com/@planes"})

    response = client.get(f"/Tracking_channel/{band.id}")

    assert response.status_code == 200
    assert "https://youtube.com/@planes" in response.text
    assert "Spotify" not in response.text


def test_tracking_channel_without_channels(client: TestClient, band: Band) -> None:
    response = client.get(f"/Tracking_channel/{band.id}")

    assert response.status_code == 200
    assert "has not published any channels" in response.text


def test_band_webboard(client: TestClient, band: Band) -> None:
    response = client.get(f"/webboard/{band.id}")

    assert response.status_code == 200
    assert "Paper Planes webboard" in response.text


def test_search_matches_band_names(client: TestClient, database: Database, band: Band) -> None:
    database.create_band("Night Tram")

    response = client.get("/search", params={"q": "Planes"})

    assert response.status_code == 200
    assert "Paper Planes" in response.text
    assert "Night Tram" not in response.text
    assert NO_SEARCH_RESULTS not in response.text


def test_search_without_results_shows_message(client: TestClient, band: Band) -> None:
    response = client.get("/search", params={"q": "Polka"})

    assert response.status_code == 200
    assert NO_SEARCH_RESULTS in response.text


def test_search_is_limited(client: TestClient, database: Database) -> None:
    for index in range(SEARCH_LIMIT + 3):
        database.create_band(f"Echo {index:02d}")

    response = client.get("/search", params={"q": "Echo"})

    assert response.text.count('class="grid__title"') == SEARCH_LIMIT


def test_submit_song_requires_fields(client: TestClient, database: Database) -> None:
    response = client.post(
        "/submit_song",
        data={"song_name": "Runway", "artist_name": "", "youtube_url": "https://youtu.be/runway"},
        follow_redirects=False,
    )

    assert response.status_code == 200
    assert SONG_FIELDS_REQUIRED in response.text
    assert 'value="Runway"' in response.text
    assert database.list_songs() == []


def test_submit_song_stores_submission(client: TestClient, database: Database) -> None:
    response = client.post(
        "/submit_song",
        data={
            "song_name": "Runway",
            "artist_name": "Paper Planes",
            "youtube_url": "https://youtu.be/runway",
            "release_date": "2024-05-01",
        },
        follow_redirects=False,
    )

    assert response.status_code == 302
    assert response.headers["location"].endswith("/login")
    songs = database.list_songs()
    assert len(songs) == 1
    assert songs[0].spotify_url is None


@pytest.mark.parametrize("path", ["/information", "/song", "/webboard", "/Create_post", "/submit_song"])
def test_static_pages_render(client: TestClient, path: str) -> None:
    assert client.get(path).status_code == 200


def test_unknown_path_returns_fixed_not_found_page(client: TestClient) -> None:
    response = client.get("/definitely/not/here")

    assert response.status_code == 404
    assert response.text == NOT_FOUND_BODY


@pytest.mark.parametrize(("method", "path"), [("post", "/bands"), ("post", "/"), ("delete", "/register")])
def test_wrong_method_on_known_path_returns_not_found_page(client: TestClient, method: str, path: str) -> None:
    response = client.request(method.upper(), path)

    assert response.status_code == 404
    assert response.text == NOT_FOUND_BODY
    assert "allow" not in response.headers


def test_stylesheet_is_served(client: TestClient) -> None:
    response = client.get("/static/style.css")

    assert response.status_code == 200
    assert "navbar" in response.text
