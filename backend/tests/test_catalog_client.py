from __future__ import annotations

import asyncio
import json
from typing import Callable, List

import httpx
import pytest

from playlistgen.catalog import client as client_module
from playlistgen.catalog.client import (
    ApiError,
    CatalogClient,
    NetworkError,
    PermissionDenied,
    TokenExpired,
)

from conftest import make_tracks


def _client(handler: Callable[[httpx.Request], httpx.Response], *, retries: int = 1) -> CatalogClient:
    return CatalogClient(access_token="user-token", retries=retries, transport=httpx.MockTransport(handler))


async def _call(handler, method: str, *args, retries: int = 1, **kwargs):
    async with _client(handler, retries=retries) as client:
        return await getattr(client, method)(*args, **kwargs)


def test_recommendations_query_encoding():
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"tracks": make_tracks("r", 3)})

    tracks = asyncio.run(
        _call(
            handler,
            "get_recommendations",
            ["a1", "a2"],
            ["jazz", "soul"],
            [],
            {"target_energy": 0.7, "min_popularity": 40},
            15,
        )
    )

    assert [track["id"] for track in tracks] == ["r0", "r1", "r2"]
    request = seen[0]
    assert request.url.path == "/v1/recommendations"
    assert request.headers["Authorization"] == "Bearer user-token"
    params = request.url.params
    assert params["seed_artists"] == "a1,a2"
    assert params["seed_genres"] == "jazz,soul"
    assert "seed_tracks" not in params
    assert params["limit"] == "15"
    assert params["target_energy"] == "0.7"
    assert params["min_popularity"] == "40"


def test_top_tracks_request():
    seen: List[httpx.Request] = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"items": make_tracks("top", 2)})

    tracks = asyncio.run(_call(handler, "get_user_top_tracks", 15))
    assert len(tracks) == 2
    assert seen[0].url.path == "/v1/me/top/tracks"
    assert seen[0].url.params["limit"] == "15"


@pytest.mark.parametrize(
    "status_code, error",
    [(401, TokenExpired), (403, PermissionDenied), (404, ApiError), (500, ApiError)],
)
def test_status_classification(status_code, error):
    def handler(request):
        return httpx.Response(status_code, json={"error": {"status": status_code}})

    with pytest.raises(error):
        asyncio.run(_call(handler, "get_user_profile"))


def test_api_error_carries_status():
    def handler(request):
        return httpx.Response(503, text="unavailable")

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(_call(handler, "get_user_profile"))
    assert excinfo.value.status == 503
    assert str(excinfo.value) == "API Error: 503"


def test_network_error_classification():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        asyncio.run(_call(handler, "get_user_profile"))


def test_rate_limit_is_retried():
    responses = [
        httpx.Response(429, headers={"Retry-After": "0"}),
        httpx.Response(200, json={"id": "user-1"}),
    ]

    def handler(request):
        return responses.pop(0)

    profile = asyncio.run(_call(handler, "get_user_profile", retries=2))
    assert profile == {"id": "user-1"}


def test_rate_limit_with_http_date_falls_back_to_one_second(monkeypatch):
    delays: List[float] = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr(client_module.asyncio, "sleep", fake_sleep)
    responses = [
        httpx.Response(429, headers={"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"}),
        httpx.Response(200, json={"id": "user-1"}),
    ]

    def handler(request):
        return responses.pop(0)

    profile = asyncio.run(_call(handler, "get_user_profile", retries=2))
    assert profile == {"id": "user-1"}
    assert delays == [1.0]


def test_rate_limit_exhausted():
    def handler(request):
        return httpx.Response(429, headers={"Retry-After": "0"})

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(_call(handler, "get_user_profile", retries=2))
    assert excinfo.value.status == 429


def test_empty_search_skips_request():
    def handler(request):  # pragma: no cover - must not be reached
        raise AssertionError("no request expected")

    assert asyncio.run(_call(handler, "search_artists", "   ")) == []
    assert asyncio.run(_call(handler, "search_tracks", "")) == []


def test_search_artists_unwraps_items():
    def handler(request):
        assert request.url.params["type"] == "artist"
        assert request.url.params["limit"] == "10"
        return httpx.Response(200, json={"artists": {"items": [{"id": "a1", "name": "Nina"}]}})

    assert asyncio.run(_call(handler, "search_artists", "nina")) == [{"id": "a1", "name": "Nina"}]


def test_create_playlist_and_add_tracks_in_chunks():
    bodies = []

    def handler(request):
        body = json.loads(request.content) if request.content else None
        bodies.append((request.method, request.url.path, body))
        if request.url.path == "/v1/me/playlists":
            return httpx.Response(201, json={"id": "pl1", "name": body["name"]})
        return httpx.Response(201, json={"snapshot_id": "snap"})

    async def run():
        async with _client(handler) as client:
            playlist = await client.create_playlist("Road trip", "desc", False)
            await client.add_tracks_to_playlist(playlist["id"], [f"spotify:track:{i}" for i in range(150)])
            return playlist

    playlist = asyncio.run(run())
    assert playlist["id"] == "pl1"
    assert bodies[0] == ("POST", "/v1/me/playlists", {"name": "Road trip", "description": "desc", "public": False})
    assert [len(body["uris"]) for _, path, body in bodies[1:]] == [100, 50]
    assert all(path == "/v1/playlists/pl1/tracks" for _, path, _ in bodies[1:])


def test_remove_track_and_delete_playlist():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path, request.content))
        if request.url.path.endswith("/followers"):
            return httpx.Response(200)
        return httpx.Response(200, json={"snapshot_id": "snap"})

    async def run():
        async with _client(handler) as client:
            await client.remove_track_from_playlist("pl1", "spotify:track:x")
            return await client.delete_playlist("pl1")

    assert asyncio.run(run()) is True
    method, path, content = seen[0]
    assert (method, path) == ("DELETE", "/v1/playlists/pl1/tracks")
    assert json.loads(content) == {"tracks": [{"uri": "spotify:track:x"}]}
    assert seen[1][:2] == ("DELETE", "/v1/playlists/pl1/followers")


def test_get_tracks_by_ids_chunks_and_drops_nulls():
    chunk_sizes = []

    def handler(request):
        ids = request.url.params["ids"].split(",")
        chunk_sizes.append(len(ids))
        return httpx.Response(200, json={"tracks": [{"id": i} for i in ids[:-1]] + [None]})

    tracks = asyncio.run(_call(handler, "get_tracks_by_ids", [f"id{i}" for i in range(60)]))
    assert sorted(chunk_sizes) == [10, 50]
    assert len(tracks) == 58
    assert all(track is not None for track in tracks)


def test_save_tracks_uses_put():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path, json.loads(request.content)))
        return httpx.Response(200)

    asyncio.run(_call(handler, "save_tracks", ["t1"]))
    assert seen == [("PUT", "/v1/me/tracks", {"ids": ["t1"]})]


def test_available_genres_is_static():
    genres = CatalogClient.available_genres()
    assert "hip-hop" in genres
    assert len(genres) == len(set(genres)) > 100


@pytest.mark.parametrize(
    "method, args, path, body, expected",
    [
        ("get_user_top_artists", (5,), "/v1/me/top/artists", {"items": [{"id": "a1"}]}, [{"id": "a1"}]),
        ("get_artist_top_tracks", ("a1",), "/v1/artists/a1/top-tracks", {"tracks": [{"id": "t1"}]}, [{"id": "t1"}]),
        ("get_user_saved_tracks", (), "/v1/me/tracks", {"items": [{"track": {"id": "t1"}}]}, [{"track": {"id": "t1"}}]),
        ("get_playlist", ("pl1",), "/v1/playlists/pl1", {"id": "pl1", "name": "Mix"}, {"id": "pl1", "name": "Mix"}),
        (
            "get_playlist_tracks",
            ("pl1",),
            "/v1/playlists/pl1/tracks",
            {"items": [{"track": {"id": "t1"}}]},
            [{"track": {"id": "t1"}}],
        ),
        ("check_saved_tracks", (["t1", "t2"],), "/v1/me/tracks/contains", [True, False], [True, False]),
    ],
)
def test_read_endpoints(method, args, path, body, expected):
    seen: List[httpx.Request] = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=body)

    assert asyncio.run(_call(handler, method, *args)) == expected
    assert seen[0].method == "GET"
    assert seen[0].url.path == path


def test_read_endpoints_query_params():
    seen: List[httpx.Request] = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"tracks": [], "items": []} if "contains" not in request.url.path else [])

    async def run():
        async with _client(handler) as client:
            await client.get_artist_top_tracks("a1", market="SE")
            await client.get_user_top_artists(5, "long_term")
            assert await client.check_saved_tracks([]) == []

    asyncio.run(run())
    assert len(seen) == 2
    assert seen[0].url.params["market"] == "SE"
    assert seen[1].url.params["time_range"] == "long_term"
