"""
Tests for the RAWG client: query building and HTTP handling via httpx.MockTransport.
"""
import asyncio
import sys
import os

import httpx
import pytest

# Ensure src is on path
sys.path.insert(0, os.path.dirname(__file__))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from fakes import game
from game_agent.errors import DataSourceError
from game_agent.state import FetchParams
from game_agent.tools.rawg import RawgClient, build_query_params


def test_names_map_to_ids_and_unknown_names_are_dropped():
    query = build_query_params(FetchParams(platforms=["PC", "PlayStation 5", "Dreamcast"], genres=["rpg", "vaporwave"]))
    assert query["platforms"] == "4,187"
    assert query["genres"] == "5"


def test_only_unknown_names_omit_the_filter():
    query = build_query_params(FetchParams(platforms=["Dreamcast"]))
    assert "platforms" not in query


def test_open_ended_ranges_get_defaults():
    query = build_query_params(FetchParams(date_from="2024-01-01", metacritic_max=70))
    assert query["dates"] == "2024-01-01,2099-12-31"
    assert query["metacritic"] == "0,70"


def test_search_flags():
    query = build_query_params(FetchParams(search="Elden Ring", search_exact=True, exclude_additions=True))
    assert query["search"] == "Elden Ring"
    assert query["search_precise"] == "true"
    assert query["search_exact"] == "true"
    assert query["exclude_additions"] == "true"


def test_page_size_is_clamped():
    assert FetchParams(page_size=500).page_size == 40
    assert FetchParams(page_size=0).page_size == 1
    assert build_query_params(FetchParams())["page_size"] == "40"


def _client(handler) -> RawgClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RawgClient("secret-key", "https://rawg.test/api", client=http)


def test_fetch_parses_records_and_redacts_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(200, json={
            "count": 321,
            "results": [game("Hades", metacritic=93, rating=4.4), game("Celeste", rating=4.5)],
        })

    async def run():
        client = _client(handler)
        try:
            return await client.fetch(FetchParams(genres=["indie"], ordering="-rating"))
        finally:
            await client._client.aclose()

    result = asyncio.run(run())

    assert seen["url"].path == "/api/games"
    assert seen["url"].params["key"] == "secret-key"
    assert seen["url"].params["genres"] == "51"
    assert result.total_count == 321
    assert [r.name for r in result.records] == ["Hades", "Celeste"]
    assert result.records[0].platforms == ["PC"]
    assert "key" not in result.echoed_params
    assert result.echoed_params["ordering"] == "-rating"


def test_error_status_raises_data_source_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "bad key"})

    async def run():
        client = _client(handler)
        try:
            await client.fetch(FetchParams())
        finally:
            await client._client.aclose()

    with pytest.raises(DataSourceError) as exc_info:
        asyncio.run(run())

    assert exc_info.value.status_code == 401
    assert "401" in str(exc_info.value)


if __name__ == "__main__":
    test_names_map_to_ids_and_unknown_names_are_dropped()
    test_fetch_parses_records_and_redacts_key()
    print("✅ PASSED: rawg")
