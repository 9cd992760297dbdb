"""
RAWG video game database client.

Translates FetchParams into RAWG query parameters and returns the total match
count plus one page of games. Platform and genre names are mapped to RAWG's
numeric ids here; names that are not in the tables are dropped.
"""
from typing import Dict, List, Optional
import httpx

from ..errors import DataSourceError
from ..state import FetchParams, FetchResponse, GameRecord

DEFAULT_BASE_URL = "https://api.rawg.io/api"

PLATFORMS: Dict[str, int] = {
    "pc": 4,
    "playstation 5": 187,
    "ps5": 187,
    "playstation 4": 18,
    "ps4": 18,
    "playstation 3": 16,
    "ps3": 16,
    "xbox one": 1,
    "xbox series": 186,
    "xbox series x": 186,
    "xbox series s": 186,
    "xbox 360": 14,
    "xbox": 80,
    "nintendo switch": 7,
    "switch": 7,
    "ios": 3,
    "android": 21,
    "macos": 5,
    "mac": 5,
    "linux": 6,
}

GENRES: Dict[str, int] = {
    "action": 4,
    "indie": 51,
    "adventure": 3,
    "rpg": 5,
    "strategy": 10,
    "shooter": 2,
    "casual": 40,
    "simulation": 14,
    "puzzle": 7,
    "arcade": 11,
    "platformer": 83,
    "racing": 1,
    "sports": 15,
    "fighting": 6,
    "family": 19,
    "board games": 28,
    "card": 17,
    "educational": 34,
    "massively multiplayer": 59,
    "mmo": 59,
}


def _resolve_ids(names: List[str], table: Dict[str, int]) -> str:
    ids = []
    for name in names:
        resolved = table.get(name.strip().lower())
        if resolved:
            ids.append(str(resolved))
    return ",".join(ids)


def build_query_params(params: FetchParams) -> Dict[str, str]:
    """RAWG query string for a fetch, without the API key."""
    query: Dict[str, str] = {"page_size": str(params.page_size)}

    if params.page:
        query["page"] = str(params.page)

    if params.platforms:
        platform_ids = _resolve_ids(params.platforms, PLATFORMS)
        if platform_ids:
            query["platforms"] = platform_ids

    if params.genres:
        genre_ids = _resolve_ids(params.genres, GENRES)
        if genre_ids:
            query["genres"] = genre_ids

    if params.date_from or params.date_to:
        query["dates"] = f"{params.date_from or '1970-01-01'},{params.date_to or '2099-12-31'}"

    if params.metacritic_min is not None or params.metacritic_max is not None:
        low = params.metacritic_min if params.metacritic_min is not None else 0
        high = params.metacritic_max if params.metacritic_max is not None else 100
        query["metacritic"] = f"{low},{high}"

    if params.ordering:
        query["ordering"] = params.ordering

    if params.search:
        query["search"] = params.search
        query["search_precise"] = "true"
        if params.search_exact:
            query["search_exact"] = "true"

    if params.tags:
        query["tags"] = params.tags
    if params.developers:
        query["developers"] = params.developers
    if params.publishers:
        query["publishers"] = params.publishers
    if params.exclude_additions:
        query["exclude_additions"] = "true"

    return query


class RawgClient:
    """Async data source backed by the RAWG /games endpoint."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # No read timeout: cancellation is left to the transport layer.
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(None, connect=10.0))
        return self._client

    async def close(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RawgClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def fetch(self, params: FetchParams) -> FetchResponse:
        query = build_query_params(params)
        client = await self._get_client()

        response = await client.get(f"{self.base_url}/games", params={"key": self.api_key, **query})
        if not response.is_success:
            raise DataSourceError(
                f"RAWG API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        data = response.json()
        records = [GameRecord.from_api(g) for g in data.get("results") or []]
        return FetchResponse(
            total_count=int(data.get("count") or 0),
            records=records,
            echoed_params=query,
        )
