"""Client for the hosted wine catalog.

The catalog is a PostgREST-style backend: a wine table queried with
attribute filters, plus three scoped RPC lookups used as distractor pools
(get_countries, get_regions, get_subregions). The only writes are single-row
inserts for shareable games.

Raw rows are normalized into WineRecord once, here, so downstream code
never has to juggle optional fields like `region or appellation`.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

import httpx

from ..config import get_settings
from .geography import world_from_country

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Catalog unreachable or returned an unusable response."""


def _clean(value: Any) -> Optional[str]:
    """Strip strings; blank or missing values become None."""
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _coerce_vintage(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class WineRecord:
    """Canonical catalog wine. Vintage None means non-vintage."""
    id: str
    display_name: str
    country: Optional[str] = None
    region: Optional[str] = None
    appellation: Optional[str] = None
    variety: Optional[str] = None
    vintage: Optional[int] = None
    world: Optional[str] = None
    producer: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "WineRecord":
        """
        Normalize a raw catalog row.

        - blank strings become None
        - vintage is coerced to int (or None); rows flagged is_nv have no vintage
        - world is derived from country when not stored
        """
        country = _clean(row.get("country"))
        world = _clean(row.get("world"))
        world = world.lower() if world else None
        if world not in ("old", "new"):
            world = world_from_country(country)

        vintage = _coerce_vintage(row.get("vintage"))
        if row.get("is_nv"):
            vintage = None

        return cls(
            id=str(row.get("id") or row.get("wine_id") or ""),
            display_name=_clean(row.get("display_name")) or "",
            country=country,
            region=_clean(row.get("region")),
            appellation=_clean(row.get("appellation")),
            variety=_clean(row.get("variety")),
            vintage=vintage,
            world=world,
            producer=_clean(row.get("producer") or row.get("winery")),
        )

    @property
    def is_non_vintage(self) -> bool:
        return self.vintage is None


def _flatten_names(data: Any, key: str) -> List[str]:
    """RPC results come back as ["France", ...] or [{"country": "France"}, ...]."""
    if not isinstance(data, list):
        return []
    names = []
    for item in data:
        if isinstance(item, dict):
            value = item.get(key)
            if value is None and len(item) == 1:
                value = next(iter(item.values()))
        else:
            value = item
        value = _clean(value)
        if value:
            names.append(value)
    return names


class CatalogClient:
    """Async access to the wine catalog."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = get_settings()
        self._client = http_client

    def _headers(self) -> Dict[str, str]:
        key = self.settings.catalog_key
        headers = {"Accept": "application/json"}
        if key:
            headers["apikey"] = key
            headers["Authorization"] = f"Bearer {key}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        extra_headers: Optional[Dict[str, str]] = None,
        **kwargs,
    ) -> Any:
        url = f"{self.settings.catalog_url.rstrip('/')}/rest/v1/{path}"
        headers = self._headers()
        if extra_headers:
            headers.update(extra_headers)
        try:
            if self._client is not None:
                response = await self._client.request(method, url, headers=headers, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.settings.catalog_timeout_seconds) as client:
                    response = await client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise CatalogError(f"Catalog returned {e.response.status_code} for {path}") from e
        except httpx.HTTPError as e:
            raise CatalogError(f"Catalog request failed for {path}: {e}") from e
        except ValueError as e:
            raise CatalogError(f"Catalog returned invalid JSON for {path}") from e

    async def search_wines(
        self,
        tokens: List[str],
        variety: Optional[str] = None,
        vintage: Optional[int] = None,
        non_vintage: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Search the wine table.

        Args:
            tokens: Words OR-matched as substrings of display_name
            variety: Optional substring filter on variety
            vintage: Optional exact vintage filter
            non_vintage: Require vintage IS NULL (takes precedence over vintage)
            limit: Max rows

        Returns:
            Raw rows, in catalog order
        """
        params: List[tuple] = [
            ("select", "*"),
            ("limit", str(limit or self.settings.match_result_limit)),
        ]
        if tokens:
            ors = ",".join(f"display_name.ilike.*{tok}*" for tok in tokens)
            params.append(("or", f"({ors})"))
        if variety:
            params.append(("variety", f"ilike.*{variety}*"))
        if non_vintage:
            params.append(("vintage", "is.null"))
        elif vintage is not None:
            params.append(("vintage", f"eq.{vintage}"))

        data = await self._request("GET", self.settings.catalog_table, params=params)
        if not isinstance(data, list):
            raise CatalogError("Catalog search did not return a list")
        return [row for row in data if isinstance(row, dict)]

    async def get_countries(self) -> List[str]:
        data = await self._request("POST", "rpc/get_countries", json={})
        return _flatten_names(data, "country")

    async def get_regions(self, country: str) -> List[str]:
        data = await self._request("POST", "rpc/get_regions", json={"p_country": country})
        return _flatten_names(data, "region")

    async def get_subregions(self, country: str, region: str) -> List[str]:
        data = await self._request(
            "POST",
            "rpc/get_subregions",
            json={"p_country": country, "p_region": region},
        )
        return _flatten_names(data, "subregion")

    async def insert_row(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert one row and return it as stored (with generated columns).

        Raises:
            CatalogError: insert rejected or nothing came back
        """
        data = await self._request(
            "POST",
            table,
            extra_headers={"Prefer": "return=representation"},
            json=[row],
        )
        if isinstance(data, list) and data and isinstance(data[0], dict):
            return data[0]
        raise CatalogError(f"Insert into {table} returned no row")
