# app/services/dish_index_service.py
"""
Assemble the dish lookup index for a menu payload.

Dish records have lived in three places over the life of the app, so menus
assigned at different times reference dishes that can only be found in one
of them. Sources are tried in strict priority and never merged:

  1. embedded  - a `dishIndex` snapshot saved inside the menu payload
  2. local     - the offline dish cache file
  3. remote    - Supabase, trying each (table, id column) candidate in turn
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from app.config.settings import settings
from app.config.supabase import supabase_client
from app.models.menu_view import DishLookup
from app.services.db_helpers import rows_of, run_blocking
from app.services.local_dish_cache import LocalDishCache
from app.services.menu_primitives import as_record, is_uuid
from app.services.menu_shapes import DISH_ID_FIELDS, collect_dish_ids, dish_reference_id

logger = logging.getLogger(__name__)

EMBEDDED_INDEX_FIELDS = ("dishIndex", "dish_index")
REMOTE_TABLES = (
    "nutritionist_dishes",
    "dishes",
    "recipes",
    "dish_recipes",
    "nutritionist_recipes",
)
REMOTE_ID_COLUMNS = DISH_ID_FIELDS

SOURCE_EMBEDDED = "embedded"
SOURCE_LOCAL = "local"

REMOTE_MISS_HINT = (
    "Dish recipes could not be loaded from the database. "
    "Dishes referenced by this menu are neither embedded in it nor in the dish catalog."
)

RowFetcher = Callable[[str, str, List[str]], Awaitable[List[Dict[str, Any]]]]


def extract_embedded_index(payload: Any) -> Dict[str, Dict[str, Any]]:
    """UUID-keyed dish records snapshotted into the payload at assignment time."""
    root = as_record(payload)
    for field in EMBEDDED_INDEX_FIELDS:
        embedded = root.get(field)
        if not isinstance(embedded, dict):
            continue
        out = {
            k.strip(): v for k, v in embedded.items() if is_uuid(k) and isinstance(v, dict)
        }
        if out:
            return out
    return {}


def _chunks(ids: Sequence[str], size: int) -> List[List[str]]:
    return [list(ids[i : i + size]) for i in range(0, len(ids), size)]


class DishIndexService:

    def __init__(
        self,
        client: Any = None,
        local_cache: Optional[LocalDishCache] = None,
        fetch_rows: Optional[RowFetcher] = None,
        tables: Sequence[str] = REMOTE_TABLES,
        columns: Sequence[str] = REMOTE_ID_COLUMNS,
    ):
        self.client = client if client is not None else getattr(supabase_client, "client", None)
        self.local_cache = local_cache or LocalDishCache(settings.local_dish_cache_path)
        self._fetch_rows = fetch_rows or self._fetch_rows_supabase
        self.candidates: List[Tuple[str, str]] = [(t, c) for t in tables for c in columns]
        if self.client is None and fetch_rows is None:
            logger.warning("DishIndexService: Supabase client not available. Remote lookups disabled.")

    async def _fetch_rows_supabase(self, table: str, column: str, ids: List[str]) -> List[Dict[str, Any]]:
        if self.client is None:
            raise RuntimeError("supabase_client_unavailable")
        resp = await run_blocking(
            self.client.table(table).select("*").in_(column, ids).execute,
            timeout=settings.dish_lookup_timeout,
        )
        if getattr(resp, "error", None):
            raise RuntimeError(str(resp.error))
        return rows_of(resp)

    async def fetch_remote(self, ids: List[str]) -> DishLookup:
        """Query (table, column) candidates in order until one returns matching rows."""
        if not ids:
            return DishLookup()

        chunk_size = settings.dish_lookup_chunk_size
        for table, column in self.candidates:
            found: Dict[str, Dict[str, Any]] = {}
            for chunk in _chunks(ids, chunk_size):
                try:
                    rows = await self._fetch_rows(table, column, chunk)
                except asyncio.TimeoutError:
                    logger.warning("dish lookup %s.%s timed out", table, column)
                    continue
                except Exception as exc:
                    logger.debug("dish lookup %s.%s failed: %s", table, column, exc)
                    continue
                for row in rows:
                    rid = row[column].strip() if is_uuid(row.get(column)) else dish_reference_id(row)
                    if rid:
                        found[rid] = row
            if found:
                logger.info("resolved %d/%d dishes from %s.%s", len(found), len(ids), table, column)
                return DishLookup(index=found, source=f"{table}.{column}")

        logger.warning("no dish source resolved any of %d ids", len(ids))
        return DishLookup(hint=REMOTE_MISS_HINT)

    async def build_index(self, payload: Any) -> DishLookup:
        """
        Dish lookup for every dish id referenced by `payload`.

        Never raises: failures end in an empty index carrying a hint.
        """
        ids = collect_dish_ids(payload, limit=settings.menu_view_limit)
        if not ids:
            return DishLookup()

        embedded = extract_embedded_index(payload)
        if embedded:
            return DishLookup(index=embedded, source=SOURCE_EMBEDDED)

        local = self.local_cache.lookup(ids)
        if local:
            return DishLookup(index=local, source=SOURCE_LOCAL)

        return await self.fetch_remote(ids)
