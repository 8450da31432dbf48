# app/services/assignment_service.py
"""
Menu assignments: a nutritionist assigns a menu to a client, the client reads it back.

An assignment stores a snapshot of the menu (with the referenced dishes
embedded under `dishIndex`), so later rendering does not depend on the dish
catalog still containing those dishes.

Every public method returns the standard envelope
{"ok": bool, "data": ..., "error": "...", "diagnostics": {...}}.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.config.settings import settings
from app.config.supabase import supabase_client
from app.services.db_helpers import call_db, make_result
from app.services.dish_catalog_service import DISHES_TABLE
from app.services.dish_index_service import DishIndexService
from app.services.menu_primitives import as_record, get_string
from app.services.menu_shapes import collect_dish_ids
from app.services.menu_view_builder import build_menu_view, summarize_days, view_state

logger = logging.getLogger(__name__)

ASSIGNMENTS_TABLE = "client_menu_assignments"

ASSIGNMENT_META_FIELDS = (
    "id",
    "title",
    "notes",
    "status",
    "start_date",
    "end_date",
    "created_at",
    "menu_id",
)

SNAPSHOT_PARTIAL_WARNING = (
    "Not every dish recipe could be loaded (permissions, missing table or unknown ids). "
    "The menu was saved, but some dishes may render without details."
)


def pick_active_assignment(rows: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """First `active` assignment carrying a menu, else the newest one carrying a menu."""
    with_menu = [r for r in rows if r.get("menu_id") or r.get("menu_data")]
    for row in with_menu:
        if row.get("status") == "active":
            return row
    return with_menu[0] if with_menu else None


def assignment_meta(row: Dict[str, Any]) -> Dict[str, Any]:
    meta = {k: row.get(k) for k in ASSIGNMENT_META_FIELDS}
    days_count = row.get("days_count")
    if days_count is None:
        days_count = as_record(row.get("menu_data")).get("daysCount")
    meta["days_count"] = days_count
    return meta


def dish_row_to_snapshot(row: Dict[str, Any]) -> Dict[str, Any]:
    """Catalog row (snake_case columns) -> dish record embedded in a menu snapshot."""
    return {
        "id": row.get("id"),
        "title": row.get("title"),
        "category": row.get("category"),
        "timeMinutes": row.get("time_minutes"),
        "difficulty": row.get("difficulty"),
        "ingredients": row["ingredients"] if isinstance(row.get("ingredients"), list) else [],
        "macros": as_record(row.get("macros")),
        "tags": [t for t in row.get("tags") or [] if t] if isinstance(row.get("tags"), list) else [],
        "instructions": row.get("instructions"),
        "notes": row.get("notes"),
        "imageUrl": row.get("image_url"),
        "createdAt": row.get("created_at"),
        "updatedAt": row.get("updated_at"),
    }


class MenuAssignmentService:

    def __init__(self, client: Any = None, dish_index_service: Optional[DishIndexService] = None):
        self.client = client if client is not None else getattr(supabase_client, "client", None)
        if self.client is None:
            logger.warning("MenuAssignmentService: Supabase client not available. DB operations will fail.")
        self.dish_index_service = dish_index_service or DishIndexService(client=self.client)

    async def _call_db(self, fn: Callable, *args, **kwargs) -> Dict[str, Any]:
        """Run a blocking SDK call in a thread and normalize the response into an envelope."""
        return await call_db(self.client, fn, *args, timeout=settings.db_timeout, **kwargs)

    # -----------------------
    # Reads
    # -----------------------
    async def list_assignments(
        self, client_id: str, nutritionist_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Assignments of a client, newest first, optionally limited to one nutritionist."""

        def _fn():
            q = self.client.table(ASSIGNMENTS_TABLE).select("*").eq("client_id", client_id)
            if nutritionist_id:
                q = q.eq("nutritionist_id", nutritionist_id)
            return q.order("created_at", desc=True).execute()

        res = await self._call_db(_fn)
        if res["ok"]:
            res["diagnostics"]["count"] = len(res["data"])
        return res

    async def get_assignment(self, client_id: str, menu_id: Optional[str] = None) -> Dict[str, Any]:
        """The assignment for `menu_id`, or the client's active one when no id is given."""
        listed = await self.list_assignments(client_id)
        if not listed["ok"]:
            return listed
        rows = listed["data"]
        if menu_id:
            row = next((r for r in rows if r.get("menu_id") == menu_id), None)
            if row is None:
                return make_result(False, error="assignment_not_found", diagnostics={"menu_id": menu_id})
            return make_result(True, data=row)
        return make_result(True, data=pick_active_assignment(rows))

    async def get_client_menu(self, client_id: str, menu_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Rendered menu for a client.

        data:
            assignment: metadata of the assignment, or None
            view_state: "no_menu" | "unrecognized" | "ok"
            days: list of day dicts (day -> meals -> dishes)
            summary: per-day list of filled meal slots
            dish_source / dish_hint: where dish recipes came from, or why not
        """
        found = await self.get_assignment(client_id, menu_id)
        if not found["ok"]:
            return found
        row = found["data"]
        payload = row.get("menu_data") if row else None

        lookup = await self.dish_index_service.build_index(payload)
        days = build_menu_view(payload, lookup.index, limit=settings.menu_view_limit)
        data = {
            "assignment": assignment_meta(row) if row else None,
            "view_state": view_state(payload, days),
            "days": [d.model_dump(exclude_none=True) for d in days],
            "summary": [s.model_dump() for s in summarize_days(days)],
            "dish_source": lookup.source,
            "dish_hint": lookup.hint,
        }
        return make_result(True, data=data, diagnostics={"day_count": len(days)})

    # -----------------------
    # Writes
    # -----------------------
    async def build_menu_snapshot(
        self, menu: Dict[str, Any], nutritionist_id: str
    ) -> Tuple[Dict[str, Any], Optional[str]]:
        """
        Copy of `menu` with the referenced catalog dishes embedded under `dishIndex`.

        Returns (snapshot, warning). A failed chunk is skipped and reported in
        the warning; the snapshot is always produced.
        """
        dish_ids = collect_dish_ids(menu)
        if not dish_ids:
            return dict(menu), None
        if self.client is None:
            return dict(menu), "Supabase is not configured; the menu is saved without recipes."

        dish_index: Dict[str, Dict[str, Any]] = {}
        had_error = False
        size = settings.snapshot_chunk_size
        for start in range(0, len(dish_ids), size):
            chunk = dish_ids[start : start + size]

            def _fn(chunk=chunk):
                return (
                    self.client.table(DISHES_TABLE)
                    .select("*")
                    .eq("nutritionist_id", nutritionist_id)
                    .in_("id", chunk)
                    .execute()
                )

            res = await self._call_db(_fn)
            if not res["ok"]:
                had_error = True
                continue
            for row in res["data"]:
                rid = get_string(row.get("id"))
                if rid:
                    dish_index[rid] = dish_row_to_snapshot(row)

        snapshot = {**menu, "dishIndex": dish_index}
        return snapshot, SNAPSHOT_PARTIAL_WARNING if had_error else None

    async def assign_menu(
        self,
        client_id: str,
        nutritionist_id: str,
        menu: Dict[str, Any],
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Snapshot `menu` and insert it as a new assignment for the client."""
        if self.client is None:
            return make_result(False, error="supabase_client_unavailable")

        snapshot, warning = await self.build_menu_snapshot(menu, nutritionist_id)
        row = {
            "client_id": client_id,
            "nutritionist_id": nutritionist_id,
            "title": get_string(menu.get("title")) or "Menu",
            "notes": (notes or "").strip() or None,
            "menu_id": get_string(menu.get("id")),
            "days_count": menu.get("daysCount"),
            "menu_data": snapshot,
        }
        logger.info(
            "assign_menu client=%s nutritionist=%s menu=%s dishes=%d",
            client_id,
            nutritionist_id,
            row["menu_id"],
            len(snapshot.get("dishIndex") or {}),
        )
        res = await self._call_db(lambda: self.client.table(ASSIGNMENTS_TABLE).insert(row).execute())
        if not res["ok"]:
            return res
        inserted = res["data"][0] if res["data"] else row
        return make_result(True, data={"assignment": inserted, "warning": warning})
