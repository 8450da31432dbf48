# app/services/food_rules_service.py
"""
Allowed / banned product lists a nutritionist sets for a client.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from app.config.settings import settings
from app.config.supabase import supabase_client
from app.services.db_helpers import make_result, parse_supabase_response, rows_of, run_blocking
from app.services.menu_primitives import get_string, split_list

logger = logging.getLogger(__name__)

FOOD_RULES_TABLE = "client_food_rules"


def _missing_updated_at(error: Optional[str]) -> bool:
    msg = (error or "").lower()
    return "updated_at" in msg and "does not exist" in msg


def food_rules_view(row: Dict[str, Any], limit: int) -> Dict[str, Any]:
    allowed = row.get("allowed_products")
    if allowed is None:
        allowed = row.get("allowed")
    banned = row.get("banned_products")
    if banned is None:
        banned = row.get("banned")
    return {
        "id": row.get("id"),
        "nutritionist_id": row.get("nutritionist_id"),
        "allowed": split_list(allowed, limit),
        "banned": split_list(banned, limit),
        "notes": get_string(row.get("notes")),
        "updated_at": row.get("updated_at") or row.get("created_at"),
    }


class FoodRulesService:

    def __init__(self, client: Any = None):
        self.client = client if client is not None else getattr(supabase_client, "client", None)
        if self.client is None:
            logger.warning("FoodRulesService: Supabase client not available.")

    async def _latest(self, client_id: str, by_updated_at: bool) -> Dict[str, Any]:
        def _fn():
            q = self.client.table(FOOD_RULES_TABLE).select("*").eq("client_id", client_id)
            if by_updated_at:
                q = q.order("updated_at", desc=True)
            return q.order("created_at", desc=True).limit(1).execute()

        try:
            raw = await run_blocking(_fn, timeout=settings.db_timeout)
        except Exception as exc:
            logger.warning("food rules query failed for client=%s: %s", client_id, exc)
            return make_result(False, error=str(exc) or type(exc).__name__)
        parsed = parse_supabase_response(raw)
        if not parsed["ok"]:
            return make_result(False, error=str(parsed.get("error") or "db_no_data"))
        return make_result(True, data=rows_of(raw))

    async def get_food_rules(self, client_id: str) -> Dict[str, Any]:
        """
        Newest food rules of a client as token lists.

        data is None when the client has no rules yet. Older databases lack
        `updated_at`; the query is then retried ordered by `created_at` alone.
        """
        if self.client is None:
            return make_result(False, error="supabase_client_unavailable")

        res = await self._latest(client_id, by_updated_at=True)
        if not res["ok"] and _missing_updated_at(res.get("error")):
            logger.info("client_food_rules has no updated_at column; ordering by created_at")
            res = await self._latest(client_id, by_updated_at=False)
        if not res["ok"]:
            return make_result(
                False,
                error="food_rules_unavailable",
                diagnostics={"cause": res.get("error")},
            )

        rows = res["data"]
        data = food_rules_view(rows[0], settings.menu_view_limit) if rows else None
        return make_result(True, data=data, diagnostics={"count": len(rows)})
