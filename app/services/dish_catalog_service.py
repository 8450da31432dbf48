# app/services/dish_catalog_service.py
"""
Nutritionist dish catalog (`nutritionist_dishes`).

The catalog is where menus reference dishes from: assignment snapshots and
the remote dish lookup both read these rows. Rows are normalized into the
camelCase dish records the menu editor works with; ingredient records that
do not carry an id, a name and an amount are dropped.
"""
from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from app.config.settings import settings
from app.config.supabase import supabase_client
from app.services.db_helpers import call_db, make_result
from app.services.menu_primitives import as_record, get_string

logger = logging.getLogger(__name__)

DISHES_TABLE = "nutritionist_dishes"
DISH_CATEGORIES = ("breakfast", "lunch", "dinner", "snack")
DEFAULT_CATEGORY = "breakfast"
INGREDIENT_BASES = ("raw", "cooked")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def normalize_ingredient(value: Any) -> Optional[Dict[str, Any]]:
    """A stored ingredient record, or None when it is malformed."""
    if not isinstance(value, dict):
        return None
    ing_id, name, amount = value.get("id"), value.get("name"), value.get("amount")
    if not isinstance(ing_id, str) or len(ing_id) < 3:
        return None
    if not isinstance(name, str) or not isinstance(amount, str):
        return None
    calories = value.get("calories")
    if calories is not None and not _finite_number(calories):
        return None
    basis = value.get("basis")
    if basis is not None and basis not in INGREDIENT_BASES:
        return None
    return {"id": ing_id, "name": name, "amount": amount, "calories": calories, "basis": basis}


def row_to_dish(row: Dict[str, Any]) -> Dict[str, Any]:
    """Catalog row (snake_case columns) -> dish record."""
    raw_ingredients = row.get("ingredients") if isinstance(row.get("ingredients"), list) else []
    ingredients = [i for i in (normalize_ingredient(x) for x in raw_ingredients) if i is not None]
    tags = row.get("tags") if isinstance(row.get("tags"), list) else []
    category = row.get("category")
    return {
        "id": row.get("id"),
        "nutritionistId": row.get("nutritionist_id"),
        "title": row.get("title"),
        "category": category if category in DISH_CATEGORIES else DEFAULT_CATEGORY,
        "timeMinutes": row.get("time_minutes"),
        "difficulty": row.get("difficulty"),
        "ingredients": ingredients,
        "macros": as_record(row.get("macros")),
        "tags": [t for t in tags if t],
        "instructions": row.get("instructions"),
        "notes": row.get("notes"),
        "imageUrl": row.get("image_url"),
        "createdAt": row.get("created_at"),
        "updatedAt": row.get("updated_at"),
    }


class DishCatalogService:

    def __init__(self, client: Any = None):
        self.client = client if client is not None else getattr(supabase_client, "client", None)
        if self.client is None:
            logger.warning("DishCatalogService: Supabase client not available. DB operations will fail.")

    async def _call_db(self, fn: Callable, *args, **kwargs) -> Dict[str, Any]:
        return await call_db(self.client, fn, *args, timeout=settings.db_timeout, **kwargs)

    async def list_dishes(self, nutritionist_id: str) -> Dict[str, Any]:
        """Dishes of a nutritionist, newest first."""

        def _fn():
            return (
                self.client.table(DISHES_TABLE)
                .select("*")
                .eq("nutritionist_id", nutritionist_id)
                .order("created_at", desc=True)
                .execute()
            )

        res = await self._call_db(_fn)
        if not res["ok"]:
            return res
        dishes = [row_to_dish(r) for r in res["data"]]
        return make_result(True, data=dishes, diagnostics={"count": len(dishes)})

    async def create_dish(self, nutritionist_id: str, dish: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a dish owned by `nutritionist_id`. A missing id is generated.

        `dish` uses the row's column names (title, category, time_minutes,
        ingredients, macros, tags, instructions, notes, image_url).
        """
        now = _now_iso()
        row = {
            "id": get_string(dish.get("id")) or str(uuid.uuid4()),
            "nutritionist_id": nutritionist_id,
            "title": get_string(dish.get("title")) or "",
            "category": dish.get("category") if dish.get("category") in DISH_CATEGORIES else DEFAULT_CATEGORY,
            "time_minutes": dish.get("time_minutes"),
            "difficulty": dish.get("difficulty"),
            "ingredients": dish.get("ingredients") or [],
            "macros": dish.get("macros") or {},
            "tags": dish.get("tags") or [],
            "instructions": dish.get("instructions"),
            "notes": dish.get("notes"),
            "image_url": dish.get("image_url"),
            "created_at": now,
            "updated_at": now,
        }
        logger.info("create_dish nutritionist=%s dish=%s", nutritionist_id, row["id"])
        res = await self._call_db(lambda: self.client.table(DISHES_TABLE).insert(row).execute())
        if not res["ok"]:
            return res
        inserted = res["data"][0] if res["data"] else row
        return make_result(True, data=row_to_dish(inserted))

    async def delete_dish(self, nutritionist_id: str, dish_id: str) -> Dict[str, Any]:
        """Delete one of the nutritionist's own dishes."""

        def _fn():
            return (
                self.client.table(DISHES_TABLE)
                .delete()
                .eq("id", dish_id)
                .eq("nutritionist_id", nutritionist_id)
                .execute()
            )

        res = await self._call_db(_fn)
        if not res["ok"]:
            return res
        if not res["data"]:
            return make_result(False, error="dish_not_found", diagnostics={"dish_id": dish_id})
        return make_result(True, data={"id": dish_id})
