# app/services/menu_view_builder.py
"""
Build the Day -> Meal -> Dish presentation tree from a stored menu payload.

`build_menu_view` is pure: it never raises, keeps no state between calls and
returns an empty list when nothing recognizable is found.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from app.models.menu_view import DayEntry, DaySummary, DishView, MealEntry
from app.services.dish_resolver import DishIndex, resolve_dish
from app.services.menu_primitives import DEFAULT_LIMIT, as_record, first_string
from app.services.menu_shapes import DAY_LABEL_FIELDS, extract_days, extract_dishes, extract_meals

logger = logging.getLogger(__name__)

MEAL_NAME_FIELDS = ("name", "title", "type")


def _build_meal(meal: Any, position: int, dish_index: DishIndex, limit: int) -> MealEntry:
    name = first_string(as_record(meal), MEAL_NAME_FIELDS) or f"Meal {position + 1}"
    dishes: List[DishView] = []
    for ref in extract_dishes(meal)[:limit]:
        dish = resolve_dish(ref, dish_index, limit)
        if dish is not None:
            dishes.append(dish)
    return MealEntry(name=name, dishes=dishes)


def _build_day(day: Any, position: int, dish_index: DishIndex, limit: int) -> DayEntry:
    label = first_string(as_record(day), DAY_LABEL_FIELDS) or f"Day {position + 1}"
    meals = [
        _build_meal(meal, i, dish_index, limit)
        for i, meal in enumerate(extract_meals(day)[:limit])
    ]
    return DayEntry(label=label, meals=meals)


def build_menu_view(
    payload: Any, dish_index: Optional[DishIndex] = None, limit: int = DEFAULT_LIMIT
) -> List[DayEntry]:
    """
    Normalize a menu payload into a list of days.

    Args:
        payload: stored menu JSON of any historical shape (or anything else).
        dish_index: dish id -> dish record used to resolve UUID references.
        limit: cap on days, meals per day, dishes per meal and list fields.
    """
    index = dish_index or {}
    try:
        days = extract_days(payload)[:limit]
        return [_build_day(day, i, index, limit) for i, day in enumerate(days)]
    except Exception:
        # extractors are total; this only trips on exotic mapping/str subclasses
        logger.exception("menu payload could not be normalized")
        return []


def summarize_days(days: List[DayEntry]) -> List[DaySummary]:
    """Per day, the names of meals that have at least one dish."""
    return [
        DaySummary(label=day.label, slots=[m.name for m in day.meals if m.dishes])
        for day in days
    ]


def view_state(payload: Any, days: List[DayEntry]) -> str:
    """
    `no_menu` when nothing is assigned, `unrecognized` when a payload exists
    but yielded no days, `ok` otherwise.
    """
    if payload is None or payload in ("", {}, []):
        return "no_menu"
    if not days:
        return "unrecognized"
    return "ok"
