# app/services/dish_resolver.py
"""
Turn a dish reference (inline record, UUID string, or plain name) into a DishView.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from app.models.menu_view import DishView
from app.services.menu_primitives import (
    DEFAULT_LIMIT,
    as_record,
    first_non_empty,
    first_string,
    get_string,
    is_uuid,
    normalize_ingredients,
    normalize_steps,
)
from app.services.menu_shapes import dish_reference_id, looks_like_dish

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "Dish"
UNAVAILABLE_DETAILS = "recipe unavailable: not embedded in the menu and not found in the dish catalog"

NAME_FIELDS = ("name", "title", "dish", "recipe_name")
PORTION_FIELDS = ("grams", "amount", "portion")
ENERGY_FIELDS = ("kcal", "calories", "energy")
INGREDIENT_FIELDS = ("ingredients", "products", "items", "components")
STEP_FIELDS = ("steps", "instructions", "cooking", "recipe")

DishIndex = Mapping[str, Dict[str, Any]]


def _energy(record: Dict[str, Any]) -> Optional[str]:
    kcal = first_string(record, ENERGY_FIELDS)
    if kcal:
        return kcal
    # catalog rows keep calories inside a macros record
    return first_string(as_record(record.get("macros")), ("calories", "kcal"))


def dish_from_record(
    record: Dict[str, Any], dish_id: Optional[str] = None, limit: int = DEFAULT_LIMIT
) -> DishView:
    portion = first_string(record, PORTION_FIELDS)
    kcal = _energy(record)
    details = " · ".join(
        part
        for part in (
            f"portion: {portion}" if portion else None,
            f"kcal: {kcal}" if kcal else None,
        )
        if part
    )

    ingredients = first_non_empty(
        *(normalize_ingredients(record.get(f), limit) for f in INGREDIENT_FIELDS)
    )
    steps = first_non_empty(*(normalize_steps(record.get(f), limit) for f in STEP_FIELDS))

    return DishView(
        id=dish_id,
        name=first_string(record, NAME_FIELDS) or PLACEHOLDER_NAME,
        details=details or None,
        ingredients=ingredients or None,
        steps=steps or None,
    )


def unavailable_dish(dish_id: str, name: Optional[str] = None) -> DishView:
    return DishView(id=dish_id, name=name or PLACEHOLDER_NAME, details=UNAVAILABLE_DETAILS)


def resolve_dish(ref: Any, dish_index: DishIndex, limit: int = DEFAULT_LIMIT) -> Optional[DishView]:
    """
    Resolve a single dish reference against `dish_index`.

    Returns None for references with nothing to show (None, blank strings,
    booleans); every other input yields a DishView with a non-empty name.
    """
    if isinstance(ref, str) or (isinstance(ref, (int, float)) and not isinstance(ref, bool)):
        text = get_string(ref)
        if not text:
            return None
        if is_uuid(text):
            record = dish_index.get(text)
            if record:
                return dish_from_record(record, text, limit)
            logger.debug("dish %s not found in lookup index", text)
            return unavailable_dish(text)
        return DishView(name=text)

    if not isinstance(ref, dict):
        return None

    rid = dish_reference_id(ref)
    if looks_like_dish(ref):
        return dish_from_record(ref, rid, limit)
    if rid and dish_index.get(rid):
        return dish_from_record(dish_index[rid], rid, limit)
    own_name = first_string(ref, NAME_FIELDS)
    if rid:
        return unavailable_dish(rid, own_name)
    return dish_from_record(ref, None, limit)
