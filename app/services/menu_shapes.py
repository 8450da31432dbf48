# app/services/menu_shapes.py
"""
Shape detection and structural extraction for stored menu payloads.

Menus have been saved in several layouts over time: arrays or keyed objects
for days, meals and dishes, inline dish records or UUID references, and
synonym field names at every level. Each extractor walks an ordered list of
candidate fields and returns the first non-empty list it finds.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from app.services.menu_primitives import as_record, first_string, get_string, is_uuid

DAY_FIELDS = ("days", "plan", "items", "weeks", "week", "schedule")
MEAL_FIELDS = ("meals", "meal", "menu", "ration")
SLOT_KEYS = ("breakfast", "lunch", "dinner", "snack", "snacks", "supper")
DISH_FIELDS = ("dishes", "items", "recipes", "recipe", "meals", "products", "components")
DIRECT_DISH_FIELDS = ("value", "dishId", "dish_id")
DISH_ID_FIELDS = ("id", "dish_id", "dishId")
DAY_LABEL_FIELDS = ("day", "label", "title", "name")

DISH_KEYS = frozenset(
    (
        "ingredients",
        "products",
        "steps",
        "instructions",
        "cooking",
        "kcal",
        "calories",
        "energy",
        "recipe_name",
        "dish",
        "title",
    )
)
MEAL_KEYS = frozenset(("dishes", "items", "recipes", "recipe", "value", "products"))
# Keys that only ever hold a meal's dish collection.
WRAPPER_KEYS = ("dishes", "recipes", "value")

# Nested wrappers are searched at most this deep below a meal.
MAX_NESTING = 2

SLOT_ALIASES = {
    "breakfast": "breakfast",
    "breakfasts": "breakfast",
    "завтрак": "breakfast",
    "lunch": "lunch",
    "lunches": "lunch",
    "brunch": "lunch",
    "обед": "lunch",
    "dinner": "dinner",
    "dinners": "dinner",
    "supper": "dinner",
    "ужин": "dinner",
    "snack": "snack",
    "snacks": "snack",
    "morning_snack": "snack",
    "afternoon_snack": "snack",
    "evening_snack": "snack",
    "перекус": "snack",
    "перекусы": "snack",
    "полдник": "snack",
}


def looks_like_dish(record: Dict[str, Any]) -> bool:
    return isinstance(record, dict) and not DISH_KEYS.isdisjoint(record)


def looks_like_meal(record: Dict[str, Any]) -> bool:
    return isinstance(record, dict) and not MEAL_KEYS.isdisjoint(record)


def carries_dish_content(record: Dict[str, Any]) -> bool:
    """Dish-like by something other than a bare title."""
    return isinstance(record, dict) and any(k in record for k in DISH_KEYS if k != "title")


def looks_like_day(record: Dict[str, Any]) -> bool:
    return isinstance(record, dict) and any(k in record for k in MEAL_FIELDS + SLOT_KEYS)


def _holds_dishes(key: str, value: Any) -> bool:
    # a bare string under `recipe` or `items` is dish text, not a collection
    if isinstance(value, (list, dict)):
        return True
    return key == "value" and get_string(value) is not None


def is_meal_wrapper(record: Any) -> bool:
    """A record that holds dishes rather than being one."""
    if not isinstance(record, dict):
        return False
    held = [k for k in MEAL_KEYS if k in record and _holds_dishes(k, record[k])]
    if any(k in WRAPPER_KEYS for k in held):
        return True
    return bool(held) and not looks_like_dish(record)


def is_single_dish(record: Dict[str, Any]) -> bool:
    """A record under a dish field that is one dish rather than a keyed collection."""
    if not isinstance(record, dict):
        return False
    return looks_like_dish(record) or "name" in record or dish_reference_id(record) is not None


def normalize_slot_name(raw: str) -> str:
    """Canonical slot for known meal keys, the raw key otherwise."""
    return SLOT_ALIASES.get(raw.strip().lower(), raw)


def to_list(
    value: Any, single_if: Optional[Callable[[Dict[str, Any]], bool]] = None
) -> List[Any]:
    """
    Lists pass through; a record becomes its values, or a one-element list
    when `single_if` says the record is itself a leaf. Anything else is [].
    """
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        if single_if is not None and single_if(value):
            return [value]
        return list(value.values())
    return []


def _index_of(day: Any) -> Optional[float]:
    idx = as_record(day).get("index")
    if isinstance(idx, bool) or not isinstance(idx, (int, float)):
        return None
    return idx


def _label_day(key: str, day: Dict[str, Any]) -> Dict[str, Any]:
    """Keyed day: the key labels the day unless it is numeric or a label exists."""
    key = key.strip()
    if not key or key.isdigit() or first_string(day, DAY_LABEL_FIELDS):
        return day
    return {**day, "label": key}


def _day_list(candidate: Any) -> List[Dict[str, Any]]:
    if isinstance(candidate, dict) and not looks_like_day(candidate):
        return [_label_day(str(k), v) for k, v in candidate.items() if isinstance(v, dict)]
    return [d for d in to_list(candidate, single_if=looks_like_day) if isinstance(d, dict)]


def extract_days(payload: Any) -> List[Dict[str, Any]]:
    """
    Day records of a menu payload.

    A bare list is taken as the day list, a single day record becomes a
    one-element list and a keyed object yields its values labelled by key.
    Non-record elements are dropped. When every day carries a numeric
    `index`, days are ordered by it.
    """
    if isinstance(payload, list):
        candidates = [payload]
    else:
        root = as_record(payload)
        candidates = [root.get(field) for field in DAY_FIELDS]

    days: List[Dict[str, Any]] = []
    for candidate in candidates:
        days = _day_list(candidate)
        if days:
            break

    if days and all(_index_of(d) is not None for d in days):
        days = sorted(days, key=_index_of)
    return days


def _synthesize_meal(key: str, value: Any) -> Dict[str, Any]:
    if is_meal_wrapper(value):
        return {**value, "name": normalize_slot_name(key)}
    return {"name": normalize_slot_name(key), "value": value}


def _has_slot_keys(record: Dict[str, Any]) -> bool:
    return any(str(k).strip().lower() in SLOT_ALIASES for k in record)


def extract_meals(day: Any) -> List[Any]:
    """
    Meals of a day: the first meal field that is a list or record, else the
    slot keys (breakfast, lunch, ...) sitting directly on the day record.
    A lone meal or dish record under a meal field is a one-element list.
    """
    d = as_record(day)
    meals = None
    for field in MEAL_FIELDS:
        if d.get(field) is not None:
            meals = d[field]
            break

    if isinstance(meals, list):
        return meals
    if isinstance(meals, dict):
        if is_meal_wrapper(meals):
            return [meals]
        if looks_like_dish(meals) and not _has_slot_keys(meals):
            return [{"value": meals}]
        return [_synthesize_meal(str(k), v) for k, v in meals.items()]

    return [_synthesize_meal(key, d[key]) for key in SLOT_KEYS if key in d]


def _flatten_wrappers(items: List[Any], depth: int) -> List[Any]:
    """Replace meal-shaped wrappers inside a dish list by their own dishes."""
    out: List[Any] = []
    for item in items:
        if depth < MAX_NESTING and is_meal_wrapper(item):
            out.extend(extract_dishes(item, depth + 1))
        else:
            out.append(item)
    return out


def extract_dishes(meal: Any, depth: int = 0) -> List[Any]:
    """
    Dish references of a meal: scalars, inline dish records or id records.

    Tries the direct scalar shortcut, then the dish collection fields, then
    the meal record itself when it carries dish content, and finally digs
    into nested records (bounded by MAX_NESTING).
    """
    if isinstance(meal, str) or (
        isinstance(meal, (int, float)) and not isinstance(meal, bool)
    ):
        return [meal]

    m = as_record(meal)
    if not m:
        return []

    for field in DIRECT_DISH_FIELDS:
        direct = m.get(field)
        if get_string(direct):
            return [direct]

    for field in DISH_FIELDS + ("value",):
        found = to_list(m.get(field), single_if=is_single_dish)
        if found:
            return _flatten_wrappers(found, depth)

    if carries_dish_content(m):
        return [m]

    if depth < MAX_NESTING:
        for value in m.values():
            if isinstance(value, dict):
                nested = extract_dishes(value, depth + 1)
                if nested:
                    return nested
    return []


def dish_reference_id(ref: Any) -> Optional[str]:
    """UUID carried by a dish reference, whether a bare string or a record."""
    if isinstance(ref, str):
        return ref.strip() if is_uuid(ref) else None
    if isinstance(ref, dict):
        for field in DISH_ID_FIELDS:
            if is_uuid(ref.get(field)):
                return ref[field].strip()
    return None


def collect_dish_ids(payload: Any, limit: Optional[int] = None) -> List[str]:
    """Every referenced dish UUID in the payload, deduplicated, in order."""
    ids: List[str] = []
    seen = set()
    days = extract_days(payload)
    for day in days[:limit]:
        for meal in extract_meals(day)[:limit]:
            for ref in extract_dishes(meal)[:limit]:
                rid = dish_reference_id(ref)
                if rid and rid not in seen:
                    seen.add(rid)
                    ids.append(rid)
    return ids
