# app/services/menu_primitives.py
"""
Primitive extraction helpers for loosely-typed menu JSON.

Everything here is total: any input value is accepted and the worst case is
an empty result. Nothing raises for "shape didn't match".
"""
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional

DEFAULT_LIMIT = 100

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)

_LIST_SPLIT_RE = re.compile(r"[,;\n]")
_STEP_SPLIT_RE = re.compile(r"\n+")

INGREDIENT_NAME_KEYS = ("name", "title", "product", "item")
INGREDIENT_AMOUNT_KEYS = ("grams", "amount", "qty")


def is_record(value: Any) -> bool:
    return isinstance(value, dict)


def as_record(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(UUID_RE.match(value.strip()))


def get_string(value: Any) -> Optional[str]:
    """Trimmed non-empty string, stringified number, or None."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    # bool is an int subclass and never a display value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return None


def first_string(record: Dict[str, Any], keys: Iterable[str]) -> Optional[str]:
    for key in keys:
        s = get_string(record.get(key))
        if s:
            return s
    return None


def unique_trimmed(items: Iterable[str], limit: int = DEFAULT_LIMIT) -> List[str]:
    """Trim, drop blanks, dedupe keeping first occurrence, cap at `limit`."""
    out: List[str] = []
    seen = set()
    for item in items:
        t = item.strip()
        if not t or t in seen:
            continue
        seen.add(t)
        out.append(t)
        if len(out) >= limit:
            break
    return out


def split_list(value: Any, limit: int = DEFAULT_LIMIT) -> List[str]:
    """
    Flatten a tag-like value into tokens.

    Accepts delimited strings (comma, semicolon, newline), lists, scalars
    and records (their values), nested arbitrarily.
    """
    tokens: List[str] = []
    stack = [value]
    while stack:
        v = stack.pop()
        if v is None:
            continue
        if isinstance(v, list):
            stack.extend(reversed(v))
        elif isinstance(v, dict):
            stack.extend(reversed(list(v.values())))
        elif isinstance(v, str):
            tokens.extend(_LIST_SPLIT_RE.split(v))
        elif isinstance(v, (int, float)):
            tokens.append(str(v))
    return unique_trimmed(tokens, limit)


def normalize_ingredients(value: Any, limit: int = DEFAULT_LIMIT) -> List[str]:
    """
    Ingredient lines from a delimited string, a list of strings, or a list of
    records (`name amount`, either half dropped when absent). A record is
    read as the list of its values.
    """
    if not value:
        return []
    if isinstance(value, str):
        return unique_trimmed(_LIST_SPLIT_RE.split(value), limit)
    if isinstance(value, dict):
        value = list(value.values())
    if not isinstance(value, list):
        return []

    lines: List[str] = []
    for item in value:
        if isinstance(item, dict):
            parts = [
                first_string(item, INGREDIENT_NAME_KEYS),
                first_string(item, INGREDIENT_AMOUNT_KEYS),
            ]
            lines.append(" ".join(p for p in parts if p))
        else:
            lines.append(get_string(item) or "")
    return unique_trimmed(lines, limit)


def normalize_steps(value: Any, limit: int = DEFAULT_LIMIT) -> List[str]:
    """Cooking steps from a newline-separated string or a list of strings."""
    if not value:
        return []
    if isinstance(value, str):
        return unique_trimmed(_STEP_SPLIT_RE.split(value), limit)
    if isinstance(value, list):
        return unique_trimmed((get_string(x) or "" for x in value), limit)
    return []


def first_non_empty(*lists: List[str]) -> List[str]:
    for candidate in lists:
        if candidate:
            return candidate
    return []
