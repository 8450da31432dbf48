# app/services/local_dish_cache.py
"""
Local, offline dish collection used before the dish catalog moved to the database.

The cache file is JSON in any of these layouts:
  - a list of dish records, each carrying an `id`
  - an object mapping dish id -> dish record
  - an object wrapping one of the above under a storage key
    (e.g. {"nutritionist_dishes_v1": [...]})
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from app.services.menu_primitives import is_uuid
from app.services.menu_shapes import dish_reference_id

logger = logging.getLogger(__name__)


def _records_by_id(data: Any) -> Dict[str, Dict[str, Any]]:
    out: Dict[str, Dict[str, Any]] = {}
    if isinstance(data, list):
        for item in data:
            rid = dish_reference_id(item) if isinstance(item, dict) else None
            if rid:
                out[rid] = item
    elif isinstance(data, dict):
        for key, value in data.items():
            if not isinstance(value, (dict, list)):
                continue
            if isinstance(value, dict) and is_uuid(key):
                out[key.strip()] = value
            else:
                out.update(_records_by_id(value))
    return out


class LocalDishCache:

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None

    def load(self) -> Dict[str, Dict[str, Any]]:
        """Read the cache file. Missing or unreadable files yield an empty dict."""
        if self.path is None or not self.path.is_file():
            return {}
        try:
            with self.path.open(encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("local dish cache %s unreadable: %s", self.path, exc)
            return {}
        return _records_by_id(data)

    def lookup(self, ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        wanted = set(ids)
        if not wanted:
            return {}
        return {k: v for k, v in self.load().items() if k in wanted}
