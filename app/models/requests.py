"""
Request bodies accepted by the HTTP layer.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class MenuViewRequest(BaseModel):
    menu_data: Any = None
    dish_index: Optional[Dict[str, Dict[str, Any]]] = None


class AssignMenuRequest(BaseModel):
    nutritionist_id: str = Field(..., min_length=1)
    menu: Dict[str, Any]
    notes: Optional[str] = None
