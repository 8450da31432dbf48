"""
View models for a rendered menu: day -> meal -> dish.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DishView(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    details: Optional[str] = None
    ingredients: Optional[List[str]] = None
    steps: Optional[List[str]] = None


class MealEntry(BaseModel):
    name: str
    dishes: List[DishView] = Field(default_factory=list)


class DayEntry(BaseModel):
    label: str
    meals: List[MealEntry] = Field(default_factory=list)


class DaySummary(BaseModel):
    label: str
    slots: List[str] = Field(default_factory=list)


class DishLookup(BaseModel):
    """A dish index plus where it came from, or why it is empty."""

    index: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    source: Optional[str] = None
    hint: Optional[str] = None

    @property
    def found(self) -> bool:
        return bool(self.index)
