"""
Dish catalog records as nutritionists create them.
"""
from __future__ import annotations

import math
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

DishCategory = Literal["breakfast", "lunch", "dinner", "snack"]
Difficulty = Literal["easy", "medium", "hard"]
IngredientBasis = Literal["raw", "cooked"]


class Ingredient(BaseModel):
    id: str = Field(..., min_length=3)
    name: str
    amount: str
    calories: Optional[float] = None
    basis: Optional[IngredientBasis] = None

    @field_validator("calories")
    @classmethod
    def finite_calories(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not math.isfinite(v):
            raise ValueError("calories must be a finite number")
        return v


class Macros(BaseModel):
    calories: Optional[float] = None
    protein: Optional[float] = None
    fat: Optional[float] = None
    carbs: Optional[float] = None
    fiber: Optional[float] = None


class DishCreateRequest(BaseModel):
    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    category: DishCategory = "breakfast"
    time_minutes: Optional[int] = Field(default=None, ge=0)
    difficulty: Optional[Difficulty] = None
    ingredients: List[Ingredient] = Field(default_factory=list)
    macros: Macros = Field(default_factory=Macros)
    tags: List[str] = Field(default_factory=list)
    instructions: Optional[str] = None
    notes: Optional[str] = None
    image_url: Optional[str] = None
