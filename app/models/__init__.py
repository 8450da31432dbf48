"""Pydantic models for menu views, the dish catalog and API payloads."""
from app.models.dish import DishCreateRequest, Ingredient, Macros
from app.models.menu_view import DayEntry, DaySummary, DishLookup, DishView, MealEntry
from app.models.requests import AssignMenuRequest, MenuViewRequest

__all__ = [
    "DayEntry",
    "DaySummary",
    "DishLookup",
    "DishView",
    "MealEntry",
    "DishCreateRequest",
    "Ingredient",
    "Macros",
    "AssignMenuRequest",
    "MenuViewRequest",
]
