# app/api/dishes.py
"""
Nutritionist dish catalog endpoints.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter

from app.api.menus import envelope_response
from app.models.dish import DishCreateRequest
from app.services.dish_catalog_service import DishCatalogService

logger = logging.getLogger(__name__)
router = APIRouter()

dish_catalog_service = DishCatalogService()


@router.get("/nutritionists/{nutritionist_id}/dishes")
async def list_dishes(nutritionist_id: str):
    res = await dish_catalog_service.list_dishes(nutritionist_id)
    return envelope_response(res)


@router.post("/nutritionists/{nutritionist_id}/dishes")
async def create_dish(nutritionist_id: str, body: DishCreateRequest):
    res = await dish_catalog_service.create_dish(nutritionist_id, body.model_dump(mode="json", exclude_none=True))
    return envelope_response(res, success_status=201)


@router.delete("/nutritionists/{nutritionist_id}/dishes/{dish_id}")
async def delete_dish(nutritionist_id: str, dish_id: str):
    res = await dish_catalog_service.delete_dish(nutritionist_id, dish_id)
    return envelope_response(res)
