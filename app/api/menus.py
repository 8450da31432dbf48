# app/api/menus.py
"""
Menu endpoints: render stored menus, list and create assignments, food rules.

Service envelopes map onto status codes:
  ok                          -> 200 / 201
  assignment_not_found        -> 404
  dish_not_found              -> 404
  supabase_client_unavailable -> 503
  anything else               -> 502
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from app.config.settings import settings
from app.models.requests import AssignMenuRequest, MenuViewRequest
from app.services.assignment_service import MenuAssignmentService
from app.services.dish_index_service import SOURCE_EMBEDDED, extract_embedded_index
from app.services.food_rules_service import FoodRulesService
from app.services.menu_view_builder import build_menu_view, summarize_days, view_state

logger = logging.getLogger(__name__)
router = APIRouter()

# Singletons
assignment_service = MenuAssignmentService()
food_rules_service = FoodRulesService()

_ERROR_STATUS = {
    "assignment_not_found": 404,
    "dish_not_found": 404,
    "supabase_client_unavailable": 503,
}


def envelope_response(res: Dict[str, Any], success_status: int = 200) -> JSONResponse:
    if res.get("ok"):
        return JSONResponse(
            {"ok": True, "data": res.get("data"), "diagnostics": res.get("diagnostics", {})},
            status_code=success_status,
        )
    error = res.get("error") or "unknown_error"
    status = _ERROR_STATUS.get(error, 502)
    logger.warning("menu endpoint failed: error=%s diagnostics=%s", error, res.get("diagnostics"))
    return JSONResponse(
        {"ok": False, "error": error, "diagnostics": res.get("diagnostics", {})},
        status_code=status,
    )


@router.post("/menus/view")
async def preview_menu(body: MenuViewRequest):
    """Render a menu payload without touching the database."""
    if body.dish_index:
        index, source = body.dish_index, "request"
    else:
        index = extract_embedded_index(body.menu_data)
        source = SOURCE_EMBEDDED if index else None

    days = build_menu_view(body.menu_data, index, limit=settings.menu_view_limit)
    return {
        "ok": True,
        "data": {
            "view_state": view_state(body.menu_data, days),
            "days": [d.model_dump(exclude_none=True) for d in days],
            "summary": [s.model_dump() for s in summarize_days(days)],
            "dish_source": source,
        },
    }


@router.get("/clients/{client_id}/menu")
async def client_menu(client_id: str, menu_id: Optional[str] = Query(default=None)):
    res = await assignment_service.get_client_menu(client_id, menu_id)
    return envelope_response(res)


@router.get("/clients/{client_id}/assignments")
async def client_assignments(
    client_id: str, nutritionist_id: Optional[str] = Query(default=None)
):
    res = await assignment_service.list_assignments(client_id, nutritionist_id)
    return envelope_response(res)


@router.post("/clients/{client_id}/assignments")
async def create_assignment(client_id: str, body: AssignMenuRequest):
    res = await assignment_service.assign_menu(
        client_id, body.nutritionist_id, body.menu, notes=body.notes
    )
    return envelope_response(res, success_status=201)


@router.get("/clients/{client_id}/food-rules")
async def client_food_rules(client_id: str):
    res = await food_rules_service.get_food_rules(client_id)
    return envelope_response(res)
