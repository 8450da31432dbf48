# tests/test_food_rules_service.py
from types import SimpleNamespace

import pytest

from app.services.food_rules_service import FOOD_RULES_TABLE, FoodRulesService
from app.tests.fakes import FakeClient


def rules_client(rows, failures=None):
    return FakeClient(rows={FOOD_RULES_TABLE: rows}, failures=failures)


@pytest.mark.asyncio
async def test_food_rules_as_token_lists():
    client = rules_client(
        [
            {
                "id": "r-1",
                "client_id": "c-1",
                "nutritionist_id": "n-1",
                "allowed_products": "oats, rice; rice",
                "banned": ["sugar", "milk, sugar"],
                "notes": "  ",
                "created_at": "2024-01-01",
                "updated_at": None,
            }
        ]
    )
    res = await FoodRulesService(client=client).get_food_rules("c-1")
    assert res["ok"] is True
    assert res["data"] == {
        "id": "r-1",
        "nutritionist_id": "n-1",
        "allowed": ["oats", "rice"],
        "banned": ["sugar", "milk"],
        "notes": None,
        "updated_at": "2024-01-01",
    }


@pytest.mark.asyncio
async def test_newest_rules_win():
    client = rules_client(
        [
            {"id": "old", "client_id": "c-1", "allowed": "a", "updated_at": "2024-01-01", "created_at": "2023-01-01"},
            {"id": "new", "client_id": "c-1", "allowed": "b", "updated_at": "2024-03-01", "created_at": "2023-01-01"},
            {"id": "x", "client_id": "c-2", "allowed": "c", "updated_at": "2025-01-01"},
        ]
    )
    res = await FoodRulesService(client=client).get_food_rules("c-1")
    assert res["data"]["id"] == "new"
    assert res["data"]["allowed"] == ["b"]


@pytest.mark.asyncio
async def test_missing_updated_at_column_retries_by_created_at():
    def no_updated_at(query):
        if any(col == "updated_at" for col, _ in query._order):
            return "column client_food_rules.updated_at does not exist"
        return None

    client = rules_client(
        [{"id": "r-1", "client_id": "c-1", "banned": "nuts", "created_at": "2024-02-02"}],
        failures={FOOD_RULES_TABLE: no_updated_at},
    )
    res = await FoodRulesService(client=client).get_food_rules("c-1")
    assert res["ok"] is True
    assert res["data"]["banned"] == ["nuts"]
    assert res["data"]["updated_at"] == "2024-02-02"
    assert [order for _, order in client.calls] == [
        [("updated_at", True), ("created_at", True)],
        [("created_at", True)],
    ]


@pytest.mark.asyncio
async def test_other_failures_are_not_retried():
    client = rules_client([], failures={FOOD_RULES_TABLE: "permission denied for table client_food_rules"})
    res = await FoodRulesService(client=client).get_food_rules("c-1")
    assert res["ok"] is False
    assert res["error"] == "food_rules_unavailable"
    assert "permission denied" in res["diagnostics"]["cause"]
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_no_rules_yet():
    res = await FoodRulesService(client=rules_client([])).get_food_rules("c-1")
    assert res["ok"] is True
    assert res["data"] is None
    assert res["diagnostics"]["count"] == 0


@pytest.mark.asyncio
async def test_no_client_configured(monkeypatch):
    monkeypatch.setattr("app.services.food_rules_service.supabase_client", SimpleNamespace(client=None))
    res = await FoodRulesService().get_food_rules("c-1")
    assert res["error"] == "supabase_client_unavailable"
