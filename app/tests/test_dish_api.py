# tests/test_dish_api.py
import pytest
from fastapi.testclient import TestClient

import app.api.dishes as dishes_api
import main
from app.services.dish_catalog_service import DISHES_TABLE, DishCatalogService
from app.tests.fakes import FakeClient
from app.tests.sample_menus import OMELETTE_ID


@pytest.fixture
def db():
    return FakeClient(rows={DISHES_TABLE: [{"id": OMELETTE_ID, "nutritionist_id": "n-1", "title": "Omelette"}]})


@pytest.fixture
def api(monkeypatch, db):
    monkeypatch.setattr(dishes_api, "dish_catalog_service", DishCatalogService(client=db))
    return TestClient(main.app)


def test_list_dishes(api):
    r = api.get("/nutritionists/n-1/dishes")
    assert r.status_code == 200
    assert [d["title"] for d in r.json()["data"]] == ["Omelette"]
    assert api.get("/nutritionists/n-2/dishes").json()["data"] == []


def test_create_dish(api, db):
    body = {
        "title": "Lentil soup",
        "category": "lunch",
        "ingredients": [{"id": "ing-1", "name": "lentils", "amount": "100 g", "basis": "raw"}],
        "macros": {"calories": 320},
    }
    r = api.post("/nutritionists/n-1/dishes", json=body)
    assert r.status_code == 201
    dish = r.json()["data"]
    assert dish["category"] == "lunch"
    assert dish["ingredients"] == [
        {"id": "ing-1", "name": "lentils", "amount": "100 g", "calories": None, "basis": "raw"}
    ]
    assert dish["macros"] == {"calories": 320}
    assert len(db.rows[DISHES_TABLE]) == 2


@pytest.mark.parametrize(
    "body",
    [
        {"title": ""},
        {"title": "Soup", "category": "brunch"},
        {"title": "Soup", "ingredients": [{"id": "x", "name": "salt", "amount": "1 g"}]},
        {"title": "Soup", "ingredients": [{"id": "ing-1", "name": "salt", "amount": "1 g", "basis": "fried"}]},
    ],
)
def test_create_dish_rejects_invalid_body(api, body):
    assert api.post("/nutritionists/n-1/dishes", json=body).status_code == 422


def test_delete_dish(api, db):
    assert api.delete(f"/nutritionists/n-2/dishes/{OMELETTE_ID}").status_code == 404
    r = api.delete(f"/nutritionists/n-1/dishes/{OMELETTE_ID}")
    assert r.status_code == 200
    assert r.json()["data"] == {"id": OMELETTE_ID}
    assert db.rows[DISHES_TABLE] == []
