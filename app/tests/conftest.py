# tests/conftest.py
import json
from types import SimpleNamespace

import pytest

import app.config.settings as settings_mod
from app.tests.fakes import FakeClient
from app.tests.sample_menus import OMELETTE_ID, SOUP_ID


@pytest.fixture(autouse=True)
def patch_settings(monkeypatch):
    """
    Provide sane defaults for settings used by services.
    Tests can override attributes on the returned settings object.
    """
    s = settings_mod.settings
    monkeypatch.setattr(s, "menu_view_limit", 100)
    monkeypatch.setattr(s, "dish_lookup_chunk_size", 200)
    monkeypatch.setattr(s, "snapshot_chunk_size", 100)
    monkeypatch.setattr(s, "local_dish_cache_path", None)
    return s


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def fake_supabase_client(monkeypatch):
    fake = SimpleNamespace(client=FakeClient(), health_check=lambda: True)
    monkeypatch.setattr("app.config.supabase.supabase_client", fake)
    return fake


@pytest.fixture
def dish_cache_file(tmp_path):
    path = tmp_path / "dishes.json"
    path.write_text(
        json.dumps(
            {
                "nutritionist_dishes_v1": [
                    {"id": OMELETTE_ID, "title": "Local omelette", "ingredients": ["eggs"]},
                    {"id": SOUP_ID, "title": "Local soup"},
                ]
            }
        ),
        encoding="utf-8",
    )
    return path
