# tests/test_supabase_config.py
from types import SimpleNamespace

from app.config.supabase import HEALTH_TABLE, SupabaseClient
from app.tests.fakes import FakeClient


def unconfigured(monkeypatch, url=None, key=None):
    monkeypatch.setattr("app.config.supabase.settings.supabase_url", url)
    monkeypatch.setattr("app.config.supabase.settings.supabase_service_role_key", key)
    return SupabaseClient()


def test_missing_credentials_leave_no_client(monkeypatch):
    sc = unconfigured(monkeypatch)
    assert sc.client is None
    assert sc.health_check() is False
    assert sc.diagnostics() == {"configured": False, "client_present": False, "host": None}


def test_malformed_url_is_rejected(monkeypatch):
    sc = unconfigured(monkeypatch, url="http://localhost:54321", key="secret")
    assert sc.client is None
    assert sc.diagnostics()["host"] == "localhost:54321"
    assert "secret" not in str(sc.diagnostics())


def test_health_check_selects_from_assignments_table(monkeypatch):
    sc = unconfigured(monkeypatch)
    fake = FakeClient()
    sc._client = fake
    assert sc.health_check() is True
    assert fake.calls == [(HEALTH_TABLE, [])]

    fake.failures[HEALTH_TABLE] = "relation does not exist"
    assert sc.health_check() is False


def test_health_check_rejects_error_status(monkeypatch):
    sc = unconfigured(monkeypatch)
    response = SimpleNamespace(data=None, error=None, status_code=401)
    query = SimpleNamespace(select=lambda *a: query, limit=lambda n: query, execute=lambda: response)
    sc._client = SimpleNamespace(table=lambda name: query)
    assert sc.health_check() is False
