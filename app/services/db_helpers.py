# app/services/db_helpers.py
"""
Shared helpers for services talking to Supabase.

- Standardized result envelope for every public service method:
    {"ok": bool, "data": ..., "error": "...", "diagnostics": {...}}
- Blocking supabase-py calls run in a worker thread with a timeout.
- Parsing of SDK responses (object with .data OR dict with "data").
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


def parse_supabase_response(resp: Any) -> Dict[str, Any]:
    """
    Turn Supabase SDK responses (object with .data or dict) into a predictable dict.
    Returns {ok, data, status_code, error}
    """
    if resp is None:
        return {"ok": False, "data": None, "status_code": None, "error": None}

    if hasattr(resp, "data"):
        data = getattr(resp, "data")
        status_code = getattr(resp, "status_code", None)
        error = getattr(resp, "error", None)
    elif isinstance(resp, dict):
        data = resp.get("data", resp.get("result", resp.get("records", None)))
        status_code = resp.get("status_code", resp.get("statusCode", resp.get("status", None)))
        error = resp.get("error")
    else:
        return {"ok": False, "data": None, "status_code": None, "error": str(resp)}

    ok = data is not None and not error
    if isinstance(status_code, int) and status_code >= 400:
        ok = False
    return {"ok": ok, "data": data, "status_code": status_code, "error": error}


def rows_of(resp: Any) -> List[Dict[str, Any]]:
    """Row dicts of a response; anything unexpected becomes []."""
    data = parse_supabase_response(resp).get("data")
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        return []
    return [row for row in data if isinstance(row, dict)]


async def run_blocking(fn: Callable, *args, timeout: Optional[float] = None, **kwargs) -> Any:
    """Run a blocking SDK call in a thread, optionally bounded by `timeout` seconds."""
    call = asyncio.to_thread(lambda: fn(*args, **kwargs))
    if timeout is None:
        return await call
    return await asyncio.wait_for(call, timeout=timeout)


def make_result(
    ok: bool,
    data: Any = None,
    error: Optional[str] = None,
    diagnostics: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    res: Dict[str, Any] = {"ok": ok}
    if ok:
        res["data"] = data
    else:
        res["error"] = error or "unknown_error"
    res["diagnostics"] = diagnostics or {}
    return res


async def call_db(client: Any, fn: Callable, *args, timeout: Optional[float] = None, **kwargs) -> Dict[str, Any]:
    """
    Run a blocking SDK call against `client` and normalize it into an envelope
    whose data is the list of returned rows.
    """
    if client is None:
        return make_result(False, error="supabase_client_unavailable")
    name = getattr(fn, "__name__", str(fn))
    try:
        raw = await run_blocking(fn, *args, timeout=timeout, **kwargs)
    except Exception as exc:
        logger.exception("DB call %s raised: %s", name, exc)
        return make_result(False, error=str(exc) or type(exc).__name__, diagnostics={"fn": name})
    parsed = parse_supabase_response(raw)
    if not parsed["ok"]:
        return make_result(
            False,
            error=str(parsed.get("error") or "db_no_data"),
            diagnostics={"fn": name, "status_code": parsed.get("status_code")},
        )
    return make_result(True, data=rows_of(raw), diagnostics={"fn": name})
