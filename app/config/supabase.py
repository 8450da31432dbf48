# app/config/supabase.py
"""
Process-wide Supabase client for the menu and dish services.

The client is created once from settings. Missing or malformed credentials
leave `client` as None; services then answer `supabase_client_unavailable`
instead of failing at import time.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from supabase import Client, create_client

from app.config.settings import settings

logger = logging.getLogger(__name__)

PROJECT_URL_RE = re.compile(r"^https://[A-Za-z0-9\-]+\.supabase\.co/?$")

# Every deployment has the assignments table; readiness checks query it.
HEALTH_TABLE = "client_menu_assignments"


def _host(url: Optional[str]) -> Optional[str]:
    return (urlparse(url).netloc or None) if url else None


class SupabaseClient:
    """Holds the supabase-py `Client` (or None) plus health helpers."""

    def __init__(self) -> None:
        self._client: Optional[Client] = self._connect(
            settings.supabase_url, settings.supabase_service_role_key
        )

    @staticmethod
    def _connect(url: Optional[str], key: Optional[str]) -> Optional[Client]:
        if not url or not key:
            logger.debug("Supabase not configured (url=%r, key set=%s)", url, bool(key))
            return None
        if not PROJECT_URL_RE.match(url):
            logger.error("SUPABASE_URL %r is not a https://<project>.supabase.co URL", url)
            return None
        try:
            client = create_client(url, key)
        except Exception as exc:
            logger.exception("Supabase client creation failed: %s", exc)
            return None
        logger.info("Supabase client ready for %s", _host(url))
        return client

    @property
    def client(self) -> Optional[Client]:
        return self._client

    def diagnostics(self) -> Dict[str, Any]:
        """Configuration facts safe to expose; never the key."""
        return {
            "configured": bool(settings.supabase_url and settings.supabase_service_role_key),
            "client_present": self._client is not None,
            "host": _host(settings.supabase_url),
        }

    def health_check(self) -> bool:
        """
        One-row select against HEALTH_TABLE. Blocking; callers run it in an
        executor. No client, an error payload, HTTP >= 400 or an exception
        all mean unhealthy.
        """
        if self._client is None:
            return False
        try:
            res = self._client.table(HEALTH_TABLE).select("id").limit(1).execute()
        except Exception as exc:
            logger.warning("Supabase health check failed: %s", exc)
            return False
        error = getattr(res, "error", None)
        status_code = getattr(res, "status_code", None)
        if error or (isinstance(status_code, int) and status_code >= 400):
            logger.warning("Supabase health check: error=%s status=%s", error, status_code)
            return False
        return True


supabase_client = SupabaseClient()
