# app/config/settings.py
"""
Application configuration using pydantic-settings (pydantic v2 style).

This centralizes environment-driven configuration. Prefer reading values
from environment variables; do not rely on os.getenv inline defaults which
can silently hide missing configuration.
"""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application configuration loaded from environment.

    Relevant environment variables:
      - SUPABASE_URL
      - SUPABASE_SERVICE_ROLE_KEY
      - DB_TIMEOUT
      - MENU_VIEW_LIMIT
      - DISH_LOOKUP_CHUNK_SIZE
      - SNAPSHOT_CHUNK_SIZE
      - DISH_LOOKUP_TIMEOUT
      - LOCAL_DISH_CACHE_PATH
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Supabase
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None

    # seconds allowed for a single blocking Supabase call
    db_timeout: float = Field(default=10.0, gt=0)

    # Menu rendering
    menu_view_limit: int = Field(default=100, ge=1)

    # Dish lookup
    dish_lookup_chunk_size: int = Field(default=200, ge=1)
    snapshot_chunk_size: int = Field(default=100, ge=1)
    dish_lookup_timeout: float = Field(default=10.0, gt=0)
    local_dish_cache_path: Optional[str] = None

    # --- validators / post-init checks ---
    @field_validator("supabase_url", "supabase_service_role_key", "local_dish_cache_path")
    @classmethod
    def maybe_strip(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    def model_post_init(self, __context) -> None:  # pydantic v2 hooks
        """
        Light-weight validation/notice that runs after model is constructed.
        Uses logging (not print) so messages show up in server logs.
        """
        if not self.supabase_url or not self.supabase_service_role_key:
            logger.warning(
                "Supabase credentials are not configured. "
                "Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY to enable DB features."
            )
        if not self.local_dish_cache_path:
            logger.info(
                "LOCAL_DISH_CACHE_PATH not set. Local dish cache lookups are disabled."
            )


# single exporter
settings = Settings()
