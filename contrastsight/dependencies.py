"""FastAPI dependency injection."""

from __future__ import annotations

from contrastsight.config import Settings, settings


def get_settings() -> Settings:
    return settings
