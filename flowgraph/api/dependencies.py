"""
FastAPI dependencies exposing the application's components.

Components are created once by ``create_app`` and attached to
``app.state``; handlers receive them through these dependencies.
"""

from fastapi import Request

from ..config.app_config import Settings
from ..store.records import RecordStore


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_record_store(request: Request) -> RecordStore:
    """Record store backing the application."""
    return request.app.state.store
