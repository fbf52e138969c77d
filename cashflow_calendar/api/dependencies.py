"""Dependency injection for FastAPI endpoints"""

from datetime import datetime, timezone

from fastapi import Request

from cashflow_calendar.config import Settings, settings


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_settings() -> Settings:
    """Provide application settings"""
    return settings


def get_now() -> datetime:
    """Current instant; the only wall-clock read, overridden in tests"""
    return datetime.now(timezone.utc)
