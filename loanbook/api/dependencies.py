"""Dependency injection for FastAPI endpoints"""

from datetime import date

from fastapi import Request

from loanbook.config import settings
from loanbook.domain.models import BookPolicy


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_today() -> date:
    """Single as-of date for every computation in one request"""
    return date.today()


def get_book_policy() -> BookPolicy:
    """Provide the configured book policy"""
    return settings.book_policy()
