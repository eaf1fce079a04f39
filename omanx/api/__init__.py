"""
API module - FastAPI routes and HTTP handling.

This module handles:
- Request validation and parsing
- Response formatting (JSON and server-sent events)
- Error handling
- Route definitions
"""
from omanx.api.main import app, create_app

__all__ = ["app", "create_app"]
