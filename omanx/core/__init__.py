"""
Core module - Configuration and cross-cutting concerns.

This module provides:
- config.py         : Environment-based configuration management
- logging_config.py : Centralized logging setup
- exceptions.py     : Error hierarchy mapped to HTTP responses
- audit.py          : Request ID, audit and security header middleware
- rate_limiter.py   : Per-client sliding window limiter
- validators.py     : Chat request validation
"""
from omanx.core.config import get_settings, Settings
from omanx.core.logging_config import setup_logging, get_logger

__all__ = [
    "get_settings",
    "Settings",
    "setup_logging",
    "get_logger",
]
