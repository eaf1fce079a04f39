"""
API Routes module - Endpoint definitions.

Each file in this module defines routes for a specific domain:
- chat.py   : POST /chat (JSON or server-sent events)
- health.py : /health, /ready, /metrics diagnostics
- admin.py  : cache clearing and knowledge reloads
"""
from omanx.api.routes.admin import router as admin_router
from omanx.api.routes.chat import router as chat_router
from omanx.api.routes.health import router as health_router

__all__ = [
    "admin_router",
    "chat_router",
    "health_router",
]
