"""
OmanX - policy-gated assistant for Omani scholars in the United States.

This package contains all application source code organized by responsibility:
- api/       : FastAPI application factory, routes and dependencies
- core/      : Configuration, logging, errors, middleware and rate limiting
- routing/   : Lane classification (scholar vs local)
- knowledge/ : Knowledge document model, renderer and hot-reloading store
- cache/     : Response cache
- llm/       : Groq completion client and lane policies
- services/  : Chat request orchestration
- models/    : Pydantic models for request/response schemas
"""
