"""
Configuration management via environment variables.

This module loads configuration from .env file using python-dotenv.
All configuration values are accessed through the Settings class.

Secrets (the Groq API key, the admin key) only ever come from the
environment, so the same build can run in development and production.
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv


# Load .env file from project root
# This must happen before accessing os.environ
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    frozen=True makes the dataclass immutable, preventing accidental
    modification of settings at runtime. Tests derive variants with
    dataclasses.replace().

    Attributes:
        app_name: Application identifier for logging
        app_env: Environment name (development, staging, production)
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Also write a daily log file under logs/
        host: Bind address for `python -m omanx.api.main`
        port: Listen port
        groq_api_key: API key for the Groq completion service
        llm_model: Model identifier sent to the provider
        llm_temperature: LLM creativity (0.0 = deterministic, 1.0 = creative)
        llm_max_tokens: Maximum response length
        llm_timeout_seconds: Per-call provider timeout
        llm_max_retries: Provider-side retry count
        knowledge_path: JSON file holding the approved knowledge corpus
        knowledge_reload_seconds: Interval of the background mtime check
        cache_ttl_seconds: Response cache entry lifetime
        cache_max_entries: Response cache capacity
        rate_limit_max: Requests allowed per client per window on /chat
        rate_limit_window_seconds: Rate limit window length
        allowed_origins: CORS allow-list (empty allows every origin)
        admin_key: Shared secret for /admin endpoints in production
        enable_audit_logging: Log every request with timing
    """
    # Application settings
    app_name: str
    app_env: str
    log_level: str
    log_to_file: bool
    host: str
    port: int

    # LLM settings
    groq_api_key: str
    llm_model: str
    llm_temperature: float
    llm_max_tokens: int
    llm_timeout_seconds: float
    llm_max_retries: int

    # Knowledge settings
    knowledge_path: str
    knowledge_reload_seconds: float

    # Response cache settings
    cache_ttl_seconds: float
    cache_max_entries: int

    # Safety settings
    rate_limit_max: int
    rate_limit_window_seconds: int
    allowed_origins: Tuple[str, ...]
    admin_key: str
    enable_audit_logging: bool

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env.lower() == "development"

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env.lower() == "production"


def _get_env(key: str, default: Optional[str] = None) -> str:
    """
    Read one variable; a missing variable without a default is a startup error.

    Raises:
        ValueError: If the variable is required and unset
    """
    value = os.environ.get(key, default)
    if value is None:
        raise ValueError(
            f"Missing required setting {key}: export it or add it to .env"
        )
    return value


def _get_int(key: str, default: int) -> int:
    return int(_get_env(key, str(default)))


def _get_float(key: str, default: float) -> float:
    return float(_get_env(key, str(default)))


def _get_bool(key: str, default: bool) -> bool:
    return _get_env(key, str(default)).strip().lower() in ("1", "true", "yes", "on")


def _get_list(key: str) -> Tuple[str, ...]:
    """Comma-separated list; blank items are dropped."""
    raw = _get_env(key, "")
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Read the environment once and return the process-wide Settings.

    Raises:
        ValueError: If GROQ_API_KEY (or another required variable) is missing
    """
    app_env = _get_env("APP_ENV", "development")
    default_level = "INFO" if app_env.lower() == "production" else "DEBUG"

    return Settings(
        # Application
        app_name=_get_env("APP_NAME", "OmanX"),
        app_env=app_env,
        log_level=_get_env("LOG_LEVEL", default_level),
        log_to_file=_get_bool("LOG_TO_FILE", True),
        host=_get_env("HOST", "0.0.0.0"),
        port=_get_int("PORT", 3000),

        # LLM
        groq_api_key=_get_env("GROQ_API_KEY"),
        llm_model=_get_env("LLM_MODEL", "llama-3.3-70b-versatile"),
        llm_temperature=_get_float("LLM_TEMPERATURE", 0.2),
        llm_max_tokens=_get_int("LLM_MAX_TOKENS", 1024),
        llm_timeout_seconds=_get_float("LLM_TIMEOUT_SECONDS", 60.0),
        llm_max_retries=_get_int("LLM_MAX_RETRIES", 2),

        # Knowledge
        knowledge_path=_get_env("KNOWLEDGE_PATH", "knowledge.json"),
        knowledge_reload_seconds=_get_float("KNOWLEDGE_RELOAD_SECONDS", 30.0),

        # Response cache
        cache_ttl_seconds=_get_float("CACHE_TTL_SECONDS", 600.0),
        cache_max_entries=_get_int("CACHE_MAX_ENTRIES", 500),

        # Safety
        rate_limit_max=_get_int("RATE_LIMIT_MAX", 120),
        rate_limit_window_seconds=_get_int("RATE_LIMIT_WINDOW_SECONDS", 900),
        allowed_origins=_get_list("ALLOWED_ORIGINS"),
        admin_key=_get_env("ADMIN_KEY", ""),
        enable_audit_logging=_get_bool("ENABLE_AUDIT_LOGGING", True),
    )
