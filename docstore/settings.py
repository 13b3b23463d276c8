from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


@dataclass(frozen=True)
class Settings:
    # Remote service
    base_url: str
    auth_token: str

    # Transport
    timeout: float

    # Debug
    debug_log_requests: bool
    debug_log_responses: bool


def get_settings() -> Settings:
    base_url = (os.getenv("DOCSTORE_BASE_URL", "http://127.0.0.1:8000")).rstrip("/")

    # Empty means no Authorization header
    auth_token = os.getenv("DOCSTORE_AUTH_TOKEN", "")

    # Same as httpx's own default
    timeout = _env_float("DOCSTORE_TIMEOUT", 5.0)

    debug_log_requests = _env_bool("DOCSTORE_DEBUG_LOG_REQUESTS", True)
    debug_log_responses = _env_bool("DOCSTORE_DEBUG_LOG_RESPONSES", False)

    return Settings(
        base_url=base_url,
        auth_token=auth_token,
        timeout=timeout,
        debug_log_requests=debug_log_requests,
        debug_log_responses=debug_log_responses,
    )
