"""Utility for logging HTTP requests when METRA_LOG_REQUESTS is enabled."""

import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

SENSITIVE_PARAMS = frozenset({"api_token", "token", "apikey", "key"})


def should_log_requests() -> bool:
    """Check if request logging is enabled via METRA_LOG_REQUESTS environment variable."""
    return os.getenv("METRA_LOG_REQUESTS", "").lower() == "true"


def redact_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """Replace credential query parameters with a placeholder."""
    if not params:
        return {}
    return {
        k: "***REDACTED***" if k.lower() in SENSITIVE_PARAMS else v for k, v in params.items()
    }


def build_url_with_params(url: str, params: dict[str, Any] | None) -> str:
    """Build full URL with (redacted) query parameters."""
    if not params:
        return url
    param_str = "&".join(f"{k}={v}" for k, v in sorted(redact_params(params).items()))
    return f"{url}?{param_str}" if "?" not in url else f"{url}&{param_str}"


def log_api_request(method: str, url: str, params: dict[str, Any] | None = None) -> None:
    """Log request details if METRA_LOG_REQUESTS is enabled.

    Args:
        method: HTTP method (GET, POST, etc.).
        url: Request URL.
        params: Query parameters (optional, credentials are redacted).
    """
    if not should_log_requests():
        return

    logger.info(f"API Request: {method} {build_url_with_params(url, params)}")
