"""Local authentication token for securing the chart API.

When the renderer shell starts the backend it passes a token via the
CRM_CHART_LOCAL_TOKEN env var and sends it back in X-Local-Token headers.
All /api/* requests (except /api/health) must include this token.

In dev mode (no CRM_CHART_LOCAL_TOKEN set), auth is disabled automatically.
Auth can also be explicitly disabled via CRM_CHART_NO_AUTH=true.
"""

from __future__ import annotations

import os
import secrets

_token: str | None = None


def get_or_create_token() -> str | None:
    """Return the local auth token if one is configured.

    Returns None (auth disabled) when:
    - CRM_CHART_NO_AUTH=true, OR
    - No CRM_CHART_LOCAL_TOKEN env var is set (dev mode)
    """
    global _token
    if os.environ.get("CRM_CHART_NO_AUTH", "").lower() == "true":
        return None
    env_token = os.environ.get("CRM_CHART_LOCAL_TOKEN")
    if not env_token:
        return None
    if _token is None:
        _token = env_token
    return _token


def verify_local_token(token: str) -> bool:
    """Verify a token using constant-time comparison."""
    expected = get_or_create_token()
    if expected is None:
        return True  # Auth disabled
    return secrets.compare_digest(token, expected)
