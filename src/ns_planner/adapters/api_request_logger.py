"""Tracing of upstream NS and OVAPI calls, enabled with NSP_LOG_REQUESTS=true."""

import json
import logging
import os
from typing import Any
from urllib.parse import urlencode

logger = logging.getLogger(__name__)

REDACTED = "***REDACTED***"
# The NS subscription key travels in a header and must never reach the logs
SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key", "ocp-apim-subscription-key"}


def should_log_requests() -> bool:
    return os.getenv("NSP_LOG_REQUESTS", "").lower() == "true"


def _url_with_params(url: str, params: dict[str, Any] | None) -> str:
    """Append sorted query parameters so identical searches trace identically."""
    if not params:
        return url
    query = urlencode(sorted(params.items()), safe=":+")
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


def _redact(headers: dict[str, str]) -> dict[str, str]:
    return {k: REDACTED if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()}


def log_api_request(
    upstream: str,
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> None:
    """Trace an outgoing GET to an upstream API.

    Args:
        upstream: Short upstream name used as log prefix, e.g. ``NS`` or ``OVAPI``.
        url: Request URL without query string.
        params: Query parameters.
        headers: Request headers; credentials are redacted.
    """
    if not should_log_requests():
        return

    lines = [f"{upstream} request: GET {_url_with_params(url, params)}"]
    if headers:
        lines.append(f"Headers: {json.dumps(_redact(headers), indent=2, sort_keys=True)}")
    logger.info("\n".join(lines))


def log_api_response(upstream: str, url: str, status: int | None, elapsed_seconds: float) -> None:
    """Trace the outcome of an upstream call; ``status`` is None when no answer arrived."""
    if not should_log_requests():
        return

    outcome = f"HTTP {status}" if status is not None else "no response"
    logger.info(f"{upstream} response: {outcome} from {url} in {elapsed_seconds * 1000:.0f} ms")
