from __future__ import annotations

"""Lightweight HTTP client util with retry.

Uses stdlib urllib; covers the two shapes the service needs: GET JSON (rate
providers) and POST JSON (hosted LLM calls).
"""
import json
import logging
import time
import urllib.request
import urllib.error
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger("itinerary_ace.http")


class HttpError(Exception):
    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


def _request_json(
    request: urllib.request.Request, *, timeout: float, retries: int, backoff: float
) -> Dict[str, Any]:
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            with urllib.request.urlopen(request, timeout=timeout) as resp:  # nosec B310
                data = resp.read()
                return json.loads(data.decode("utf-8"))
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace") if e.fp else ""
            last_err = HttpError(f"HTTP {e.code} for {request.full_url}", e.code, body)
            # Client errors will not improve with a retry.
            if 400 <= e.code < 500:
                raise last_err from e
        except (
            urllib.error.URLError,
            TimeoutError,
            ValueError,
        ) as e:  # ValueError for JSON decode
            last_err = e
        if attempt == retries:
            break
        logger.debug("retrying %s after error: %s", request.full_url, last_err)
        time.sleep(backoff * (2**attempt))
    if isinstance(last_err, HttpError):
        raise last_err
    raise HttpError(f"Failed to fetch JSON from {request.full_url}: {last_err}")


def get_json(
    url: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    timeout: float = 5.0,
    retries: int = 2,
    backoff: float = 0.5,
) -> Dict[str, Any]:
    request = urllib.request.Request(url, headers=dict(headers or {}), method="GET")
    return _request_json(request, timeout=timeout, retries=retries, backoff=backoff)


def post_json(
    url: str,
    payload: Mapping[str, Any],
    *,
    headers: Optional[Mapping[str, str]] = None,
    timeout: float = 30.0,
    retries: int = 0,
    backoff: float = 0.5,
) -> Dict[str, Any]:
    all_headers = {"Content-Type": "application/json"}
    all_headers.update(headers or {})
    request = urllib.request.Request(
        url,
        data=json.dumps(payload).encode("utf-8"),
        headers=all_headers,
        method="POST",
    )
    return _request_json(request, timeout=timeout, retries=retries, backoff=backoff)
