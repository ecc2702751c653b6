"""
Map HTTP responses and transport failures onto the notifier error taxonomy.
"""

from __future__ import annotations

import typing as t

import requests
from loguru import logger

from resilient_notifier.notifierErrors import (
    ApiError,
    InvalidChatId,
    InvalidToken,
    NetworkError,
    NotifierError,
    RateLimited,
    RequestTimeout,
)

DEFAULT_RETRY_AFTER = 60
_BODY_PREVIEW = 200


def classify_response(resp: requests.Response, destination_id: str) -> dict[str, t.Any]:
    """
    Return the decoded envelope for 2xx responses, raise a NotifierError otherwise.
    """
    status = resp.status_code
    if 200 <= status < 300:
        try:
            data = resp.json()
        except ValueError:
            logger.debug(f"Non-JSON success body ({status}), treating as ok")
            return {"ok": True}
        return data if isinstance(data, dict) else {"ok": True, "result": data}

    body = resp.text[:_BODY_PREVIEW]
    if status == 400:
        raise ApiError(f"bad request: {body}", status_code=400)
    if status == 401:
        raise InvalidToken()
    if status == 403:
        raise ApiError("forbidden", status_code=403)
    if status == 404:
        raise InvalidChatId(destination_id)
    if status == 429:
        retry_after = _retry_after(resp)
        logger.warning(f"Rate limited by provider, retry after {retry_after}s")
        raise RateLimited(retry_after)
    raise ApiError(f"http {status}: {body}", status_code=status)


def classify_transport_error(exc: requests.RequestException, secret: str | None = None) -> NotifierError:
    """Map a requests failure to Timeout/Network; `secret` is scrubbed from the detail."""
    detail = str(exc) or type(exc).__name__
    if secret:
        detail = detail.replace(secret, "<token>")
    if isinstance(exc, requests.Timeout):
        return RequestTimeout(detail)
    return NetworkError(detail)


def _retry_after(resp: requests.Response) -> int:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        params = data.get("parameters") or {}
        if isinstance(params, dict) and "retry_after" in params:
            try:
                return int(params["retry_after"])
            except (TypeError, ValueError):
                pass

    header = resp.headers.get("Retry-After")
    if header:
        try:
            return int(header)
        except ValueError:
            pass
    return DEFAULT_RETRY_AFTER
