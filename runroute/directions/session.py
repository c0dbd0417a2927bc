"""Pooled HTTP session used by directions clients."""

from __future__ import annotations

import threading
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import DIRECTIONS_MAX_RETRIES, HTTP_POOL_CONNECTIONS, HTTP_POOL_MAXSIZE

RETRY_STATUSES = (500, 502, 503, 504)

_default_session: Optional[requests.Session] = None
_default_lock = threading.Lock()


def directions_retry(max_retries: int = DIRECTIONS_MAX_RETRIES) -> Retry:
    """Retry GETs on transient 5xx; the final response is handed back unraised."""

    return Retry(
        total=max_retries,
        backoff_factor=1.0,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )


def create_default_session(
    *,
    max_retries: int = DIRECTIONS_MAX_RETRIES,
    pool_connections: int = HTTP_POOL_CONNECTIONS,
    pool_maxsize: int = HTTP_POOL_MAXSIZE,
) -> requests.Session:
    adapter = HTTPAdapter(
        pool_connections=pool_connections,
        pool_maxsize=pool_maxsize,
        max_retries=directions_retry(max_retries),
    )
    session = requests.Session()
    for prefix in ("https://", "http://"):
        session.mount(prefix, adapter)
    session.headers.update(
        {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "User-Agent": "runroute/0.1",
        }
    )
    return session


def get_default_session() -> requests.Session:
    """Return the process-wide directions session, creating it on first use."""

    global _default_session
    with _default_lock:
        if _default_session is None:
            _default_session = create_default_session()
        return _default_session


__all__ = ["create_default_session", "directions_retry", "get_default_session"]
