"""Shared HTTP transport utilities for the database REST adapter.

This module provides a thin wrapper around ``requests.Session`` so every
point request shares one timeout policy and one retry loop. Event streams are
opened separately by ``EventStream``.

Dependencies:
    - ``requests`` for network I/O.
    - ``medisync.adapters.store_errors.StoreTimeoutError`` for typed transport failures.

Call context:
    - Constructed by ``medisync/adapters/firebase_rest.py``.
    - Used only inside adapter layer methods; use cases interact through ports.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from medisync.adapters.store_errors import StoreTimeoutError


@dataclass
class HttpConfig:
    """Timeout and retry configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Default timeout in seconds for point operations.
        stream_read_timeout_s: Read timeout for event streams; the server sends
            a keep-alive every 30 seconds, so this must stay above that.
        retries: Number of retry attempts after the initial request.
    """
    request_timeout_s: int = 10
    stream_read_timeout_s: int = 90
    retries: int = 2


class RetryingSession:
    """Shared requests wrapper with JSON headers and retry loops.

    This class is intentionally transport-only. Callers provide endpoint URLs and
    decide how to map non-2xx responses into adapter errors.
    """

    def __init__(self, cfg: HttpConfig, session: Optional[requests.Session] = None) -> None:
        """Create a retry-enabled session.

        Args:
            cfg: Shared timeout and retry settings.
            session: Optional pre-built session (tests inject stubs here).
        """
        self.session = session if session is not None else requests.Session()
        self.cfg = cfg

    @staticmethod
    def _headers(accept: str = "application/json", json_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": accept}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def request(
        self,
        method: str,
        url: str,
        *,
        json_body: Any = None,
        send_body: bool = False,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        """Send one JSON request, retrying on timeout/connectivity failures.

        Args:
            method: HTTP verb (``GET``, ``PUT``, ``PATCH``, ``POST``, ``DELETE``).
            url: Absolute endpoint URL.
            json_body: Payload serialized with ``json.dumps`` when ``send_body``.
            send_body: Whether a body is sent (``None`` is a valid JSON body).
            timeout: Optional timeout override in seconds.

        Returns:
            ``requests.Response`` from the first attempt that reached the server.

        Raises:
            StoreTimeoutError: If all attempts fail with timeout/connection errors.
        """
        context = f"{method} {url}"
        data = json.dumps(json_body) if send_body else None
        last_err: StoreTimeoutError | None = None
        attempts = self.cfg.retries + 1
        for _ in range(attempts):
            try:
                return self.session.request(
                    method,
                    url,
                    data=data,
                    headers=self._headers(json_body=send_body),
                    timeout=timeout or self.cfg.request_timeout_s,
                )
            except (req_exc.Timeout, req_exc.ConnectionError):
                last_err = StoreTimeoutError(f"Timeout contacting {url}", context=context)
        raise last_err


__all__ = ["HttpConfig", "RetryingSession"]
