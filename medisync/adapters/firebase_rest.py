"""Realtime Database REST adapter implementing :class:`RemoteStorePort`.

Point operations map one-to-one onto REST verbs against ``{base}/{path}.json``:

    get     -> GET
    set     -> PUT
    update  -> PATCH
    push    -> POST   (server answers ``{"name": <generated key>}``)
    remove  -> DELETE

Subscriptions use the streaming variant of the same endpoint
(``Accept: text/event-stream``). The server first sends a ``put`` event with
the full subtree at path ``/`` and then ``put``/``patch`` events relative to
the subscribed path. Each :class:`EventStream` keeps a mirror of its subtree
and hands the complete current value to its handler after every change, so
consumers always see full snapshots rather than deltas.

Threading:
    Every subscription owns one daemon thread. Handlers run on that thread;
    callers that need a single logical thread must marshal back themselves.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import httpx
import requests

from medisync.adapters.http_client import HttpConfig, RetryingSession
from medisync.adapters.store_errors import StoreError, raise_for_response
from medisync.domain.ports import ChangeHandler, RemoteStorePort, StorePath

_STREAM_BACKOFF_START_S = 0.5
_STREAM_HEADERS = {"Accept": "text/event-stream"}


class FirebaseRestStore(RemoteStorePort):
    """REST adapter for one database instance (``https://<db>.firebaseio.com``)."""

    def __init__(
        self,
        database_url: str,
        *,
        request_timeout_s: int = 10,
        retries: int = 2,
        stream_reconnect_max_s: float = 30.0,
        session: Optional[requests.Session] = None,
        stream_client_factory: Optional[Callable[[], httpx.Client]] = None,
    ) -> None:
        base = str(database_url or "").strip().rstrip("/")
        if not base:
            raise ValueError("FirebaseRestStore requires a database URL")
        self.base_url = base
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.session = RetryingSession(self.cfg, session=session)
        self.stream_reconnect_max_s = max(_STREAM_BACKOFF_START_S, float(stream_reconnect_max_s))
        self._stream_client_factory = stream_client_factory
        self._log = logging.getLogger(__name__)

    # ---------- RemoteStorePort ----------

    def get(self, path: StorePath) -> Any:
        resp = self.session.request("GET", self._url(path))
        raise_for_response(resp, f"get[{path}]")
        return self._json(resp, f"get[{path}]")

    def set(self, path: StorePath, value: Any) -> None:
        resp = self.session.request("PUT", self._url(path), json_body=value, send_body=True)
        raise_for_response(resp, f"set[{path}]")

    def update(self, path: StorePath, fields: Mapping[str, Any]) -> None:
        resp = self.session.request(
            "PATCH", self._url(path), json_body=dict(fields), send_body=True
        )
        raise_for_response(resp, f"update[{path}]")

    def push(self, path: StorePath, value: Any) -> str:
        resp = self.session.request("POST", self._url(path), json_body=value, send_body=True)
        raise_for_response(resp, f"push[{path}]")
        data = self._json(resp, f"push[{path}]")
        key = data.get("name") if isinstance(data, dict) else None
        if not isinstance(key, str) or not key:
            raise StoreError(f"push[{path}]: response carried no generated key", payload=data)
        return key

    def remove(self, path: StorePath) -> None:
        resp = self.session.request("DELETE", self._url(path))
        raise_for_response(resp, f"remove[{path}]")

    def subscribe(self, path: StorePath, handler: ChangeHandler) -> "EventStream":
        stream = EventStream(
            url=self._url(path),
            path=path,
            handler=handler,
            reconnect_max_s=self.stream_reconnect_max_s,
            connect_timeout_s=self.cfg.request_timeout_s,
            read_timeout_s=self.cfg.stream_read_timeout_s,
            client_factory=self._stream_client_factory,
        )
        stream.start()
        return stream

    # ---------- helpers ----------

    def _url(self, path: StorePath) -> str:
        cleaned = str(path or "").strip("/")
        return f"{self.base_url}/{cleaned}.json" if cleaned else f"{self.base_url}/.json"

    @staticmethod
    def _json(resp: Any, ctx: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise StoreError(f"{ctx}: invalid JSON response", context=ctx) from exc


class EventStream(threading.Thread):
    """Background reader for one streaming subscription.

    The thread reconnects with exponential back-off (capped at
    ``reconnect_max_s``) until :meth:`close` is called. A fresh connection
    always starts with a full ``put`` of the subtree, so the mirror is simply
    replaced on reconnect.
    """

    def __init__(
        self,
        *,
        url: str,
        path: StorePath,
        handler: ChangeHandler,
        reconnect_max_s: float,
        connect_timeout_s: float = 10.0,
        read_timeout_s: float = 90.0,
        client_factory: Optional[Callable[[], httpx.Client]] = None,
    ) -> None:
        super().__init__(daemon=True, name=f"stream:{path}")
        self._url = url
        self._path = path
        self._handler = handler
        self._reconnect_max_s = reconnect_max_s
        self._client_factory = client_factory or (
            lambda: httpx.Client(
                timeout=httpx.Timeout(connect_timeout_s, read=read_timeout_s),
                follow_redirects=True,
            )
        )
        self._stop_event = threading.Event()
        self._client: Optional[httpx.Client] = None
        self._mirror: Any = None
        self._log = logging.getLogger(__name__)

    @property
    def closed(self) -> bool:
        return self._stop_event.is_set()

    def close(self) -> None:
        """Stop the thread and drop the open connection, if any."""
        self._stop_event.set()
        client = self._client
        if client is not None:
            try:
                client.close()
            except Exception:  # pragma: no cover - best-effort socket teardown
                self._log.debug("stream %s: close failed", self._path, exc_info=True)

    def run(self) -> None:
        delay = _STREAM_BACKOFF_START_S
        ctx = f"subscribe[{self._path}]"
        while not self._stop_event.is_set():
            try:
                with self._client_factory() as client:
                    self._client = client
                    with client.stream("GET", self._url, headers=_STREAM_HEADERS) as resp:
                        if not resp.is_success:
                            resp.read()
                            raise_for_response(resp, ctx)
                        delay = _STREAM_BACKOFF_START_S
                        self.consume(resp.iter_lines())
            except StoreError as exc:
                if self._stop_event.is_set():
                    break
                self._log.warning("stream %s: %s", self._path, exc)
            except (httpx.HTTPError, httpx.StreamError) as exc:
                if self._stop_event.is_set():
                    break
                self._log.warning("stream %s dropped: %s", self._path, exc)
            finally:
                self._client = None
            if self._stop_event.wait(delay):
                break
            delay = min(delay * 2, self._reconnect_max_s)

    def consume(self, lines: Iterable[Any]) -> None:
        """Parse server-sent event lines and apply each complete event."""
        event: Optional[str] = None
        data_lines: List[str] = []
        for raw in lines:
            if self._stop_event.is_set():
                return
            if raw is None:
                continue
            line = raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)
            line = line.rstrip("\r")
            if line == "":
                if event is not None:
                    if not self._dispatch(event, "\n".join(data_lines)):
                        return
                event = None
                data_lines = []
                continue
            if line.startswith(":"):
                continue
            if line.startswith("event:"):
                event = line.split(":", 1)[1].strip()
            elif line.startswith("data:"):
                data_lines.append(line.split(":", 1)[1].strip())

    def _dispatch(self, event: str, data: str) -> bool:
        """Apply one event; returns ``False`` when the server ends the stream."""
        if event == "keep-alive":
            return True
        if event in ("cancel", "auth_revoked"):
            self._log.warning("stream %s: server sent %s", self._path, event)
            return False
        if event not in ("put", "patch"):
            self._log.debug("stream %s: ignoring event %s", self._path, event)
            return True
        try:
            payload = json.loads(data) if data else None
        except json.JSONDecodeError:
            self._log.warning("stream %s: undecodable %s payload", self._path, event)
            return True
        if not isinstance(payload, dict):
            return True
        parts = _split_path(payload.get("path"))
        value = payload.get("data")
        if event == "put":
            self._mirror = apply_put(self._mirror, parts, value)
        else:
            self._mirror = apply_patch(self._mirror, parts, value)
        self._notify()
        return True

    def _notify(self) -> None:
        try:
            self._handler(copy.deepcopy(self._mirror))
        except Exception:
            self._log.exception("stream %s: change handler failed", self._path)


def _split_path(path: Any) -> List[str]:
    return [part for part in str(path or "").split("/") if part]


def apply_put(tree: Any, parts: List[str], value: Any) -> Any:
    """Return ``tree`` with ``value`` stored at ``parts`` (``None`` deletes)."""
    if not parts:
        return copy.deepcopy(value)
    root: Dict[str, Any] = dict(tree) if isinstance(tree, dict) else {}
    head, rest = parts[0], parts[1:]
    child = apply_put(root.get(head), rest, value)
    if child is None or child == {}:
        root.pop(head, None)
    else:
        root[head] = child
    return root or None


def apply_patch(tree: Any, parts: List[str], fields: Any) -> Any:
    """Merge each child in ``fields`` under ``parts``, like a PATCH would."""
    if not isinstance(fields, dict):
        return tree
    for key, value in fields.items():
        tree = apply_put(tree, parts + _split_path(key), value)
    return tree


__all__ = ["EventStream", "FirebaseRestStore", "apply_patch", "apply_put"]
