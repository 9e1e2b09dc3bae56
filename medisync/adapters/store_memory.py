from __future__ import annotations

import copy
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from medisync.adapters.firebase_rest import apply_patch, apply_put
from medisync.adapters.store_errors import StoreError
from medisync.domain.ports import ChangeHandler, RemoteStorePort, StorePath

PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"


class PushIdGenerator:
    """Chronologically ordered 20-character keys.

    Eight characters encode the millisecond timestamp; the remaining twelve are
    random and get incremented when two ids share a millisecond, so keys
    always sort in generation order.
    """

    def __init__(
        self,
        clock_ms: Optional[Callable[[], int]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._clock_ms = clock_ms or (lambda: int(time.time() * 1000))
        self._rng = rng or random.Random()
        self._last_ms = -1
        self._last_rand: List[int] = [0] * 12
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            now = self._clock_ms()
            if now == self._last_ms:
                for idx in range(11, -1, -1):
                    if self._last_rand[idx] != 63:
                        self._last_rand[idx] += 1
                        break
                    self._last_rand[idx] = 0
            else:
                self._last_rand = [self._rng.randrange(64) for _ in range(12)]
            self._last_ms = max(now, self._last_ms)

            stamp = []
            remaining = now
            for _ in range(8):
                stamp.append(PUSH_CHARS[remaining % 64])
                remaining //= 64
            return "".join(reversed(stamp)) + "".join(PUSH_CHARS[i] for i in self._last_rand)


@dataclass(eq=False)
class _Listener:
    path: List[str]
    handler: ChangeHandler
    store: "InMemoryStore"
    active: bool = True

    def close(self) -> None:
        self.active = False
        self.store._detach(self)


@dataclass(eq=False)
class InMemoryStore(RemoteStorePort):
    """Offline substitute for ``FirebaseRestStore`` with synchronous notifications.

    Subscribers receive the current value immediately and then once per write
    touching their subtree, in write order, on the writer's thread.
    ``fail_on`` names operations (``get``, ``set``, ``update``, ``push``,
    ``remove``) that raise :class:`StoreError` to simulate remote failures.
    """

    data: Dict[str, Any] = field(default_factory=dict)
    fail_on: Set[str] = field(default_factory=set)
    key_generator: Callable[[], str] = field(default_factory=PushIdGenerator)

    def __post_init__(self) -> None:
        self._lock = threading.RLock()
        self._listeners: List[_Listener] = []
        self.calls: List[tuple] = []

    # ---------- RemoteStorePort ----------

    def get(self, path: StorePath) -> Any:
        self._record("get", path)
        with self._lock:
            return copy.deepcopy(self._value_at(_parts(path)))

    def set(self, path: StorePath, value: Any) -> None:
        self._record("set", path, value)
        self._write(_parts(path), lambda tree, parts: apply_put(tree, parts, value))

    def update(self, path: StorePath, fields: Mapping[str, Any]) -> None:
        self._record("update", path, dict(fields))
        self._write(_parts(path), lambda tree, parts: apply_patch(tree, parts, dict(fields)))

    def push(self, path: StorePath, value: Any) -> str:
        self._record("push", path, value)
        key = self.key_generator()
        self._write(_parts(path) + [key], lambda tree, parts: apply_put(tree, parts, value))
        return key

    def remove(self, path: StorePath) -> None:
        self._record("remove", path)
        self._write(_parts(path), lambda tree, parts: apply_put(tree, parts, None))

    def subscribe(self, path: StorePath, handler: ChangeHandler) -> _Listener:
        listener = _Listener(path=_parts(path), handler=handler, store=self)
        with self._lock:
            self._listeners.append(listener)
            current = copy.deepcopy(self._value_at(listener.path))
        handler(current)
        return listener

    # ---------- test helpers ----------

    def set_connected(self, connected: bool, path: StorePath = "connection-status") -> None:
        """Publish a connectivity signal without recording it as a call."""
        self._write(_parts(path), lambda tree, parts: apply_put(tree, parts, bool(connected)))

    def writes(self) -> List[tuple]:
        return [call for call in self.calls if call[0] != "get"]

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    # ---------- internals ----------

    def _record(self, op: str, path: StorePath, *payload: Any) -> None:
        if op in self.fail_on:
            raise StoreError(f"{op}[{path}]: simulated failure", context=op)
        self.calls.append((op, path, *copy.deepcopy(payload)))

    def _write(self, parts: List[str], mutate: Callable[[Any, List[str]], Any]) -> None:
        with self._lock:
            self.data = mutate(self.data, parts) or {}
            targets = [
                listener
                for listener in self._listeners
                if listener.active and _overlaps(listener.path, parts)
            ]
            snapshots = [(lst, copy.deepcopy(self._value_at(lst.path))) for lst in targets]
        for listener, value in snapshots:
            if listener.active:
                listener.handler(value)

    def _value_at(self, parts: List[str]) -> Any:
        node: Any = self.data
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        if node == {}:
            return None
        return node

    def _detach(self, listener: _Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)


def _parts(path: StorePath) -> List[str]:
    return [part for part in str(path or "").split("/") if part]


def _overlaps(listen: List[str], changed: List[str]) -> bool:
    size = min(len(listen), len(changed))
    return listen[:size] == changed[:size]


__all__ = ["InMemoryStore", "PUSH_CHARS", "PushIdGenerator"]
