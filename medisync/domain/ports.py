from __future__ import annotations
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

StorePath = str
ChangeHandler = Callable[[Any], None]


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = dict(meta or {})


# ---- Ports (Hexagonal boundaries) ----
class Subscription(Protocol):
    """Handle for one live change stream; closing it stops notifications."""

    def close(self) -> None: ...


class RemoteStorePort(Protocol):
    """Shared real-time key-value store (slots, journal, connectivity signal).

    Paths are slash separated and relative to the store root. Values are
    plain JSON-compatible objects; ``None`` means the path holds nothing.
    """

    def get(self, path: StorePath) -> Any: ...
    def set(self, path: StorePath, value: Any) -> None: ...
    def update(self, path: StorePath, fields: Mapping[str, Any]) -> None: ...
    def push(self, path: StorePath, value: Any) -> str: ...  # returns generated key
    def remove(self, path: StorePath) -> None: ...
    def subscribe(self, path: StorePath, handler: ChangeHandler) -> Subscription: ...


class StoragePort(Protocol):
    """Persistence for local user settings."""

    def save_user_settings(self, payload: Dict[str, Any]) -> None: ...
    def load_user_settings(self) -> Optional[Dict[str, Any]]: ...
