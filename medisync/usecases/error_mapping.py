"""Translate adapter errors into user-facing UseCaseError instances."""

from __future__ import annotations


from typing import Any, Dict, Optional

from medisync.adapters.store_errors import (
    StoreClientError,
    StoreError,
    StoreServerError,
    StoreTimeoutError,
    extract_error_hint,
)
from medisync.domain.ports import UseCaseError


def map_store_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    Args:
        exc: Exception raised by a store adapter (or anything else).
        default_code: Code used when ``exc`` is not a known adapter error.
        default_message: Message used for unknown errors; falls back to ``str(exc)``.
        meta: Extra context attached to the resulting error.

    Returns:
        UseCaseError: Error carrying a stable ``code`` for callers to branch on.
    """
    if isinstance(exc, UseCaseError):
        if meta:
            exc.meta.update(meta)
        return exc
    if isinstance(exc, StoreTimeoutError):
        return UseCaseError(
            "REQUEST_TIMEOUT", "Request timed out. Check connection.", meta=meta
        )
    if isinstance(exc, StoreClientError):
        status = exc.status or 0
        hint = exc.hint or extract_error_hint(getattr(exc, "payload", None))
        if status in (401, 403):
            return UseCaseError(
                "PERMISSION_DENIED",
                _compose_error_message("Permission denied", hint),
                meta=meta,
            )
        label = f"Request failed (HTTP {status})" if status else "Request failed"
        return UseCaseError("REQUEST_FAILED", _compose_error_message(label, hint), meta=meta)
    if isinstance(exc, StoreServerError):
        return UseCaseError("SERVER_ERROR", "Database error, try again.", meta=meta)
    if isinstance(exc, StoreError):
        return UseCaseError("STORE_ERROR", str(exc), meta=meta)

    message = default_message or str(exc) or "Unexpected error."
    return UseCaseError(default_code, message, meta=meta)


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    """Compose a user-facing error message with optional hint text."""
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["map_store_error"]
