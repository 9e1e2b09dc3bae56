from __future__ import annotations

import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Dict, Mapping, Optional

from ..domain.entities import DEFAULT_SLOT_COUNT
from ..domain.paths import StorePaths
from ..utils.logging import env_debug_enabled

ENV_DATABASE_URL = "MEDISYNC_DATABASE_URL"
ENV_DEVICE_ID = "MEDISYNC_DEVICE_ID"


@dataclass
class SettingsConfig:
    """Typed runtime settings that persist via StorageLocal."""

    database_url: str = ""
    device_id: str = "my_device_1"
    slot_count: int = DEFAULT_SLOT_COUNT
    connection_path: str = "connection-status"
    request_timeout_s: int = 10
    retries: int = 2
    stream_reconnect_max_s: int = 30


def _default_debug_logging() -> bool:
    return env_debug_enabled()


class SettingsVM:
    """Keeps app settings state and validation, no I/O here."""

    def __init__(
        self,
        *,
        config: Optional[SettingsConfig] = None,
        on_save: Optional[Callable[[dict], None]] = None,
    ) -> None:
        self.config = config or SettingsConfig()
        self.on_save = on_save
        self.debug_logging: bool = _default_debug_logging()

    # ------------------------------------------------------------------
    # Properties bridging to the typed config
    # ------------------------------------------------------------------
    @property
    def database_url(self) -> str:
        return self.config.database_url

    @database_url.setter
    def database_url(self, value: str) -> None:
        self.config = replace(self.config, database_url=self._coerce_url(value))

    @property
    def device_id(self) -> str:
        return self.config.device_id

    @device_id.setter
    def device_id(self, value: str) -> None:
        self.config = replace(self.config, device_id=self._coerce_path_token("device_id", value))

    @property
    def slot_count(self) -> int:
        return self.config.slot_count

    @slot_count.setter
    def slot_count(self, value: int) -> None:
        coerced = self._coerce_int("slot_count", value, minimum=1)
        self.config = replace(self.config, slot_count=coerced)

    @property
    def request_timeout_s(self) -> int:
        return self.config.request_timeout_s

    @request_timeout_s.setter
    def request_timeout_s(self, value: int) -> None:
        coerced = self._coerce_int("request_timeout_s", value, minimum=1)
        self.config = replace(self.config, request_timeout_s=coerced)

    # ------------------------------------------------------------------
    def is_valid(self) -> bool:
        if not self.database_url.startswith(("http://", "https://")):
            return False
        if self.slot_count < 1 or self.request_timeout_s < 1 or self.config.retries < 0:
            return False
        return bool(self.device_id)

    def store_paths(self) -> StorePaths:
        return StorePaths(
            device_id=self.device_id,
            slot_count=self.slot_count,
            connection_path=self.config.connection_path,
        )

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply persisted settings to the view-model."""

        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        allowed_flat_keys = {*SettingsConfig.__annotations__.keys(), "debug_logging"}
        unknown = set(payload.keys()) - allowed_flat_keys
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        updates: Dict[str, Any] = {}
        for cfg_key in SettingsConfig.__annotations__.keys():
            if cfg_key in payload:
                updates[cfg_key] = self._coerce_config_value(cfg_key, payload[cfg_key])

        if updates:
            self.config = replace(self.config, **updates)

        if "debug_logging" in payload:
            self.debug_logging = self._coerce_bool(payload["debug_logging"])

    def apply_env(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Let ``MEDISYNC_DATABASE_URL`` / ``MEDISYNC_DEVICE_ID`` override persisted values."""
        env = os.environ if environ is None else environ
        url = (env.get(ENV_DATABASE_URL) or "").strip()
        if url:
            self.database_url = url
        device = (env.get(ENV_DEVICE_ID) or "").strip()
        if device:
            self.device_id = device

    def to_dict(self) -> dict:
        snapshot = asdict(self.config)
        snapshot["debug_logging"] = bool(self.debug_logging)
        return snapshot

    def set_debug_logging(self, enabled: bool) -> None:
        self.debug_logging = self._coerce_bool(enabled)

    def cmd_save(self) -> None:
        if not self.is_valid():
            raise ValueError("Settings invalid")
        if self.on_save:
            self.on_save(self.to_dict())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _coerce_config_value(self, key: str, raw: Any) -> Any:
        if key == "database_url":
            return self._coerce_url(raw)
        if key in {"device_id", "connection_path"}:
            return self._coerce_path_token(key, raw)
        if key in {"slot_count", "request_timeout_s"}:
            return self._coerce_int(key, raw, minimum=1)
        if key in {"retries", "stream_reconnect_max_s"}:
            return self._coerce_int(key, raw, minimum=0)
        raise ValueError(f"Unhandled config field: {key}")

    @staticmethod
    def _coerce_url(value: Any) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise ValueError("database_url must be a string.")
        return value.strip().rstrip("/")

    @staticmethod
    def _coerce_path_token(name: str, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError(f"{name} must be a string.")
        normalized = value.strip().strip("/")
        if not normalized:
            raise ValueError(f"{name} must not be empty.")
        return normalized

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    @staticmethod
    def _coerce_int(name: str, value: Any, *, minimum: Optional[int] = None) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be an integer.")
        if isinstance(value, (int, float)):
            coerced = int(value)
        elif isinstance(value, str):
            try:
                coerced = int(value.strip())
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name} must be an integer.") from exc
        else:
            raise ValueError(f"{name} must be an integer.")
        if minimum is not None and coerced < minimum:
            raise ValueError(f"{name} must be at least {minimum}.")
        return coerced


def default_settings_payload() -> dict:
    """Return a fresh snapshot containing the default settings payload."""
    return SettingsVM().to_dict()
