"""Root logger setup for the dispenser client.

``MEDISYNC_LOG_LEVEL`` names an explicit level (``warning``, ``DEBUG`` or a
number) and ``MEDISYNC_DEBUG`` set to a truthy value forces DEBUG. Either one
wins over the persisted ``debug_logging`` setting.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

LEVEL_ENV = "MEDISYNC_LOG_LEVEL"
DEBUG_ENV = "MEDISYNC_DEBUG"

# stream threads are named "stream:<path>", so the thread column names the subscription
_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"

# both HTTP stacks log every request and keep-alive at DEBUG
_TRANSPORT_LOGGERS = ("urllib3", "httpx", "httpcore")


def env_level(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    """Return the level forced by the environment, or ``None`` when unset."""
    env = os.environ if environ is None else environ
    raw = (env.get(LEVEL_ENV) or "").strip()
    if raw:
        if raw.isdigit():
            return int(raw)
        level = logging.getLevelName(raw.upper())
        return level if isinstance(level, int) else logging.INFO
    if (env.get(DEBUG_ENV) or "").strip().lower() in {"1", "true", "yes", "on"}:
        return logging.DEBUG
    return None


def env_debug_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    level = env_level(environ)
    return level is not None and level <= logging.DEBUG


def configure_root(default_level: int = logging.INFO) -> int:
    """Install the console handler once and apply the effective level."""
    forced = env_level()
    effective = default_level if forced is None else forced
    if not logging.getLogger().handlers:
        logging.basicConfig(format=_FORMAT, datefmt=_DATEFMT)
    _set_levels(effective)
    return effective


def apply_preferences(debug_enabled: bool) -> int:
    """Apply the saved debug preference unless the environment forces a level."""
    forced = env_level()
    if forced is None:
        forced = logging.DEBUG if debug_enabled else logging.INFO
    _set_levels(forced)
    return forced


def _set_levels(level: int) -> None:
    logging.getLogger().setLevel(level)
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))
