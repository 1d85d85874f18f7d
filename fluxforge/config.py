"""
fluxforge.config
~~~~~~~~~~~~~~~~
AppConfig persistence and the in-memory ConfigStore.

The persisted record is a JSON object whose keys are exactly AppConfig's
field names. Missing keys fall back to the built-in defaults, unknown keys
are ignored, and a value of the wrong type for a known key is replaced by
that key's default.

Saving is optimistic: the new value is applied in memory before it is
written, and a failed write raises PersistError without rolling back
unless the store was built with SaveFailurePolicy.ROLLBACK.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, fields
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from fluxforge.errors import PersistError
from fluxforge.models import AppConfig, Theme
from fluxforge.paths import config_file

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = AppConfig()


class SaveFailurePolicy(Enum):
    KEEP_APPLIED = "keep_applied"
    ROLLBACK     = "rollback"


class ConfigPersistence(Protocol):
    def read(self) -> dict[str, Any] | None:
        """Return the stored record, or None if nothing has been saved yet."""

    def write(self, record: dict[str, Any]) -> None:
        ...


# ── JSON file persistence ─────────────────────────────────────────────────────

class JsonConfigFile:
    """Stores the record as pretty-printed JSON at *path*."""

    def __init__(self, path: Path | None = None):
        self.path = path or config_file()

    def read(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Config root must be an object, got {type(payload).__name__}")
        return payload

    def write(self, record: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(record, indent=2), encoding="utf-8")


# ── Store ─────────────────────────────────────────────────────────────────────

class ConfigStore:

    def __init__(
        self,
        persistence: ConfigPersistence | None = None,
        policy: SaveFailurePolicy = SaveFailurePolicy.KEEP_APPLIED,
    ):
        self._persistence = persistence if persistence is not None else JsonConfigFile()
        self._policy = policy
        self._current = DEFAULT_CONFIG

    def load(self) -> AppConfig:
        """
        Merge the persisted record over the defaults and cache the result.
        Any read or parse failure yields the defaults; it is logged, never raised.
        """
        try:
            record = self._persistence.read()
        except Exception as exc:
            logger.warning("Could not load config, using defaults: %s", exc)
            record = None

        self._current = config_from_dict(record or {})
        return self._current

    def save(self, config: AppConfig) -> None:
        """
        Apply *config* and persist it.

        Raises:
            PersistError – if the write fails. The new value stays applied
                           unless the policy is ROLLBACK.
        """
        previous = self._current
        self._current = config
        try:
            self._persistence.write(config_to_dict(config))
        except Exception as exc:
            logger.error("Could not save config: %s", exc)
            if self._policy is SaveFailurePolicy.ROLLBACK:
                self._current = previous
            raise PersistError(f"Settings could not be saved: {exc}") from exc

    def current(self) -> AppConfig:
        return self._current


# ── Serialisation helpers ─────────────────────────────────────────────────────

def config_to_dict(config: AppConfig) -> dict[str, Any]:
    record = asdict(config)
    record["theme"] = config.theme.value
    return record


def config_from_dict(record: dict[str, Any]) -> AppConfig:
    known = {f.name for f in fields(AppConfig)}
    values: dict[str, Any] = {}
    for key, raw in record.items():
        if key not in known:
            continue
        value = _coerce(key, raw)
        if value is _INVALID:
            logger.warning("Ignoring invalid config value %s=%r", key, raw)
            continue
        values[key] = value
    return AppConfig(**values)


_INVALID = object()


def _coerce(key: str, raw: Any) -> Any:
    if key == "theme":
        try:
            return Theme(raw)
        except ValueError:
            return _INVALID
    if key == "default_pdf_dpi":
        # bool is an int subclass; reject it explicitly
        if isinstance(raw, int) and not isinstance(raw, bool) and raw > 0:
            return raw
        return _INVALID
    if key == "auto_create_date_folders":
        return raw if isinstance(raw, bool) else _INVALID
    if key == "cloud_sync_folder":
        return raw if raw is None or isinstance(raw, str) else _INVALID
    return raw if isinstance(raw, str) else _INVALID
