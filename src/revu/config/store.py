"""Load/save application settings."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from revu.config.models import AppSettings
from revu.paths import settings_path
from revu.runtime_logging import get_runtime_logger


def _parent_for(data: dict[str, Any], dotted_key: str) -> tuple[dict[str, Any], str]:
    """Return the dict holding the leaf of ``dotted_key`` and the leaf name."""
    *parents, leaf = dotted_key.split(".")
    cursor = data
    for key in parents:
        nested = cursor.get(key)
        if not isinstance(nested, dict):
            raise KeyError(f"Unknown setting path: {dotted_key}")
        cursor = nested
    if leaf not in cursor or isinstance(cursor[leaf], dict):
        raise KeyError(f"Unknown setting path: {dotted_key}")
    return cursor, leaf


class SettingsStore:
    """JSON settings file with defaults written on first use.

    A file that cannot be parsed or validated is copied aside as
    ``*.corrupt.json`` and replaced with defaults.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or settings_path()

    def load(self) -> AppSettings:
        if not self.path.exists():
            return self._write_defaults()

        raw = self.path.read_text(encoding="utf-8")
        try:
            return AppSettings.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            backup = self.path.with_suffix(".corrupt.json")
            backup.write_text(raw, encoding="utf-8")
            get_runtime_logger().warning(
                "settings.corrupt",
                path=str(self.path),
                backup=str(backup),
                error=str(exc),
            )
            return self._write_defaults()

    def _write_defaults(self) -> AppSettings:
        settings = AppSettings()
        self.save(settings)
        return settings

    def save(self, settings: AppSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(settings.model_dump(mode="json"), indent=2, sort_keys=True)
        self.path.write_text(f"{payload}\n", encoding="utf-8")

    def update(self, dotted_key: str, value: Any) -> AppSettings:
        """Set one leaf such as ``diff.fold_threshold``.

        Values go through model validation, so strings from the command line
        are coerced (``"12"`` to ``12``, ``"true"`` to ``True``). Unknown keys
        raise ``KeyError`` and invalid values ``ValidationError``; the file is
        left untouched in both cases.
        """
        data = self.load().model_dump()
        parent, leaf = _parent_for(data, dotted_key)
        parent[leaf] = value
        updated = AppSettings.model_validate(data)
        self.save(updated)
        get_runtime_logger().info("settings.updated", key=dotted_key)
        return updated
