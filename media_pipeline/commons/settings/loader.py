"""Layered settings loading: JSON files first, environment variables last."""

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from media_pipeline.commons.settings.models import Settings

ENV_PREFIX = "MEDIA_PIPELINE__"
ENVIRONMENT_VARIABLE = f"{ENV_PREFIX}APP__ENVIRONMENT"


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``, recursing into nested dicts."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def parse_env_value(raw: str) -> Any:
    """Interpret an environment string as bool, number, JSON or plain text."""
    lowered = raw.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


class SettingsLoader:
    """Builds a ``Settings`` instance from layered sources.

    Precedence, lowest to highest:

    1. ``appsettings.json``
    2. ``appsettings.{environment}.json``
    3. ``MEDIA_PIPELINE__`` environment variables (``__`` separates levels)
    """

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            config_dir: Directory holding the JSON files. Defaults to ./config.
            environment: Environment name. Defaults to the value of
                MEDIA_PIPELINE__APP__ENVIRONMENT, then 'dev'.
            environ: Environment mapping, ``os.environ`` when omitted.
        """
        self._environ = os.environ if environ is None else environ
        self.config_dir = config_dir or Path("config")
        self.environment = environment or self._environ.get(
            ENVIRONMENT_VARIABLE, "dev"
        )

    def load(self) -> Settings:
        """Resolve all layers into a validated ``Settings``."""
        layers = [
            self._read_file("appsettings.json"),
            self._read_file(f"appsettings.{self.environment}.json"),
            self._env_overrides(),
        ]
        resolved: dict[str, Any] = {}
        for layer in layers:
            resolved = deep_merge(resolved, layer)
        return Settings(**resolved)

    def _read_file(self, filename: str) -> dict[str, Any]:
        path = self.config_dir / filename
        if not path.is_file():
            return {}
        with path.open(encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a JSON object")
        return data

    def _env_overrides(self) -> dict[str, Any]:
        """Turn ``MEDIA_PIPELINE__WORKER__POLL_INTERVAL_SECONDS=2`` into
        ``{"worker": {"poll_interval_seconds": 2}}``.
        """
        overrides: dict[str, Any] = {}
        for name, raw in self._environ.items():
            if not name.startswith(ENV_PREFIX):
                continue
            *parents, leaf = name[len(ENV_PREFIX) :].lower().split("__")
            node = overrides
            for part in parents:
                node = node.setdefault(part, {})
            node[leaf] = parse_env_value(raw)
        return overrides


_settings: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings  # noqa: PLW0603
    if _settings is None or reload:
        _settings = SettingsLoader(config_dir, environment).load()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings. Used by tests."""
    global _settings  # noqa: PLW0603
    _settings = None
