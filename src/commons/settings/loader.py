"""Settings loader with layered configuration support."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.commons.settings.models import Settings

ENV_PREFIX = "RECORDING_SEARCH__"


class SettingsLoader:
    """Loads and merges configuration from multiple sources.

    Configuration precedence (highest to lowest):
    1. Environment variables
    2. Environment-specific config (appsettings.{env}.json)
    3. Base config (appsettings.json)
    """

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
    ) -> None:
        """Initialize the settings loader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to 'config' in current working directory.
            environment: Environment name (dev, staging, prod).
                        Defaults to RECORDING_SEARCH__APP__ENVIRONMENT or 'dev'.
        """
        self.config_dir = config_dir or Path("config")
        self.environment = environment or os.getenv(
            f"{ENV_PREFIX}APP__ENVIRONMENT", "dev"
        )

    def load(self) -> Settings:
        """Load settings with proper precedence.

        Returns:
            Fully resolved Settings instance.
        """
        config: dict[str, Any] = {}
        for layer in (
            self._load_json("appsettings.json"),
            self._load_json(f"appsettings.{self.environment}.json"),
            self._load_env_vars(),
        ):
            config = _deep_merge(config, layer)
        return Settings(**config)

    def _load_env_vars(self) -> dict[str, Any]:
        """Collect prefixed environment variables into a nested dict.

        ``RECORDING_SEARCH__OCR__ENABLED=true`` becomes
        ``{"ocr": {"enabled": True}}``.

        Returns:
            Nested dictionary of environment variable overrides.
        """
        result: dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            *parents, leaf = key[len(ENV_PREFIX) :].lower().split("__")
            current = result
            for part in parents:
                current = current.setdefault(part, {})
            current[leaf] = _coerce_value(value)

        return result

    def _load_json(self, filename: str) -> dict[str, Any]:
        """Load a JSON config file, or an empty dict when it is missing."""
        path = self.config_dir / filename
        if not path.exists():
            return {}
        with path.open(encoding="utf-8") as f:
            return dict(json.load(f))


def _coerce_value(value: str) -> Any:
    """Coerce an environment string to bool, int, float or JSON."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            pass

    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


# Global settings instance
_settings: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Get or create the global settings instance.

    Args:
        config_dir: Optional config directory override.
        environment: Optional environment override.
        reload: Force reload settings from files.

    Returns:
        Settings instance.
    """
    global _settings  # noqa: PLW0603
    if _settings is None or reload:
        _settings = SettingsLoader(
            config_dir=config_dir, environment=environment
        ).load()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance. Useful for testing."""
    global _settings  # noqa: PLW0603
    _settings = None


@dataclass(frozen=True)
class FeatureFlagSnapshot:
    """Flag values read at the start of one invocation."""

    ocr_enabled: bool
    visual_indexing_enabled: bool
    visual_search_enabled: bool


class FeatureFlags:
    """Reads runtime feature flags from a fresh settings load.

    Flags are toggled externally (env vars or config files), so they are
    re-read on every ``snapshot()`` call instead of coming from the cached
    global settings.
    """

    def __init__(self, loader: SettingsLoader | None = None) -> None:
        """Initialize the flag reader.

        Args:
            loader: Loader to read from. Defaults to a plain SettingsLoader.
        """
        self._loader = loader or SettingsLoader()

    def snapshot(self) -> FeatureFlagSnapshot:
        """Load the current flag values.

        Returns:
            Immutable flag values for one invocation.
        """
        settings = self._loader.load()
        return FeatureFlagSnapshot(
            ocr_enabled=settings.ocr.enabled,
            visual_indexing_enabled=settings.visual_indexing.enabled,
            visual_search_enabled=settings.search.visual_search_enabled,
        )
