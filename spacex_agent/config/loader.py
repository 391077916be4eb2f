"""Configuration loader with layered parameter precedence."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import DefaultConfig, config_from_dict, get_default_config
from .validation import ConfigValidator

# Environment variable -> (section, key, converter)
ENV_OVERRIDES: dict[str, tuple[str, str, Any]] = {
    "SPACEX_API_URL": ("upstream", "base_url", str),
    "UPSTREAM_TIMEOUT_SECONDS": ("upstream", "timeout_seconds", float),
    "PORT": ("server", "port", int),
    "BASE_URL": ("server", "base_url", str),
    "PAYMENTS_METHOD": ("payments", "method", str),
    "FACILITATOR_URL": ("payments", "facilitator_url", str),
    "PAYMENTS_RECEIVABLE_ADDRESS": ("payments", "pay_to", str),
    "NETWORK": ("payments", "network", str),
    "LEDGER_DB_PATH": ("ledger", "db_path", str),
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with layered precedence."""

    config_dir: Path
    defaults: DefaultConfig
    environ: Mapping = field(default_factory=lambda: os.environ)

    @classmethod
    def create(
        cls,
        config_dir: Optional[Path] = None,
        environ: Optional[Mapping] = None
    ) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
            environ=os.environ if environ is None else environ,
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load overrides from agent.yaml, if present."""
        config_file = self.config_dir / "agent.yaml"

        if not config_file.exists():
            return {}

        with open(config_file) as f:
            file_config = yaml.safe_load(f)

        return file_config or {}

    def load_env_config(self) -> dict[str, Any]:
        """Collect overrides from environment variables."""
        config: dict[str, Any] = {}

        for env_name, (section, key, convert) in ENV_OVERRIDES.items():
            raw = self.environ.get(env_name)
            if raw is None or raw == "":
                continue
            try:
                value = convert(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {env_name}: {raw!r}",
                    context={"env": env_name, "error": str(e)}
                ) from e
            config.setdefault(section, {})[key] = value

        return config

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration layers.

        Priority order:
        1. Explicit overrides (highest priority)
        2. Environment variables
        3. config/agent.yaml
        4. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_file_config())
        config = self._deep_merge(config, self.load_env_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(self, overrides: Optional[dict[str, Any]] = None) -> DefaultConfig:
        """Merge, validate and build the typed configuration."""
        merged = self.merge_config(overrides)

        errors = ConfigValidator.validate_config(merged)
        if errors:
            raise ConfigurationError(
                "Configuration validation failed: " + "; ".join(
                    f"{err.field}: {err.message} (got: {err.value!r})" for err in errors
                ),
                errors=errors,
            )

        return config_from_dict(merged)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def load_config(
    config_dir: Optional[Path] = None,
    overrides: Optional[dict[str, Any]] = None,
    environ: Optional[Mapping] = None
) -> DefaultConfig:
    """Load the agent configuration from all layers."""
    return ConfigLoader.create(config_dir, environ=environ).load(overrides)
