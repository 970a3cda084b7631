"""ScriptForge configuration settings."""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scriptforge.exceptions import ConfigurationError, check_config_keys


class ScriptForgeSettings(BaseSettings):
    """ScriptForge configuration settings.

    Settings are loaded with the following precedence (highest to lowest):
    1. CLI arguments (when provided via command flags)
    2. Config file values (YAML, TOML, or JSON)
       Example: scriptforge --config myconfig.yaml validate draft.fountain
    3. Environment variables (prefixed with SCRIPTFORGE_)
       Example: export SCRIPTFORGE_LINES_PER_PAGE=55
    4. .env file in the current directory
    5. Default values (defined in field declarations below)
    """

    model_config = SettingsConfigDict(
        env_prefix="SCRIPTFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Debug settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Logging settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        pattern="^(?i)(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    log_format: str = Field(
        default="console",
        description="Log output format (console, json, structured)",
        pattern="^(?i)(console|json|structured)$",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    # Document model settings
    lines_per_page: int = Field(
        default=56,
        description="Formatted lines per page used for page count estimates",
        ge=1,
    )

    # Structure settings
    heuristic_act_count: int = Field(
        default=3,
        description="Number of acts used when a script carries no act markers",
        ge=1,
        le=10,
    )
    heuristic_min_scenes: int = Field(
        default=8,
        description="Scripts with fewer scenes and no act markers form a single act",
        ge=1,
    )
    sequence_max_scenes: int = Field(
        default=8,
        description="Largest number of scenes grouped into one sequence",
        ge=2,
    )
    norms_file: Path | None = Field(
        default=None,
        description="Optional YAML file replacing the bundled turning point norms",
    )

    # Polish pass thresholds
    polish_dialogue_ratio_high: float = Field(
        default=4.0,
        description="Dialogue/action ratio above which a scene is dialogue-heavy",
        gt=0.0,
    )
    polish_dialogue_ratio_low: float = Field(
        default=0.5,
        description="Dialogue/action ratio below which a scene is action-heavy",
        ge=0.0,
    )
    polish_verbose_action_lines: int = Field(
        default=4,
        description="Action paragraphs longer than this many lines are flagged",
        ge=1,
    )
    polish_repetition_threshold: int = Field(
        default=3,
        description="Occurrences of one word inside a scene that count as repetition",
        ge=2,
    )

    @field_validator("log_file", "norms_file", mode="before")
    @classmethod
    def resolve_paths(cls, v: Any) -> Path | None:
        """Resolve optional path fields to absolute paths."""
        if v is None or v == "":
            return None
        try:
            return Path(str(v)).expanduser().resolve()
        except (TypeError, ValueError, OSError) as e:
            raise ValueError(
                f"Path fields must be string, Path, or convertible to string. "
                f"Got {type(v).__name__}: {v!r}"
            ) from e

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Normalize log level to uppercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.upper()
        raise ValueError(f"log_level must be a string, got {type(v).__name__}")

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, v: Any) -> str:
        """Normalize log format to lowercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.lower()
        raise ValueError(f"log_format must be a string, got {type(v).__name__}")

    @classmethod
    def from_env(cls) -> ScriptForgeSettings:
        """Create settings from environment variables."""
        return cls()

    @classmethod
    def from_file(cls, config_path: Path | str) -> ScriptForgeSettings:
        """Load settings from a configuration file.

        Args:
            config_path: Path to configuration file (YAML, TOML, or JSON).

        Returns:
            Settings loaded from the file.

        Raises:
            ConfigurationError: If the file format is not supported.
            FileNotFoundError: If config file doesn't exist.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        suffix = config_path.suffix.lower()
        if suffix in {".yml", ".yaml"}:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        elif suffix == ".toml":
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        elif suffix == ".json":
            with config_path.open(encoding="utf-8") as f:
                data = json.load(f)
        else:
            raise ConfigurationError(
                message=f"Unsupported configuration file format: {suffix}",
                hint="Use one of the supported formats: .yml, .yaml, .toml, or .json",
                details={
                    "file": str(config_path),
                    "detected_format": suffix,
                    "supported_formats": [".yml", ".yaml", ".toml", ".json"],
                },
            )

        if not isinstance(data, dict):
            raise ConfigurationError(
                message="Configuration file must contain a mapping",
                hint="Write settings as key: value pairs at the top level",
                details={"file": str(config_path), "type": type(data).__name__},
            )

        check_config_keys(data)
        return cls(**data)

    @classmethod
    def from_multiple_sources(
        cls,
        config_files: list[Path | str] | None = None,
        env_file: Path | str | None = None,
        cli_args: dict[str, Any] | None = None,
    ) -> ScriptForgeSettings:
        """Load settings with proper precedence from multiple sources.

        Precedence (highest to lowest):
        1. CLI arguments
        2. Config files (last file wins)
        3. Environment variables
        4. .env file
        5. Default values

        Args:
            config_files: Config files to load (later files override earlier).
            env_file: Path to .env file (default: .env in current directory).
            cli_args: Dictionary of CLI arguments.

        Returns:
            Merged settings from all sources.
        """
        data: dict[str, Any] = {}

        for config_file in config_files or []:
            try:
                file_settings = cls.from_file(config_file)
            except FileNotFoundError:
                from scriptforge.config.logging import get_logger as _get_logger

                _get_logger("scriptforge.config.settings").warning(
                    "Configuration file not found, using defaults",
                    config_file=str(config_file),
                )
                continue
            data.update(file_settings.model_dump(exclude_unset=True))

        if env_file:
            settings = cast(
                "ScriptForgeSettings", cast(Any, cls)(_env_file=env_file, **data)
            )
        else:
            settings = cls(**data)

        if cli_args:
            cli_data = {k: v for k, v in cli_args.items() if v is not None}
            if cli_data:
                updated_data = settings.model_dump()
                updated_data.update(cli_data)
                settings = cls(**updated_data)

        return settings


# Global settings instance
_settings: ScriptForgeSettings | None = None


def _get_config_paths() -> list[Path | str]:
    """Get the existing config files, lowest priority first."""
    potential_paths = [
        Path.home() / ".config" / "scriptforge" / "config.yaml",
        Path.home() / ".config" / "scriptforge" / "config.toml",
        Path.cwd() / "scriptforge.yaml",
        Path.cwd() / "scriptforge.toml",
    ]
    existing_paths: list[Path | str] = []
    for path in potential_paths:
        try:
            if path.is_file():
                existing_paths.append(path)
        except OSError:
            continue
    return existing_paths


def get_settings() -> ScriptForgeSettings:
    """Get the global settings instance.

    Returns:
        Global ScriptForgeSettings instance.
    """
    global _settings
    if _settings is None:
        config_paths = _get_config_paths()
        if config_paths:
            _settings = ScriptForgeSettings.from_multiple_sources(
                config_files=config_paths
            )
        else:
            _settings = ScriptForgeSettings.from_env()
    return _settings


def set_settings(settings: ScriptForgeSettings) -> None:
    """Set the global settings instance.

    Args:
        settings: Settings instance to use globally.
    """
    global _settings
    _settings = settings


def clear_settings_cache() -> None:
    """Clear the global settings cache.

    This forces get_settings() to re-read from environment variables
    and configuration files on the next call.
    """
    global _settings
    _settings = None


def reset_settings() -> None:
    """Reset the global settings instance."""
    clear_settings_cache()


def get_settings_for_cli(
    config_file: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> ScriptForgeSettings:
    """Get settings for CLI commands with consistent precedence.

    Args:
        config_file: Optional specific config file to load. If not provided,
                    uses standard config locations.
        cli_overrides: CLI argument overrides. Only non-None values are applied.

    Returns:
        ScriptForgeSettings instance with all sources merged.

    Raises:
        FileNotFoundError: If config_file is specified but doesn't exist.
    """
    if config_file:
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        return ScriptForgeSettings.from_multiple_sources(
            config_files=[config_file],
            cli_args=cli_overrides,
        )

    settings = get_settings()
    if cli_overrides:
        filtered_overrides = {k: v for k, v in cli_overrides.items() if v is not None}
        if filtered_overrides:
            data = settings.model_dump()
            data.update(filtered_overrides)
            settings = ScriptForgeSettings(**data)
    return settings
