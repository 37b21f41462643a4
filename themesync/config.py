"""Configuration management for themesync.

This module loads the project settings (an optional ``themesync.toml``),
the ``key=value`` environment file holding the store credentials, and
resolves the credential/store pair used by every theme CLI call.
"""

import os
import tomllib
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from rich.console import Console
from typing_extensions import Literal

from .exceptions import ConfigError
from .models import Credentials

DEFAULT_CONFIG_FILE = Path("themesync.toml")

EnvironmentMap = Mapping[str, str]


class Settings(BaseModel):
    """Project settings for a theme sync session."""

    password_var: str = Field(default="SHOPIFY_PASSWORD", description="Key holding the store credential")
    store_var: str = Field(default="SHOPIFY_STORE", description="Key holding the store identifier")
    env_file: Path = Field(default=Path(".env"), description="Environment file with the credentials")
    dist_dir: Path = Field(default=Path("src/shopify"), description="Distribution directory")
    build_dir: Path = Field(default=Path(".build"), description="Scratch directory used during theme creation")
    theme_command: str = Field(default="theme", description="Theme CLI executable")
    watched_extension: str = Field(default=".liquid", description="Extension that triggers a hot deploy")
    debounce_window: float = Field(default=0.5, description="Hot deploy debounce window in seconds")
    debounce_policy: Literal["global", "per-file"] = Field(
        default="global", description="Whether the debounce window blocks all files or only the same file"
    )
    ignored_files: List[str] = Field(
        default_factory=lambda: ["assets/*", "locales/*", "config/*"],
        description="Patterns excluded when pulling a theme",
    )
    protected_branches: List[str] = Field(
        default_factory=lambda: ["main", "master"],
        description="Branches that may never be synced",
    )

    @field_validator("password_var", "store_var", "theme_command")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Validate that names are not blank."""
        v = v.strip()
        if not v:
            raise ValueError("Value cannot be empty")
        return v

    @field_validator("watched_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Validate extension format."""
        if not v.startswith(".") or len(v) < 2:
            raise ValueError("Extension must start with a dot, e.g. '.liquid'")
        return v

    @field_validator("debounce_window")
    @classmethod
    def validate_debounce_window(cls, v: float) -> float:
        """Validate debounce window value."""
        if v <= 0:
            raise ValueError("Debounce window must be greater than 0")
        if v > 10:
            raise ValueError("Debounce window cannot exceed 10 seconds")
        return v


def load_settings(path: Optional[Path] = None, **overrides: Any) -> Settings:
    """Load settings from a TOML file and apply explicit overrides.

    Args:
        path: Settings file. If None, ``themesync.toml`` is used when present.
        **overrides: Values that win over the file, ``None`` values are skipped

    Returns:
        Validated settings

    Raises:
        ConfigError: If the file cannot be read or the values are invalid
    """
    data: Dict[str, Any] = {}
    config_file = path or DEFAULT_CONFIG_FILE

    if path is not None and not config_file.exists():
        raise ConfigError(f"Settings file not found: {config_file}")

    if config_file.exists():
        try:
            with open(config_file, "rb") as f:
                raw = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load settings: {e}")
        data.update(raw.get("themesync", raw))

    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}")


def load_environment(path: Path, console: Optional[Console] = None) -> EnvironmentMap:
    """Load ``key=value`` pairs from an environment file.

    All whitespace is removed from a line before it is parsed, and only lines
    with both a key and a value are kept.

    Args:
        path: Environment file
        console: Console used to warn about a missing file

    Returns:
        Read-only mapping of variable names to values

    Raises:
        ConfigError: If the file exists but cannot be read
    """
    if not path.exists():
        (console or Console(stderr=True)).print(
            f"[yellow]Warning: environment file {path} not found[/yellow]"
        )
        return MappingProxyType({})

    try:
        data = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read environment file {path}: {e}")

    values: Dict[str, str] = {}
    for line in data.splitlines():
        line = "".join(line.split())
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        if key and value:
            values[key] = value

    return MappingProxyType(values)


def resolve_credentials(env: EnvironmentMap, settings: Settings) -> Credentials:
    """Resolve the credential/store pair.

    The environment file wins; the process environment is the fallback.

    Raises:
        ConfigError: If either key is missing from both sources
    """
    resolved = {}
    for var in (settings.password_var, settings.store_var):
        value = env.get(var) or os.getenv(var)
        if not value:
            raise ConfigError(
                f"{var} is not set in {settings.env_file} or the environment",
                details={"key": var},
            )
        resolved[var] = value

    return Credentials(
        password=resolved[settings.password_var],
        store=resolved[settings.store_var],
    )
