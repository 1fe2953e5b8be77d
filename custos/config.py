"""Configuration file management for custos."""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w

from custos.errors import ConfigError

BACKENDS = ("local", "remote")

DEFAULT_CONFIG: dict[str, Any] = {
    "backend": "local",
    "log_level": "WARNING",
    "supabase": {
        "url": "",
        "anon_key": "",
        "table": "expenses",
        "timeout": 15,
    },
}


@dataclass(frozen=True)
class SupabaseSettings:
    """Connection settings for the remote backend."""

    url: str
    anon_key: str
    table: str = "expenses"
    timeout: float = 15


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "custos" / "config.toml"


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)
    save_config(DEFAULT_CONFIG, config_path)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    A missing file yields the defaults. Environment variables override
    file values: CUSTOS_BACKEND, CUSTOS_LOG_LEVEL, SUPABASE_URL and
    SUPABASE_ANON_KEY.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        ConfigError: If the file is not valid TOML or the log level is unknown.
    """
    if config_path is None:
        config_path = get_config_path()

    config: dict[str, Any] = {**DEFAULT_CONFIG, "supabase": dict(DEFAULT_CONFIG["supabase"])}

    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                loaded = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e
        config["supabase"].update(loaded.pop("supabase", {}))
        config.update(loaded)

    if os.environ.get("CUSTOS_BACKEND"):
        config["backend"] = os.environ["CUSTOS_BACKEND"]
    if os.environ.get("CUSTOS_LOG_LEVEL"):
        config["log_level"] = os.environ["CUSTOS_LOG_LEVEL"]
    if os.environ.get("SUPABASE_URL"):
        config["supabase"]["url"] = os.environ["SUPABASE_URL"]
    if os.environ.get("SUPABASE_ANON_KEY"):
        config["supabase"]["anon_key"] = os.environ["SUPABASE_ANON_KEY"]

    level = str(config.get("log_level", "WARNING")).upper()
    if level not in logging.getLevelNamesMapping():
        raise ConfigError(f"Unknown log level {config['log_level']!r} (expected DEBUG, INFO, WARNING or ERROR)")
    config["log_level"] = level

    return config


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def get_backend(config: dict[str, Any]) -> str:
    """Get the configured persistence backend.

    Raises:
        ConfigError: If the backend is not "local" or "remote".
    """
    backend = str(config.get("backend", "local")).lower()
    if backend not in BACKENDS:
        raise ConfigError(f"Unknown backend {backend!r} (expected one of: {', '.join(BACKENDS)})")
    return backend


def get_supabase_settings(config: dict[str, Any]) -> SupabaseSettings:
    """Get remote backend settings.

    Raises:
        ConfigError: If the URL or anon key is missing.
    """
    supabase = config.get("supabase", {})
    url = str(supabase.get("url", "")).rstrip("/")
    anon_key = str(supabase.get("anon_key", ""))
    if not url or not anon_key:
        raise ConfigError("Supabase URL and anon key are required (set SUPABASE_URL and SUPABASE_ANON_KEY)")

    return SupabaseSettings(
        url=url,
        anon_key=anon_key,
        table=str(supabase.get("table", "expenses")),
        timeout=float(supabase.get("timeout", 15)),
    )
