"""Configuration loading: TOML files, env var overrides, merge logic.

Discovery order (later overrides earlier):
    1. Built-in defaults (Pydantic model defaults)
    2. User config: ``~/.config/aoflux/config.toml``
    3. Project-local config: ``./aoflux.toml``
    4. ``$AOFLUX_CONFIG`` environment variable (explicit path)
    5. ``path`` argument to ``load_config``
    6. Environment variable overrides (below)
    7. Programmatic overrides (passed to ``load_config``)

Environment variable overrides:
    ``PORT`` overrides ``server.port``.  The wallet's ``path_env`` field
    names an env var (default ``AOFLUX_WALLET``); if it is set *and*
    ``wallet.path`` is not already provided, the loader resolves it.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from aoflux.core.errors import ConfigError

from .schema import FluxConfig


def _user_config_path() -> Path:
    """Return XDG-compliant user config path."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "aoflux" / "config.toml"


def _project_config_path() -> Path:
    """Return project-local config path."""
    return Path.cwd() / "aoflux.toml"


def _discover_config_files() -> list[Path]:
    """Return config files in merge order (first = lowest priority)."""
    paths: list[Path] = []

    user = _user_config_path()
    if user.is_file():
        paths.append(user)

    project = _project_config_path()
    if project.is_file():
        paths.append(project)

    env_path = os.environ.get("AOFLUX_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.is_file():
            msg = f"AOFLUX_CONFIG points to non-existent file: {env_path}"
            raise ConfigError(msg)
        paths.append(p)

    return paths


def _read_toml(path: Path) -> dict[str, Any]:
    """Read and parse a TOML file."""
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read config file {path}: {e}"
        raise ConfigError(msg) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override wins on conflicts."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_overrides() -> dict[str, Any]:
    """Collect overrides that come straight from the environment."""
    port = os.environ.get("PORT")
    if not port:
        return {}
    try:
        return {"server": {"port": int(port)}}
    except ValueError as e:
        msg = f"PORT must be an integer, got {port!r}"
        raise ConfigError(msg) from e


def _resolve_wallet_path(config: FluxConfig) -> None:
    """Resolve the wallet path from its environment variable (in-place)."""
    wallet = config.wallet
    if wallet.path is None and wallet.path_env:
        wallet.path = os.environ.get(wallet.path_env) or None


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> FluxConfig:
    """Load and validate configuration.

    Args:
        path: Explicit config file path (highest file priority).
        overrides: Dict of overrides merged last (highest overall priority).

    Returns:
        Validated FluxConfig instance.

    Raises:
        ConfigError: On invalid TOML, missing files, or validation failure.
    """
    merged: dict[str, Any] = {}

    files = _discover_config_files()

    # Explicit path overrides AOFLUX_CONFIG
    if path is not None:
        p = Path(path)
        if not p.is_file():
            msg = f"Config file not found: {path}"
            raise ConfigError(msg)
        files.append(p)

    for config_file in files:
        data = _read_toml(config_file)
        merged = _deep_merge(merged, data)

    merged = _deep_merge(merged, _env_overrides())

    if overrides:
        merged = _deep_merge(merged, overrides)

    try:
        config = FluxConfig.model_validate(merged)
    except Exception as e:
        msg = f"Configuration validation failed: {e}"
        raise ConfigError(msg) from e

    _resolve_wallet_path(config)

    return config
