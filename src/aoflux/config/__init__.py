"""Configuration loading and validation."""

from aoflux.config.loader import load_config
from aoflux.config.schema import (
    BlueprintConfig,
    FluxConfig,
    LoggingConfig,
    NetworkConfig,
    ServerConfig,
    SettleConfig,
    WalletConfig,
)

__all__ = [
    "BlueprintConfig",
    "FluxConfig",
    "LoggingConfig",
    "NetworkConfig",
    "ServerConfig",
    "SettleConfig",
    "WalletConfig",
    "load_config",
]
