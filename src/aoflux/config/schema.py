"""Pydantic models for aoflux configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class NetworkConfig(BaseModel):
    """AO network endpoints and fixed process parameters."""

    mu_url: str = "https://mu.ao-testnet.xyz"
    cu_url: str = "https://cu.ao-testnet.xyz"
    scheduler: str = "_GQ33BkPtZrqxA84vM8Zk-N2aO0toNNu_C-l-rawrBA"
    standard_module: str = "JArYBF-D8q2OmZ4Mok00sD2Y_6SYEQ7Hjx-6VZ_jl3g"
    sqlite_module: str = "33d-3X8mpv6xYBlVB-eXMrPfH5Kzf6Hiwhcv0UA10sw"
    timeout: float = 30.0


class SettleConfig(BaseModel):
    """How long to wait between submitting a message and fetching its result."""

    delay_ms: int = Field(default=100, ge=0)
    strategy: Literal["fixed", "backoff"] = "fixed"
    max_retries: int = Field(default=3, ge=0)
    max_delay_ms: int = Field(default=2000, ge=0)


class WalletConfig(BaseModel):
    """Signing wallet location."""

    path: str | None = None
    path_env: str | None = "AOFLUX_WALLET"


class BlueprintConfig(BaseModel):
    """Where official blueprints and the APM client are fetched from."""

    base_url: str = (
        "https://raw.githubusercontent.com/permaweb/aos/refs/heads/main/blueprints"
    )
    apm_client_url: str = (
        "https://raw.githubusercontent.com/betteridea-dev/ao-package-manager"
        "/refs/heads/main/client.lua"
    )


class ServerConfig(BaseModel):
    """HTTP/SSE server settings."""

    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""


class FluxConfig(BaseModel):
    """Top-level configuration for aoflux."""

    network: NetworkConfig = Field(default_factory=NetworkConfig)
    settle: SettleConfig = Field(default_factory=SettleConfig)
    wallet: WalletConfig = Field(default_factory=WalletConfig)
    blueprints: BlueprintConfig = Field(default_factory=BlueprintConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
