"""Tests for configuration loading and validation."""

from __future__ import annotations

import pytest

from aoflux.config.loader import _deep_merge, load_config
from aoflux.config.schema import (
    FluxConfig,
    NetworkConfig,
    SettleConfig,
    WalletConfig,
)
from aoflux.core.errors import ConfigError


@pytest.fixture(autouse=True)
def _isolate(tmp_path, monkeypatch):
    """Keep user/project config and env vars out of every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
    for var in ("AOFLUX_CONFIG", "AOFLUX_WALLET", "PORT"):
        monkeypatch.delenv(var, raising=False)


# ─── Schema Defaults ──────────────────────────────────────────


class TestSchemaDefaults:
    def test_flux_config_all_defaults(self):
        cfg = FluxConfig()
        assert cfg.network.mu_url == "https://mu.ao-testnet.xyz"
        assert cfg.network.cu_url == "https://cu.ao-testnet.xyz"
        assert cfg.settle.delay_ms == 100
        assert cfg.settle.strategy == "fixed"
        assert cfg.server.port == 3000
        assert cfg.logging.level == "INFO"
        assert cfg.wallet.path is None

    def test_network_modules(self):
        cfg = NetworkConfig()
        assert cfg.standard_module == "JArYBF-D8q2OmZ4Mok00sD2Y_6SYEQ7Hjx-6VZ_jl3g"
        assert cfg.sqlite_module == "33d-3X8mpv6xYBlVB-eXMrPfH5Kzf6Hiwhcv0UA10sw"
        assert cfg.scheduler == "_GQ33BkPtZrqxA84vM8Zk-N2aO0toNNu_C-l-rawrBA"

    def test_settle_rejects_negative_delay(self):
        with pytest.raises(ValueError):
            SettleConfig(delay_ms=-1)

    def test_settle_rejects_unknown_strategy(self):
        with pytest.raises(ValueError):
            SettleConfig(strategy="adaptive")  # type: ignore[arg-type]

    def test_wallet_env_default(self):
        assert WalletConfig().path_env == "AOFLUX_WALLET"


# ─── Merge ────────────────────────────────────────────────────


class TestDeepMerge:
    def test_nested_override(self):
        base = {"network": {"mu_url": "a", "timeout": 1}}
        merged = _deep_merge(base, {"network": {"mu_url": "b"}})
        assert merged == {"network": {"mu_url": "b", "timeout": 1}}
        assert base["network"]["mu_url"] == "a"

    def test_scalar_replaces_dict(self):
        assert _deep_merge({"a": {"b": 1}}, {"a": 2}) == {"a": 2}


# ─── Loading ──────────────────────────────────────────────────


class TestLoadConfig:
    def test_defaults_without_files(self):
        cfg = load_config()
        assert cfg == FluxConfig()

    def test_project_file(self, tmp_path):
        (tmp_path / "aoflux.toml").write_text("[settle]\ndelay_ms = 250\n")
        assert load_config().settle.delay_ms == 250

    def test_user_file_then_project_file(self, tmp_path):
        user_dir = tmp_path / "xdg" / "aoflux"
        user_dir.mkdir(parents=True)
        (user_dir / "config.toml").write_text(
            '[network]\nmu_url = "https://user"\ncu_url = "https://user-cu"\n'
        )
        (tmp_path / "aoflux.toml").write_text('[network]\nmu_url = "https://project"\n')
        cfg = load_config()
        assert cfg.network.mu_url == "https://project"
        assert cfg.network.cu_url == "https://user-cu"

    def test_env_config_path(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.toml"
        path.write_text("[server]\nport = 8080\n")
        monkeypatch.setenv("AOFLUX_CONFIG", str(path))
        assert load_config().server.port == 8080

    def test_env_config_missing_file(self, monkeypatch):
        monkeypatch.setenv("AOFLUX_CONFIG", "/no/such/file.toml")
        with pytest.raises(ConfigError, match="non-existent"):
            load_config()

    def test_explicit_path_missing(self):
        with pytest.raises(ConfigError, match="not found"):
            load_config(path="/no/such/file.toml")

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[network\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(path=path)

    def test_validation_failure(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('[settle]\nstrategy = "sometimes"\n')
        with pytest.raises(ConfigError, match="validation failed"):
            load_config(path=path)

    def test_port_env_override(self, monkeypatch):
        monkeypatch.setenv("PORT", "4321")
        assert load_config().server.port == 4321

    def test_port_env_not_integer(self, monkeypatch):
        monkeypatch.setenv("PORT", "http")
        with pytest.raises(ConfigError, match="PORT"):
            load_config()

    def test_overrides_win(self, tmp_path):
        (tmp_path / "aoflux.toml").write_text("[settle]\ndelay_ms = 250\n")
        cfg = load_config(overrides={"settle": {"delay_ms": 5}})
        assert cfg.settle.delay_ms == 5

    def test_wallet_path_from_env(self, monkeypatch):
        monkeypatch.setenv("AOFLUX_WALLET", "/keys/wallet.json")
        assert load_config().wallet.path == "/keys/wallet.json"

    def test_explicit_wallet_path_beats_env(self, monkeypatch):
        monkeypatch.setenv("AOFLUX_WALLET", "/keys/env.json")
        cfg = load_config(overrides={"wallet": {"path": "/keys/file.json"}})
        assert cfg.wallet.path == "/keys/file.json"
