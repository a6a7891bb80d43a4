"""Tests for HarnessConfig and its loader."""

from pathlib import Path

import pytest

from clirig.config import DEFAULT_ALIASES, HarnessConfig, load_config
from clirig.exceptions import ConfigurationError


class TestHarnessConfig:
    def test_defaults(self) -> None:
        config = HarnessConfig()
        assert config.repo_env_var == "IPFS_PATH"
        assert config.daemon_api == "/ip4/127.0.0.1/tcp/5002"
        assert config.ready_marker == "Daemon is ready\n"
        assert config.shutdown_grace == 1.0
        assert dict(config.aliases) == {"cat": "files", "add": "files", "get": "files"}
        assert config.numeric_log_level == 30

    def test_aliases_are_read_only(self) -> None:
        config = HarnessConfig(aliases={"ls": "files"})
        with pytest.raises(TypeError):
            config.aliases["cat"] = "files"
        assert "ls" not in DEFAULT_ALIASES

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"shutdown_grace": -1},
            {"shutdown_grace": True},
            {"log_level": "LOUD"},
            {"daemon_api": "127.0.0.1:5002"},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            HarnessConfig(**kwargs)


class TestLoadConfig:
    def test_no_file_gives_defaults(self) -> None:
        assert load_config(None) == HarnessConfig()

    def test_reads_harness_table(self, tmp_path: Path) -> None:
        config_file = tmp_path / "clirig.toml"
        config_file.write_text(
            """
            [harness]
            repo_env_var = "NODE_REPO"
            shutdown_grace = 0.5
            unknown_key = 1

            [harness.aliases]
            ls = "files"
            """
        )
        config = load_config(config_file)
        assert config.repo_env_var == "NODE_REPO"
        assert config.shutdown_grace == 0.5
        assert dict(config.aliases) == {"ls": "files"}

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "clirig.toml"
        config_file.write_text("[harness]\nshutdown_grace = 0.5\n")
        monkeypatch.setenv("CLIRIG_SHUTDOWN_GRACE", "0")
        monkeypatch.setenv("CLIRIG_DAEMON_API", "/ip4/127.0.0.1/tcp/6002")
        config = load_config(config_file)
        assert config.shutdown_grace == 0.0
        assert config.daemon_api == "/ip4/127.0.0.1/tcp/6002"

    def test_invalid_env_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLIRIG_SHUTDOWN_GRACE", "soon")
        with pytest.raises(ConfigurationError, match="CLIRIG_SHUTDOWN_GRACE"):
            load_config(None)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "broken.toml"
        config_file.write_text('[harness\nrepo_env_var = "x')
        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            load_config(config_file)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "nope.toml")

    def test_invalid_value_in_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "clirig.toml"
        config_file.write_text("[harness]\nshutdown_grace = -2\n")
        with pytest.raises(ConfigurationError, match="shutdown_grace"):
            load_config(config_file)
