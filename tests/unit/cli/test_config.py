"""Tests for CLI configuration loading."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from src.cli.config import ENV_OVERRIDES, Config


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Isolate tests from the caller's environment and home directory."""
    for env_var in list(ENV_OVERRIDES) + ["OCP_RECLAIM_CONFIG"]:
        monkeypatch.delenv(env_var, raising=False)
    with patch("src.cli.config.DEFAULT_CONFIG_PATH", tmp_path / "missing" / "config.yaml"):
        yield


class TestConfigLoad:
    """Test suite for Config.load."""

    def test_defaults(self) -> None:
        """Test defaults when no file or environment is present."""
        config = Config.load()

        assert config.cloud is None
        assert config.install_dir == "openshift-install"
        assert config.log_level == "WARNING"
        assert config.router_max_attempts == 3
        assert config.router_retry_delay == 2.0
        assert config.metadata_path == Path("openshift-install") / "metadata.json"

    def test_file_values(self, tmp_path: Path) -> None:
        """Test values read from a YAML file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "cloud: shiftstack\n"
            "install_dir: /srv/install\n"
            "router_max_attempts: 5\n"
            "router_retry_delay: 0.5\n"
            "base_domain: ocp.example.org\n"
        )

        config = Config.load(str(config_file))

        assert config.cloud == "shiftstack"
        assert config.metadata_path == Path("/srv/install/metadata.json")
        assert config.router_max_attempts == 5
        assert config.router_retry_delay == 0.5
        assert config.base_domain == "ocp.example.org"

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test environment variables win over the file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("cloud: from-file\nlog_level: INFO\n")
        monkeypatch.setenv("OS_CLOUD", "from-env")
        monkeypatch.setenv("OCP_RECLAIM_AUDIT_DIR", str(tmp_path / "audit"))

        config = Config.load(str(config_file))

        assert config.cloud == "from-env"
        assert config.log_level == "INFO"
        assert config.audit_dir == str(tmp_path / "audit")

    def test_config_path_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test OCP_RECLAIM_CONFIG selects the file."""
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("cluster_name: ocp-lab\n")
        monkeypatch.setenv("OCP_RECLAIM_CONFIG", str(config_file))

        assert Config.load().cluster_name == "ocp-lab"

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        """Test a missing explicit file is an error."""
        with pytest.raises(FileNotFoundError):
            Config.load(str(tmp_path / "nope.yaml"))

    def test_non_mapping_file(self, tmp_path: Path) -> None:
        """Test a YAML list is rejected."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            Config.load(str(config_file))

    def test_unknown_keys_ignored(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Test unknown keys are dropped with a warning."""
        caplog.set_level(logging.WARNING)
        config_file = tmp_path / "config.yaml"
        config_file.write_text("cloud: shiftstack\nregion: RegionOne\n")

        config = Config.load(str(config_file))

        assert config.cloud == "shiftstack"
        assert "region" in caplog.text
