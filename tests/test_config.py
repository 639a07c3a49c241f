"""Tests for runtime configuration."""
import textwrap

import pytest

from lxcpilot.core.config import LxcPilotConfig, get_config, set_config
from lxcpilot.core.errors import ConfigurationError

ENV_VARS = [
    "LXCPILOT_CONFIG",
    "LXCPILOT_CONTAINERS_PATH",
    "LXCPILOT_TEMPLATES_PATH",
    "LXCPILOT_USE_SUDO",
    "LXCPILOT_IP_ATTEMPTS",
    "LXCPILOT_IP_RETRY_DELAY",
    "LXCPILOT_TRANSITION_TIMEOUT",
    "LXC_START_LOG_FILE",
    "LXCPILOT_LOG_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    """Test built-in defaults."""

    def test_defaults(self):
        config = LxcPilotConfig.from_env()

        assert config.containers_path == "/var/lib/lxc"
        assert config.templates_lookup == ["/usr/share/lxc/templates", "/usr/lib/lxc/templates"]
        assert config.ip_attempts == 10
        assert config.ip_retry_delay == 3.0
        assert config.use_sudo is True
        assert config.start_log_file is None
        assert config.log_file is None

    def test_lookup_lists_are_independent(self):
        first = LxcPilotConfig()
        first.templates_lookup.append("/extra")

        assert "/extra" not in LxcPilotConfig().templates_lookup


class TestEnvironment:
    """Test environment overrides."""

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("LXCPILOT_CONTAINERS_PATH", "/srv/lxc")
        monkeypatch.setenv("LXCPILOT_TEMPLATES_PATH", "/opt/t1:/opt/t2")
        monkeypatch.setenv("LXCPILOT_USE_SUDO", "0")
        monkeypatch.setenv("LXCPILOT_IP_ATTEMPTS", "4")
        monkeypatch.setenv("LXCPILOT_IP_RETRY_DELAY", "0.5")
        monkeypatch.setenv("LXC_START_LOG_FILE", "/tmp/start.log")
        monkeypatch.setenv("LXCPILOT_LOG_FILE", "/var/log/lxcpilot.log")

        config = LxcPilotConfig.from_env()

        assert config.containers_path == "/srv/lxc"
        assert config.templates_lookup == ["/opt/t1", "/opt/t2"]
        assert config.use_sudo is False
        assert config.ip_attempts == 4
        assert config.ip_retry_delay == 0.5
        assert config.start_log_file == "/tmp/start.log"
        assert config.log_file == "/var/log/lxcpilot.log"

    def test_empty_log_file_is_ignored(self, monkeypatch):
        monkeypatch.setenv("LXC_START_LOG_FILE", "")

        assert LxcPilotConfig.from_env().start_log_file is None


class TestConfigFile:
    """Test YAML configuration files."""

    def test_from_file(self, tmp_path):
        path = tmp_path / "lxcpilot.yml"
        path.write_text(textwrap.dedent("""\
            containers_path: /data/lxc
            templates_lookup:
              - /data/templates
            ip_attempts: 20
            log_file: /data/logs/lxcpilot.log
            """))

        config = LxcPilotConfig.from_file(str(path))

        assert config.containers_path == "/data/lxc"
        assert config.templates_lookup == ["/data/templates"]
        assert config.ip_attempts == 20
        assert config.ip_retry_delay == 3.0
        assert config.log_file == "/data/logs/lxcpilot.log"

    def test_env_beats_file(self, tmp_path, monkeypatch):
        path = tmp_path / "lxcpilot.yml"
        path.write_text("ip_attempts: 20\n")
        monkeypatch.setenv("LXCPILOT_IP_ATTEMPTS", "5")

        assert LxcPilotConfig.from_file(str(path)).ip_attempts == 5

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "lxcpilot.yml"
        path.write_text("")

        assert LxcPilotConfig.from_file(str(path)) == LxcPilotConfig()

    def test_unknown_keys_rejected(self, tmp_path):
        path = tmp_path / "lxcpilot.yml"
        path.write_text("ip_atempts: 3\n")

        with pytest.raises(ConfigurationError, match="ip_atempts"):
            LxcPilotConfig.from_file(str(path))

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "lxcpilot.yml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError):
            LxcPilotConfig.from_file(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            LxcPilotConfig.from_file(str(tmp_path / "nope.yml"))


class TestGlobalConfig:
    """Test the process-wide config."""

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_set_config(self):
        custom = LxcPilotConfig(containers_path="/x")
        set_config(custom)

        assert get_config() is custom

    def test_get_config_reads_named_file(self, tmp_path, monkeypatch):
        path = tmp_path / "lxcpilot.yml"
        path.write_text("containers_path: /from/file\n")
        monkeypatch.setenv("LXCPILOT_CONFIG", str(path))

        assert get_config().containers_path == "/from/file"
