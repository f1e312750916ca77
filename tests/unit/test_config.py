"""Unit tests for configuration loading."""

import stat

import pytest

from fwapi.core.config import (
    AppConfig,
    FirewallConfig,
    FwapiConfig,
    get_example_config,
    init_config,
)
from fwapi.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from FWAPI_* variables and any .env file."""
    for name in ("FWAPI_HOST", "FWAPI_PORT", "FWAPI_IPV6"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestFwapiConfig:
    """Tests for loading the YAML file."""

    def test_defaults(self):
        config = FwapiConfig()
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8000
        assert config.firewall.ipv6 is False
        assert config.firewall.wait_for_lock is True
        assert config.firewall.command_timeout == 10

    def test_load(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  port: 9000\nfirewall:\n  ipv6: true\n")
        config = FwapiConfig.load(path)
        assert config.server.port == 9000
        assert config.firewall.binary == "ip6tables"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc:
            FwapiConfig.load(tmp_path / "missing.yaml")
        assert "not found" in str(exc.value)

    def test_load_or_default_missing_file(self, tmp_path):
        config = FwapiConfig.load_or_default(tmp_path / "missing.yaml")
        assert config.server.port == 8000

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server: [unclosed\n")
        with pytest.raises(ConfigurationError) as exc:
            FwapiConfig.load(path)
        assert "Invalid YAML" in str(exc.value)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            FwapiConfig.load(path)

    def test_invalid_port(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  port: 70000\n")
        with pytest.raises(ConfigurationError):
            FwapiConfig.load(path)

    def test_invalid_timeout(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("firewall:\n  command_timeout: 0\n")
        with pytest.raises(ConfigurationError):
            FwapiConfig.load(path)

    def test_example_config_is_valid(self, tmp_path):
        """The file written by 'config init' should load cleanly."""
        path = tmp_path / "config.yaml"
        path.write_text(get_example_config())
        assert FwapiConfig.load(path) == FwapiConfig()

    def test_to_yaml(self):
        assert "command_timeout: 10" in FwapiConfig().to_yaml()


class TestFirewallConfig:
    """Tests for FirewallConfig."""

    def test_binary(self):
        assert FirewallConfig().binary == "iptables"
        assert FirewallConfig(ipv6=True).binary == "ip6tables"


class TestAppConfig:
    """Tests for environment overrides."""

    def test_file_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  host: 0.0.0.0\n")
        assert AppConfig(config_path=path).server.host == "0.0.0.0"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  host: 0.0.0.0\n  port: 9000\n")
        monkeypatch.setenv("FWAPI_PORT", "8081")
        monkeypatch.setenv("FWAPI_IPV6", "true")
        app_config = AppConfig(config_path=path)
        assert app_config.server.host == "0.0.0.0"
        assert app_config.server.port == 8081
        assert app_config.firewall.ipv6 is True

    def test_invalid_env_port(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FWAPI_PORT", "not-a-port")
        with pytest.raises(ConfigurationError):
            AppConfig(config_path=tmp_path / "missing.yaml")

    def test_out_of_range_env_port(self, tmp_path, monkeypatch):
        """A port outside 1-65535 is a configuration problem, not a bad request."""
        monkeypatch.setenv("FWAPI_PORT", "70000")
        with pytest.raises(ConfigurationError) as exc:
            AppConfig(config_path=tmp_path / "missing.yaml")
        assert "FWAPI_PORT" in str(exc.value)
        assert exc.value.exit_code == 2

    def test_preloaded_config(self, tmp_path):
        config = FwapiConfig(firewall=FirewallConfig(command_timeout=3))
        app_config = AppConfig(config_path=tmp_path / "missing.yaml", config=config)
        assert app_config.firewall.command_timeout == 3


class TestInitConfig:
    """Tests for init_config."""

    def test_writes_file(self, tmp_path):
        path = tmp_path / "etc" / "config.yaml"
        init_config(path)
        assert path.read_text() == get_example_config()
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_refuses_overwrite(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server: {}\n")
        with pytest.raises(ConfigurationError) as exc:
            init_config(path)
        assert exc.value.hint == "Use --force to overwrite"

    def test_force_overwrite(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("server: {}\n")
        init_config(path, force=True)
        assert path.read_text() == get_example_config()
