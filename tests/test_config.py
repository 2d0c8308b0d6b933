"""Tests for configuration loading."""

from pathlib import Path

import pytest

from pingpy.config import (
    LoggingSettings,
    PingConfig,
    ProbeSettings,
    create_default_config,
    find_config_file,
    load_config,
    load_from_env,
)
from pingpy.errors import ConfigurationError


class TestConfigModels:
    """Defaults and validation."""

    def test_defaults(self):
        config = PingConfig()
        assert config.probe.count == 4
        assert config.probe.timeout_ms == 2000
        assert config.probe.privileged is False
        assert config.output.ascii is False
        assert config.output.color is True
        assert config.logging.level == "WARNING"
        assert config.logging.file is None

    @pytest.mark.parametrize("field", ["count", "timeout_ms"])
    @pytest.mark.parametrize("value", [0, -3])
    def test_non_positive_rejected(self, field, value):
        with pytest.raises(ValueError):
            ProbeSettings(**{field: value})

    def test_log_level_normalized(self):
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValueError):
            LoggingSettings(level="chatty")


class TestLoadConfig:
    """Merging file and environment sources."""

    def test_no_file(self):
        config = load_config(environ={})
        assert config == PingConfig()

    def test_from_toml_file(self, tmp_path):
        config_file = tmp_path / "pingpy.toml"
        config_file.write_text('[probe]\ncount = 7\n\n[output]\nascii = true\n')
        config = load_config(config_file, environ={})
        assert config.probe.count == 7
        assert config.probe.timeout_ms == 2000
        assert config.output.ascii is True

    def test_found_in_cwd(self, tmp_path):
        (tmp_path / "pingpy.toml").write_text("[probe]\ntimeout_ms = 300\n")
        assert find_config_file() == tmp_path / "pingpy.toml"
        assert load_config(environ={}).probe.timeout_ms == 300

    def test_env_overrides_file(self, tmp_path):
        config_file = tmp_path / "c.toml"
        config_file.write_text("[probe]\ncount = 7\n")
        env = {"PINGPY_PROBE_COUNT": "9", "PINGPY_PROBE_TIMEOUT_MS": "250"}
        config = load_config(config_file, environ=env)
        assert config.probe.count == 9
        assert config.probe.timeout_ms == 250

    def test_invalid_toml(self, tmp_path):
        config_file = tmp_path / "bad.toml"
        config_file.write_text("invalid toml content [[[")
        with pytest.raises(ConfigurationError, match="Failed to load config file"):
            load_config(config_file, environ={})

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "absent.toml", environ={})

    def test_invalid_values(self, tmp_path):
        config_file = tmp_path / "c.toml"
        config_file.write_text("[probe]\ncount = 0\n")
        with pytest.raises(ConfigurationError, match="validation failed"):
            load_config(config_file, environ={})

    def test_overrides_applied_before_validation(self, tmp_path):
        config_file = tmp_path / "c.toml"
        config_file.write_text("[probe]\ncount = 0\ntimeout_ms = 300\n")
        env = {"PINGPY_OUTPUT_ASCII": "true"}
        overrides = {"probe": {"count": 2}, "output": {"color": False}, "logging": {}}
        config = load_config(config_file, environ=env, overrides=overrides)
        assert config.probe.count == 2
        assert config.probe.timeout_ms == 300
        assert config.output.ascii is True
        assert config.output.color is False

    def test_invalid_override_rejected(self):
        with pytest.raises(ConfigurationError, match="validation failed"):
            load_config(environ={}, overrides={"logging": {"level": "chatty"}})


class TestEnvironmentConfig:
    """PINGPY_* variables."""

    def test_empty(self):
        assert load_from_env({"PATH": "/bin"}) == {}

    def test_type_conversion(self):
        env = {
            "PINGPY_PROBE_COUNT": "3",
            "PINGPY_PROBE_PRIVILEGED": "yes",
            "PINGPY_OUTPUT_COLOR": "off",
            "PINGPY_LOGGING_LEVEL": "info",
            "PINGPY_BOGUS": "x",
        }
        config = load_from_env(env)
        assert config["probe"] == {"count": 3, "privileged": True}
        assert config["output"] == {"color": False}
        assert config["logging"] == {"level": "info"}
        assert "bogus" not in config


class TestDefaultConfigFile:
    def test_roundtrip(self, tmp_path):
        path = tmp_path / "sub" / "pingpy.toml"
        create_default_config(path)
        assert path.exists()
        content = path.read_text()
        assert "[probe]" in content
        assert load_config(Path(path), environ={}) == PingConfig()
