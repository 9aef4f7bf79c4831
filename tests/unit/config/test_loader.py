"""Tests for configuration loading and precedence."""

from pathlib import Path

import pytest

from mco.config.env import EnvReader
from mco.config.loader import get_config, get_default_config_path, load_config_file
from mco.config.models import ConfigError


@pytest.fixture
def config_file(tmp_path):
    def _write(text: str) -> Path:
        path = tmp_path / "config.toml"
        path.write_text(text)
        return path

    return _write


NO_ENV = EnvReader(env={})


class TestLoadConfigFile:
    """Tests for load_config_file."""

    def test_missing_file_is_empty(self, tmp_path):
        assert load_config_file(tmp_path / "nope.toml") == {}

    def test_invalid_toml(self, config_file):
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config_file(config_file("[retry\nmax_retries = "))


class TestGetConfig:
    """Tests for get_config."""

    def test_defaults(self, tmp_path):
        config = get_config(tmp_path / "missing.toml", env_reader=NO_ENV)
        assert config.retry.max_retries == 3
        assert config.batch.max_concurrent == 2
        assert config.tools.ffmpeg is None
        assert config.logging.level == "info"

    def test_file_values(self, config_file):
        path = config_file(
            """
            [tools]
            ffmpeg = "~/bin/ffmpeg"

            [retry]
            max_retries = 5
            base_delay = 0.5

            [batch]
            max_concurrent = 4
            """
        )
        config = get_config(path, env_reader=NO_ENV)

        assert config.tools.ffmpeg == Path("~/bin/ffmpeg").expanduser()
        assert config.retry.max_retries == 5
        assert config.retry.base_delay == 0.5
        assert config.batch.max_concurrent == 4

    def test_precedence(self, config_file):
        """Overrides beat the environment, which beats the file."""
        path = config_file("[retry]\nmax_retries = 5\n[batch]\nmax_concurrent = 4\n")
        env = EnvReader(env={"MCO_MAX_RETRIES": "7", "MCO_MAX_CONCURRENT": "6"})

        config = get_config(
            path, overrides={"batch": {"max_concurrent": 8}}, env_reader=env
        )

        assert config.retry.max_retries == 7
        assert config.batch.max_concurrent == 8

    def test_none_override_ignored(self, tmp_path):
        config = get_config(
            tmp_path / "missing.toml",
            overrides={"logging": {"level": None, "file": None}},
            env_reader=EnvReader(env={"MCO_LOG_LEVEL": "debug"}),
        )
        assert config.logging.level == "debug"

    def test_config_path_from_env(self, config_file):
        path = config_file("[process]\nkill_grace_seconds = 1.5\n")
        env = EnvReader(env={"MCO_CONFIG_PATH": str(path)})

        assert get_default_config_path(env) == path
        assert get_config(env_reader=env).process.kill_grace_seconds == 1.5

    def test_unknown_key(self, config_file):
        with pytest.raises(ConfigError, match="Unknown keys in \\[retry\\]"):
            get_config(config_file("[retry]\nretries = 5\n"), env_reader=NO_ENV)

    def test_unknown_section(self, config_file):
        with pytest.raises(ConfigError, match="Unknown config sections"):
            get_config(config_file("[server]\nport = 1\n"), env_reader=NO_ENV)

    def test_section_not_table(self, config_file):
        with pytest.raises(ConfigError, match="must be a table"):
            get_config(config_file('retry = "fast"\n'), env_reader=NO_ENV)

    def test_invalid_value(self, config_file):
        with pytest.raises(ConfigError):
            get_config(config_file("[batch]\nmax_concurrent = 0\n"), env_reader=NO_ENV)

    def test_wrong_type(self, config_file):
        path = config_file('[retry]\nmax_retries = "many"\n')
        with pytest.raises(ConfigError):
            get_config(path, env_reader=NO_ENV)

    def test_unknown_override_section(self, tmp_path):
        with pytest.raises(ConfigError, match="Unknown config section"):
            get_config(
                tmp_path / "missing.toml",
                overrides={"server": {"port": 1}},
                env_reader=NO_ENV,
            )
