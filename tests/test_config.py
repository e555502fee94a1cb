"""Tests for the configuration system."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from agent_loop.config import DEFAULT_MODEL, ConfigError, Settings, _apply_env_overrides, load_settings


def test_settings_defaults():
	"""Settings should have sensible defaults."""
	settings = Settings()
	assert settings.config_dir.is_absolute()
	assert settings.data_dir.is_absolute()
	assert settings.log_dir == settings.data_dir / "logs"
	assert settings.model == DEFAULT_MODEL
	assert settings.max_sessions == 50
	assert settings.retry_delay == 5.0
	assert settings.session_delay == 2.0
	assert settings.retry_delay > settings.session_delay
	assert settings.disallowed_tools == ["Bash"]


def test_settings_env_overrides():
	"""Environment variables should override defaults."""
	settings = Settings()
	with patch.dict(os.environ, {
		"AGENT_LOOP_DATA_DIR": "/tmp/test-data",
		"AGENT_LOOP_MODEL": "claude-sonnet-4-5-20250929",
		"AGENT_LOOP_MAX_SESSIONS": "7",
		"AGENT_LOOP_RETRY_DELAY": "10",
		"AGENT_LOOP_DISALLOWED_TOOLS": "Bash, WebSearch",
	}):
		settings = _apply_env_overrides(settings)
		assert settings.data_dir == Path("/tmp/test-data")
		# Derived paths should be recomputed
		assert settings.log_dir == Path("/tmp/test-data/logs")
		assert settings.model == "claude-sonnet-4-5-20250929"
		assert settings.max_sessions == 7
		assert settings.retry_delay == 10.0
		assert settings.disallowed_tools == ["Bash", "WebSearch"]


def test_empty_command_server_env_disables_channel():
	with patch.dict(os.environ, {"AGENT_LOOP_COMMAND_SERVER": ""}):
		settings = _apply_env_overrides(Settings())
	assert settings.command_server == ""


def test_invalid_env_value():
	with patch.dict(os.environ, {"AGENT_LOOP_MAX_SESSIONS": "many"}):
		with pytest.raises(ConfigError, match="max_sessions"):
			_apply_env_overrides(Settings())


def test_ensure_dirs(tmp_path: Path):
	"""ensure_dirs should create all required directories."""
	settings = Settings(config_dir=tmp_path / "config", data_dir=tmp_path / "data")
	assert not settings.config_dir.exists()

	settings.ensure_dirs()

	assert settings.config_dir.exists()
	assert settings.data_dir.exists()
	assert settings.log_dir.exists()


class TestValidate:
	def test_defaults_valid(self):
		Settings().validate()

	def test_retry_must_exceed_pacing(self):
		with pytest.raises(ConfigError, match="retry_delay"):
			Settings(retry_delay=2.0, session_delay=2.0).validate()

	def test_max_sessions_positive(self):
		with pytest.raises(ConfigError, match="max_sessions"):
			Settings(max_sessions=0).validate()

	def test_limits_positive(self):
		with pytest.raises(ConfigError, match="tool_input_limit"):
			Settings(tool_input_limit=0).validate()


def test_load_settings_reads_toml(tmp_path: Path):
	config_dir = tmp_path / "config"
	config_dir.mkdir()
	(config_dir / "config.toml").write_text(
		'model = "claude-sonnet-4-5-20250929"\n'
		"session_delay = 1\n"
		f'data_dir = "{tmp_path / "data"}"\n'
	)
	with patch.dict(os.environ, {"AGENT_LOOP_CONFIG_DIR": str(config_dir)}, clear=False):
		settings = load_settings()
	assert settings.model == "claude-sonnet-4-5-20250929"
	assert settings.session_delay == 1.0
	assert settings.data_dir == tmp_path / "data"
	assert settings.log_dir.exists()


def test_env_beats_toml(tmp_path: Path):
	config_dir = tmp_path / "config"
	config_dir.mkdir()
	(config_dir / "config.toml").write_text(f'model = "from-toml"\ndata_dir = "{tmp_path / "data"}"\n')
	with patch.dict(os.environ, {
		"AGENT_LOOP_CONFIG_DIR": str(config_dir),
		"AGENT_LOOP_MODEL": "from-env",
	}):
		settings = load_settings()
	assert settings.model == "from-env"


def test_invalid_toml(tmp_path: Path):
	config_dir = tmp_path / "config"
	config_dir.mkdir()
	(config_dir / "config.toml").write_text("model = \n")
	with patch.dict(os.environ, {"AGENT_LOOP_CONFIG_DIR": str(config_dir)}):
		with pytest.raises(ConfigError, match="config.toml"):
			load_settings()


def test_toml_cannot_replace_methods(tmp_path: Path):
	config_dir = tmp_path / "config"
	config_dir.mkdir()
	(config_dir / "config.toml").write_text(
		'validate = "nope"\n'
		'ensure_dirs = 1\n'
		'log_dir = "/elsewhere"\n'
		f'data_dir = "{tmp_path / "data"}"\n'
	)
	with patch.dict(os.environ, {"AGENT_LOOP_CONFIG_DIR": str(config_dir)}):
		settings = load_settings()
	assert callable(settings.validate)
	assert callable(settings.ensure_dirs)
	assert settings.log_dir == tmp_path / "data" / "logs"
