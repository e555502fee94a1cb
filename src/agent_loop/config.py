"""Configuration system using platformdirs for cross-platform paths."""

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path

import platformdirs

APP_NAME = "agent-loop"

DEFAULT_MODEL = "claude-opus-4-5-20251101"


class ConfigError(Exception):
	"""Raised for invalid settings or command-line input."""
	pass


@dataclass
class Settings:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Derived paths
	log_dir: Path = field(init=False)

	# Session defaults
	model: str = DEFAULT_MODEL
	max_sessions: int = 50

	# Pauses between sessions, in seconds
	retry_delay: float = 5.0
	session_delay: float = 2.0

	# Transcript caps
	tool_input_limit: int = 200
	tool_result_limit: int = 200
	verbose_tool_result_limit: int = 500

	# Agent tool surface
	disallowed_tools: list[str] = field(default_factory=lambda: ["Bash"])
	command_server: str = "nu"

	def __post_init__(self) -> None:
		self.log_dir = self.data_dir / "logs"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)

	def validate(self) -> None:
		"""Reject settings the session loop cannot honor."""
		if self.max_sessions < 1:
			raise ConfigError(f"max_sessions must be at least 1, got {self.max_sessions}")
		if self.session_delay < 0:
			raise ConfigError(f"session_delay must not be negative, got {self.session_delay}")
		if self.retry_delay <= self.session_delay:
			raise ConfigError(
				f"retry_delay ({self.retry_delay}) must be greater than session_delay ({self.session_delay})"
			)
		for name in ("tool_input_limit", "tool_result_limit", "verbose_tool_result_limit"):
			if getattr(self, name) < 1:
				raise ConfigError(f"{name} must be at least 1")


_PATH_FIELDS = {"config_dir", "data_dir"}
_INT_FIELDS = {"max_sessions", "tool_input_limit", "tool_result_limit", "verbose_tool_result_limit"}
_FLOAT_FIELDS = {"retry_delay", "session_delay"}


def _coerce(key: str, val):
	"""Convert a raw env/toml value to the field's type."""
	try:
		if key in _PATH_FIELDS:
			return Path(os.path.expanduser(str(val)))
		if key in _INT_FIELDS:
			return int(val)
		if key in _FLOAT_FIELDS:
			return float(val)
	except (TypeError, ValueError) as e:
		raise ConfigError(f"Invalid value for {key}: {val!r}") from e
	if key == "disallowed_tools":
		if isinstance(val, str):
			return [t.strip() for t in val.split(",") if t.strip()]
		return list(val)
	return val


def _apply_env_overrides(settings: Settings) -> Settings:
	"""Apply AGENT_LOOP_* environment variable overrides."""
	env_map = {
		"AGENT_LOOP_CONFIG_DIR": "config_dir",
		"AGENT_LOOP_DATA_DIR": "data_dir",
		"AGENT_LOOP_MODEL": "model",
		"AGENT_LOOP_MAX_SESSIONS": "max_sessions",
		"AGENT_LOOP_RETRY_DELAY": "retry_delay",
		"AGENT_LOOP_SESSION_DELAY": "session_delay",
		"AGENT_LOOP_DISALLOWED_TOOLS": "disallowed_tools",
		"AGENT_LOOP_COMMAND_SERVER": "command_server",
	}
	for env_key, attr in env_map.items():
		val = os.getenv(env_key)
		if val is not None and (val or attr == "command_server"):
			setattr(settings, attr, _coerce(attr, val))
	# Recompute derived paths after overrides
	settings.__post_init__()
	return settings


def _apply_toml(settings: Settings) -> Settings:
	"""Apply config.toml overrides if file exists."""
	toml_path = settings.config_dir / "config.toml"
	if not toml_path.exists():
		return settings

	try:
		with open(toml_path, "rb") as f:
			data = tomllib.load(f)
	except tomllib.TOMLDecodeError as e:
		raise ConfigError(f"config.toml parse error: {e}") from e

	settable = {f.name for f in fields(Settings) if f.init}
	for key, val in data.items():
		if key in settable:
			setattr(settings, key, _coerce(key, val))

	# Recompute derived paths after toml overrides
	settings.__post_init__()
	return settings


def load_settings() -> Settings:
	"""Load settings with precedence: env vars > config.toml > defaults."""
	settings = Settings()
	# The config dir itself may be overridden from the environment
	config_dir = os.getenv("AGENT_LOOP_CONFIG_DIR")
	if config_dir:
		settings.config_dir = Path(config_dir)
	settings = _apply_toml(settings)
	settings = _apply_env_overrides(settings)
	settings.validate()
	settings.ensure_dirs()
	return settings


# Singleton
_settings: Settings | None = None


def get_settings() -> Settings:
	"""Get or create the global settings instance."""
	global _settings
	if _settings is None:
		_settings = load_settings()
	return _settings
