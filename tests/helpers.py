"""Shared test fixtures and helpers for agent-loop tests."""

import io
import json
from pathlib import Path
from typing import Any, Iterable, Optional

from rich.console import Console

from agent_loop.config import Settings
from agent_loop.session import SessionOutcome


def make_settings(tmp_path: Path, **overrides) -> Settings:
	"""Settings rooted in a temp dir."""
	return Settings(
		config_dir=tmp_path / "config",
		data_dir=tmp_path / "data",
		**overrides,
	)


def make_console(width: int = 200) -> Console:
	"""A console that records plain text instead of writing to a terminal."""
	return Console(file=io.StringIO(), width=width, color_system=None, force_terminal=False)


def console_text(console: Console) -> str:
	return console.file.getvalue()


def make_feature(description: str = "Feature", passes: bool = False, priority: int = 1, **extra) -> dict:
	feature = {
		"category": "functional",
		"description": description,
		"steps": ["Open the app", "Check the result"],
		"passes": passes,
		"priority": priority,
	}
	feature.update(extra)
	return feature


def write_feature_list(project_dir: Path, total: int, passing: int = 0) -> Path:
	"""Write a feature list with `passing` of `total` features marked passing."""
	features = [
		make_feature(f"Feature {i + 1}", passes=i < passing, priority=i + 1)
		for i in range(total)
	]
	path = project_dir / "feature_list.json"
	path.write_text(json.dumps({"features": features}, indent=2))
	return path


def write_plan(project_dir: Path) -> Path:
	path = project_dir / "plan.md"
	path.write_text("# Implementation Plan\n")
	return path


def fake_query(messages: Iterable[Any], error: Optional[Exception] = None):
	"""Stand-in for claude_agent_sdk.query yielding canned messages."""
	calls: list[dict] = []

	async def _query(*, prompt, options=None):
		calls.append({"prompt": prompt, "options": options})
		for message in messages:
			yield message
		if error is not None:
			raise error

	_query.calls = calls
	return _query


class ScriptedSessions:
	"""Session runner that replays outcomes and optional disk side effects."""

	def __init__(self, outcomes: list, effects: Optional[list] = None):
		self.outcomes = list(outcomes)
		self.effects = list(effects or [])
		self.calls: list[dict] = []

	async def __call__(self, prompt, cwd, model, verbose, **kwargs) -> SessionOutcome:
		self.calls.append({"prompt": prompt, "cwd": cwd, "model": model, "verbose": verbose})
		index = len(self.calls) - 1
		if index < len(self.effects) and self.effects[index] is not None:
			self.effects[index]()
		success = self.outcomes[index] if index < len(self.outcomes) else True
		return SessionOutcome(success=success, error=None if success else "boom")


class RecordingSleep:
	"""Async sleep replacement that records requested delays."""

	def __init__(self):
		self.delays: list[float] = []

	async def __call__(self, seconds: float) -> None:
		self.delays.append(seconds)
