"""Tests for the Rich status and summary views."""

from pathlib import Path

from agent_loop.orchestrator import BudgetExhausted, LoopResult, SessionRecord
from agent_loop.phases import Phase
from agent_loop.progress import Progress
from agent_loop.visualizer import render_run_summary, render_status

from tests.helpers import console_text, make_console, write_feature_list, write_plan


class TestRenderStatus:
	def test_fresh_project(self, tmp_path: Path):
		console = make_console()
		render_status(tmp_path, console=console)
		out = console_text(console)
		assert "[initializer]" in out
		assert "No feature_list.json yet" in out

	def test_corrupt_list(self, tmp_path: Path):
		(tmp_path / "feature_list.json").write_text("{not json")
		console = make_console()
		render_status(tmp_path, console=console)
		out = console_text(console)
		assert "could not be parsed" in out
		assert "[initializer]" in out

	def test_feature_table(self, tmp_path: Path):
		write_feature_list(tmp_path, total=3, passing=1)
		write_plan(tmp_path)
		console = make_console()
		render_status(tmp_path, console=console)
		out = console_text(console)
		assert "[coder]" in out
		assert "1/3 features (33%)" in out
		assert "Plan: present" in out
		assert "Feature 2" in out

	def test_two_phase_skips_planner(self, tmp_path: Path):
		write_feature_list(tmp_path, total=2)
		console = make_console()
		render_status(tmp_path, two_phase=True, console=console)
		assert "[coder]" in console_text(console)


class TestRenderRunSummary:
	def test_empty_run_prints_nothing(self):
		console = make_console()
		render_run_summary(LoopResult(state=BudgetExhausted(sessions_run=0)), console=console)
		assert console_text(console) == ""

	def test_rows_per_session(self):
		console = make_console()
		result = LoopResult(
			state=BudgetExhausted(sessions_run=2, progress=Progress(0, 4)),
			records=[
				SessionRecord(session=1, phase=Phase.INITIALIZER, success=False, error="boom"),
				SessionRecord(session=2, phase=Phase.INITIALIZER, success=True, progress=Progress(0, 4)),
			],
		)
		render_run_summary(result, console=console)
		out = console_text(console)
		assert "FAIL" in out
		assert "0/4" in out
		assert "Stopped after 2 sessions" in out
