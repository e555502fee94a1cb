"""Tests for the prompt provider."""

import pytest

from agent_loop.phases import Phase
from agent_loop.prompts import get_prompt


def test_initializer_includes_project_spec():
	prompt = get_prompt(Phase.INITIALIZER, "Build a CSV parser CLI")
	assert "Build a CSV parser CLI" in prompt
	assert "feature_list.json" in prompt
	assert '"passes": false' in prompt


def test_initializer_requires_project_spec():
	with pytest.raises(ValueError):
		get_prompt(Phase.INITIALIZER)


def test_planner_writes_plan():
	prompt = get_prompt(Phase.PLANNER)
	assert "plan.md" in prompt
	assert "Do not write implementation code" in prompt


def test_planner_ignores_project_spec():
	assert get_prompt(Phase.PLANNER, "spec") == get_prompt(Phase.PLANNER)


def test_coder_follows_plan_and_removes_it():
	prompt = get_prompt(Phase.CODER)
	assert "Read plan.md" in prompt
	assert "Delete plan.md" in prompt


def test_two_phase_coder_picks_own_feature():
	prompt = get_prompt(Phase.CODER, two_phase=True)
	assert "highest-priority feature" in prompt
	assert "Delete plan.md" not in prompt


@pytest.mark.parametrize("phase", list(Phase))
def test_no_unformatted_placeholders(phase):
	prompt = get_prompt(phase, "spec")
	assert "{feature_list}" not in prompt
	assert "{plan}" not in prompt
	assert "{progress_log}" not in prompt
