"""Prompt provider - instruction text for each phase."""

from typing import Optional

from ..phases import Phase
from .coder import get_coder_prompt
from .initializer import get_initializer_prompt
from .planner import get_planner_prompt


def get_prompt(phase: Phase, project_spec: Optional[str] = None, two_phase: bool = False) -> str:
	"""
	Return the instruction text for a phase.

	Only the initializer takes the project specification; later phases
	rely on the artifacts the agent reads during its own session.
	"""
	if phase == Phase.INITIALIZER:
		if not project_spec:
			raise ValueError("The initializer phase requires a project specification")
		return get_initializer_prompt(project_spec)
	if phase == Phase.PLANNER:
		return get_planner_prompt()
	if phase == Phase.CODER:
		return get_coder_prompt(plan_driven=not two_phase)
	raise ValueError(f"Unknown phase: {phase}")


__all__ = [
	"get_prompt",
	"get_coder_prompt",
	"get_initializer_prompt",
	"get_planner_prompt",
]
