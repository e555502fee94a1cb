"""
Phase resolution.

State machine, recomputed from disk before every session:
- No feature_list.json (or an unparseable one) -> initializer
- feature_list.json but no plan.md -> planner
- feature_list.json and plan.md -> coder

The two-phase variant skips planning and always returns coder once a
feature list exists.
"""

from enum import Enum
from pathlib import Path

from .progress import plan_exists, read_feature_list


class Phase(str, Enum):
	"""Operating mode for one agent session."""
	INITIALIZER = "initializer"
	PLANNER = "planner"
	CODER = "coder"


PHASE_STYLES = {
	Phase.INITIALIZER: "yellow",
	Phase.PLANNER: "magenta",
	Phase.CODER: "green",
}

PHASE_LABELS = {
	Phase.INITIALIZER: "Initializing project...",
	Phase.PLANNER: "Planning next feature...",
	Phase.CODER: "Implementing plan...",
}


def resolve_phase(project_dir: Path, two_phase: bool = False) -> Phase:
	"""Determine which phase to run from the artifacts in project_dir."""
	if read_feature_list(project_dir) is None:
		return Phase.INITIALIZER

	if two_phase or plan_exists(project_dir):
		return Phase.CODER

	return Phase.PLANNER


def describe_phase(phase: Phase) -> str:
	"""Rich markup announcing a phase."""
	style = PHASE_STYLES[phase]
	return f"[{style}]\\[{phase.value}] {PHASE_LABELS[phase]}[/{style}]"
