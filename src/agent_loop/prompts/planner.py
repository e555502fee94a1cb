"""Planner prompt - designs the next feature before any code is written."""

from ..progress import FEATURE_LIST_FILE, PLAN_FILE
from .initializer import PROGRESS_LOG_FILE

_TEMPLATE = """You are planning the next feature of a long-running coding project. A separate
coding session will implement your plan, so it has to stand on its own.

## Orientation
1. Run `pwd` and confirm the working directory.
2. Read {progress_log} and `git log --oneline -10`.
3. Read {feature_list} and pick the highest-priority feature with "passes": false.
4. Run ./init.nu if it exists and make sure the project still builds.

## Planning
- Read the feature's verification steps; they define done.
- Explore the code for related modules, conventions and reusable helpers.
- Decide which files change, in what order, and which edge cases matter.

Write {plan} with these sections:
- Feature (copied from {feature_list})
- Analysis
- Implementation Steps (numbered, naming concrete files and functions)
- Files to Modify / Files to Create
- Testing Strategy
- Risks

## Rules
- Do not write implementation code or modify source files.
- Do not change {feature_list}.
- Add a line to {progress_log} saying the plan was written.

Begin with the orientation steps.
"""


def get_planner_prompt() -> str:
	return _TEMPLATE.format(
		feature_list=FEATURE_LIST_FILE,
		plan=PLAN_FILE,
		progress_log=PROGRESS_LOG_FILE,
	)
