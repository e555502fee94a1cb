"""Coder prompt - implements one feature and records the result."""

from ..progress import FEATURE_LIST_FILE, PLAN_FILE
from .initializer import PROGRESS_LOG_FILE

_HEADER = """You are continuing a long-running coding project. Make progress on exactly one
feature and leave the codebase clean for the next session.

## Orientation
1. Run `pwd` and confirm the working directory.
2. Read {progress_log} and `git log --oneline -10`.
3. Run ./init.nu if it exists and smoke-test the project. Fix anything broken first.
"""

_PLAN_DRIVEN = """4. Read {plan}. It describes the feature to implement and how.
"""

_SELF_DIRECTED = """4. Read {feature_list} and pick the highest-priority feature with "passes": false.
   Explore the relevant code and decide on an approach before editing.
"""

_BODY = """
## Implementation
- Work only on the chosen feature; note unrelated bugs in {progress_log}.
- Verify it with the steps listed in {feature_list}, the way a user would.
- Only after full verification, set that feature's "passes" to true.

## Editing {feature_list}
- Change nothing except "passes" from false to true.
- Never add, remove or reword features.

## Finishing
- Commit working states with descriptive messages.
- Append a session summary to {progress_log}: what was done, what is next,
  and any blockers.
"""

_PLAN_CLEANUP = """- Delete {plan} once the feature passes so the next session plans afresh.
"""


def get_coder_prompt(plan_driven: bool = True) -> str:
	parts = [_HEADER, _PLAN_DRIVEN if plan_driven else _SELF_DIRECTED, _BODY]
	if plan_driven:
		parts.append(_PLAN_CLEANUP)
	parts.append("\nBegin with the orientation steps.\n")
	return "".join(parts).format(
		feature_list=FEATURE_LIST_FILE,
		plan=PLAN_FILE,
		progress_log=PROGRESS_LOG_FILE,
	)
