"""Initializer prompt - turns the project specification into a feature list."""

from ..progress import FEATURE_LIST_FILE

PROGRESS_LOG_FILE = "claude-progress.txt"

_TEMPLATE = """You are preparing a project for a long-running, multi-session coding effort.
Later sessions start with no memory of this one; the files you create are the
only hand-off they get.

## Project Specification
{project_spec}

## Your Tasks

### 1. Write {feature_list}
Break the specification into discrete features that can each be finished and
verified in a single session. Use exactly this schema:

```json
{{
  "features": [
    {{
      "category": "functional|infrastructure|testing|documentation",
      "description": "What this feature does",
      "steps": ["How to verify it, step 1", "Step 2"],
      "passes": false,
      "priority": 1
    }}
  ]
}}
```

- Aim for 20-30 features for a typical project.
- Order them by dependency, foundational work first; priority 1 is most urgent.
- Every feature starts with "passes": false.

### 2. Write {progress_log}
Start a progress log with a "Session 1" entry: what you set up and what the
next session should pick up first.

### 3. Write init.nu
A nushell script that installs dependencies and starts any services the
project needs. It must be safe to run more than once.

### 4. Commit
Initialize git if needed, add a .gitignore, and commit everything with the
message "chore: initialize long-running agent environment".

## Constraints
- Do not implement any features in this session.
- Do not search the web or spawn sub-agents; work from the specification and
  the existing directory only.

Start by listing the project directory, then create the files.
"""


def get_initializer_prompt(project_spec: str) -> str:
	return _TEMPLATE.format(
		project_spec=project_spec.strip(),
		feature_list=FEATURE_LIST_FILE,
		progress_log=PROGRESS_LOG_FILE,
	)
