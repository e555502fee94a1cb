"""agent-loop - long-running agent harness driven by on-disk progress artifacts."""

from .orchestrator import LoopResult, Orchestrator, RunOptions, run_loop
from .phases import Phase, resolve_phase
from .progress import Feature, FeatureList, Progress, compute_progress, read_feature_list
from .session import SessionOutcome, run_agent_session

__all__ = [
	"Feature",
	"FeatureList",
	"LoopResult",
	"Orchestrator",
	"Phase",
	"Progress",
	"RunOptions",
	"SessionOutcome",
	"compute_progress",
	"read_feature_list",
	"resolve_phase",
	"run_agent_session",
	"run_loop",
]
