"""
Session orchestrator - the main control loop.

Each iteration resolves the phase from disk, runs one agent session and
decides what happens next:

	Running(n) --failure--> Retrying(n) --backoff--> Running(n+1)
	Running(n) --success, incomplete--> Running(n+1)
	Running(n) --success, all features passing--> Completed
	Running(max) / Retrying(max) --> BudgetExhausted

A failed session still uses up its slot in the session budget.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from rich.console import Console
from rich.markup import escape

from .config import Settings, get_settings
from .notifications import notify
from .phases import Phase, describe_phase, resolve_phase
from .progress import (
	FEATURE_LIST_FILE,
	Progress,
	compute_progress,
	feature_list_path,
	next_feature,
	read_feature_list,
)
from .prompts import get_prompt
from .session import SessionOutcome, run_agent_session

logger = logging.getLogger(__name__)

SessionRunner = Callable[..., Awaitable[SessionOutcome]]
PromptProvider = Callable[..., str]
Notifier = Callable[[str, str], Awaitable[None]]
Sleeper = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RunOptions:
	"""Everything one run of the loop needs. Built once at startup."""
	project_spec: str
	project_dir: Path
	max_sessions: int = 50
	verbose: bool = False
	model: str = ""
	two_phase: bool = False


# Loop states

@dataclass(frozen=True)
class Running:
	session: int
	progress: Optional[Progress] = None


@dataclass(frozen=True)
class Retrying:
	session: int
	error: Optional[str] = None
	progress: Optional[Progress] = None


@dataclass(frozen=True)
class Completed:
	session: int
	progress: Progress


@dataclass(frozen=True)
class BudgetExhausted:
	sessions_run: int
	progress: Optional[Progress] = None


LoopState = Union[Running, Retrying, Completed, BudgetExhausted]


@dataclass
class SessionRecord:
	"""One row of the run summary."""
	session: int
	phase: Phase
	success: bool
	progress: Optional[Progress] = None
	error: Optional[str] = None


@dataclass
class LoopResult:
	"""Final state of a run plus what each session did."""
	state: LoopState
	records: list[SessionRecord] = field(default_factory=list)

	@property
	def completed(self) -> bool:
		return isinstance(self.state, Completed)

	@property
	def sessions_run(self) -> int:
		return len(self.records)


class Orchestrator:
	"""
	Runs agent sessions until every feature passes or the budget runs out.

	Collaborators are injectable so the loop can be driven without the
	agent service, a desktop, or real pauses.
	"""

	def __init__(
		self,
		options: RunOptions,
		settings: Optional[Settings] = None,
		console: Optional[Console] = None,
		run_session: Optional[SessionRunner] = None,
		prompt_provider: Optional[PromptProvider] = None,
		notifier: Optional[Notifier] = None,
		sleep: Optional[Sleeper] = None,
	):
		self.options = options
		self.settings = settings or get_settings()
		self.console = console or Console()
		self.run_session = run_session or run_agent_session
		self.prompt_provider = prompt_provider or get_prompt
		self.notifier = notifier or notify
		self.sleep = sleep or asyncio.sleep

	@property
	def model(self) -> str:
		return self.options.model or self.settings.model

	async def run(self) -> LoopResult:
		"""Drive the loop to a terminal state."""
		records: list[SessionRecord] = []
		state: LoopState = Running(session=1)

		while isinstance(state, (Running, Retrying)):
			if isinstance(state, Running):
				state = await self._run_session(state, records)
			else:
				state = await self._retry(state)

		if isinstance(state, BudgetExhausted):
			logger.info(f"Session budget exhausted after {state.sessions_run} sessions")
		return LoopResult(state=state, records=records)

	def _advance(self, session: int, progress: Optional[Progress]) -> LoopState:
		if session >= self.options.max_sessions:
			return BudgetExhausted(sessions_run=session, progress=progress)
		return Running(session=session + 1, progress=progress)

	async def _retry(self, state: Retrying) -> LoopState:
		self.console.print("[yellow]Session failed, retrying after delay...[/yellow]")
		logger.warning(f"Session {state.session} failed: {state.error}")
		await self.sleep(self.settings.retry_delay)
		return self._advance(state.session, state.progress)

	async def _run_session(self, state: Running, records: list[SessionRecord]) -> LoopState:
		session = state.session
		project_dir = self.options.project_dir

		self.console.print(f"\n[cyan]=== Session {session}/{self.options.max_sessions} ===[/cyan]")

		phase = resolve_phase(project_dir, two_phase=self.options.two_phase)
		if phase == Phase.INITIALIZER and feature_list_path(project_dir).exists():
			self.console.print(
				f"[yellow]Warning: {FEATURE_LIST_FILE} exists but could not be parsed; "
				f"running the initializer again.[/yellow]"
			)

		project_spec = self.options.project_spec if phase == Phase.INITIALIZER else None
		prompt = self.prompt_provider(phase, project_spec, two_phase=self.options.two_phase)

		self.console.print(describe_phase(phase))
		logger.info(f"Session {session}: phase {phase.value}")

		outcome = await self.run_session(
			prompt,
			project_dir,
			self.model,
			self.options.verbose,
			console=self.console,
			settings=self.settings,
		)

		if not outcome.success:
			records.append(SessionRecord(
				session=session,
				phase=phase,
				success=False,
				progress=state.progress,
				error=outcome.error,
			))
			return Retrying(session=session, error=outcome.error, progress=state.progress)

		progress = self._check_progress()
		records.append(SessionRecord(session=session, phase=phase, success=True, progress=progress))

		if progress is not None and progress.is_complete:
			self.console.print("[green]All features complete![/green]")
			await self._notify_complete(progress)
			return Completed(session=session, progress=progress)

		await self.sleep(self.settings.session_delay)
		return self._advance(session, progress if progress is not None else state.progress)

	def _check_progress(self) -> Optional[Progress]:
		feature_list = read_feature_list(self.options.project_dir)
		if feature_list is None:
			return None

		progress = compute_progress(feature_list)
		self.console.print(f"[blue]Progress: {progress.passing}/{progress.total} features passing[/blue]")
		upcoming = next_feature(feature_list)
		if upcoming is not None:
			self.console.print(
				f"[bright_black]Next up (priority {upcoming.priority}): {escape(upcoming.description)}[/bright_black]"
			)
		return progress

	async def _notify_complete(self, progress: Progress) -> None:
		try:
			await self.notifier("Agent loop complete", f"All {progress.total} features passing")
		except Exception as e:
			logger.warning(f"Completion notification failed: {e}")


async def run_loop(
	options: RunOptions,
	settings: Optional[Settings] = None,
	console: Optional[Console] = None,
) -> LoopResult:
	"""Run the loop with the default collaborators."""
	return await Orchestrator(options, settings=settings, console=console).run()
