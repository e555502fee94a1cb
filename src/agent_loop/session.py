"""
Agent session runner.

Drives exactly one call into the agent service, renders the streamed
events as a live transcript and reports whether the session succeeded.
Exceptions never escape: they are reported and turned into a failed
outcome, which the orchestrator retries.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Optional

from claude_agent_sdk import ClaudeAgentOptions, query
from rich.console import Console
from rich.markup import escape

from .config import Settings, get_settings
from .events import (
	AgentEvent,
	AssistantOutput,
	SessionInit,
	SessionResult,
	StreamDelta,
	SystemNotice,
	TextSegment,
	ToolProgress,
	ToolResult,
	ToolUseSegment,
	Unrecognized,
	decode_event,
	render_tool_input,
	render_tool_result,
)

logger = logging.getLogger(__name__)

QueryFn = Callable[..., AsyncIterator[Any]]

PERMISSION_MODE = "bypassPermissions"


@dataclass
class SessionOutcome:
	"""What one agent session left behind."""
	success: bool
	session_id: Optional[str] = None
	num_turns: int = 0
	total_cost_usd: float = 0.0
	result_subtype: Optional[str] = None
	error: Optional[str] = None

	def __bool__(self) -> bool:
		return self.success


def working_directory_pin(cwd: Path) -> str:
	"""System prompt addendum keeping the agent inside cwd."""
	return (
		f"\nIMPORTANT: Your working directory is {cwd}.\n"
		f"All file paths should be relative to {cwd} or absolute paths starting with {cwd}.\n"
		f"When you run 'pwd', it should show {cwd}.\n"
		"Do NOT read or write files outside this directory.\n"
	)


def build_agent_options(
	cwd: Path,
	model: str,
	verbose: bool,
	settings: Optional[Settings] = None,
	console: Optional[Console] = None,
) -> ClaudeAgentOptions:
	"""
	Configure one isolated, non-interactive agent invocation.

	No settings files are loaded and no earlier conversation is resumed.
	When a command server is configured, the generic shell tool is replaced
	by that server's structured command channel.
	"""
	settings = settings or get_settings()
	console = console or Console()

	mcp_servers: dict[str, Any] = {}
	disallowed_tools: list[str] = []
	if settings.command_server:
		mcp_servers[settings.command_server] = {
			"type": "stdio",
			"command": settings.command_server,
			"args": ["--mcp"],
		}
		disallowed_tools = list(settings.disallowed_tools)

	def _stderr_sink(line: str) -> None:
		console.print(f"[stderr] {line.rstrip()}", style="bright_black", markup=False, highlight=False)

	return ClaudeAgentOptions(
		cwd=str(cwd),
		model=model,
		permission_mode=PERMISSION_MODE,
		continue_conversation=False,
		setting_sources=[],
		system_prompt={
			"type": "preset",
			"preset": "claude_code",
			"append": working_directory_pin(cwd),
		},
		disallowed_tools=disallowed_tools,
		mcp_servers=mcp_servers,
		include_partial_messages=verbose,
		stderr=_stderr_sink if verbose else None,
	)


class TranscriptRenderer:
	"""Prints agent events to the console as they arrive."""

	def __init__(self, console: Console, verbose: bool, settings: Settings):
		self.console = console
		self.verbose = verbose
		self.settings = settings

	@property
	def result_limit(self) -> int:
		if self.verbose:
			return self.settings.verbose_tool_result_limit
		return self.settings.tool_result_limit

	def _dim(self, text: str) -> None:
		self.console.print(text, style="bright_black", markup=False, highlight=False)

	def render(self, event: AgentEvent) -> None:
		if isinstance(event, SessionInit):
			self._dim(f"[system] Session {event.session_id} initialized")
			self._dim(f"[system] Model: {event.model}, Tools: {event.tool_count}")

		elif isinstance(event, SystemNotice):
			if self.verbose:
				self._dim(f"[system] {event.subtype}")

		elif isinstance(event, AssistantOutput):
			for segment in event.segments:
				if isinstance(segment, TextSegment):
					self.console.out(segment.text, end="", highlight=False)
				elif isinstance(segment, ToolUseSegment):
					rendered = render_tool_input(segment.input, self.settings.tool_input_limit)
					self.console.print()
					self.console.print(
						f"[yellow]\\[tool] {escape(segment.name)}[/yellow] [bright_black]{escape(rendered)}[/bright_black]",
						highlight=False,
					)

		elif isinstance(event, ToolResult):
			rendered = render_tool_result(event.content, self.result_limit)
			label = "tool error" if event.is_error else "tool result"
			self._dim(f"[{label}] {rendered}")

		elif isinstance(event, ToolProgress):
			if self.verbose:
				self._dim(f"[progress] {event.tool_name} ({event.elapsed_seconds:.1f}s)")

		elif isinstance(event, StreamDelta):
			if self.verbose:
				self._dim(f"[stream] {event.event_type}")

		elif isinstance(event, SessionResult):
			self.console.print()
			if event.is_success:
				self.console.print(
					f"[green]\\[result] Success - {event.num_turns} turns, ${event.total_cost_usd:.4f}[/green]"
				)
			else:
				self.console.print(f"[red]\\[result] Error: {escape(event.subtype)}[/red]")
				for err in event.errors:
					self.console.print(f"  {err}", style="red", markup=False, highlight=False)

		elif isinstance(event, Unrecognized):
			logger.debug(f"Ignoring unrecognized event: {event.tag}")


async def run_agent_session(
	prompt: str,
	cwd: Path,
	model: str,
	verbose: bool = False,
	*,
	console: Optional[Console] = None,
	query_fn: Optional[QueryFn] = None,
	settings: Optional[Settings] = None,
) -> SessionOutcome:
	"""
	Run one agent invocation to completion.

	Returns a failed outcome if the stream raises or ends with a
	non-success result; a stream that ends without a result event counts
	as success.
	"""
	console = console or Console()
	settings = settings or get_settings()
	query_fn = query_fn or query
	renderer = TranscriptRenderer(console, verbose, settings)
	outcome = SessionOutcome(success=True)

	console.print("\n--- Agent session starting ---\n")
	logger.info(f"Starting agent session in {cwd} with model {model} ({len(prompt)} char prompt)")

	try:
		options = build_agent_options(cwd, model, verbose, settings=settings, console=console)
		async for message in query_fn(prompt=prompt, options=options):
			event = decode_event(message)
			logger.debug(f"Agent event: {type(event).__name__}")
			renderer.render(event)

			if isinstance(event, SessionInit):
				outcome.session_id = event.session_id
			elif isinstance(event, SessionResult):
				outcome.result_subtype = event.subtype
				outcome.num_turns = event.num_turns
				outcome.total_cost_usd = event.total_cost_usd
				outcome.session_id = event.session_id or outcome.session_id
				if not event.is_success:
					outcome.success = False
					outcome.error = "; ".join(event.errors) or event.subtype

	except Exception as e:
		console.print("\n[red]--- Agent session failed ---[/red]")
		console.print(f"Error: {e}", style="red", markup=False, highlight=False)
		if verbose:
			console.print_exception()
		logger.error(f"Agent session failed: {e}")
		outcome.success = False
		outcome.error = str(e) or type(e).__name__
		return outcome

	console.print("\n--- Agent session ended ---\n")
	if outcome.success:
		logger.info(f"Agent session finished: {outcome.num_turns} turns, ${outcome.total_cost_usd:.4f}")
	else:
		logger.warning(f"Agent session ended with result '{outcome.result_subtype}'")
	return outcome
