"""Rich views for project status."""

from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .orchestrator import Completed, LoopResult
from .phases import describe_phase, resolve_phase
from .progress import (
	FEATURE_LIST_FILE,
	compute_progress,
	feature_list_path,
	next_feature,
	plan_exists,
	read_feature_list,
)

STATUS_ICONS = {
	True: "[green][x][/green]",
	False: "[dim][ ][/dim]",
}


def render_status(project_dir: Path, two_phase: bool = False, console: Optional[Console] = None) -> None:
	"""Render the current phase and the feature table for a project."""
	console = console or Console()

	phase = resolve_phase(project_dir, two_phase=two_phase)
	feature_list = read_feature_list(project_dir)

	lines = [
		f"[bold]Directory:[/bold] {escape(str(project_dir))}",
		f"[bold]Next phase:[/bold] {describe_phase(phase)}",
		f"[bold]Plan:[/bold] {'present' if plan_exists(project_dir) else 'absent'}",
	]

	if feature_list is None:
		if feature_list_path(project_dir).exists():
			lines.append(f"[red]{FEATURE_LIST_FILE} could not be parsed[/red]")
		else:
			lines.append(f"[dim]No {FEATURE_LIST_FILE} yet[/dim]")
		console.print(Panel("\n".join(lines), title="agent-loop status", border_style="cyan"))
		return

	progress = compute_progress(feature_list)
	lines.append(f"[bold]Progress:[/bold] {progress.passing}/{progress.total} features ({progress.percent:.0f}%)")
	upcoming = next_feature(feature_list)
	if upcoming is not None:
		lines.append(f"[bold]Next feature:[/bold] {escape(upcoming.description)}")
	console.print(Panel("\n".join(lines), title="agent-loop status", border_style="cyan"))

	table = Table(title="Features")
	table.add_column("", justify="center")
	table.add_column("Priority", justify="right")
	table.add_column("Category", style="cyan")
	table.add_column("Description")
	table.add_column("Steps", justify="right")

	for feature in sorted(feature_list.features, key=lambda f: f.priority):
		table.add_row(
			STATUS_ICONS[feature.passes],
			str(feature.priority),
			feature.category or "-",
			escape(feature.description),
			str(len(feature.steps)),
		)

	console.print(table)


def render_run_summary(result: LoopResult, console: Optional[Console] = None) -> None:
	"""Render a per-session table for a finished run."""
	console = console or Console()
	if not result.records:
		return

	table = Table(title="Sessions")
	table.add_column("#", justify="right")
	table.add_column("Phase", style="cyan")
	table.add_column("Result")
	table.add_column("Progress", justify="right")

	for record in result.records:
		status = "[green]OK[/green]" if record.success else "[red]FAIL[/red]"
		table.add_row(
			str(record.session),
			record.phase.value,
			status,
			str(record.progress) if record.progress is not None else "-",
		)

	console.print(table)

	if isinstance(result.state, Completed):
		console.print(f"[green]Completed in {result.state.session} sessions.[/green]")
	else:
		console.print(
			f"[yellow]Stopped after {result.sessions_run} sessions without completing every feature.[/yellow]"
		)
