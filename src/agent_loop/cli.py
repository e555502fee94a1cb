"""CLI for agent-loop: run the long-running agent harness on a project."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from .config import ConfigError, Settings, load_settings
from .logging_config import setup_logging
from .orchestrator import RunOptions, run_loop
from .visualizer import render_run_summary, render_status

logger = logging.getLogger(__name__)

EPILOG = """\
Three-phase approach:
  1. Initializer - creates feature_list.json, init.nu, claude-progress.txt
  2. Planner     - explores the codebase and writes plan.md for the next feature
  3. Coder       - implements the plan and marks the feature as passing

Examples:
  agent-loop "Build a REST API with user authentication"
  agent-loop "Create a CLI tool for parsing CSV files" -d ./my-project
  agent-loop "Implement a todo app with React" -n 100
  agent-loop "Fix bugs" -m claude-sonnet-4-5-20250929
  agent-loop --status -d ./my-project
"""


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="agent-loop",
		description="Long-running agent harness for complex coding tasks",
		epilog=EPILOG,
		formatter_class=argparse.RawDescriptionHelpFormatter,
	)
	parser.add_argument(
		"project_spec",
		nargs="*",
		help="Project specification (used for initialization)",
	)
	parser.add_argument("-d", "--dir", default=".", help="Project directory to work in (default: .)")
	parser.add_argument(
		"-n", "--max-sessions",
		type=int,
		default=None,
		help="Maximum number of sessions to run (default: 50)",
	)
	parser.add_argument("-m", "--model", default=None, help="Model to use")
	parser.add_argument(
		"-v", "--verbose",
		action="store_true",
		help="Enable verbose logging (show all agent events)",
	)
	parser.add_argument(
		"--two-phase",
		action="store_true",
		help="Skip the planner phase; the coder plans its own work",
	)
	parser.add_argument(
		"--status",
		action="store_true",
		help="Show the project's phase and feature progress, then exit",
	)
	return parser


def options_from_args(args: argparse.Namespace, settings: Settings) -> RunOptions:
	"""Build run options from parsed arguments, validating the directory."""
	project_dir = Path(args.dir).expanduser().resolve()
	if not project_dir.is_dir():
		raise ConfigError(f"Project directory does not exist: {project_dir}")

	project_spec = " ".join(args.project_spec).strip()
	if not project_spec and not args.status:
		raise ConfigError("A project specification is required")

	max_sessions = args.max_sessions if args.max_sessions is not None else settings.max_sessions
	if max_sessions < 1:
		raise ConfigError(f"--max-sessions must be at least 1, got {max_sessions}")

	return RunOptions(
		project_spec=project_spec,
		project_dir=project_dir,
		max_sessions=max_sessions,
		verbose=args.verbose,
		model=args.model or settings.model,
		two_phase=args.two_phase,
	)


def _print_banner(options: RunOptions, console: Console) -> None:
	console.print("[cyan]=== Agent Loop Starting ===[/cyan]")
	console.print(f"Directory: {escape(str(options.project_dir))}")
	console.print(f"Model: {escape(options.model)}")
	console.print(f"Max sessions: {options.max_sessions}")
	if options.two_phase:
		console.print("Mode: two-phase")
	if options.verbose:
		console.print("Verbose mode: enabled")


def main(argv: Optional[list[str]] = None) -> None:
	"""CLI entry point."""
	load_dotenv()
	parser = build_parser()
	args = parser.parse_args(argv)
	console = Console()

	if not args.project_spec and not args.status:
		parser.print_help()
		sys.exit(1)

	try:
		settings = load_settings()
		options = options_from_args(args, settings)
	except ConfigError as e:
		console.print(f"[red]{escape(str(e))}[/red]")
		sys.exit(1)

	if args.status:
		render_status(options.project_dir, two_phase=options.two_phase, console=console)
		return

	setup_logging(verbose=options.verbose, log_dir=settings.log_dir, console=console)
	_print_banner(options, console)

	try:
		result = asyncio.run(run_loop(options, settings=settings, console=console))
	except KeyboardInterrupt:
		console.print("\n[yellow]Interrupted.[/yellow]")
		sys.exit(130)
	except Exception as e:
		logger.debug("Fatal error", exc_info=True)
		console.print(f"[red]Fatal error: {escape(str(e))}[/red]")
		sys.exit(1)

	render_run_summary(result, console=console)
	console.print("[cyan]=== Agent loop finished ===[/cyan]")


if __name__ == "__main__":
	main()
