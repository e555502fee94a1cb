"""Centralized logging configuration for agent-loop."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "agent_loop"


def setup_logging(
	verbose: bool = False,
	log_dir: Optional[Path] = None,
	level: Optional[str] = None,
	console: Optional[Console] = None,
) -> logging.Logger:
	"""
	Set up logging with console and file handlers.

	Args:
		verbose: Show debug records on the console
		log_dir: Directory for the rotating log file; no file log when None
		level: Log level name. Defaults to LOG_LEVEL env var, then DEBUG/WARNING by verbosity.
		console: Rich console to log through (shares output with the transcript)

	Returns:
		The package logger
	"""
	default_level = "DEBUG" if verbose else "WARNING"
	level = level or os.getenv("LOG_LEVEL", default_level)
	console_level = getattr(logging, level.upper(), logging.WARNING)

	logger = logging.getLogger(ROOT_LOGGER)
	logger.setLevel(logging.DEBUG)

	# Avoid duplicate handlers
	if logger.handlers:
		for handler in logger.handlers:
			if isinstance(handler, RichHandler):
				handler.setLevel(console_level)
		return logger

	console_handler = RichHandler(
		console=console,
		show_path=verbose,
		rich_tracebacks=True,
		markup=False,
	)
	console_handler.setLevel(console_level)
	console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="%H:%M:%S"))
	logger.addHandler(console_handler)

	if log_dir is not None:
		log_path = Path(log_dir)
		log_path.mkdir(parents=True, exist_ok=True)

		file_handler = RotatingFileHandler(
			log_path / "agent-loop.log",
			maxBytes=10 * 1024 * 1024,  # 10 MB
			backupCount=5,
			encoding="utf-8",
		)
		file_handler.setLevel(logging.DEBUG)  # File gets all logs
		file_handler.setFormatter(logging.Formatter(
			"%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
			datefmt="%Y-%m-%d %H:%M:%S",
		))
		logger.addHandler(file_handler)

	return logger
