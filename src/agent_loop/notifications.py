"""
Desktop notifications.

Uses osascript on macOS and notify-send (freedesktop) elsewhere.
Delivery is best effort: every failure is logged and swallowed.
"""

import asyncio
import logging
import shutil
import sys

logger = logging.getLogger(__name__)

NOTIFY_TIMEOUT = 5  # seconds
MAX_NOTIFICATION_LENGTH = 200


def _applescript_quote(text: str) -> str:
	return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_notify_command(title: str, message: str, platform: str = sys.platform) -> list[str] | None:
	"""Command that shows a notification on this platform, or None."""
	if len(message) > MAX_NOTIFICATION_LENGTH:
		message = message[:MAX_NOTIFICATION_LENGTH] + "..."

	if platform == "darwin":
		if not shutil.which("osascript"):
			return None
		script = (
			f"display notification {_applescript_quote(message)} "
			f"with title {_applescript_quote(title)} sound name \"Glass\""
		)
		return ["osascript", "-e", script]

	if shutil.which("notify-send"):
		return ["notify-send", "--app-name", "agent-loop", title, message]
	return None


async def notify(title: str, message: str) -> None:
	"""Send a desktop notification without ever raising."""
	cmd = build_notify_command(title, message)
	if cmd is None:
		logger.debug("No notification command available, skipping notification")
		return

	try:
		process = await asyncio.create_subprocess_exec(
			*cmd,
			stdout=asyncio.subprocess.DEVNULL,
			stderr=asyncio.subprocess.PIPE,
		)
		try:
			_, stderr = await asyncio.wait_for(process.communicate(), timeout=NOTIFY_TIMEOUT)
		except asyncio.TimeoutError:
			process.kill()
			await process.wait()
			logger.warning(f"{cmd[0]} timed out")
			return

		if process.returncode != 0:
			err = stderr.decode(errors="replace").strip() if stderr else ""
			logger.warning(f"{cmd[0]} failed (exit {process.returncode}): {err}")
	except OSError as e:
		logger.warning(f"Failed to run {cmd[0]}: {e}")
