"""
Agent event decoding.

Messages streamed by the agent service are decoded into a closed set of
event types at the stream boundary. Both ``claude_agent_sdk`` message
objects and their raw wire dicts (``{"type": ..., ...}``) are accepted.
Anything unknown becomes ``Unrecognized`` so dispatch never falls through.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from claude_agent_sdk.types import (
	AssistantMessage,
	ResultMessage,
	StreamEvent,
	SystemMessage,
	TextBlock,
	ToolResultBlock,
	ToolUseBlock,
	UserMessage,
)

ELLIPSIS = "..."
EMPTY_OUTPUT = "(empty)"


@dataclass
class TextSegment:
	text: str


@dataclass
class ToolUseSegment:
	name: str
	input: Any = None


Segment = Union[TextSegment, ToolUseSegment]


@dataclass
class SessionInit:
	"""Agent session started."""
	session_id: str
	model: str
	tool_count: int


@dataclass
class SystemNotice:
	"""Any other system message."""
	subtype: str


@dataclass
class AssistantOutput:
	"""Assistant turn: text and tool calls, in order."""
	segments: list[Segment] = field(default_factory=list)


@dataclass
class ToolResult:
	"""Result of a tool call, reported back to the agent."""
	content: Any
	is_error: bool = False


@dataclass
class ToolProgress:
	"""Heartbeat for a long-running tool."""
	tool_name: str
	elapsed_seconds: float


@dataclass
class StreamDelta:
	"""Partial message update."""
	event_type: str


@dataclass
class SessionResult:
	"""Terminal event of one agent invocation."""
	subtype: str
	num_turns: int = 0
	total_cost_usd: float = 0.0
	session_id: Optional[str] = None
	errors: list[str] = field(default_factory=list)

	@property
	def is_success(self) -> bool:
		return self.subtype == "success"


@dataclass
class Unrecognized:
	"""Event with a tag we do not handle; ignored."""
	tag: str


AgentEvent = Union[
	SessionInit,
	SystemNotice,
	AssistantOutput,
	ToolResult,
	ToolProgress,
	StreamDelta,
	SessionResult,
	Unrecognized,
]


def decode_event(message: Any) -> AgentEvent:
	"""Map one streamed message to an AgentEvent."""
	if isinstance(message, dict):
		return _decode_dict(message)
	if isinstance(message, SystemMessage):
		return _decode_system(message.subtype, message.data or {})
	if isinstance(message, AssistantMessage):
		return AssistantOutput(segments=_decode_blocks(message.content))
	if isinstance(message, UserMessage):
		return _decode_user(
			getattr(message, "tool_use_result", None),
			message.content,
		)
	if isinstance(message, ResultMessage):
		errors = getattr(message, "errors", None) or []
		if not errors and message.is_error and message.result:
			errors = [message.result]
		return SessionResult(
			subtype=message.subtype,
			num_turns=message.num_turns or 0,
			total_cost_usd=message.total_cost_usd or 0.0,
			session_id=message.session_id,
			errors=_as_error_list(errors),
		)
	if isinstance(message, StreamEvent):
		return StreamDelta(event_type=str((message.event or {}).get("type", "unknown")))
	return Unrecognized(tag=type(message).__name__)


def _decode_dict(message: dict) -> AgentEvent:
	tag = message.get("type")
	if tag == "system":
		return _decode_system(str(message.get("subtype", "")), message)
	if tag == "assistant":
		content = (message.get("message") or {}).get("content") or []
		return AssistantOutput(segments=_decode_blocks(content))
	if tag == "user":
		content = (message.get("message") or {}).get("content")
		return _decode_user(message.get("tool_use_result"), content)
	if tag == "result":
		return SessionResult(
			subtype=str(message.get("subtype", "unknown")),
			num_turns=message.get("num_turns") or 0,
			total_cost_usd=message.get("total_cost_usd") or 0.0,
			session_id=message.get("session_id"),
			errors=_as_error_list(message.get("errors")),
		)
	if tag == "tool_progress":
		return ToolProgress(
			tool_name=str(message.get("tool_name", "")),
			elapsed_seconds=float(message.get("elapsed_time_seconds") or 0.0),
		)
	if tag == "stream_event":
		event = message.get("event") or {}
		return StreamDelta(event_type=str(event.get("type", "unknown")))
	return Unrecognized(tag=str(tag))


def _decode_system(subtype: str, data: dict) -> AgentEvent:
	if subtype == "init":
		return SessionInit(
			session_id=str(data.get("session_id", "")),
			model=str(data.get("model", "")),
			tool_count=len(data.get("tools") or []),
		)
	return SystemNotice(subtype=subtype)


def _decode_blocks(blocks: Any) -> list[Segment]:
	segments: list[Segment] = []
	for block in blocks or []:
		if isinstance(block, TextBlock):
			segments.append(TextSegment(text=block.text))
		elif isinstance(block, ToolUseBlock):
			segments.append(ToolUseSegment(name=block.name, input=block.input))
		elif isinstance(block, dict):
			if block.get("type") == "text":
				segments.append(TextSegment(text=str(block.get("text", ""))))
			elif block.get("type") == "tool_use":
				segments.append(ToolUseSegment(name=str(block.get("name", "")), input=block.get("input")))
	return segments


def _decode_user(tool_use_result: Any, content: Any) -> AgentEvent:
	if tool_use_result is not None:
		return ToolResult(content=tool_use_result)

	results = []
	for block in content if isinstance(content, list) else []:
		if isinstance(block, ToolResultBlock):
			results.append((block.content, bool(block.is_error)))
		elif isinstance(block, dict) and block.get("type") == "tool_result":
			results.append((block.get("content"), bool(block.get("is_error"))))

	if not results:
		return Unrecognized(tag="user")
	if len(results) == 1:
		return ToolResult(content=results[0][0], is_error=results[0][1])
	return ToolResult(
		content=[c for c, _ in results],
		is_error=any(err for _, err in results),
	)


def _as_error_list(errors: Any) -> list[str]:
	if errors is None:
		return []
	if isinstance(errors, str):
		return [errors]
	try:
		return [str(e) for e in errors]
	except TypeError:
		return [str(errors)]


# Rendering helpers

def truncate(text: str, limit: int) -> str:
	"""Cap text at limit characters, marking the cut with an ellipsis."""
	if len(text) <= limit:
		return text
	return text[:limit] + ELLIPSIS


def to_display_string(value: Any) -> str:
	if isinstance(value, str):
		return value
	try:
		return json.dumps(value, default=str)
	except (TypeError, ValueError):
		return str(value)


def unwrap_tool_output(text: str) -> str:
	"""
	Pull the ``output`` field out of a JSON-wrapped tool result.

	Handles ``{"output": ...}`` and ``[{"text": "{\\"output\\": ...}"}]``.
	Returns the input unchanged when it does not match either shape.
	Never raises.
	"""
	if "output" not in text:
		return text
	try:
		data = json.loads(text)
	except (ValueError, TypeError, RecursionError):
		return text

	missing = object()
	output: Any = missing
	if isinstance(data, list) and len(data) == 1 and isinstance(data[0], dict) and "text" in data[0]:
		try:
			inner = json.loads(data[0]["text"])
		except (ValueError, TypeError, RecursionError):
			return text
		if isinstance(inner, dict) and "output" in inner:
			output = inner["output"]
	elif isinstance(data, dict) and "output" in data:
		output = data["output"]

	if output is missing:
		return text
	if output is None or output == "" or output == [] or output == {}:
		return EMPTY_OUTPUT
	return to_display_string(output)


def render_tool_input(tool_input: Any, limit: int) -> str:
	return truncate(to_display_string(tool_input), limit)


def render_tool_result(content: Any, limit: int) -> str:
	return truncate(unwrap_tool_output(to_display_string(content)), limit)
