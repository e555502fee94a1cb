"""
Progress tracking - reads the feature list the agent maintains on disk.

The feature list is owned by the agent: it is created in bulk by the
initializer phase and only its ``passes`` flags change afterwards. This
module never writes it.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

FEATURE_LIST_FILE = "feature_list.json"
PLAN_FILE = "plan.md"


class FeatureListError(Exception):
	"""Raised when the feature list is missing or cannot be parsed."""

	def __init__(self, path: Path, message: str):
		super().__init__(f"{path}: {message}")
		self.path = path


class FeatureCategory(str, Enum):
	"""Categories the initializer is asked to use. Others are kept as-is."""
	FUNCTIONAL = "functional"
	INFRASTRUCTURE = "infrastructure"
	TESTING = "testing"
	DOCUMENTATION = "documentation"


KNOWN_CATEGORIES = frozenset(c.value for c in FeatureCategory)


class Feature(BaseModel):
	"""A discrete, independently verifiable unit of project scope."""
	category: str = Field(default="", description="Kind of work")
	description: str = Field(default="", description="What the feature does")
	steps: list[str] = Field(default_factory=list, description="Ordered verification steps")
	passes: bool = Field(default=False)
	priority: int = Field(default=1, description="Lower is more urgent")

	@property
	def has_known_category(self) -> bool:
		return self.category in KNOWN_CATEGORIES

	@classmethod
	def from_raw(cls, raw: Any) -> "Feature":
		"""Best-effort feature for an entry that does not match the model."""
		if not isinstance(raw, dict):
			return cls(description=str(raw))
		priority = raw.get("priority")
		return cls(
			category=str(raw.get("category") or ""),
			description=str(raw.get("description") or ""),
			passes=raw.get("passes") is True,
			priority=priority if isinstance(priority, int) and not isinstance(priority, bool) else 1,
		)


class FeatureList(BaseModel):
	"""The persisted feature list document."""
	features: list[Feature] = Field(default_factory=list)


@dataclass(frozen=True)
class Progress:
	"""Aggregate completion of a feature list."""
	passing: int
	total: int

	@property
	def is_complete(self) -> bool:
		# An empty list is never complete
		return self.total > 0 and self.passing == self.total

	@property
	def percent(self) -> float:
		return self.passing / self.total * 100 if self.total else 0.0

	def __str__(self) -> str:
		return f"{self.passing}/{self.total}"


def feature_list_path(project_dir: Path) -> Path:
	return Path(project_dir) / FEATURE_LIST_FILE


def plan_path(project_dir: Path) -> Path:
	return Path(project_dir) / PLAN_FILE


def load_feature_list(project_dir: Path) -> FeatureList:
	"""
	Load the feature list.

	Only an unreadable file, invalid JSON, or a document that is not an
	object with a ``features`` list is an error. Entries that do not fit
	the Feature model are kept in a best-effort form and logged, so a
	valid document is never discarded over one odd field.

	Raises:
		FeatureListError: if the file is absent, unreadable, not JSON,
			or not shaped like a feature list.
	"""
	path = feature_list_path(project_dir)
	if not path.exists():
		raise FeatureListError(path, "not found")

	try:
		content = path.read_text(encoding="utf-8")
	except OSError as e:
		raise FeatureListError(path, f"unreadable ({e})") from e

	try:
		data = json.loads(content)
	except json.JSONDecodeError as e:
		raise FeatureListError(path, f"invalid JSON ({e})") from e

	if not isinstance(data, dict) or not isinstance(data.get("features"), list):
		raise FeatureListError(path, "unexpected shape (expected an object with a 'features' list)")

	features = []
	for index, raw in enumerate(data["features"]):
		try:
			feature = Feature.model_validate(raw)
		except ValidationError as e:
			logger.warning(
				f"{FEATURE_LIST_FILE}: feature {index + 1} does not match the schema "
				f"({e.error_count()} errors); keeping it as-is"
			)
			feature = Feature.from_raw(raw)
		if feature.category and not feature.has_known_category:
			logger.debug(f"{FEATURE_LIST_FILE}: feature {index + 1} has unknown category {feature.category!r}")
		features.append(feature)

	return FeatureList(features=features)


def read_feature_list(project_dir: Path) -> Optional[FeatureList]:
	"""
	Read the feature list, returning None when it is absent or unparseable.

	Parse failures are logged so the operator can see them, but callers
	treat them exactly like a missing file.
	"""
	path = feature_list_path(project_dir)
	if not path.exists():
		return None
	try:
		return load_feature_list(project_dir)
	except FeatureListError as e:
		logger.error(f"Failed to parse {FEATURE_LIST_FILE}: {e}")
		return None


def plan_exists(project_dir: Path) -> bool:
	return plan_path(project_dir).exists()


def compute_progress(feature_list: FeatureList) -> Progress:
	"""Count passing features against the total."""
	total = len(feature_list.features)
	passing = sum(1 for f in feature_list.features if f.passes)
	return Progress(passing=passing, total=total)


def next_feature(feature_list: FeatureList) -> Optional[Feature]:
	"""Highest-priority feature that is not yet passing (ties keep list order)."""
	pending = [f for f in feature_list.features if not f.passes]
	if not pending:
		return None
	return min(pending, key=lambda f: f.priority)
