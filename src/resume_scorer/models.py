"""Data models for the resume scoring pipeline."""

from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import PurePath
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr

from .errors import InvalidTransition


class ItemStatus(Enum):
    """Lifecycle status of one resume in a batch."""
    READY = "ready"
    READING = "reading"
    SCORING = "scoring"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemStatus.COMPLETED, ItemStatus.FAILED)


ALLOWED_TRANSITIONS = {
    ItemStatus.READY: {ItemStatus.READING},
    ItemStatus.READING: {ItemStatus.SCORING, ItemStatus.FAILED},
    ItemStatus.SCORING: {ItemStatus.COMPLETED, ItemStatus.FAILED},
    ItemStatus.COMPLETED: set(),
    ItemStatus.FAILED: set(),
}


class ScorePayload(BaseModel):
    """Structured answer returned by the oracle for one resume.

    Every field may be absent; callers apply the filename and zero-score
    fallbacks. Fields are strict: a boolean or numeric string score and a
    non-string name fail validation instead of being coerced.
    """
    model_config = ConfigDict(extra="ignore")

    candidateName: Optional[StrictStr] = None
    currentRole: Optional[StrictStr] = None
    matchScore: Optional[Union[StrictInt, StrictFloat]] = None
    analysis: Optional[StrictStr] = None


@dataclass
class SourceHandle:
    """Reference to a selected file, either on disk or already in memory."""
    name: str
    size: int
    media_type: str
    path: Optional[str] = None
    data: Optional[bytes] = field(default=None, repr=False)

    @property
    def stem(self) -> str:
        """File name without its final extension."""
        return PurePath(self.name).stem or self.name

    @property
    def display_size(self) -> str:
        return f"{self.size / (1024 * 1024):.1f} MB"


@dataclass
class BatchItem:
    """One resume submission within a batch."""
    id: str
    source: SourceHandle
    status: ItemStatus = ItemStatus.READY
    progress: int = 0
    result: Optional[ScorePayload] = None
    candidate_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def name(self) -> str:
        return self.source.name

    def transition(
        self,
        status: ItemStatus,
        progress: int,
        result: Optional[ScorePayload] = None,
        error: Optional[str] = None,
    ) -> None:
        """Move the item to a new status, enforcing the lifecycle rules.

        Raises:
            InvalidTransition: If the move is not allowed, if ``result`` does
                not match the target status, or if progress would go backwards
                on a non-failing move.
        """
        if status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransition(
                f"Item {self.id}: {self.status.value} -> {status.value} not allowed"
            )
        if (result is not None) != (status is ItemStatus.COMPLETED):
            raise InvalidTransition(
                f"Item {self.id}: result must be set exactly when completed"
            )
        if status is not ItemStatus.FAILED and progress < self.progress:
            raise InvalidTransition(
                f"Item {self.id}: progress cannot go from {self.progress} to {progress}"
            )
        self.status = status
        self.progress = progress
        self.result = result
        self.error = error if status is ItemStatus.FAILED else None


@dataclass
class JobDescription:
    """Scoring target for a batch."""
    source_text: str
    origin_ref: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return bool(self.source_text and self.source_text.strip())


@dataclass
class JobRecord:
    """Persisted job posting."""
    id: str
    title: str
    department: str
    location: str
    type: str
    status: str
    description: str
    skills: List[str] = field(default_factory=list)
    applicants_count: int = 0
    matches_count: int = 0
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobRecord":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class CandidateRecord:
    """Persisted outcome of scoring one resume."""
    id: str
    name: str
    role: str
    match_score: Union[int, float]
    job_id: str
    analysis: Optional[str] = None
    resume_base64: str = field(default="", repr=False)
    resume_media_type: str = ""
    company: str = ""
    location: str = ""
    status: str = ""
    applied_date: str = field(default_factory=lambda: date.today().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CandidateRecord":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
