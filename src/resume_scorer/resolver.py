"""Resolve the job description a batch is scored against."""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .config import (
    DEFAULT_DEPARTMENT,
    DEFAULT_JOB_STATUS,
    DEFAULT_JOB_TITLE,
    DEFAULT_JOB_TYPE,
    DEFAULT_LOCATION,
    ScoringConfig,
)
from .encoder import encode
from .errors import ExtractionError, JobNotFound, PersistenceError, ReadError
from .models import JobDescription, JobRecord, SourceHandle
from .oracle import Oracle
from .store import JobStore

logger = logging.getLogger(__name__)


@dataclass
class ExistingJob:
    """Score against a stored job record."""
    job_id: str


@dataclass
class ManualText:
    """Score against text typed or pasted by the operator."""
    text: str


@dataclass
class ExtractFromDocument:
    """Score against a description extracted from an uploaded document."""
    source: SourceHandle


JobSelection = Union[ExistingJob, ManualText, ExtractFromDocument]


@dataclass
class JobLine:
    text: str
    bullet: bool = False


@dataclass
class JobSection:
    """One ``## `` section of a structured job description."""
    title: Optional[str]
    lines: List[JobLine] = field(default_factory=list)


def job_title_from_text(text: str, max_length: int = 50) -> str:
    """Heuristic job title: the first line of the text, truncated."""
    first_line = (text or "").split("\n")[0].strip()
    return first_line[:max_length].strip() or DEFAULT_JOB_TITLE


def parse_sections(text: str) -> List[JobSection]:
    """Split a structured description into titled sections and bullet lines.

    Text before the first ``##`` header becomes an untitled section.
    """
    sections = []
    for index, chunk in enumerate((text or "").split("##")):
        chunk = chunk.strip()
        if not chunk:
            continue
        lines = chunk.split("\n")
        if index == 0:
            title, body = None, lines
        else:
            title, body = lines[0].strip() or None, lines[1:]
        parsed = []
        for line in body:
            stripped = line.strip()
            if not stripped:
                continue
            if stripped.startswith("-"):
                parsed.append(JobLine(stripped[1:].strip(), bullet=True))
            else:
                parsed.append(JobLine(stripped))
        sections.append(JobSection(title=title, lines=parsed))
    return sections


class JobResolver:
    """Produces the job description for a batch and ensures a job record exists."""

    def __init__(self, store: JobStore, oracle: Oracle, config: Optional[ScoringConfig] = None):
        self.store = store
        self.oracle = oracle
        self.config = config or ScoringConfig()

    async def resolve(self, selection: JobSelection) -> JobDescription:
        """Resolve a selection to a job description.

        Raises:
            JobNotFound: If an existing job reference does not exist.
            ExtractionError: If extraction from a document fails.
            PersistenceError: If stored jobs cannot be read.
        """
        if isinstance(selection, ExistingJob):
            return await self._from_existing(selection.job_id)
        if isinstance(selection, ManualText):
            return JobDescription(source_text=selection.text)
        if isinstance(selection, ExtractFromDocument):
            return JobDescription(source_text=await self.extract(selection.source))
        raise TypeError(f"Unsupported job selection: {type(selection).__name__}")

    async def extract(self, source: SourceHandle) -> str:
        """Extract description text from a document via the oracle."""
        try:
            content = await encode(source)
        except ReadError as e:
            raise ExtractionError(str(e)) from e
        try:
            text = await self.oracle.extract_job_description(source.name, content, source.media_type)
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(f"Job description extraction failed for {source.name}: {e}") from e
        if not text or not text.strip():
            raise ExtractionError(f"No job description text returned for {source.name}")
        logger.info(f"Extracted job description from {source.name} ({len(text)} chars)")
        return text

    async def materialize(self, job_description: JobDescription) -> JobDescription:
        """Persist free text as a job record so candidates have a stable reference.

        Returns the input unchanged when it already references a job or has no text.

        Raises:
            PersistenceError: If the job record cannot be saved.
        """
        if job_description.origin_ref is not None or not job_description.is_ready:
            return job_description
        record = JobRecord(
            id=f"j-{uuid.uuid4().hex[:12]}",
            title=job_title_from_text(job_description.source_text, self.config.job_title_max_length),
            department=DEFAULT_DEPARTMENT,
            location=DEFAULT_LOCATION,
            type=DEFAULT_JOB_TYPE,
            status=DEFAULT_JOB_STATUS,
            description=job_description.source_text,
        )
        try:
            await asyncio.to_thread(self.store.insert_job, record)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to save job {record.id}: {e}") from e
        logger.info(f"Created job {record.id} '{record.title}' from manual description")
        return JobDescription(source_text=job_description.source_text, origin_ref=record.id)

    async def _from_existing(self, job_id: str) -> JobDescription:
        jobs = await asyncio.to_thread(self.store.find_jobs)
        job = next((j for j in jobs if j.id == job_id), None)
        if job is None:
            raise JobNotFound(job_id)
        return JobDescription(source_text=job.description or job.title, origin_ref=job.id)
