"""Exceptions raised by the resume scoring pipeline."""


class ResumeScorerError(Exception):
    """Base class for all resume scorer errors."""


class ReadError(ResumeScorerError):
    """File content could not be read or encoded."""


class ExtractionError(ResumeScorerError):
    """Job description could not be extracted from a document."""


class ScoringError(ResumeScorerError):
    """Scoring call failed or returned a non-conforming payload."""


class PersistenceError(ResumeScorerError):
    """Store write or read failed."""


class JobNotFound(ResumeScorerError):
    """Referenced job record does not exist."""

    def __init__(self, job_id: str):
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class BatchAlreadyRunning(ResumeScorerError):
    """A batch run is already in progress on this orchestrator."""


class InvalidTransition(ResumeScorerError):
    """Batch item status change not allowed by the item lifecycle."""
