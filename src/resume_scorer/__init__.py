"""Resume Scorer - score batches of resumes against a job description.

This package provides:
1. File intake and an observable batch of resume items
2. A sequential scoring pipeline backed by Amazon Bedrock (ScoringOrchestrator)
3. Job description resolution, including extraction from uploaded documents
4. A ranked result view derived from the batch state
"""

from .config import ScoringConfig
from .errors import (
    BatchAlreadyRunning,
    ExtractionError,
    InvalidTransition,
    JobNotFound,
    PersistenceError,
    ReadError,
    ResumeScorerError,
    ScoringError,
)
from .intake import Batch, intake_files, intake_paths
from .models import (
    BatchItem,
    CandidateRecord,
    ItemStatus,
    JobDescription,
    JobRecord,
    ScorePayload,
    SourceHandle,
)
from .encoder import encode
from .oracle import BedrockOracle
from .store import DynamoDBStore, InMemoryStore
from .resolver import (
    ExistingJob,
    ExtractFromDocument,
    JobResolver,
    ManualText,
    parse_sections,
)
from .orchestrator import ScoringOrchestrator
from .projection import batch_progress, project_results

__all__ = [
    # Models
    "BatchItem",
    "CandidateRecord",
    "ItemStatus",
    "JobDescription",
    "JobRecord",
    "ScorePayload",
    "SourceHandle",
    # Errors
    "ResumeScorerError",
    "ReadError",
    "ExtractionError",
    "ScoringError",
    "PersistenceError",
    "JobNotFound",
    "BatchAlreadyRunning",
    "InvalidTransition",
    # Pipeline
    "Batch",
    "intake_files",
    "intake_paths",
    "encode",
    "JobResolver",
    "ExistingJob",
    "ManualText",
    "ExtractFromDocument",
    "parse_sections",
    "ScoringOrchestrator",
    "project_results",
    "batch_progress",
    # Services
    "ScoringConfig",
    "BedrockOracle",
    "DynamoDBStore",
    "InMemoryStore",
]
