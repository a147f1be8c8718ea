"""Configuration for the resume scorer."""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_REGION = "us-east-1"
DEFAULT_MODEL_ID = "amazon.nova-lite-v1:0"

# Defaults for job records created from free text
DEFAULT_JOB_TITLE = "New Position"
DEFAULT_DEPARTMENT = "General"
DEFAULT_LOCATION = "Remote"
DEFAULT_JOB_TYPE = "Full-time"
DEFAULT_JOB_STATUS = "Active"

# Defaults for candidate records created by scoring
DEFAULT_COMPANY = "Analyzed Profile"
DEFAULT_CANDIDATE_STATUS = "New"

# Progress hints shown per item
PROGRESS_READING = 10
PROGRESS_SCORING = 30
PROGRESS_DONE = 100

JD_EXTRACTION_PROMPT = (
    "Extract the full Job Description. Format it strictly as follows:\n"
    "1. Use '## ' for main headers (Responsibilities, Requirements, Preferred Qualifications).\n"
    "2. Use bullet points '- ' for lists.\n"
    "3. Return only the structured text with no extra commentary."
)

SCORING_PROMPT = """Act as a Technical Recruiter. Analyze the resume "{name}" against this Job Description:

JD: {job_description}

Return only JSON with: candidateName, currentRole, matchScore (0-100), analysis (1 sentence summary)."""


@dataclass
class ScoringConfig:
    """Settings for the Bedrock oracle, the DynamoDB store and batch runs."""

    region: str = DEFAULT_REGION
    model_id: str = DEFAULT_MODEL_ID
    max_tokens: int = 1000
    temperature: float = 0.2

    jobs_table: str = "resume-scorer-jobs"
    candidates_table: str = "resume-scorer-candidates"

    # None keeps the oracle call unbounded
    scoring_timeout: Optional[float] = None
    job_title_max_length: int = 50

    @classmethod
    def from_env(cls) -> "ScoringConfig":
        """Load configuration from environment variables."""
        timeout = os.getenv("SCORING_TIMEOUT_SECONDS", "")
        return cls(
            region=os.getenv("AWS_REGION", DEFAULT_REGION),
            model_id=os.getenv("BEDROCK_MODEL_ID", DEFAULT_MODEL_ID),
            max_tokens=int(os.getenv("BEDROCK_MAX_TOKENS", "1000")),
            temperature=float(os.getenv("BEDROCK_TEMPERATURE", "0.2")),
            jobs_table=os.getenv("JOBS_TABLE", "resume-scorer-jobs"),
            candidates_table=os.getenv("CANDIDATES_TABLE", "resume-scorer-candidates"),
            scoring_timeout=float(timeout) if timeout else None,
            job_title_max_length=int(os.getenv("JOB_TITLE_MAX_LENGTH", "50")),
        )
