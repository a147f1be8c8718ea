"""Amazon Bedrock client for resume scoring and job description extraction."""

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from .config import JD_EXTRACTION_PROMPT, SCORING_PROMPT, ScoringConfig
from .encoder import decode_content
from .errors import ExtractionError, ScoringError
from .models import ScorePayload

logger = logging.getLogger(__name__)

# Media types accepted by the Converse API as document blocks
DOCUMENT_FORMATS = {
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/vnd.ms-excel": "xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
    "text/plain": "txt",
    "text/csv": "csv",
    "text/html": "html",
    "text/markdown": "md",
}

CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class Oracle(Protocol):
    """Interface of the AI analysis service used by the pipeline."""

    async def score_resume(
        self, job_description: str, name: str, content: str, media_type: str
    ) -> ScorePayload:
        ...

    async def extract_job_description(self, name: str, content: str, media_type: str) -> str:
        ...


def document_format(media_type: str, name: str = "") -> str:
    """Map a media type (or the file extension as a fallback) to a document format."""
    fmt = DOCUMENT_FORMATS.get((media_type or "").split(";")[0].strip().lower())
    if fmt:
        return fmt
    extension = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    if extension in DOCUMENT_FORMATS.values():
        return extension
    return "txt"


def document_name(name: str) -> str:
    """Sanitize a file name to the characters Bedrock allows for document names."""
    stem = name.rsplit(".", 1)[0] if "." in name else name
    cleaned = re.sub(r"[^A-Za-z0-9\s\-\(\)\[\]]", " ", stem)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    return cleaned or "document"


def parse_score_payload(text: str) -> ScorePayload:
    """Parse the model's text answer into a validated payload.

    Raises:
        ScoringError: If the text is not a JSON object matching the schema.
    """
    cleaned = CODE_FENCE.sub("", (text or "").strip())
    try:
        data = json.loads(cleaned or "{}")
    except json.JSONDecodeError as e:
        raise ScoringError(f"Model returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ScoringError(f"Expected a JSON object, got {type(data).__name__}")
    try:
        return ScorePayload.model_validate(data)
    except ValidationError as e:
        raise ScoringError(f"Model response failed validation: {e}") from e


class BedrockOracle:
    """Oracle backed by the Bedrock Converse API."""

    def __init__(self, config: Optional[ScoringConfig] = None, client=None):
        """Initialize the oracle.

        Args:
            config: Scoring configuration. If None, loads from environment.
            client: Pre-built bedrock-runtime client, mainly for tests.
        """
        self.config = config or ScoringConfig.from_env()
        self.client = client or boto3.client(
            service_name="bedrock-runtime",
            region_name=self.config.region,
        )

    async def score_resume(
        self, job_description: str, name: str, content: str, media_type: str
    ) -> ScorePayload:
        """Score one resume against a job description.

        Args:
            job_description: Text of the job description.
            name: Display name of the resume file.
            content: Base64 encoded file content, empty when it could not be read.
            media_type: Media type of the file.

        Returns:
            The validated score payload.

        Raises:
            ScoringError: On service errors or a non-conforming answer.
        """
        prompt = SCORING_PROMPT.format(name=name, job_description=job_description)
        try:
            text = await self._converse(self._content_blocks(prompt, name, content, media_type))
        except (BotoCoreError, ClientError, KeyError, ValueError) as e:
            raise ScoringError(f"Scoring request failed for {name}: {e}") from e
        return parse_score_payload(text)

    async def extract_job_description(self, name: str, content: str, media_type: str) -> str:
        """Extract structured job description text from an uploaded document.

        Raises:
            ExtractionError: On service errors or an empty answer.
        """
        try:
            text = await self._converse(
                self._content_blocks(JD_EXTRACTION_PROMPT, name, content, media_type)
            )
        except (BotoCoreError, ClientError, KeyError, ValueError) as e:
            raise ExtractionError(f"Job description extraction failed for {name}: {e}") from e
        text = text.strip()
        if not text:
            raise ExtractionError(f"No job description text returned for {name}")
        return text

    def _content_blocks(
        self, prompt: str, name: str, content: str, media_type: str
    ) -> List[Dict[str, Any]]:
        blocks: List[Dict[str, Any]] = []
        if content:
            blocks.append({
                "document": {
                    "format": document_format(media_type, name),
                    "name": document_name(name),
                    "source": {"bytes": decode_content(content)},
                }
            })
        blocks.append({"text": prompt})
        return blocks

    async def _converse(self, content: List[Dict[str, Any]]) -> str:
        kwargs = {
            "modelId": self.config.model_id,
            "messages": [{"role": "user", "content": content}],
            "inferenceConfig": {
                "maxTokens": self.config.max_tokens,
                "temperature": self.config.temperature,
            },
        }
        logger.debug(f"Calling {self.config.model_id} with {len(content)} content block(s)")
        response = await asyncio.to_thread(self.client.converse, **kwargs)
        blocks = response["output"]["message"]["content"]
        return "".join(block.get("text", "") for block in blocks)
