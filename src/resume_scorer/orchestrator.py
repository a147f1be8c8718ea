"""Scoring orchestrator: drives each batch item through its lifecycle."""

import asyncio
import logging
import uuid
from typing import Optional, Union

from .config import (
    DEFAULT_CANDIDATE_STATUS,
    DEFAULT_COMPANY,
    DEFAULT_LOCATION,
    PROGRESS_DONE,
    PROGRESS_READING,
    PROGRESS_SCORING,
    ScoringConfig,
)
from .encoder import encode
from .errors import BatchAlreadyRunning, ReadError, ScoringError
from .intake import Batch
from .models import BatchItem, CandidateRecord, ItemStatus, JobDescription, ScorePayload
from .oracle import Oracle
from .resolver import JobResolver
from .store import JobStore

logger = logging.getLogger(__name__)


def build_candidate(
    item: BatchItem, payload: ScorePayload, job_id: str, content: str
) -> CandidateRecord:
    """Derive the candidate record for a scored item.

    Name and role fall back to the file name stem; a missing score becomes 0.
    The score is otherwise kept exactly as the oracle returned it.
    """
    score: Union[int, float] = payload.matchScore if payload.matchScore is not None else 0
    if isinstance(score, float) and score.is_integer():
        score = int(score)
    return CandidateRecord(
        id=f"c-{uuid.uuid4().hex[:12]}",
        name=payload.candidateName or item.source.stem,
        role=payload.currentRole or item.source.stem,
        match_score=score,
        job_id=job_id,
        analysis=payload.analysis,
        resume_base64=content,
        resume_media_type=item.source.media_type,
        company=DEFAULT_COMPANY,
        location=DEFAULT_LOCATION,
        status=DEFAULT_CANDIDATE_STATUS,
    )


class ScoringOrchestrator:
    """Scores batch items one at a time, in submission order.

    Each item goes READY -> READING -> SCORING -> COMPLETED or FAILED. A
    failure on one item never stops the batch, and unreadable files are still
    sent to the oracle with empty content.
    """

    def __init__(
        self,
        oracle: Oracle,
        store: JobStore,
        resolver: Optional[JobResolver] = None,
        config: Optional[ScoringConfig] = None,
    ):
        self.oracle = oracle
        self.store = store
        self.config = config or ScoringConfig()
        self.resolver = resolver or JobResolver(store, oracle, self.config)
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def run_batch(self, batch: Batch, job_description: JobDescription) -> None:
        """Score every READY item of ``batch`` against ``job_description``.

        Progress and results are observable through the batch. A blank job
        description or an empty batch is a no-op.

        Raises:
            BatchAlreadyRunning: If another run is in progress.
            PersistenceError: If the job record cannot be materialized.
        """
        if self._running:
            raise BatchAlreadyRunning("A batch run is already in progress")
        if not job_description.is_ready or len(batch) == 0:
            logger.warning("Skipping batch run: job description and at least one file are required")
            return

        self._running = True
        try:
            job = await self._job_for(batch, job_description)
            completed = failed = 0
            for item in batch:
                if batch.get(item.id) is not item:
                    logger.debug(f"Skipping {item.name}: removed from the batch")
                    continue
                if item.status is not ItemStatus.READY:
                    logger.debug(f"Skipping {item.name}: already {item.status.value}")
                    continue
                await self._process(batch, item, job)
                if item.status is ItemStatus.COMPLETED:
                    completed += 1
                else:
                    failed += 1
            logger.info(f"Batch finished for job {job.origin_ref}: {completed} completed, {failed} failed")
        finally:
            self._running = False

    async def _job_for(self, batch: Batch, job_description: JobDescription) -> JobDescription:
        # Reruns of the same batch reuse the job materialized on the first run
        previous = batch.job
        if (
            previous is not None
            and job_description.origin_ref is None
            and previous.source_text == job_description.source_text
        ):
            return previous
        batch.job = await self.resolver.materialize(job_description)
        return batch.job

    async def _process(self, batch: Batch, item: BatchItem, job: JobDescription) -> None:
        try:
            batch.transition(item, ItemStatus.READING, PROGRESS_READING)

            content = ""
            try:
                content = await encode(item.source)
            except ReadError as e:
                logger.warning(f"File reading failed for {item.name}, scoring without content: {e}")

            batch.transition(item, ItemStatus.SCORING, PROGRESS_SCORING)

            payload = await self._score(job, item, content)
            record = build_candidate(item, payload, job.origin_ref, content)
            await asyncio.to_thread(self.store.insert_candidate, record)
        except Exception as e:
            logger.error(f"Scoring failed for {item.name}: {e}")
            batch.transition(item, ItemStatus.FAILED, 0, error=str(e))
            return

        item.candidate_id = record.id
        batch.transition(item, ItemStatus.COMPLETED, PROGRESS_DONE, result=payload)
        logger.info(f"Scored {item.name}: {record.name} ({record.match_score})")

    async def _score(self, job: JobDescription, item: BatchItem, content: str) -> ScorePayload:
        call = self.oracle.score_resume(job.source_text, item.name, content, item.source.media_type)
        if self.config.scoring_timeout is None:
            payload = await call
        else:
            try:
                payload = await asyncio.wait_for(call, timeout=self.config.scoring_timeout)
            except asyncio.TimeoutError as e:
                raise ScoringError(
                    f"Scoring timed out after {self.config.scoring_timeout}s"
                ) from e
        if not isinstance(payload, ScorePayload):
            raise ScoringError(f"Unexpected scoring result type: {type(payload).__name__}")
        return payload
