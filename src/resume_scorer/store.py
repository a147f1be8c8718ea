"""Persistence for job and candidate records."""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import ScoringConfig
from .errors import PersistenceError
from .models import CandidateRecord, JobRecord

logger = logging.getLogger(__name__)


class JobStore(Protocol):
    """CRUD operations the pipeline needs from the data store."""

    def find_jobs(self) -> List[JobRecord]:
        ...

    def insert_job(self, record: JobRecord) -> JobRecord:
        ...

    def insert_candidate(self, record: CandidateRecord) -> CandidateRecord:
        ...


def to_dynamo(value: Any) -> Any:
    """Convert floats (recursively) to Decimal, as DynamoDB requires."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [to_dynamo(v) for v in value]
    return value


def from_dynamo(value: Any) -> Any:
    """Convert Decimals read from DynamoDB back to int or float."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    return value


class DynamoDBStore:
    """Store backed by two DynamoDB tables keyed on ``id``."""

    def __init__(self, config: Optional[ScoringConfig] = None, dynamodb=None):
        self.config = config or ScoringConfig.from_env()
        self.dynamodb = dynamodb or boto3.resource("dynamodb", region_name=self.config.region)
        self.jobs_table = self.dynamodb.Table(self.config.jobs_table)
        self.candidates_table = self.dynamodb.Table(self.config.candidates_table)

    def find_jobs(self) -> List[JobRecord]:
        try:
            response = self.jobs_table.scan()
            items = response.get("Items", [])
            while "LastEvaluatedKey" in response:
                response = self.jobs_table.scan(ExclusiveStartKey=response["LastEvaluatedKey"])
                items.extend(response.get("Items", []))
        except (BotoCoreError, ClientError) as e:
            raise PersistenceError(f"Failed to list jobs: {e}") from e
        jobs = [JobRecord.from_dict(from_dynamo(item)) for item in items]
        jobs.sort(key=lambda job: job.created_at, reverse=True)
        return jobs

    def insert_job(self, record: JobRecord) -> JobRecord:
        self._put(self.jobs_table, record.to_dict(), "job")
        logger.info(f"Saved job {record.id}: {record.title}")
        return record

    def insert_candidate(self, record: CandidateRecord) -> CandidateRecord:
        self._put(self.candidates_table, record.to_dict(), "candidate")
        logger.info(f"Saved candidate {record.id}: {record.name}")
        return record

    def _put(self, table, item: Dict[str, Any], kind: str) -> None:
        try:
            table.put_item(Item=to_dynamo(item))
        except (BotoCoreError, ClientError) as e:
            raise PersistenceError(f"Failed to save {kind} {item.get('id')}: {e}") from e


class InMemoryStore:
    """List-backed store for demo runs without AWS."""

    def __init__(self, jobs: Optional[List[JobRecord]] = None):
        self.jobs: List[JobRecord] = list(jobs or [])
        self.candidates: List[CandidateRecord] = []

    def find_jobs(self) -> List[JobRecord]:
        return list(self.jobs)

    def insert_job(self, record: JobRecord) -> JobRecord:
        self.jobs.append(record)
        return record

    def insert_candidate(self, record: CandidateRecord) -> CandidateRecord:
        self.candidates.append(record)
        return record
