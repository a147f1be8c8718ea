"""Tests for the DynamoDB store using moto."""

from decimal import Decimal
from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from resume_scorer.config import ScoringConfig
from resume_scorer.errors import PersistenceError
from resume_scorer.models import CandidateRecord, JobRecord
from resume_scorer.store import DynamoDBStore, InMemoryStore, from_dynamo, to_dynamo

CONFIG = ScoringConfig(region="us-east-1", jobs_table="test-jobs", candidates_table="test-candidates")


def create_table(dynamodb, name):
    dynamodb.create_table(
        TableName=name,
        KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
        BillingMode="PAY_PER_REQUEST",
    )


@pytest.fixture
def dynamodb(aws_credentials):
    """Create mock DynamoDB tables."""
    with mock_aws():
        resource = boto3.resource("dynamodb", region_name="us-east-1")
        create_table(resource, "test-jobs")
        create_table(resource, "test-candidates")
        yield resource


def make_job(job_id="j-1", created_at="2025-01-01T00:00:00+00:00"):
    return JobRecord(
        id=job_id,
        title="Data Engineer",
        department="General",
        location="Remote",
        type="Full-time",
        status="Active",
        description="Build pipelines",
        created_at=created_at,
    )


class TestDynamoDBStore:
    """Tests for DynamoDBStore against moto."""

    def test_insert_and_find_jobs(self, dynamodb):
        store = DynamoDBStore(CONFIG, dynamodb=dynamodb)

        store.insert_job(make_job("j-old", "2025-01-01T00:00:00+00:00"))
        store.insert_job(make_job("j-new", "2025-06-01T00:00:00+00:00"))
        jobs = store.find_jobs()

        assert [job.id for job in jobs] == ["j-new", "j-old"]
        assert jobs[0].title == "Data Engineer"
        assert jobs[0].applicants_count == 0
        assert isinstance(jobs[0].applicants_count, int)

    def test_find_jobs_empty(self, dynamodb):
        assert DynamoDBStore(CONFIG, dynamodb=dynamodb).find_jobs() == []

    def test_insert_candidate(self, dynamodb):
        store = DynamoDBStore(CONFIG, dynamodb=dynamodb)
        record = CandidateRecord(
            id="c-1",
            name="Jane Smith",
            role="Engineer",
            match_score=87.5,
            job_id="j-1",
            analysis=None,
            resume_base64="UEVERg==",
            resume_media_type="application/pdf",
        )

        store.insert_candidate(record)

        item = dynamodb.Table("test-candidates").get_item(Key={"id": "c-1"})["Item"]
        assert item["name"] == "Jane Smith"
        assert item["match_score"] == Decimal("87.5")
        assert item["job_id"] == "j-1"
        assert "analysis" not in item
        assert CandidateRecord.from_dict(from_dynamo(item)).match_score == 87.5

    def test_missing_table_raises_persistence_error(self, aws_credentials):
        with mock_aws():
            resource = boto3.resource("dynamodb", region_name="us-east-1")
            store = DynamoDBStore(CONFIG, dynamodb=resource)

            with pytest.raises(PersistenceError):
                store.insert_job(make_job())
            with pytest.raises(PersistenceError):
                store.find_jobs()

    def test_client_error_wrapped(self):
        resource = MagicMock()
        resource.Table.return_value.put_item.side_effect = ClientError(
            {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "slow down"}},
            "PutItem",
        )
        store = DynamoDBStore(CONFIG, dynamodb=resource)

        with pytest.raises(PersistenceError, match="candidate c-9"):
            store.insert_candidate(CandidateRecord(id="c-9", name="A", role="B", match_score=1, job_id="j-1"))


class TestConversions:
    """Tests for Decimal conversion helpers."""

    def test_to_dynamo(self):
        converted = to_dynamo({"score": 1.5, "count": 3, "tags": [0.25], "note": None})

        assert converted == {"score": Decimal("1.5"), "count": 3, "tags": [Decimal("0.25")]}

    def test_from_dynamo(self):
        restored = from_dynamo({"score": Decimal("1.5"), "count": Decimal("3"), "tags": [Decimal("2")]})

        assert restored == {"score": 1.5, "count": 3, "tags": [2]}
        assert isinstance(restored["count"], int)


def test_in_memory_store():
    store = InMemoryStore([make_job()])

    store.insert_job(make_job("j-2"))
    store.insert_candidate(CandidateRecord(id="c-1", name="A", role="B", match_score=1, job_id="j-2"))

    assert [job.id for job in store.find_jobs()] == ["j-1", "j-2"]
    assert len(store.candidates) == 1
