"""
Pytest configuration file for the Resume Scorer tests.
"""
import os
import sys

import pytest
from unittest.mock import MagicMock

# Add the src directory to the path so we can import the package
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from resume_scorer.models import ScorePayload, SourceHandle
from resume_scorer.store import InMemoryStore


class FakeOracle:
    """Oracle double returning scripted answers keyed by file name."""

    def __init__(self, answers=None, default=None, description="## Requirements\n- Python"):
        self.answers = answers or {}
        self.default = default or ScorePayload(
            candidateName="Jane Smith", currentRole="Engineer", matchScore=75, analysis="Good fit"
        )
        self.description = description
        self.calls = []
        self.extract_calls = []

    async def score_resume(self, job_description, name, content, media_type):
        self.calls.append({
            "job_description": job_description,
            "name": name,
            "content": content,
            "media_type": media_type,
        })
        answer = self.answers.get(name, self.default)
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def extract_job_description(self, name, content, media_type):
        self.extract_calls.append(name)
        if isinstance(self.description, Exception):
            raise self.description
        return self.description


def make_handle(name="resume.pdf", data=b"%PDF-1.4 resume", media_type="application/pdf"):
    return SourceHandle(name=name, size=len(data), media_type=media_type, data=data)


@pytest.fixture
def fake_oracle():
    return FakeOracle()


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def mock_boto3_client(mocker):
    """Fixture to mock boto3.client"""
    mock_client = mocker.patch('boto3.client')
    return mock_client


@pytest.fixture
def mock_bedrock_client():
    """Fixture to create a mock Bedrock client"""
    mock_client = MagicMock()
    return mock_client


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
