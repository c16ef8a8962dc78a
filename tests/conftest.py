"""
futureresume Test Configuration

Shared pytest fixtures and configuration for all test types.
"""

import os
from typing import Any, Generator, List, Sequence, Union

import pytest
import structlog

from futureresume.core.config import reset_settings
from futureresume.generation.models import (
    GenerationMetadata,
    GenerationRequest,
    GenerationResult,
    InterviewToolkit,
)


# Configure pytest collection
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (components wired together)")


@pytest.fixture(autouse=True)
def isolate_environment() -> Generator[None, None, None]:
    """Reset settings, FUTURERESUME_ env vars and structlog around each test."""
    reset_settings()
    for key in list(os.environ.keys()):
        if key.startswith("FUTURERESUME_"):
            del os.environ[key]

    yield

    reset_settings()
    for key in list(os.environ.keys()):
        if key.startswith("FUTURERESUME_"):
            del os.environ[key]
    structlog.reset_defaults()


# =============================================================================
# Time control
# =============================================================================


class FakeClock:
    """Manually advanced clock usable wherever a ``clock`` callable is accepted."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Async sleep replacement that records requested delays and returns at once."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


# =============================================================================
# Generation fixtures
# =============================================================================


RESUME_TEXT = """Jane Doe
Senior Software Engineer

Summary
Backend engineer with eight years of Python experience building distributed systems.

Experience
Acme Corp - Built Python services on Kubernetes, cut latency by 40 percent.
Led migration of reporting pipeline to PostgreSQL and Kafka.

Education
BSc Computer Science

Skills
Python, Kubernetes, PostgreSQL, Kafka, AWS
"""

JOB_TEXT = (
    "We are hiring a Senior Python Engineer to design distributed systems on Kubernetes. "
    "Experience with PostgreSQL, Kafka and Terraform is required. Python expertise "
    "and mentoring skills are essential."
)


class ScriptedGenerator:
    """Remote generator that plays back a script of results and exceptions."""

    def __init__(self, outcomes: Sequence[Union[BaseException, GenerationResult]]) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0
        self.requests: List[GenerationRequest] = []

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        self.calls += 1
        self.requests.append(request)
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def make_result(resume: str = "# Jane Doe\n\nTailored resume", **overrides: Any) -> GenerationResult:
    fields = dict(
        final_resume=resume,
        cover_letter="Dear hiring manager",
        recruiter_highlights=["Python", "Kubernetes"],
        interview_toolkit=InterviewToolkit(
            questions=["Tell me about Kafka"],
            follow_up_email="Thanks!",
            skill_gaps=["Terraform"],
        ),
        weekly_kpi_tracker="Applications: 5",
        grammar_score=88,
        metadata=GenerationMetadata(
            phase="complete", optimization_score=4, keywords_matched=6, word_count=120
        ),
    )
    fields.update(overrides)
    return GenerationResult(**fields)


@pytest.fixture
def resume_text() -> str:
    return RESUME_TEXT


@pytest.fixture
def job_text() -> str:
    return JOB_TEXT


@pytest.fixture
def sample_request() -> GenerationRequest:
    return GenerationRequest(resume_content=RESUME_TEXT, job_description=JOB_TEXT)


@pytest.fixture
def sample_result() -> GenerationResult:
    return make_result()


@pytest.fixture
def result_factory():
    """Build GenerationResult objects with optional field overrides."""
    return make_result


@pytest.fixture
def scripted_generator():
    """Factory for ScriptedGenerator; the last outcome repeats once the script runs out."""
    return ScriptedGenerator
