"""Resilient resume generation: models, remote client, fallback, orchestration."""

from futureresume.generation.client import HostedGenerationClient, classify_error_message
from futureresume.generation.fallback import FallbackPipeline
from futureresume.generation.formatting import estimate_processing_time, format_resume_output
from futureresume.generation.models import (
    GenerationMetadata,
    GenerationRequest,
    GenerationResult,
    InterviewToolkit,
)
from futureresume.generation.orchestrator import (
    GenerationOrchestrator,
    GenerationState,
    is_service_unavailable,
)
from futureresume.generation.pipeline import GenerationPipeline, build_pipeline

__all__ = [
    "FallbackPipeline",
    "GenerationMetadata",
    "GenerationOrchestrator",
    "GenerationPipeline",
    "GenerationRequest",
    "GenerationResult",
    "GenerationState",
    "HostedGenerationClient",
    "InterviewToolkit",
    "build_pipeline",
    "classify_error_message",
    "estimate_processing_time",
    "format_resume_output",
    "is_service_unavailable",
]
