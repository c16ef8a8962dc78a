"""Generation request and result types.

The wire format is the hosted function's camelCase JSON; these dataclasses
use snake_case and convert at the boundary (``to_payload`` / ``from_dict``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from futureresume.core.exceptions import ContractViolationError
from futureresume.core.hashing import calculate_payload_hash

MODES = ("concise", "detailed", "executive")
VOICES = ("first-person", "third-person")
FORMATS = ("markdown", "plain_text", "json")

MIN_JOB_DESCRIPTION_LENGTH = 50
MAX_HIGHLIGHTS = 5
MAX_QUESTIONS = 5
MAX_SKILL_GAPS = 3


@dataclass
class GenerationRequest:
    """Parameters for one resume generation.

    Attributes:
        mode: Resume style: concise, detailed or executive.
        voice: first-person or third-person.
        format: Output format: markdown, plain_text or json.
        include_table: Add a skills table.
        proofread: Run the grammar and readability phase.
        resume_content: Uploaded resume text.
        job_description: Target job posting (at least 50 characters).
        manual_entry: Hand-typed resume text, used when no upload exists.
    """

    resume_content: str = ""
    job_description: str = ""
    mode: str = "concise"
    voice: str = "first-person"
    format: str = "markdown"
    include_table: bool = False
    proofread: bool = False
    manual_entry: Optional[str] = None

    @property
    def resume_text(self) -> str:
        """Uploaded content, or the manual entry when there is none."""
        return self.resume_content or self.manual_entry or ""

    def validate(self) -> List[str]:
        """Return human-readable problems; empty when the request is valid."""
        errors = []
        if self.mode not in MODES:
            errors.append("Resume mode is required (concise, detailed, or executive)")
        if self.voice not in VOICES:
            errors.append("Voice style is required (first-person or third-person)")
        if self.format not in FORMATS:
            errors.append("Output format is required (markdown, plain_text, or json)")
        if not self.resume_content and not self.manual_entry:
            errors.append("Resume content is required (either file upload or manual entry)")
        if len(self.job_description.strip()) < MIN_JOB_DESCRIPTION_LENGTH:
            errors.append(
                f"Job description is required and must be at least "
                f"{MIN_JOB_DESCRIPTION_LENGTH} characters"
            )
        return errors

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "mode": self.mode,
            "voice": self.voice,
            "format": self.format,
            "includeTable": self.include_table,
            "proofread": self.proofread,
            "resumeContent": self.resume_content,
            "jobDescription": self.job_description,
        }
        if self.manual_entry is not None:
            payload["manualEntry"] = self.manual_entry
        return payload

    def cache_key(self) -> str:
        """SHA-256 of the canonical payload; equal requests share a key."""
        return calculate_payload_hash(self.to_payload())


@dataclass
class InterviewToolkit:
    questions: List[str] = field(default_factory=list)
    follow_up_email: str = ""
    skill_gaps: List[str] = field(default_factory=list)


@dataclass
class GenerationMetadata:
    phase: str = "complete"
    optimization_score: float = 0
    keywords_matched: int = 0
    word_count: int = 0


@dataclass
class GenerationResult:
    """Document bundle returned by the remote generator or the fallback.

    Only the presence of ``final_resume`` matters to the orchestrator; the
    rest is passed through untouched.
    """

    final_resume: str
    cover_letter: str = ""
    recruiter_highlights: List[str] = field(default_factory=list)
    interview_toolkit: InterviewToolkit = field(default_factory=InterviewToolkit)
    weekly_kpi_tracker: str = ""
    grammar_score: Optional[int] = None
    metadata: GenerationMetadata = field(default_factory=GenerationMetadata)

    def check_contract(self, service: Optional[str] = None) -> None:
        """Raise ContractViolationError unless the bundle is well formed."""
        if not isinstance(self.final_resume, str) or not self.final_resume.strip():
            raise ContractViolationError("missing or empty final resume", service=service)
        if len(self.recruiter_highlights) > MAX_HIGHLIGHTS:
            raise ContractViolationError("too many recruiter highlights", service=service)
        if len(self.interview_toolkit.questions) > MAX_QUESTIONS:
            raise ContractViolationError("too many interview questions", service=service)
        if len(self.interview_toolkit.skill_gaps) > MAX_SKILL_GAPS:
            raise ContractViolationError("too many skill gaps", service=service)

    @classmethod
    def from_dict(cls, data: Any, service: Optional[str] = None) -> "GenerationResult":
        """Parse the hosted function's JSON body.

        List fields are truncated to their bounds and coerced to strings.

        Raises:
            ContractViolationError: Body is not an object or has no resume.
        """
        if not isinstance(data, dict):
            raise ContractViolationError("response body is not a JSON object", service=service)

        toolkit = data.get("interviewToolkit") or {}
        metadata = data.get("metadata") or {}
        if not isinstance(toolkit, dict) or not isinstance(metadata, dict):
            raise ContractViolationError("malformed toolkit or metadata", service=service)

        grammar_score = data.get("grammarScore")
        result = cls(
            final_resume=data.get("finalResume") or "",
            cover_letter=str(data.get("coverLetter") or ""),
            recruiter_highlights=_string_list(data.get("recruiterHighlights"), MAX_HIGHLIGHTS),
            interview_toolkit=InterviewToolkit(
                questions=_string_list(toolkit.get("questions"), MAX_QUESTIONS),
                follow_up_email=str(toolkit.get("followUpEmail") or ""),
                skill_gaps=_string_list(toolkit.get("skillGaps"), MAX_SKILL_GAPS),
            ),
            weekly_kpi_tracker=str(data.get("weeklyKPITracker") or ""),
            grammar_score=int(grammar_score) if isinstance(grammar_score, (int, float)) else None,
            metadata=GenerationMetadata(
                phase=str(metadata.get("phase") or "complete"),
                optimization_score=metadata.get("optimizationScore") or 0,
                keywords_matched=int(metadata.get("keywordsMatched") or 0),
                word_count=int(metadata.get("wordCount") or 0),
            ),
        )
        result.check_contract(service=service)
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "finalResume": self.final_resume,
            "coverLetter": self.cover_letter,
            "recruiterHighlights": list(self.recruiter_highlights),
            "interviewToolkit": {
                "questions": list(self.interview_toolkit.questions),
                "followUpEmail": self.interview_toolkit.follow_up_email,
                "skillGaps": list(self.interview_toolkit.skill_gaps),
            },
            "weeklyKPITracker": self.weekly_kpi_tracker,
            "grammarScore": self.grammar_score,
            "metadata": {
                "phase": self.metadata.phase,
                "optimizationScore": self.metadata.optimization_score,
                "keywordsMatched": self.metadata.keywords_matched,
                "wordCount": self.metadata.word_count,
            },
        }


def _string_list(value: Any, limit: int) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value[:limit]]
