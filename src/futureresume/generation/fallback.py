"""Local, deterministic stand-in for the remote generator.

Produces the same result contract as the remote path (non-empty resume,
bounded deliverables) from keyword frequencies and formatting transforms,
with ``metadata.phase == "fallback"``.
"""

from __future__ import annotations

import re
from typing import List, Sequence

import structlog

from futureresume.analysis import calculate_ats_score, extract_keywords, missing_keywords
from futureresume.generation.formatting import format_resume_output
from futureresume.generation.models import (
    MAX_HIGHLIGHTS,
    MAX_QUESTIONS,
    MAX_SKILL_GAPS,
    GenerationMetadata,
    GenerationRequest,
    GenerationResult,
    InterviewToolkit,
)

log = structlog.get_logger()

FALLBACK_PHASE = "fallback"
DEFAULT_GRAMMAR_SCORE = 75

DEFAULT_HIGHLIGHTS = (
    "Experienced professional with relevant background",
    "Strong track record of delivering results",
    "Excellent communication and collaboration skills",
    "Proven ability to adapt and learn quickly",
    "Committed to continuous improvement and growth",
)

DEFAULT_QUESTIONS = (
    "Tell me about yourself and your background",
    "Why are you interested in this role?",
    "What are your greatest strengths?",
    "Describe a challenging project you've worked on",
    "Where do you see yourself in 5 years?",
)

DEFAULT_SKILL_GAPS = (
    "Industry-specific knowledge",
    "Advanced technical skills",
    "Leadership experience",
)

FOLLOW_UP_EMAIL = (
    "Thank you for taking the time to interview me today. I'm very excited about "
    "the opportunity to contribute to your team and look forward to hearing about next steps."
)

KPI_TRACKER = """WEEKLY JOB SEARCH KPI TRACKER

Applications Sent: ___ / 5
Networking Touches: ___ / 3
Interview Invites: ___
Phone Screens: ___
Final Interviews: ___
Offers Received: ___

Weekly Goals:
- Send 5 targeted applications
- Make 3 meaningful networking connections
- Schedule 1+ interview
- Follow up on pending applications
- Update LinkedIn with recent achievements"""

# Competency list length per resume mode
_COMPETENCY_COUNT = {"concise": 6, "detailed": 10, "executive": 8}


class FallbackPipeline:
    """Builds a GenerationResult without calling any remote service."""

    def run(self, request: GenerationRequest) -> GenerationResult:
        resume_text = request.resume_text
        job_keywords = extract_keywords(request.job_description)
        resume_keywords = set(extract_keywords(resume_text))
        matched = [k for k in job_keywords if k in resume_keywords]
        gaps = missing_keywords(job_keywords, list(resume_keywords))

        content = self._build_resume(request, job_keywords, matched)
        final_resume = format_resume_output(content, request.format)

        result = GenerationResult(
            final_resume=final_resume,
            cover_letter=self._build_cover_letter(request, matched),
            recruiter_highlights=_pad(
                [f"Hands-on experience with {k}" for k in matched], DEFAULT_HIGHLIGHTS, MAX_HIGHLIGHTS
            ),
            interview_toolkit=InterviewToolkit(
                questions=_pad(
                    [f"Walk me through a project where you applied {k}" for k in job_keywords[:2]],
                    DEFAULT_QUESTIONS,
                    MAX_QUESTIONS,
                ),
                follow_up_email=FOLLOW_UP_EMAIL,
                skill_gaps=_pad(gaps, DEFAULT_SKILL_GAPS, MAX_SKILL_GAPS),
            ),
            weekly_kpi_tracker=KPI_TRACKER,
            grammar_score=DEFAULT_GRAMMAR_SCORE if request.proofread else None,
            metadata=GenerationMetadata(
                phase=FALLBACK_PHASE,
                optimization_score=calculate_ats_score(resume_text, request.job_description).score,
                keywords_matched=len(matched),
                word_count=len(final_resume.split()),
            ),
        )

        log.info(
            "fallback_generated",
            keywords_matched=len(matched),
            word_count=result.metadata.word_count,
        )
        return result

    def _build_resume(
        self,
        request: GenerationRequest,
        job_keywords: Sequence[str],
        matched: Sequence[str],
    ) -> str:
        count = _COMPETENCY_COUNT.get(request.mode, 6)
        competencies = list(matched[:count]) or list(job_keywords[:count])
        focus = ", ".join(competencies[:3]) or "the role's core requirements"

        if request.voice == "third-person":
            summary = f"The candidate brings proven experience in {focus}."
        else:
            summary = f"I bring proven experience in {focus}."

        sections = ["# Resume", "## Summary", summary]

        if competencies:
            sections.append("## Core Competencies")
            sections.append("\n".join(f"- {c}" for c in competencies))

        if request.include_table and job_keywords:
            rows = [f"| {k} | {'Yes' if k in matched else 'No'} |" for k in job_keywords[:count]]
            sections.append("## Skills Match")
            sections.append("\n".join(["| Skill | On resume |", "| --- | --- |", *rows]))

        body = _normalize(request.resume_text)
        if body:
            sections.append("## Experience")
            sections.append(body)

        return "\n\n".join(sections)

    def _build_cover_letter(self, request: GenerationRequest, matched: Sequence[str]) -> str:
        opening = (
            "I am writing to express my strong interest in this position. Based on my "
            "experience and skills outlined in my resume, I believe I would be a valuable "
            "addition to your team."
        )
        if not matched:
            return opening
        return f"{opening} In particular, my background in {', '.join(matched[:3])} aligns closely with your requirements."


def _pad(items: Sequence[str], defaults: Sequence[str], limit: int) -> List[str]:
    """First ``limit`` of items, topped up from defaults without duplicates."""
    result = list(dict.fromkeys(items))[:limit]
    for item in defaults:
        if len(result) >= limit:
            break
        if item not in result:
            result.append(item)
    return result


def _normalize(text: str) -> str:
    text = text.replace("\t", "    ")
    return re.sub(r"\n{3,}", "\n\n", text).strip()
