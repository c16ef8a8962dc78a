"""ATS-style heuristics over plain resume text.

All scores are integers or floats in 0..100. The overall ATS score weights
keyword match 40 %, formatting 20 %, sections 20 % and length 20 %.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Sequence

from futureresume.analysis.keywords import (
    calculate_matching_score,
    extract_keywords,
    generate_recommendations,
)

COMMON_SECTIONS = (
    "experience",
    "education",
    "skills",
    "summary",
    "objective",
    "work",
    "employment",
    "projects",
    "achievements",
)

ATS_WEIGHTS = {"keyword_match": 0.4, "formatting": 0.2, "sections": 0.2, "length": 0.2}


@dataclass(frozen=True)
class ResumeAnalysis:
    matching_score: int
    job_keywords: List[str]
    resume_keywords: List[str]
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AtsFactors:
    keyword_match: float
    formatting: float
    sections: float
    length: float


@dataclass(frozen=True)
class AtsScore:
    score: int
    factors: AtsFactors

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ContentOptimization:
    optimized_content: str
    improvements: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def analyze_resume(resume_text: str, job_description: str) -> ResumeAnalysis:
    """One-shot version of the resume-analysis task."""
    job_keywords = extract_keywords(job_description)
    resume_keywords = extract_keywords(resume_text)
    return ResumeAnalysis(
        matching_score=calculate_matching_score(job_keywords, resume_keywords),
        job_keywords=job_keywords[:20],
        resume_keywords=resume_keywords[:20],
        recommendations=generate_recommendations(job_keywords, resume_keywords),
    )


def calculate_keyword_match(resume_text: str, job_description: str) -> int:
    return calculate_matching_score(extract_keywords(job_description), extract_keywords(resume_text))


def analyze_formatting(text: str) -> int:
    """Start at 100; deduct for tabs, runs of blank lines and no capitalised words."""
    score = 100
    if "\t" in text:
        score -= 10
    if re.search(r"\n{3,}", text):
        score -= 10
    if not re.search(r"[A-Z][a-z]+", text):
        score -= 20
    return max(0, score)


def analyze_sections(text: str) -> float:
    """Five or more recognised section names score 100."""
    lowered = text.lower()
    found = [s for s in COMMON_SECTIONS if s in lowered]
    return min(100.0, len(found) / 5 * 100)


def analyze_length(text: str) -> int:
    word_count = len(text.split())
    if word_count < 200:
        return 50
    if word_count > 800:
        return 70
    if 300 <= word_count <= 600:
        return 100
    return 85


def calculate_ats_score(resume_text: str, job_description: str) -> AtsScore:
    factors = AtsFactors(
        keyword_match=calculate_keyword_match(resume_text, job_description),
        formatting=analyze_formatting(resume_text),
        sections=analyze_sections(resume_text),
        length=analyze_length(resume_text),
    )
    score = round(sum(getattr(factors, name) * weight for name, weight in ATS_WEIGHTS.items()))
    return AtsScore(score=score, factors=factors)


def improve_formatting(content: str) -> str:
    """Collapse all whitespace runs to single spaces."""
    return re.sub(r"\s+", " ", content).strip()


def keyword_improvements(content: str, target_keywords: Sequence[str]) -> List[str]:
    """Suggestions for target keywords that appear fewer than twice."""
    improvements = []
    for keyword in target_keywords:
        matches = re.findall(rf"\b{re.escape(keyword)}\b", content, flags=re.IGNORECASE)
        if len(matches) < 2:
            improvements.append(f'Consider adding "{keyword}" more frequently')
    return improvements
