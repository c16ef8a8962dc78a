"""Frequency-based keyword extraction and matching."""

from __future__ import annotations

import re
from collections import Counter
from typing import List, Sequence

STOP_WORDS = frozenset(
    {
        "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "a", "an", "is", "are", "was", "were", "be", "been", "have", "has", "had",
        "do", "does", "did", "will", "would", "could", "should", "may", "might", "can",
    }
)

_NON_WORD = re.compile(r"[^\w\s]")


def extract_keywords(text: str) -> List[str]:
    """Return distinct keywords of text, most frequent first.

    Words are lowercased with punctuation stripped; stop words and words of
    two characters or fewer are dropped. Ties keep first-appearance order.
    """
    words = _NON_WORD.sub(" ", text.lower()).split()
    counts = Counter(w for w in words if len(w) > 2 and w not in STOP_WORDS)
    return [word for word, _ in counts.most_common()]


def calculate_matching_score(job_keywords: Sequence[str], resume_keywords: Sequence[str]) -> int:
    """Percentage of the top 50 job keywords present in the resume.

    The denominator is the full job keyword count, so very long job
    descriptions score lower. Returns 0 when the job has no keywords.
    """
    if not job_keywords:
        return 0
    resume_set = set(resume_keywords)
    matches = [k for k in dict.fromkeys(job_keywords[:50]) if k in resume_set]
    return round(len(matches) / len(job_keywords) * 100)


def missing_keywords(
    job_keywords: Sequence[str],
    resume_keywords: Sequence[str],
    top: int = 20,
) -> List[str]:
    """Top job keywords absent from the resume, in job-frequency order."""
    resume_set = set(resume_keywords)
    return [k for k in dict.fromkeys(job_keywords[:top]) if k not in resume_set]


def generate_recommendations(
    job_keywords: Sequence[str],
    resume_keywords: Sequence[str],
    limit: int = 5,
) -> List[str]:
    return [
        f'Consider adding "{keyword}" to better match the job requirements'
        for keyword in missing_keywords(job_keywords, resume_keywords)[:limit]
    ]
