"""Output formatting and processing-time estimates."""

from __future__ import annotations

import json
import math
import re
from datetime import datetime, timezone
from typing import Optional

_MARKDOWN_RULES = (
    (re.compile(r"#{1,6}[ \t]*"), ""),  # headers
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),  # bold
    (re.compile(r"\*(.*?)\*"), r"\1"),  # italic
    (re.compile(r"`(.*?)`"), r"\1"),  # code
    (re.compile(r"\[(.*?)\]\(.*?\)"), r"\1"),  # links
    (re.compile(r"^[ \t]*[-*+][ \t]+", re.MULTILINE), "• "),  # bullets
)

BASE_SECONDS = 30
MAX_SECONDS = 120


def strip_markdown(content: str) -> str:
    for pattern, replacement in _MARKDOWN_RULES:
        content = pattern.sub(replacement, content)
    return content


def format_resume_output(content: str, fmt: str, now: Optional[datetime] = None) -> str:
    """Render generated markdown in the requested format.

    ``json`` wraps the content with a generation timestamp, ``plain_text``
    strips markdown, anything else returns the content unchanged.
    """
    if fmt == "json":
        generated_at = (now or datetime.now(timezone.utc)).isoformat()
        return json.dumps(
            {"resume": content, "generatedAt": generated_at, "format": "json"},
            indent=2,
            ensure_ascii=False,
        )
    if fmt == "plain_text":
        # Bullets first so "* item" is not read as italics
        content = re.sub(r"^[ \t]*[-*+][ \t]+", "• ", content, flags=re.MULTILINE)
        return strip_markdown(content)
    return content


def estimate_processing_time(resume_length: int, job_description_length: int) -> int:
    """Seconds a remote generation is expected to take.

    30 s base, plus 10 s per started 1000 resume characters and 5 s per
    started 500 job characters, capped at two minutes.
    """
    resume_factor = math.ceil(resume_length / 1000) * 10
    job_factor = math.ceil(job_description_length / 500) * 5
    return min(BASE_SECONDS + resume_factor + job_factor, MAX_SECONDS)
