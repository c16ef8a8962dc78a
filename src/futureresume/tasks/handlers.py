"""Default task bodies, one per TaskKind.

Each handler takes the task payload (a mapping) and its TaskContext, and
checkpoints between phases so cancellation is observed promptly.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, List, Mapping

from futureresume.analysis import (
    AtsScore,
    ContentOptimization,
    ResumeAnalysis,
    calculate_ats_score,
    calculate_matching_score,
    extract_keywords,
    generate_recommendations,
    improve_formatting,
    keyword_improvements,
)
from futureresume.tasks.models import TaskContext, TaskKind

TaskHandler = Callable[[Mapping[str, Any], TaskContext], Awaitable[Any]]


async def run_resume_analysis(payload: Mapping[str, Any], ctx: TaskContext) -> ResumeAnalysis:
    """Keyword match between resume and job description, with recommendations.

    Payload: ``resume_text``, ``job_description``.
    """
    ctx.report_progress(10)
    await ctx.checkpoint()

    resume_text = payload["resume_text"]
    job_description = payload["job_description"]
    ctx.report_progress(30)

    job_keywords = extract_keywords(job_description)
    ctx.report_progress(50)
    await ctx.checkpoint()

    resume_keywords = extract_keywords(resume_text)
    ctx.report_progress(70)
    await ctx.checkpoint()

    matching_score = calculate_matching_score(job_keywords, resume_keywords)
    ctx.report_progress(90)

    recommendations = generate_recommendations(job_keywords, resume_keywords)
    ctx.report_progress(100)

    return ResumeAnalysis(
        matching_score=matching_score,
        job_keywords=job_keywords[:20],
        resume_keywords=resume_keywords[:20],
        recommendations=recommendations,
    )


async def run_keyword_extraction(payload: Mapping[str, Any], ctx: TaskContext) -> List[str]:
    await ctx.checkpoint()
    return extract_keywords(payload["text"])


async def run_content_optimization(
    payload: Mapping[str, Any], ctx: TaskContext
) -> ContentOptimization:
    """Payload: ``content``, ``target_keywords``."""
    ctx.report_progress(20)
    content = payload["content"]
    target_keywords = list(payload.get("target_keywords", []))

    await ctx.checkpoint()
    ctx.report_progress(50)

    improvements = keyword_improvements(content, target_keywords)
    ctx.report_progress(80)
    await ctx.checkpoint()

    optimized = improve_formatting(content)
    ctx.report_progress(100)
    return ContentOptimization(optimized_content=optimized, improvements=improvements)


async def run_ats_scoring(payload: Mapping[str, Any], ctx: TaskContext) -> AtsScore:
    await ctx.checkpoint()
    return calculate_ats_score(payload["resume_text"], payload["job_description"])


DEFAULT_HANDLERS: Dict[TaskKind, TaskHandler] = {
    TaskKind.RESUME_ANALYSIS: run_resume_analysis,
    TaskKind.KEYWORD_EXTRACTION: run_keyword_extraction,
    TaskKind.CONTENT_OPTIMIZATION: run_content_optimization,
    TaskKind.ATS_SCORING: run_ats_scoring,
}
