"""futureresume CLI Entry Point.

Commands:
    generate   Generate a tailored resume bundle (remote, or local fallback).
    analyze    Run resume analysis and ATS scoring through the task queue.
    estimate   Print the expected remote processing time.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional

import structlog
import typer

from futureresume.core.config import ConfigurationError, Settings, get_settings
from futureresume.core.error_reporting import AppError
from futureresume.core.exceptions import FutureResumeError, ValidationError
from futureresume.core.logging import configure_logging
from futureresume.generation import (
    GenerationRequest,
    GenerationResult,
    HostedGenerationClient,
    build_pipeline,
    estimate_processing_time,
)

log = structlog.get_logger()

app = typer.Typer(
    name="futureresume",
    help="futureresume - resilient resume generation",
    no_args_is_help=True,
)

_RESUME_OPTION = typer.Option(
    ..., "--resume", "-r", exists=True, dir_okay=False, readable=True, help="Resume text file"
)
_JOB_OPTION = typer.Option(
    ..., "--job", "-j", exists=True, dir_okay=False, readable=True, help="Job description file"
)


@app.callback()
def main(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to configuration file"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Override the configured log level"
    ),
) -> None:
    """futureresume CLI."""
    if config is not None and not config.exists():
        typer.echo(f"Error: Config file '{config}' not found", err=True)
        raise typer.Exit(code=1)

    try:
        settings = get_settings(force_reload=True, system_config_path=config)
    except ConfigurationError as e:
        typer.echo(f"Error loading config: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        configure_logging(log_level or settings.logging.level, settings.logging.format)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if config is not None:
        log.info("config_loaded", path=str(config))


def _abort(app_error: AppError) -> NoReturn:
    typer.echo(f"Error: {app_error.user_message}", err=True)
    if isinstance(app_error.original, ValidationError):
        for problem in app_error.original.errors:
            typer.echo(f"  - {problem}", err=True)
    raise typer.Exit(code=1)


async def _generate(settings: Settings, request: GenerationRequest, offline: bool) -> GenerationResult:
    remote = HostedGenerationClient(url=None, api_key=None) if offline else None
    async with build_pipeline(settings, remote=remote) as pipeline:
        try:
            return await pipeline.orchestrator.generate(request)
        except FutureResumeError as e:
            _abort(pipeline.error_reporter.handle(e, context={"command": "generate"}))


async def _analyze(settings: Settings, resume_text: str, job_text: str) -> Dict[str, Any]:
    results: Dict[str, Any] = {}
    errors: List[BaseException] = []

    async with build_pipeline(settings) as pipeline:
        queue = pipeline.task_queue
        queue.calculate_ats_score(
            resume_text,
            job_text,
            on_result=lambda r: results.__setitem__("ats", r.to_dict()),
            on_error=errors.append,
        )
        queue.analyze_resume(
            resume_text,
            job_text,
            on_result=lambda r: results.__setitem__("analysis", r.to_dict()),
            on_error=errors.append,
        )
        await queue.join()

        if errors:
            _abort(pipeline.error_reporter.handle(errors[0], context={"command": "analyze"}))

    return results


@app.command()
def generate(
    resume: Path = _RESUME_OPTION,
    job: Path = _JOB_OPTION,
    mode: str = typer.Option("concise", help="concise, detailed or executive"),
    voice: str = typer.Option("first-person", help="first-person or third-person"),
    output_format: str = typer.Option("markdown", "--format", help="markdown, plain_text or json"),
    include_table: bool = typer.Option(False, "--include-table", help="Add a skills table"),
    proofread: bool = typer.Option(False, "--proofread", help="Run the grammar check phase"),
    offline: bool = typer.Option(False, "--offline", help="Skip the remote service"),
) -> None:
    """Generate a resume bundle and print it as JSON."""
    request = GenerationRequest(
        resume_content=resume.read_text(encoding="utf-8"),
        job_description=job.read_text(encoding="utf-8"),
        mode=mode,
        voice=voice,
        format=output_format,
        include_table=include_table,
        proofread=proofread,
    )
    result = asyncio.run(_generate(get_settings(), request, offline))
    typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


@app.command()
def analyze(
    resume: Path = _RESUME_OPTION,
    job: Path = _JOB_OPTION,
) -> None:
    """Score a resume against a job description locally."""
    results = asyncio.run(
        _analyze(get_settings(), resume.read_text(encoding="utf-8"), job.read_text(encoding="utf-8"))
    )
    typer.echo(json.dumps(results, indent=2, ensure_ascii=False))


@app.command()
def estimate(
    resume: Path = _RESUME_OPTION,
    job: Path = _JOB_OPTION,
) -> None:
    """Print the estimated remote processing time."""
    seconds = estimate_processing_time(
        len(resume.read_text(encoding="utf-8")),
        len(job.read_text(encoding="utf-8")),
    )
    typer.echo(f"Estimated processing time: {seconds} seconds")


if __name__ == "__main__":
    app()
