"""Unit tests for the futureresume CLI."""

import json

import pytest
from typer.testing import CliRunner

from futureresume.cli import app

runner = CliRunner()


@pytest.fixture
def files(tmp_path, resume_text, job_text):
    """Resume, job description and an empty config file on disk."""
    resume = tmp_path / "resume.txt"
    resume.write_text(resume_text, encoding="utf-8")
    job = tmp_path / "job.txt"
    job.write_text(job_text, encoding="utf-8")
    config = tmp_path / "config.yaml"
    config.write_text("", encoding="utf-8")
    return {"resume": str(resume), "job": str(job), "config": str(config)}


def _invoke(files, *args):
    return runner.invoke(
        app,
        ["--config", files["config"], "--log-level", "CRITICAL", *args],
    )


class TestGenerateCommand:
    def test_offline_generation_prints_fallback_bundle(self, files):
        result = _invoke(files, "generate", "-r", files["resume"], "-j", files["job"], "--offline")

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["metadata"]["phase"] == "fallback"
        assert data["finalResume"].startswith("# Resume")
        assert len(data["interviewToolkit"]["skillGaps"]) == 3

    def test_options_are_forwarded(self, files):
        result = _invoke(
            files,
            "generate",
            "-r", files["resume"],
            "-j", files["job"],
            "--offline",
            "--voice", "third-person",
            "--include-table",
            "--proofread",
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert "The candidate brings" in data["finalResume"]
        assert "## Skills Match" in data["finalResume"]
        assert data["grammarScore"] == 75

    def test_invalid_mode_exits_with_user_message(self, files):
        result = _invoke(
            files, "generate", "-r", files["resume"], "-j", files["job"], "--offline", "--mode", "verbose"
        )

        assert result.exit_code == 1
        assert "Please check your resume content" in result.output
        assert "Resume mode is required" in result.output

    def test_missing_resume_file(self, files, tmp_path):
        result = _invoke(files, "generate", "-r", str(tmp_path / "nope.txt"), "-j", files["job"])
        assert result.exit_code != 0


class TestAnalyzeCommand:
    def test_prints_ats_and_analysis(self, files):
        result = _invoke(files, "analyze", "-r", files["resume"], "-j", files["job"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert set(data) == {"ats", "analysis"}
        assert 0 <= data["ats"]["score"] <= 100
        assert "python" in data["analysis"]["job_keywords"]


class TestEstimateCommand:
    def test_prints_estimate(self, files):
        result = _invoke(files, "estimate", "-r", files["resume"], "-j", files["job"])

        assert result.exit_code == 0
        assert "Estimated processing time: 45 seconds" in result.stdout


class TestGlobalOptions:
    def test_missing_config_file(self, files, tmp_path):
        result = runner.invoke(
            app, ["--config", str(tmp_path / "absent.yaml"), "estimate", "-r", files["resume"], "-j", files["job"]]
        )
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_invalid_config_file(self, files, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("cache:\n  prefix: 'a:b'\n", encoding="utf-8")
        result = runner.invoke(
            app, ["--config", str(bad), "estimate", "-r", files["resume"], "-j", files["job"]]
        )
        assert result.exit_code == 1
        assert "Error loading config" in result.output

    def test_invalid_log_level(self, files):
        result = runner.invoke(
            app,
            ["--config", files["config"], "--log-level", "LOUD", "estimate", "-r", files["resume"], "-j", files["job"]],
        )
        assert result.exit_code == 1
        assert "Unknown log level" in result.output

    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "generate" in result.output
