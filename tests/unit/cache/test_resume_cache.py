"""Unit tests for resume-specific cache accessors."""

import pytest

from futureresume.cache import Cache, InMemoryKeyValueStore, ResumeCache, StorageTier
from futureresume.cache.namespaces import (
    COMPANY_INFO_TTL,
    JOB_ANALYSIS_TTL,
    RESUME_TTL,
    TEMPLATE_TTL,
)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def cache(store, clock):
    return Cache(store=store, clock=clock)


@pytest.fixture
def resume_cache(cache):
    return ResumeCache(cache)


class TestResumeCache:
    def test_resume_lives_in_memory_for_thirty_minutes(self, resume_cache, cache, store, clock):
        assert resume_cache.set_resume("abc", "# Resume")
        assert store.length == 0
        assert cache.get("resume:abc") == "# Resume"

        clock.advance(RESUME_TTL)
        assert resume_cache.get_resume("abc") == "# Resume"
        clock.advance(1)
        assert resume_cache.get_resume("abc") is None

    def test_job_analysis_ttl(self, resume_cache, clock):
        resume_cache.set_job_analysis("job1", {"keywords": ["python"]})
        clock.advance(JOB_ANALYSIS_TTL + 1)
        assert resume_cache.get_job_analysis("job1") is None

    def test_company_info_is_persistent_and_case_insensitive(self, resume_cache, store, clock):
        resume_cache.set_company_info("Acme Corp", {"size": 500})

        assert store.get_item("resume-app-cache:company:acme corp") is not None
        assert resume_cache.get_company_info("ACME CORP") == {"size": 500}

        clock.advance(COMPANY_INFO_TTL + 1)
        assert resume_cache.get_company_info("acme corp") is None

    def test_template_is_persistent(self, resume_cache, cache, clock):
        resume_cache.set_template("modern", {"columns": 2})
        assert cache.get("template:modern", tier=StorageTier.PERSISTENT) == {"columns": 2}

        clock.advance(TEMPLATE_TTL - 1)
        assert resume_cache.get_template("modern") == {"columns": 2}

    def test_unknown_entries_miss(self, resume_cache):
        assert resume_cache.get_resume("nope") is None
        assert resume_cache.get_template("nope") is None
