"""Resume-specific cache accessors with fixed TTLs and tiers."""

from __future__ import annotations

from typing import Any, Optional

from futureresume.cache.store import Cache, StorageTier

RESUME_TTL = 30 * 60.0
JOB_ANALYSIS_TTL = 60 * 60.0
COMPANY_INFO_TTL = 24 * 60 * 60.0
TEMPLATE_TTL = 7 * 24 * 60 * 60.0


class ResumeCache:
    """Typed facade over a shared Cache.

    Resumes and job analyses live in memory; company info and templates are
    persisted so they survive restarts. Company names are case-insensitive.
    """

    def __init__(self, cache: Cache) -> None:
        self._cache = cache

    def set_resume(self, resume_hash: str, resume: str) -> bool:
        return self._cache.set(f"resume:{resume_hash}", resume, ttl=RESUME_TTL)

    def get_resume(self, resume_hash: str) -> Optional[str]:
        return self._cache.get(f"resume:{resume_hash}")

    def set_job_analysis(self, job_hash: str, analysis: Any) -> bool:
        return self._cache.set(f"job-analysis:{job_hash}", analysis, ttl=JOB_ANALYSIS_TTL)

    def get_job_analysis(self, job_hash: str) -> Optional[Any]:
        return self._cache.get(f"job-analysis:{job_hash}")

    def set_company_info(self, company_name: str, info: Any) -> bool:
        return self._cache.set(
            f"company:{company_name.lower()}",
            info,
            ttl=COMPANY_INFO_TTL,
            tier=StorageTier.PERSISTENT,
        )

    def get_company_info(self, company_name: str) -> Optional[Any]:
        return self._cache.get(f"company:{company_name.lower()}", tier=StorageTier.PERSISTENT)

    def set_template(self, template_id: str, template: Any) -> bool:
        return self._cache.set(
            f"template:{template_id}",
            template,
            ttl=TEMPLATE_TTL,
            tier=StorageTier.PERSISTENT,
        )

    def get_template(self, template_id: str) -> Optional[Any]:
        return self._cache.get(f"template:{template_id}", tier=StorageTier.PERSISTENT)
