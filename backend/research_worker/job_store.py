"""
Prism Research Worker — Job Store Operations

The job store is owned by an external service that exposes two edge
functions: fetch a job by id and apply a partial update to a job by id.
Both are authenticated with the shared worker secret.
"""

from typing import Any, Optional

import httpx

from research_worker.config import Settings, generate_error_code, log

GET_JOB_PATH = "/get-research-job-internal"
UPDATE_JOB_PATH = "/update-research-job"


class JobStoreError(Exception):
    pass


def _headers(settings: Settings) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "x-worker-secret": settings.worker_secret,
    }


def _url(settings: Settings, path: str) -> str:
    return settings.job_store_url.rstrip("/") + path


async def get_job(settings: Settings, job_id: str) -> Optional[dict]:
    """
    Fetch a research job by id.

    Returns the job record as a dict, or None if the store has no such job.

    Raises:
        JobStoreError: If the store answers with a non-success status.
    """
    async with httpx.AsyncClient(timeout=settings.job_store_timeout_seconds) as client:
        response = await client.post(
            _url(settings, GET_JOB_PATH),
            headers=_headers(settings),
            json={"job_id": job_id},
        )

    if response.is_error:
        raise JobStoreError(f"Failed to get job: {response.status_code}")

    data = response.json()
    return data.get("job")


async def update_job(settings: Settings, job_id: str, updates: dict[str, Any]) -> bool:
    """
    Apply a partial update to a research job.

    A non-success response is logged and swallowed so a flaky progress write
    never stops the research itself. Transport errors still propagate.

    Returns:
        True if the store accepted the update.
    """
    async with httpx.AsyncClient(timeout=settings.job_store_timeout_seconds) as client:
        response = await client.post(
            _url(settings, UPDATE_JOB_PATH),
            headers=_headers(settings),
            json={"job_id": job_id, "updates": updates},
        )

    if response.is_error:
        code = generate_error_code()
        log(
            "ERROR",
            "job update failed",
            job_id=job_id,
            status_code=response.status_code,
            body=response.text[:300],
            fields=",".join(sorted(updates)),
            error_code=code,
        )
        return False
    return True
