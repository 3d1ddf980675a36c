"""
Prism Research Worker — Research API (POST /process-research)

Acknowledges the dispatch immediately and runs the job in the background.
The caller never hears about the outcome on this channel; it polls the job
store instead.
"""

import asyncio

from fastapi import APIRouter, Request

from research_worker import orchestrator
from research_worker.config import log
from research_worker.models import ProcessResearchRequest, ProcessResearchResponse

router = APIRouter(tags=["research"])

# Strong references to in-flight jobs. The event loop only keeps weak
# references to tasks, and a job must outlive the request that started it.
_running_jobs: set[asyncio.Task] = set()


def dispatch_job(request: Request, job_id: str) -> asyncio.Task:
    """Spawn the orchestration for job_id without awaiting it."""
    settings = request.app.state.settings
    task = asyncio.create_task(
        orchestrator.run_research_job(settings, job_id),
        name=f"research-job-{job_id}",
    )
    _running_jobs.add(task)
    task.add_done_callback(_running_jobs.discard)
    return task


def running_job_count() -> int:
    return len(_running_jobs)


@router.post("/process-research", response_model=ProcessResearchResponse)
async def process_research(request: Request, payload: ProcessResearchRequest) -> ProcessResearchResponse:
    """
    POST /process-research

    Body: { "job_id": "..." }
    Returns: { "received": true, "job_id": "..." } before any work starts.
    """
    job_id = payload.job_id
    log("INFO", "research request received", job_id=job_id, running_jobs=running_job_count())
    dispatch_job(request, job_id)
    return ProcessResearchResponse(received=True, job_id=job_id)
