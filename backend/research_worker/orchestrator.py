"""
Prism Research Worker — Job Orchestration

Drives one research job from dispatch to a terminal status:
fetch job → research phase(s) → merge → optional summarization → complete.
Every milestone is written back to the job store. Any failure outside the
summarization step marks the job failed.
"""

import time
from datetime import datetime, timezone

from research_worker import job_store, llm, prompts, research
from research_worker.config import ENGINE_NAME, Settings, generate_error_code, log, utc_now_iso
from research_worker.models import TERMINAL_STATUSES, Job
from research_worker.research import ResearchResult


async def run_research_job(settings: Settings, job_id: str) -> None:
    """
    Run one job to completion. Never raises.

    This is the single error boundary for everything after the dispatch
    acknowledgment.
    """
    start_ms = time.perf_counter()
    log("INFO", "pipeline started", job_id=job_id, pipeline=settings.research_mode)

    try:
        record = await job_store.get_job(settings, job_id)
        if not record:
            log("ERROR", "job not found", job_id=job_id)
            return

        job = Job.model_validate(record)
        if job.status in TERMINAL_STATUSES:
            log("WARN", "job already finished, ignoring dispatch", job_id=job_id, status=job.status)
            return

        if settings.research_mode == "single":
            await _run_single_phase(settings, job_id, job)
        else:
            await _run_dual_phase(settings, job_id, job)

        log(
            "INFO",
            "pipeline completed",
            job_id=job_id,
            pipeline=settings.research_mode,
            duration_ms=int((time.perf_counter() - start_ms) * 1000),
            total_elapsed_s=_seconds_since(job.created_at),
        )

    except Exception as e:
        code = generate_error_code()
        log("ERROR", "job failed", job_id=job_id, pipeline=settings.research_mode, error=str(e), error_code=code)
        try:
            await job_store.update_job(settings, job_id, {
                "status": "failed",
                "error_message": str(e),
                "completed_at": utc_now_iso(),
            })
        except Exception as report_error:
            log("ERROR", "failed to record job failure", job_id=job_id, error=str(report_error), error_code=code)


# -----------------------------------------------------------------------------
# Pipeline: Single phase
# -----------------------------------------------------------------------------


async def _run_single_phase(settings: Settings, job_id: str, job: Job) -> None:
    log("INFO", "starting research", job_id=job_id, product=job.product_name)

    await job_store.update_job(settings, job_id, {
        "status": "running",
        "progress": 10,
        "stage_message": "Starting deep research...",
        "started_at": utc_now_iso(),
    })

    prompt = prompts.build_prompt(
        prompts.RESEARCH_PROMPT, job.product_name, job.niche, job.product_description
    )

    await job_store.update_job(settings, job_id, {
        "progress": 25,
        "stage_message": "Searching Reddit, forums, reviews, communities...",
    })

    result = await research.call_research(settings, prompt, job_id=job_id)
    citations = research.merge_citations(result.citations)
    log("INFO", "research complete", job_id=job_id, citations=len(citations), chars=len(result.content))

    await job_store.update_job(settings, job_id, {
        "progress": 70,
        "stage_message": "Research complete. Processing results...",
        "raw_research": result.content,
        "citations": citations,
    })

    parsed_research = await llm.summarize_research(settings, result.content, job_id=job_id)

    await job_store.update_job(settings, job_id, {
        "status": "completed",
        "progress": 100,
        "stage_message": "Research complete!",
        "parsed_research": parsed_research,
        "completed_at": utc_now_iso(),
    })


# -----------------------------------------------------------------------------
# Pipeline: Dual phase
# -----------------------------------------------------------------------------


async def _run_dual_phase(settings: Settings, job_id: str, job: Job) -> None:
    log("INFO", "starting dual-phase research", job_id=job_id, product=job.product_name)

    await job_store.update_job(settings, job_id, {
        "status": "running",
        "progress": 5,
        "stage_message": f"Initializing {ENGINE_NAME}...",
        "started_at": utc_now_iso(),
    })

    # Phase 1: emotional / behavioral research
    await job_store.update_job(settings, job_id, {
        "progress": 10,
        "stage_message": "Phase 1: Extracting emotional drivers, pain points, and language patterns...",
    })
    phase1 = await _run_phase(settings, job_id, job, prompts.PHASE_1_PROMPT, phase=1)

    await job_store.update_job(settings, job_id, {
        "progress": 45,
        "stage_message": "Phase 1 complete. Starting Phase 2: Demographic profiling...",
    })

    # Phase 2: demographic / psychographic profiling
    await job_store.update_job(settings, job_id, {
        "progress": 50,
        "stage_message": "Phase 2: Mapping demographics and psychographics to each segment...",
    })
    phase2 = await _run_phase(settings, job_id, job, prompts.PHASE_2_PROMPT, phase=2)

    await job_store.update_job(settings, job_id, {
        "progress": 85,
        "stage_message": "Combining research phases and structuring insights...",
    })

    citations = research.merge_citations(phase1.citations, phase2.citations)
    combined = build_combined_report(job, phase1, phase2, citations)
    log("INFO", "combined research", job_id=job_id, citations=len(citations), chars=len(combined))

    await job_store.update_job(settings, job_id, {
        "progress": 95,
        "stage_message": "Finalizing research package...",
        "raw_research": combined,
        "citations": citations,
    })

    parsed_research = await llm.summarize_research(
        settings, combined, job_id=job_id, total_citations=len(citations)
    )

    await job_store.update_job(settings, job_id, {
        "status": "completed",
        "progress": 100,
        "stage_message": f"Prism Intelligence complete! {len(citations)} sources analyzed.",
        "parsed_research": parsed_research,
        "completed_at": utc_now_iso(),
    })


async def _run_phase(settings: Settings, job_id: str, job: Job, template: str, phase: int) -> ResearchResult:
    prompt = prompts.build_prompt(template, job.product_name, job.niche, job.product_description)
    start = time.perf_counter()
    result = await research.call_research(settings, prompt, job_id=job_id)
    log(
        "INFO",
        "research phase complete",
        job_id=job_id,
        phase=phase,
        citations=len(result.citations),
        chars=len(result.content),
        duration_ms=int((time.perf_counter() - start) * 1000),
    )
    return result


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def build_combined_report(
    job: Job,
    phase1: ResearchResult,
    phase2: ResearchResult,
    citations: list[str],
) -> str:
    """Render both phases and the merged citation list as one markdown report."""
    numbered = "\n".join(f"{i}. {url}" for i, url in enumerate(citations, start=1))
    return f"""
# PRISM INTELLIGENCE ENGINE - COMPLETE MARKET RESEARCH

## Research Summary
- **Product:** {job.product_name}
- **Niche:** {job.niche or 'Not specified'}
- **Total Sources Analyzed:** {len(citations)}
- **Phase 1 (Behavioral):** {len(phase1.citations)} sources
- **Phase 2 (Demographic):** {len(phase2.citations)} sources

---

# PHASE 1: EMOTIONAL & BEHAVIORAL RESEARCH

{phase1.content}

---

# PHASE 2: DEMOGRAPHIC & PSYCHOGRAPHIC PROFILES

{phase2.content}

---

## All Citations ({len(citations)} sources)

{numbered}
"""


def _seconds_since(iso_timestamp: str | None) -> float | None:
    """Elapsed seconds since an ISO timestamp from the store, or None if unparsable."""
    if not iso_timestamp:
        return None
    try:
        then = datetime.fromisoformat(iso_timestamp.replace("Z", "+00:00"))
    except ValueError:
        return None
    if then.tzinfo is None:
        then = then.replace(tzinfo=timezone.utc)
    return round((datetime.now(timezone.utc) - then).total_seconds(), 1)
