"""
Prism Research Worker — Research API

Perplexity chat completions with the deep-research model.
One prompt in, generated text plus the list of source URLs out.
"""

import time
from dataclasses import dataclass, field

import httpx

from research_worker.config import Settings, log

PERPLEXITY_URL = "https://api.perplexity.ai/chat/completions"


@dataclass
class ResearchResult:
    content: str
    citations: list[str] = field(default_factory=list)


class ResearchError(Exception):
    pass


async def call_research(settings: Settings, prompt: str, job_id: str | None = None) -> ResearchResult:
    """
    Send a single research prompt to Perplexity.

    Deep research can run for many minutes, so the request has no timeout.

    Raises:
        ResearchError: On a non-success response. The message carries the status code.
    """
    log("INFO", "research call started", job_id=job_id, model=settings.research_model, prompt_length=len(prompt))
    start = time.perf_counter()

    async with httpx.AsyncClient(timeout=None) as client:
        response = await client.post(
            PERPLEXITY_URL,
            headers={
                "Authorization": f"Bearer {settings.perplexity_api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": settings.research_model,
                "messages": [{"role": "user", "content": prompt}],
            },
        )

    duration_ms = int((time.perf_counter() - start) * 1000)
    log("INFO", "research call responded", job_id=job_id, status_code=response.status_code, duration_ms=duration_ms)

    if response.is_error:
        raise ResearchError(f"Perplexity error {response.status_code}: {response.text}")

    data = response.json()
    return ResearchResult(
        content=_first_message_content(data),
        citations=list(data.get("citations") or []),
    )


def _first_message_content(data: dict) -> str:
    """Return choices[0].message.content, or "" when any level is missing."""
    choices = data.get("choices") or []
    if not choices:
        return ""
    message = choices[0].get("message") or {}
    return message.get("content") or ""


def merge_citations(*citation_lists: list[str]) -> list[str]:
    """
    Union several citation lists, dropping duplicate URLs.
    First-appearance order is kept.
    """
    return list(dict.fromkeys(url for urls in citation_lists for url in urls))
