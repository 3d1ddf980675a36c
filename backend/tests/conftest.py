"""
Prism Research Worker — Shared Test Fixtures

Provides mocked versions of external services (job store, research API,
summarizer LLM) for deterministic, fast unit tests.
"""

import asyncio
import os
import sys
from dataclasses import dataclass
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import AsyncClient, ASGITransport

# Ensure research_worker is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))


# -----------------------------------------------------------------------------
# Environment Setup (before importing research_worker modules)
# -----------------------------------------------------------------------------

os.environ.setdefault("JOB_STORE_URL", "https://store.test/functions/v1")
os.environ.setdefault("WORKER_SECRET", "test-worker-secret")
os.environ.setdefault("PERPLEXITY_API_KEY", "test-perplexity-key")
os.environ.setdefault("SUMMARIZER_API_KEY", "test-summarizer-key")
os.environ.setdefault("ENVIRONMENT", "test")


# -----------------------------------------------------------------------------
# Mock Response Classes
# -----------------------------------------------------------------------------


@dataclass
class MockLLMMessage:
    """Mock message from LLM response."""
    content: str


@dataclass
class MockLLMChoice:
    """Mock choice from LLM response."""
    message: MockLLMMessage


@dataclass
class MockLLMUsage:
    """Mock usage stats from LLM response."""
    total_tokens: int = 100


@dataclass
class MockLLMResponse:
    """Mock LLM completion response."""
    choices: list[MockLLMChoice]
    usage: MockLLMUsage = None

    def __post_init__(self):
        if self.usage is None:
            self.usage = MockLLMUsage()


def create_mock_llm_response(content: str) -> MockLLMResponse:
    """Create a mock LLM response with given content."""
    return MockLLMResponse(
        choices=[MockLLMChoice(message=MockLLMMessage(content=content))]
    )


# -----------------------------------------------------------------------------
# Settings Fixtures
# -----------------------------------------------------------------------------


def make_settings(**overrides):
    """Build an explicit Settings object for tests."""
    from research_worker.config import Settings

    values = {
        "job_store_url": "https://store.test/functions/v1",
        "worker_secret": "test-worker-secret",
        "perplexity_api_key": "test-perplexity-key",
        "summarizer_api_key": "test-summarizer-key",
        "research_mode": "dual",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings():
    """Dual-phase settings with a summarizer key configured."""
    return make_settings()


@pytest.fixture
def single_settings():
    """Single-phase settings with a summarizer key configured."""
    return make_settings(research_mode="single")


# -----------------------------------------------------------------------------
# Job Store Mocking Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def sample_job() -> dict:
    return {
        "id": "job-1",
        "product_name": "Acme Widget",
        "product_description": "A foldable resistance trainer for small apartments.",
        "niche": "home fitness",
        "status": "pending",
        "progress": 0,
        "created_at": "2026-10-17T09:00:00+00:00",
    }


@pytest.fixture
def mock_job_store(monkeypatch, sample_job):
    """
    Mock job store operations with in-memory storage.

    Returns a dict with the stored jobs and every update call, in order,
    as (job_id, updates) tuples.
    """
    storage: dict[str, Any] = {
        "jobs": {sample_job["id"]: dict(sample_job)},
        "updates": [],
        "fetches": [],
    }

    async def mock_get_job(settings, job_id: str) -> Optional[dict]:
        storage["fetches"].append(job_id)
        job = storage["jobs"].get(job_id)
        return dict(job) if job else None

    async def mock_update_job(settings, job_id: str, updates: dict) -> bool:
        storage["updates"].append((job_id, dict(updates)))
        if job_id in storage["jobs"]:
            storage["jobs"][job_id].update(updates)
        return True

    monkeypatch.setattr("research_worker.job_store.get_job", AsyncMock(side_effect=mock_get_job))
    monkeypatch.setattr("research_worker.job_store.update_job", AsyncMock(side_effect=mock_update_job))
    return storage


# -----------------------------------------------------------------------------
# Research API Mocking Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def mock_research(monkeypatch):
    """
    Factory fixture to mock the research API with queued results.

    Usage:
        def test_example(mock_research):
            mock = mock_research(ResearchResult(content="...", citations=[...]))
    """
    def _create_mock(*results):
        queue = list(results)

        async def mock_call_research(settings, prompt: str, job_id: str | None = None):
            item = queue.pop(0)
            if isinstance(item, Exception):
                raise item
            return item

        mock = AsyncMock(side_effect=mock_call_research)
        monkeypatch.setattr("research_worker.research.call_research", mock)
        return mock

    return _create_mock


# -----------------------------------------------------------------------------
# LLM Mocking Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def mock_llm_with_content(monkeypatch):
    """
    Factory fixture to mock litellm.acompletion with a fixed text answer.

    Usage:
        def test_example(mock_llm_with_content):
            mock = mock_llm_with_content('{"key": "value"}')
    """
    def _create_mock(content: str):
        async def mock_acompletion(*args, **kwargs) -> MockLLMResponse:
            return create_mock_llm_response(content)

        mock = AsyncMock(side_effect=mock_acompletion)
        monkeypatch.setattr("litellm.acompletion", mock)
        return mock

    return _create_mock


@pytest.fixture
def mock_llm_failure(monkeypatch):
    """Mock the summarizer gateway answering with an error status."""
    async def mock_acompletion(*args, **kwargs):
        raise Exception("Error code: 502 - Bad Gateway")

    mock = AsyncMock(side_effect=mock_acompletion)
    monkeypatch.setattr("litellm.acompletion", mock)
    return mock


# -----------------------------------------------------------------------------
# HTTP Mocking Fixtures (outbound)
# -----------------------------------------------------------------------------


@pytest.fixture
def mock_httpx():
    """
    Patch httpx.AsyncClient so outbound POSTs hit an AsyncMock.

    Returns (client_class_mock, post_mock). Set post_mock.return_value to an
    httpx.Response to control the answer.
    """
    with patch("httpx.AsyncClient") as mock_client:
        mock_instance = MagicMock()
        mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
        mock_instance.__aexit__ = AsyncMock(return_value=None)
        mock_instance.post = AsyncMock()
        mock_client.return_value = mock_instance
        yield mock_client, mock_instance.post


# -----------------------------------------------------------------------------
# HTTP Client Fixtures (inbound)
# -----------------------------------------------------------------------------


@pytest.fixture
def app(settings):
    """A fresh app wired to the test settings."""
    from research_worker.main import create_app
    return create_app(settings)


@pytest.fixture
async def client(app):
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def wait_for_jobs() -> None:
    """Wait for every job dispatched by POST /process-research to finish."""
    from research_worker.api import research as research_api

    pending = list(research_api._running_jobs)
    if pending:
        await asyncio.gather(*pending)
