"""
Prism Research Worker — Job Store Module Unit Tests

Tests for job_store.py: request shape, shared-secret header, not-found,
fatal fetch errors and log-only update errors. All HTTP calls are mocked.
"""

import httpx
import pytest

from research_worker.job_store import (
    GET_JOB_PATH,
    UPDATE_JOB_PATH,
    JobStoreError,
    get_job,
    update_job,
)


class TestGetJob:
    """Tests for get_job."""

    @pytest.mark.asyncio
    async def test_returns_job(self, settings, mock_httpx, sample_job):
        _, post = mock_httpx
        post.return_value = httpx.Response(200, json={"job": sample_job})

        job = await get_job(settings, "job-1")

        assert job == sample_job

    @pytest.mark.asyncio
    async def test_posts_job_id_with_secret(self, settings, mock_httpx, sample_job):
        _, post = mock_httpx
        post.return_value = httpx.Response(200, json={"job": sample_job})

        await get_job(settings, "job-1")

        args, kwargs = post.call_args
        assert args[0] == settings.job_store_url + GET_JOB_PATH
        assert kwargs["json"] == {"job_id": "job-1"}
        assert kwargs["headers"]["x-worker-secret"] == settings.worker_secret

    @pytest.mark.asyncio
    async def test_trailing_slash_in_base_url(self, mock_httpx, sample_job):
        from tests.conftest import make_settings

        _, post = mock_httpx
        post.return_value = httpx.Response(200, json={"job": sample_job})
        settings = make_settings(job_store_url="https://store.test/functions/v1/")

        await get_job(settings, "job-1")

        assert post.call_args.args[0] == "https://store.test/functions/v1/get-research-job-internal"

    @pytest.mark.asyncio
    async def test_null_job_returns_none(self, settings, mock_httpx):
        _, post = mock_httpx
        post.return_value = httpx.Response(200, json={"job": None})

        assert await get_job(settings, "missing") is None

    @pytest.mark.asyncio
    async def test_missing_job_key_returns_none(self, settings, mock_httpx):
        _, post = mock_httpx
        post.return_value = httpx.Response(200, json={})

        assert await get_job(settings, "missing") is None

    @pytest.mark.asyncio
    async def test_error_status_raises(self, settings, mock_httpx):
        _, post = mock_httpx
        post.return_value = httpx.Response(401, json={"error": "bad secret"})

        with pytest.raises(JobStoreError, match="Failed to get job: 401"):
            await get_job(settings, "job-1")


class TestUpdateJob:
    """Tests for update_job."""

    @pytest.mark.asyncio
    async def test_posts_partial_update(self, settings, mock_httpx):
        _, post = mock_httpx
        post.return_value = httpx.Response(200, json={"ok": True})

        ok = await update_job(settings, "job-1", {"progress": 25})

        assert ok is True
        args, kwargs = post.call_args
        assert args[0] == settings.job_store_url + UPDATE_JOB_PATH
        assert kwargs["json"] == {"job_id": "job-1", "updates": {"progress": 25}}
        assert kwargs["headers"]["x-worker-secret"] == settings.worker_secret

    @pytest.mark.asyncio
    async def test_error_status_is_logged_not_raised(self, settings, mock_httpx, capsys):
        _, post = mock_httpx
        post.return_value = httpx.Response(500, text="db down")

        ok = await update_job(settings, "job-1", {"status": "running"})

        assert ok is False
        out = capsys.readouterr().out
        assert "job update failed" in out
        assert "status_code=500" in out
        assert settings.worker_secret not in out

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, settings, mock_httpx):
        _, post = mock_httpx
        post.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(httpx.ConnectError):
            await update_job(settings, "job-1", {"progress": 10})
