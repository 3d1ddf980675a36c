"""
Single source of truth for all Pydantic models (requests, responses, job records).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

TERMINAL_STATUSES: tuple[str, ...] = ("completed", "failed")


# -----------------------------------------------------------------------------
# Request / Response Models
# -----------------------------------------------------------------------------


class ProcessResearchRequest(BaseModel):
    job_id: str = Field(..., min_length=1, description="Id of a research job already created in the job store")


class ProcessResearchResponse(BaseModel):
    received: bool = True
    job_id: str


class HealthResponse(BaseModel):
    status: str = "ok"
    engine: str
    version: str
    research_mode: str
    timestamp: str


class ServiceInfo(BaseModel):
    service: str
    description: str
    version: str
    endpoints: list[str]


# -----------------------------------------------------------------------------
# Job Store Records
# -----------------------------------------------------------------------------


class Job(BaseModel):
    """A research job as returned by the job store.

    Only the fields the worker reads are declared; anything else the store
    sends along is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    product_name: str
    product_description: Optional[str] = None
    niche: Optional[str] = None
    status: Optional[str] = None  # pending | running | completed | failed
    progress: Optional[int] = None
    created_at: Optional[str] = None

