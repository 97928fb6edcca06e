"""Schemas for the print API.

Print and agent payloads use camelCase on the wire (printerId, jobId,
createdAt, ...); session snapshots keep their snake_case field names.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from bmt.db.models import PrintJobStatus
from bmt.labels.transports import DEFAULT_TCP_PORT


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================================
# Print Request Schemas
# ============================================================================


class SessionPayload(BaseModel):
    """Session sent inline with a print request."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    timestamp: str | None = None
    amount_oz: float = 0
    notes: str | None = None
    use_by_fridge: str | None = None
    use_by_frozen: str | None = None


class DirectTcpPrinter(BaseModel):
    """Network label printer reached over a raw TCP socket."""

    host: str | None = None
    port: int = Field(DEFAULT_TCP_PORT, ge=1, le=65535)

    @field_validator("port", mode="before")
    @classmethod
    def default_port(cls, v):
        """Treat a missing, null or zero port as the raw printing port."""
        return v or DEFAULT_TCP_PORT


class PrintRequest(CamelModel):
    """Print a session label.

    Either session_id must name a stored session or session must carry the
    fields inline.
    """

    session_id: str | None = None
    session: SessionPayload | None = None
    printer_id: str | None = None
    direct_tcp_printer: DirectTcpPrinter | None = None


class PrintResponse(CamelModel):
    """Outcome of a print request."""

    status: str = Field(..., description="'printed' or 'queued'")
    mode: str
    job_id: str | None = None
    printer_id: str | None = None
    host: str | None = None
    port: int | None = None


# ============================================================================
# Agent Schemas
# ============================================================================


class AgentHeartbeat(CamelModel):
    """Schema for agent heartbeat.

    agent_version and capabilities are free-form and stored as sent.
    """

    printer_id: str | None = None
    agent_version: Any = None
    capabilities: Any = None


class NextJobRequest(CamelModel):
    """Agent asking for its next job."""

    printer_id: str | None = None


class PrintJobComplete(CamelModel):
    """Agent reporting a job outcome."""

    success: bool = False
    error: str | None = None


class PrintJobResponse(CamelModel):
    """Schema for print job response."""

    id: str
    printer_id: str | None
    status: PrintJobStatus
    session: dict
    created_at: datetime
    claimed_at: datetime | None = None
    finished_at: datetime | None = None
    error: str | None = None


class NextJobResponse(BaseModel):
    """Claimed job, or null when nothing is waiting."""

    job: PrintJobResponse | None


class PrintAgentResponse(CamelModel):
    """Schema for print agent response."""

    printer_id: str
    last_seen: datetime
    agent_version: str | None = None
    capabilities: Any = None
    is_online: bool = Field(
        default=False, description="Whether agent has been seen in last 60 seconds"
    )


class OkResponse(BaseModel):
    """Plain acknowledgement."""

    ok: bool = True
