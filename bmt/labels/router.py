"""Print and agent API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bmt.db.models import PrintJobStatus
from bmt.dependencies import CurrentSettings, DbSession
from bmt.labels.dispatcher import PrintDispatcher
from bmt.labels.errors import JobNotFoundError, SessionNotFoundError, TransportError
from bmt.labels.print_service import PrintService, get_print_service
from bmt.labels.schemas import (
    AgentHeartbeat,
    NextJobRequest,
    NextJobResponse,
    OkResponse,
    PrintAgentResponse,
    PrintJobComplete,
    PrintJobResponse,
    PrintRequest,
    PrintResponse,
)
from bmt.sessions.service import get_session_service

router = APIRouter()


def get_print_svc(db: DbSession) -> PrintService:
    """Get print service dependency."""
    return get_print_service(db)


def get_dispatcher(db: DbSession, settings: CurrentSettings) -> PrintDispatcher:
    """Get print dispatcher dependency."""
    return PrintDispatcher(settings, get_print_service(db), get_session_service(db))


# ============================================================================
# Printing
# ============================================================================


@router.post("/print", response_model=PrintResponse, response_model_exclude_none=True)
def print_label(
    data: PrintRequest,
    dispatcher: Annotated[PrintDispatcher, Depends(get_dispatcher)],
):
    """Print a session label, or queue it for a remote agent.

    Runs in the threadpool: lp and TCP printing block until the
    transport finishes.

    Args:
        data: Session reference plus optional target printer.
        dispatcher: Print dispatcher.

    Returns:
        PrintResponse: Status and mode of the transport used.

    Raises:
        HTTPException: 400 without a session, 5xx if the transport fails.
    """
    try:
        return dispatcher.dispatch(data)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except TransportError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"message": e.message, "mode": e.mode, "error": e.detail},
        ) from e


@router.get("/print/jobs", response_model=list[PrintJobResponse])
async def list_print_jobs(
    svc: Annotated[PrintService, Depends(get_print_svc)],
    job_status: PrintJobStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=500),
):
    """List print jobs, newest first.

    Args:
        svc: Print service.
        job_status: Filter by status.
        limit: Maximum jobs to return.

    Returns:
        list[PrintJobResponse]: Jobs.
    """
    return svc.list_jobs(status=job_status, limit=limit)


@router.get("/print/stats")
async def get_print_stats(svc: Annotated[PrintService, Depends(get_print_svc)]):
    """Get print job counts by status."""
    return svc.get_job_statistics()


@router.get("/print/jobs/{job_id}", response_model=PrintJobResponse)
async def get_print_job(
    job_id: str,
    svc: Annotated[PrintService, Depends(get_print_svc)],
):
    """Get a print job by ID.

    Raises:
        HTTPException: If job not found.
    """
    job = svc.get_job(job_id)
    if not job:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found",
        )
    return job


@router.post("/print/{job_id}/complete", response_model=OkResponse)
async def complete_print_job(
    job_id: str,
    data: PrintJobComplete,
    svc: Annotated[PrintService, Depends(get_print_svc)],
):
    """Record the outcome an agent reports for a job.

    Args:
        job_id: Job UUID.
        data: Success flag and error message.
        svc: Print service.

    Returns:
        OkResponse: Acknowledgement.

    Raises:
        HTTPException: If job not found.
    """
    try:
        svc.complete_job(job_id, success=data.success, error=data.error)
    except JobNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found") from e
    return OkResponse()


# ============================================================================
# Agent Endpoints
# ============================================================================


@router.post("/agents/heartbeat", response_model=OkResponse)
async def agent_heartbeat(
    data: AgentHeartbeat,
    svc: Annotated[PrintService, Depends(get_print_svc)],
):
    """Register an agent's presence.

    Raises:
        HTTPException: If printerId is missing.
    """
    if not data.printer_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="printerId required",
        )
    svc.record_heartbeat(data.printer_id, data.agent_version, data.capabilities)
    return OkResponse()


@router.post("/agents/next-job", response_model=NextJobResponse)
async def agent_next_job(
    data: NextJobRequest,
    svc: Annotated[PrintService, Depends(get_print_svc)],
):
    """Claim the oldest job the agent may print.

    Jobs targeted at the agent come first, then unassigned jobs. An agent
    without a printerId only receives unassigned jobs.

    Returns:
        NextJobResponse: Claimed job or null.
    """
    job = svc.claim_next_job(data.printer_id)
    return NextJobResponse(job=PrintJobResponse.model_validate(job) if job else None)


@router.get("/agents", response_model=list[PrintAgentResponse])
async def list_agents(svc: Annotated[PrintService, Depends(get_print_svc)]):
    """List known agents with their online state."""
    return [
        PrintAgentResponse(
            printer_id=a.printer_id,
            last_seen=a.last_seen,
            agent_version=a.agent_version,
            capabilities=a.capabilities,
            is_online=svc.is_agent_online(a),
        )
        for a in svc.list_agents()
    ]
