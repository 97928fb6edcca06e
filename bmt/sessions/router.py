"""Sessions API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from bmt.dependencies import DbSession
from bmt.sessions.schemas import (
    SessionCreate,
    SessionListResponse,
    SessionResponse,
    SessionUpdate,
)
from bmt.sessions.service import SessionService, get_session_service

router = APIRouter()


def get_service(db: DbSession) -> SessionService:
    """Get session service dependency."""
    return get_session_service(db)


@router.get("", response_model=SessionListResponse)
async def list_sessions(service: Annotated[SessionService, Depends(get_service)]):
    """List sessions, newest first, with the total volume."""
    sessions = service.list_sessions()
    return SessionListResponse(
        sessions=[SessionResponse.model_validate(s) for s in sessions],
        total=sum(s.amount_oz for s in sessions),
    )


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    data: SessionCreate,
    service: Annotated[SessionService, Depends(get_service)],
):
    """Log a new session.

    Args:
        data: Amount in ounces and optional notes.
        service: Session service.

    Returns:
        SessionResponse: Created session with derived use-by dates.
    """
    return service.create_session(data)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    service: Annotated[SessionService, Depends(get_service)],
):
    """Get a session by ID.

    Raises:
        HTTPException: If session not found.
    """
    session = service.get_session(session_id)
    if not session:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return session


@router.patch("/{session_id}", response_model=SessionResponse)
async def update_session(
    session_id: str,
    data: SessionUpdate,
    service: Annotated[SessionService, Depends(get_service)],
):
    """Edit a session's amount or notes.

    Raises:
        HTTPException: If session not found.
    """
    session = service.update_session(session_id, data)
    if not session:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return session


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    service: Annotated[SessionService, Depends(get_service)],
):
    """Delete a session. Queued print jobs keep their own copy.

    Raises:
        HTTPException: If session not found.
    """
    if not service.delete_session(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
