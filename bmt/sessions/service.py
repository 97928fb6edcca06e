"""Session service layer."""

import calendar
import threading
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from bmt.db.models import PumpSession
from bmt.sessions.schemas import SessionCreate, SessionUpdate

FRIDGE_DAYS = 4
FREEZER_MONTHS = 6

# Edits and deletes are read-modify-write cycles on a stored session
_store_lock = threading.Lock()


def add_months(dt: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length.

    Args:
        dt: Start datetime.
        months: Months to add.

    Returns:
        datetime: Shifted datetime.
    """
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def _isoformat(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SessionService:
    """Service class for session operations."""

    def __init__(self, db: Session):
        """Initialize session service.

        Args:
            db: Database session.
        """
        self.db = db

    def create_session(self, data: SessionCreate, now: datetime | None = None) -> PumpSession:
        """Log a session and derive its use-by dates.

        Args:
            data: Session creation data.
            now: Session time (defaults to the current UTC time).

        Returns:
            PumpSession: Created session.
        """
        timestamp = now or datetime.now(UTC)
        session = PumpSession(
            timestamp=_isoformat(timestamp),
            amount_oz=data.amount,
            notes=data.notes,
            use_by_fridge=_isoformat(timestamp + timedelta(days=FRIDGE_DAYS)),
            use_by_frozen=_isoformat(add_months(timestamp, FREEZER_MONTHS)),
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        return session

    def get_session(self, session_id: str) -> PumpSession | None:
        """Get a session by ID.

        Args:
            session_id: Session UUID.

        Returns:
            PumpSession | None: Session if found.
        """
        return self.db.get(PumpSession, session_id)

    def list_sessions(self) -> list[PumpSession]:
        """List sessions, newest first."""
        return self.db.query(PumpSession).order_by(PumpSession.timestamp.desc()).all()

    def update_session(self, session_id: str, data: SessionUpdate) -> PumpSession | None:
        """Edit the amount or notes of a session.

        Jobs already queued keep the snapshot taken when they were created.

        Args:
            session_id: Session UUID.
            data: Fields to change; notes may be set to null to clear them.

        Returns:
            PumpSession | None: Updated session if found.
        """
        with _store_lock:
            session = self.get_session(session_id)
            if not session:
                return None

            if data.amount_oz is not None:
                session.amount_oz = data.amount_oz
            if "notes" in data.model_fields_set:
                session.notes = data.notes

            self.db.commit()
            self.db.refresh(session)
        return session

    def delete_session(self, session_id: str) -> bool:
        """Delete a session.

        Args:
            session_id: Session UUID.

        Returns:
            bool: True if deleted, False if not found.
        """
        with _store_lock:
            session = self.get_session(session_id)
            if not session:
                return False

            self.db.delete(session)
            self.db.commit()
        return True


def get_session_service(db: Session) -> SessionService:
    """Factory function for SessionService.

    Args:
        db: Database session.

    Returns:
        SessionService: Session service instance.
    """
    return SessionService(db)
