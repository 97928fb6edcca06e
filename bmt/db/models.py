"""SQLAlchemy database models."""

import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import JSON, DateTime, Enum, Float, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string for primary keys.

    Returns:
        str: UUID as 36-character string.
    """
    return str(uuid4())


class PrintJobStatus(str, enum.Enum):
    """Print job status enumeration."""

    QUEUED = "queued"  # Waiting for an agent to pick up
    CLAIMED = "claimed"  # An agent has claimed the job
    DONE = "done"  # Agent reported a successful print
    FAILED = "failed"  # Agent reported a print failure


class PumpSession(Base):
    """A logged pumping session.

    Attributes:
        id: Primary key UUID.
        timestamp: When the session happened (ISO-8601, UTC).
        amount_oz: Volume in fluid ounces.
        notes: Optional free text.
        use_by_fridge: Refrigerated expiry (ISO-8601).
        use_by_frozen: Frozen expiry (ISO-8601).
    """

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    timestamp: Mapped[str] = mapped_column(String(40), nullable=False)
    amount_oz: Mapped[float] = mapped_column(Float, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    use_by_fridge: Mapped[str] = mapped_column(String(40), nullable=False)
    use_by_frozen: Mapped[str] = mapped_column(String(40), nullable=False)

    def to_dict(self) -> dict:
        """Return the session fields as a plain dict."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "amount_oz": self.amount_oz,
            "notes": self.notes,
            "use_by_fridge": self.use_by_fridge,
            "use_by_frozen": self.use_by_frozen,
        }


class PrintAgent(Base):
    """A remote print agent, upserted on every heartbeat.

    Attributes:
        printer_id: Agent identity chosen by the agent itself.
        last_seen: Time of the most recent heartbeat.
        agent_version: Free-form version string reported by the agent.
        capabilities: Free-form capability descriptor (any JSON value).
    """

    __tablename__ = "print_agents"

    printer_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    last_seen: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    agent_version: Mapped[str | None] = mapped_column(String(50), nullable=True)
    capabilities: Mapped[dict | None] = mapped_column(JSON, nullable=True)


class PrintJob(Base):
    """Print job queued for a remote agent.

    Jobs are never deleted; the table doubles as a log of print attempts.

    Attributes:
        id: Primary key UUID.
        printer_id: Target agent, or None when any agent may claim it.
        status: queued -> claimed -> done | failed.
        session: Snapshot of the session fields taken at enqueue time.
        created_at: Enqueue timestamp (FIFO key).
        claimed_at: When an agent claimed the job.
        finished_at: When the agent reported completion.
        error: Failure message, set only when status is failed.
    """

    __tablename__ = "print_jobs"
    __table_args__ = (
        Index("ix_print_jobs_status", "status"),
        Index("ix_print_jobs_printer_id", "printer_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    printer_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[PrintJobStatus] = mapped_column(
        Enum(PrintJobStatus, values_callable=lambda x: [e.value for e in x]),
        default=PrintJobStatus.QUEUED,
    )
    session: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    claimed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
