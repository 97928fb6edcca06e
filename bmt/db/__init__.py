"""Database module."""

from bmt.db.database import SessionLocal, engine, get_db, init_db
from bmt.db.models import Base, PrintAgent, PrintJob, PrintJobStatus, PumpSession

__all__ = [
    "SessionLocal",
    "engine",
    "get_db",
    "init_db",
    "Base",
    "PrintAgent",
    "PrintJob",
    "PrintJobStatus",
    "PumpSession",
]
