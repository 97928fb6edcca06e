"""Print job queue and agent registry service layer."""

import logging
import threading
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from bmt.db.models import PrintAgent, PrintJob, PrintJobStatus
from bmt.labels.errors import JobNotFoundError

logger = logging.getLogger(__name__)

# Serializes read-modify-write cycles on the queue within this process. The
# conditional UPDATE in claim_next_job covers writers in other processes.
_queue_lock = threading.Lock()

SNAPSHOT_FIELDS = ("id", "timestamp", "amount_oz", "notes", "use_by_fridge", "use_by_frozen")


def snapshot_session(session: dict) -> dict:
    """Copy the label fields of a session into a detached dict.

    Args:
        session: Session fields from the store or the request body.

    Returns:
        dict: Snapshot with amount_oz coerced to float and notes to str.
    """
    snapshot = {key: session.get(key) for key in SNAPSHOT_FIELDS}
    snapshot["amount_oz"] = float(snapshot["amount_oz"] or 0)
    snapshot["notes"] = snapshot["notes"] or ""
    return snapshot


class PrintService:
    """Service class for print job and agent operations."""

    # Agent is considered online if seen within this many seconds
    ONLINE_THRESHOLD_SECONDS = 60

    # Attempts before giving up when other writers keep winning the claim
    MAX_CLAIM_ATTEMPTS = 5

    def __init__(self, db: Session):
        """Initialize print service.

        Args:
            db: Database session.
        """
        self.db = db

    # ========================================================================
    # Agent Methods
    # ========================================================================

    def record_heartbeat(
        self,
        printer_id: str,
        agent_version: Any = None,
        capabilities: Any = None,
    ) -> PrintAgent:
        """Upsert an agent and stamp its last_seen time.

        Args:
            printer_id: Agent identity.
            agent_version: Version reported by the agent, stored as text.
            capabilities: Capability descriptor reported by the agent, stored as sent.

        Returns:
            PrintAgent: Stored agent.
        """
        with _queue_lock:
            agent = self.db.get(PrintAgent, printer_id)
            if agent is None:
                agent = PrintAgent(printer_id=printer_id)
                self.db.add(agent)
                logger.info(f"New agent registered: {printer_id}")
            agent.last_seen = datetime.utcnow()
            agent.agent_version = None if agent_version is None else str(agent_version)
            agent.capabilities = capabilities
            self.db.commit()
            self.db.refresh(agent)

        logger.debug(f"Heartbeat from {printer_id}")
        return agent

    def get_agent(self, printer_id: str) -> PrintAgent | None:
        """Get an agent by printer ID.

        Args:
            printer_id: Agent identity.

        Returns:
            PrintAgent | None: Agent if known.
        """
        return self.db.get(PrintAgent, printer_id)

    def list_agents(self) -> list[PrintAgent]:
        """List all known agents, most recently seen first.

        Returns:
            list[PrintAgent]: Agents.
        """
        return self.db.query(PrintAgent).order_by(PrintAgent.last_seen.desc()).all()

    def is_agent_online(self, agent: PrintAgent) -> bool:
        """Check if agent is considered online.

        Only reported to clients; stale agents are never evicted and their
        targeted jobs stay queued.

        Args:
            agent: Print agent.

        Returns:
            bool: True if online.
        """
        if not agent.last_seen:
            return False
        threshold = datetime.utcnow() - timedelta(seconds=self.ONLINE_THRESHOLD_SECONDS)
        return agent.last_seen > threshold

    # ========================================================================
    # Print Job Methods
    # ========================================================================

    def enqueue_job(self, session: dict, printer_id: str | None = None) -> PrintJob:
        """Create a queued print job from a session snapshot.

        Args:
            session: Session fields; copied, never referenced.
            printer_id: Target agent, None for any agent.

        Returns:
            PrintJob: Created job.
        """
        with _queue_lock:
            job = PrintJob(
                printer_id=printer_id or None,
                status=PrintJobStatus.QUEUED,
                session=snapshot_session(session),
                created_at=datetime.utcnow(),
            )
            self.db.add(job)
            self.db.commit()
            self.db.refresh(job)

        logger.info(f"Queued job {job.id} for {job.printer_id or 'any agent'}")
        return job

    def _next_queued_id(self, printer_id: str | None) -> str | None:
        """Pick the oldest queued job an agent may claim.

        Jobs targeted at the agent win over unassigned ones; an agent
        without an identity only sees unassigned jobs.
        """
        queued = self.db.query(PrintJob.id).filter(PrintJob.status == PrintJobStatus.QUEUED)
        oldest = (PrintJob.created_at.asc(), PrintJob.id.asc())

        if printer_id:
            row = queued.filter(PrintJob.printer_id == printer_id).order_by(*oldest).first()
            if row:
                return row.id

        row = queued.filter(PrintJob.printer_id.is_(None)).order_by(*oldest).first()
        return row.id if row else None

    def claim_next_job(self, printer_id: str | None = None) -> PrintJob | None:
        """Claim the next job for an agent.

        Args:
            printer_id: Requesting agent identity (None = unidentified).

        Returns:
            PrintJob | None: Claimed job, or None if nothing is claimable.
        """
        with _queue_lock:
            for _ in range(self.MAX_CLAIM_ATTEMPTS):
                job_id = self._next_queued_id(printer_id)
                if job_id is None:
                    self.db.rollback()
                    return None

                # Only the writer that still sees the job queued wins it
                result = self.db.execute(
                    update(PrintJob)
                    .where(PrintJob.id == job_id, PrintJob.status == PrintJobStatus.QUEUED)
                    .values(status=PrintJobStatus.CLAIMED, claimed_at=datetime.utcnow())
                )
                self.db.commit()
                if result.rowcount == 1:
                    job = self.db.get(PrintJob, job_id, populate_existing=True)
                    logger.info(f"Job {job_id} claimed by {printer_id or 'unidentified agent'}")
                    return job

        logger.warning(f"Gave up claiming a job for {printer_id}: lost every race")
        return None

    def complete_job(
        self,
        job_id: str,
        success: bool = True,
        error: str | None = None,
    ) -> PrintJob:
        """Mark a job as done or failed.

        Completing a job that is not claimed is allowed and overwrites the
        previous outcome.

        Args:
            job_id: Job UUID.
            success: Whether the agent printed the label.
            error: Error message if failed.

        Returns:
            PrintJob: Updated job.

        Raises:
            JobNotFoundError: If the job does not exist.
        """
        with _queue_lock:
            job = self.db.get(PrintJob, job_id)
            if not job:
                raise JobNotFoundError(job_id)

            if job.status != PrintJobStatus.CLAIMED:
                logger.warning(f"Completing job {job_id} in state {job.status.value}")

            job.status = PrintJobStatus.DONE if success else PrintJobStatus.FAILED
            job.finished_at = datetime.utcnow()
            job.error = None if success else str(error or "unknown")

            self.db.commit()
            self.db.refresh(job)

        if success:
            logger.info(f"Job {job_id} done")
        else:
            logger.warning(f"Job {job_id} failed: {job.error}")
        return job

    def get_job(self, job_id: str) -> PrintJob | None:
        """Get a print job by ID.

        Args:
            job_id: Job UUID.

        Returns:
            PrintJob | None: Job if found.
        """
        return self.db.get(PrintJob, job_id)

    def list_jobs(
        self,
        status: PrintJobStatus | None = None,
        limit: int = 50,
    ) -> list[PrintJob]:
        """List print jobs, newest first.

        Args:
            status: Filter by status.
            limit: Maximum jobs to return.

        Returns:
            list[PrintJob]: List of jobs.
        """
        query = self.db.query(PrintJob)
        if status:
            query = query.filter(PrintJob.status == status)
        return query.order_by(PrintJob.created_at.desc()).limit(limit).all()

    def get_job_statistics(self) -> dict:
        """Get print job counts by status.

        Returns:
            dict: Job counts by status.
        """
        results = (
            self.db.query(PrintJob.status, func.count(PrintJob.id))
            .group_by(PrintJob.status)
            .all()
        )

        stats = {status.value: 0 for status in PrintJobStatus}
        for status, count in results:
            stats[status.value] = count

        return stats


def get_print_service(db: Session) -> PrintService:
    """Factory function for PrintService.

    Args:
        db: Database session.

    Returns:
        PrintService: Print service instance.
    """
    return PrintService(db)
