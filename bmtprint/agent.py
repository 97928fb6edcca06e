"""Print agent - polls the central server for print jobs and prints them."""

import logging
import os
import signal
import threading
from datetime import datetime

import requests

from bmt.labels.errors import TransportError
from bmt.labels.transports import RawDeviceTransport
from bmt.labels.tspl import create_label_tspl
from bmtprint import __version__
from bmtprint.config import AgentConfig, get_config

logger = logging.getLogger(__name__)

CAPABILITIES = {"tspl": True}


class BmtPrintAgent:
    """Print agent that polls the server for jobs and prints them as TSPL.

    Each cycle:
    1. Sends a heartbeat so the server knows the agent is alive
    2. Claims the next job for this printer ID
    3. Renders the job's session snapshot and writes it to the device
    4. Reports success or the error message back to the server

    Cycles never overlap; the next one starts interval_ms after the
    previous one finished, whatever its outcome.
    """

    def __init__(self, config: AgentConfig | None = None, http: requests.Session | None = None):
        """Initialize the agent.

        Args:
            config: Configuration (read from the environment if not provided).
            http: HTTP session to use for server calls.
        """
        self.config = config or get_config()
        self.http = http or requests.Session()
        self.transport = RawDeviceTransport(self.config.device)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._last_heartbeat: datetime | None = None

    @property
    def running(self) -> bool:
        """Whether the polling loop should keep going."""
        return not self._stop_event.is_set()

    @property
    def last_heartbeat(self) -> datetime | None:
        """UTC time of the last heartbeat the server accepted."""
        return self._last_heartbeat

    def _api_url(self, path: str) -> str:
        """Build full API URL.

        Args:
            path: API path (e.g., '/agents/heartbeat').

        Returns:
            str: Full URL.
        """
        base = self.config.central_url.rstrip("/")
        return f"{base}/api{path}"

    def _post(self, path: str, payload: dict) -> dict:
        response = self.http.post(
            self._api_url(path),
            json=payload,
            timeout=self.config.request_timeout,
        )
        response.raise_for_status()
        return response.json()

    def send_heartbeat(self) -> bool:
        """Send heartbeat to server.

        Returns:
            bool: True if heartbeat was successful.
        """
        try:
            self._post(
                "/agents/heartbeat",
                {
                    "printerId": self.config.printer_id,
                    "agentVersion": __version__,
                    "capabilities": CAPABILITIES,
                },
            )
        except requests.RequestException as e:
            logger.error(f"Heartbeat error: {e}")
            return False

        self._last_heartbeat = datetime.utcnow()
        return True

    def next_job(self) -> dict | None:
        """Claim the next job for this printer.

        Returns:
            dict | None: Claimed job, or None if nothing is waiting.
        """
        try:
            data = self._post("/agents/next-job", {"printerId": self.config.printer_id})
        except requests.RequestException as e:
            logger.error(f"Error getting next job: {e}")
            return None
        return data.get("job")

    def complete_job(self, job_id: str, success: bool, error: str | None = None) -> bool:
        """Report a job outcome.

        Args:
            job_id: Job UUID.
            success: Whether printing succeeded.
            error: Error message if failed.

        Returns:
            bool: True if the server accepted the report.
        """
        payload = {"success": success}
        if not success:
            payload["error"] = error
        try:
            self._post(f"/print/{job_id}/complete", payload)
        except requests.RequestException as e:
            logger.error(f"Error completing job {job_id}: {e}")
            return False
        return True

    def process_job(self, job: dict) -> bool:
        """Print a claimed job and report the outcome.

        Args:
            job: Job data from server.

        Returns:
            bool: True if the label was printed.
        """
        job_id = job["id"]
        try:
            program = create_label_tspl(job["session"], self.config.label_timezone)
            self.transport.send(program)
        except TransportError as e:
            logger.error(f"Print failed for job {job_id}: {e.detail}")
            self.complete_job(job_id, success=False, error=e.detail or e.message)
            return False
        except Exception as e:
            logger.exception(f"Could not print job {job_id}: {e}")
            self.complete_job(job_id, success=False, error=str(e) or type(e).__name__)
            return False

        self.complete_job(job_id, success=True)
        logger.info(f"Printed job {job_id}")
        return True

    def run_once(self) -> bool:
        """Run a single polling cycle.

        Returns:
            bool: True if a job was printed.
        """
        self.send_heartbeat()

        job = self.next_job()
        if not job or not job.get("session"):
            return False

        return self.process_job(job)

    def run(self) -> None:
        """Run the polling loop until stop() is called."""
        logger.info("Starting print agent")
        logger.info(f"Server: {self.config.central_url}")
        logger.info(f"Printer ID: {self.config.printer_id}")
        logger.info(f"Device: {self.config.device}")
        logger.info(f"Poll interval: {self.config.interval_ms}ms")

        self._stop_event.clear()

        while self.running:
            try:
                self.run_once()
            except Exception as e:
                logger.exception(f"Error in agent loop: {e}")

            # Returns early when stop() is called
            self._stop_event.wait(self.config.interval_seconds)

        logger.info("Agent stopped")

    def start(self) -> threading.Thread:
        """Run the polling loop in a background thread.

        Returns:
            threading.Thread: The loop thread.
        """
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="bmtprint-agent", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        """Ask the loop to stop and wait for the background thread.

        Args:
            timeout: Seconds to wait for the thread to finish.
        """
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def install_signal_handlers(self) -> None:
        """Stop the loop on SIGINT/SIGTERM. Call from the main thread."""

        def _handle_shutdown(signum, frame):
            logger.info("Shutdown signal received")
            self._stop_event.set()

        signal.signal(signal.SIGINT, _handle_shutdown)
        signal.signal(signal.SIGTERM, _handle_shutdown)

    def test_connection(self) -> dict:
        """Test connection to server and printer device.

        Returns:
            dict: Test results with 'server', 'printer', 'success' keys.
        """
        results = {
            "server": {"status": "unknown", "message": ""},
            "printer": {"status": "unknown", "message": ""},
            "success": False,
        }

        if self.send_heartbeat():
            results["server"] = {
                "status": "ok",
                "message": f"Connected to {self.config.central_url}",
                "last_heartbeat": self._last_heartbeat.isoformat(),
            }
        else:
            results["server"] = {"status": "error", "message": "Heartbeat failed"}

        device = self.config.device
        if not os.path.exists(device):
            results["printer"] = {"status": "error", "message": f"{device} not found"}
        elif not os.access(device, os.W_OK):
            results["printer"] = {"status": "error", "message": f"{device} is not writable"}
        else:
            results["printer"] = {"status": "ok", "message": f"{device} is ready"}

        results["success"] = all(
            results[part]["status"] == "ok" for part in ("server", "printer")
        )
        return results


def get_agent(config: AgentConfig | None = None) -> BmtPrintAgent:
    """Factory function for BmtPrintAgent.

    Args:
        config: Optional configuration.

    Returns:
        BmtPrintAgent: Agent instance.
    """
    return BmtPrintAgent(config)
