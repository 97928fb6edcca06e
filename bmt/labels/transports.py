"""Print transports: raw device, CUPS lp pipe, TCP socket and agent queue.

Each transport takes a rendered label program and either returns normally
or raises TransportError with whatever diagnostic text it collected.
"""

import logging
import socket
import subprocess
import time
from typing import TYPE_CHECKING

from bmt.labels.errors import TransportError

if TYPE_CHECKING:
    from bmt.labels.print_service import PrintService

logger = logging.getLogger(__name__)

DEFAULT_TCP_PORT = 9100
DEFAULT_TCP_TIMEOUT_MS = 5000

# Some printers close the socket as soon as they have the data
TCP_GRACE_SECONDS = 0.1


def _to_bytes(program: str | bytes) -> bytes:
    return program.encode("utf-8") if isinstance(program, str) else program


class RawDeviceTransport:
    """Writes a TSPL program straight to a printer device node."""

    mode = "tspl-direct"

    def __init__(self, device_path: str):
        """Initialize the transport.

        Args:
            device_path: Device node, e.g. /dev/usb/lp0.
        """
        self.device_path = device_path

    def send(self, program: str | bytes) -> None:
        """Write the program to the device.

        Raises:
            TransportError: If the device cannot be opened or written.
        """
        try:
            with open(self.device_path, "wb") as device:
                device.write(_to_bytes(program))
        except OSError as err:
            raise TransportError(
                "Direct print failed", mode=self.mode, detail=str(err)
            ) from err
        logger.info(f"Wrote label to {self.device_path}")


def build_lp_options(
    raw: bool,
    printer: str | None = None,
    media: str = "Custom.189x72",
    fit: bool = True,
    orientation: str = "",
) -> list[str]:
    """Build lp arguments for a raw TSPL or a PDF job.

    Args:
        raw: Pass bytes through untouched (TSPL).
        printer: Destination queue (-d), default queue when None.
        media: Media name for PDF jobs.
        fit: Fit PDF to page, otherwise print at 100% scaling.
        orientation: "landscape" rotates PDF jobs.

    Returns:
        list[str]: Arguments to pass after the lp command.
    """
    if raw:
        args = ["-o", "raw"]
    else:
        args = ["-o", f"media={media}"]
        args.extend(["-o", "fit-to-page"] if fit else ["-o", "scaling=100"])
        if orientation.strip().lower() == "landscape":
            args.extend(["-o", "landscape"])
    if printer:
        args.extend(["-d", printer])
    return args


class LpTransport:
    """Pipes a label program into the CUPS lp command."""

    def __init__(self, options: list[str], mode: str, command: str = "lp"):
        """Initialize the transport.

        Args:
            options: lp arguments, see build_lp_options().
            mode: Dispatch mode reported on success or failure.
            command: Spooler executable.
        """
        self.options = options
        self.mode = mode
        self.command = command

    def send(self, program: str | bytes) -> None:
        """Stream the program to lp's stdin and check its exit code.

        Raises:
            TransportError: If lp is missing or exits non-zero.
        """
        cmd = [self.command, *self.options]
        logger.info(f"Print command: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, input=_to_bytes(program), capture_output=True)
        except FileNotFoundError as err:
            raise TransportError(
                "Print failed", mode=self.mode, detail=f"{self.command} command not found"
            ) from err

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace")
            raise TransportError("Print failed", mode=self.mode, detail=stderr)

        logger.info(f"Print job submitted via {self.command}: {result.stdout.decode().strip()}")


class TcpTransport:
    """Sends a TSPL program to a networked label printer (raw port 9100)."""

    mode = "tspl-tcp"

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_TCP_PORT,
        timeout_ms: int = DEFAULT_TCP_TIMEOUT_MS,
    ):
        """Initialize the transport.

        Args:
            host: Printer host name or address.
            port: Printer port.
            timeout_ms: Connect and idle timeout in milliseconds.
        """
        self.host = host
        self.port = port
        self.timeout_ms = timeout_ms

    def send(self, program: str | bytes) -> None:
        """Connect, write the program and close.

        Raises:
            TransportError: On connect/write errors or timeout.
        """
        timeout = self.timeout_ms / 1000
        try:
            with socket.create_connection((self.host, self.port), timeout=timeout) as sock:
                sock.settimeout(timeout)
                sock.sendall(_to_bytes(program))
                time.sleep(TCP_GRACE_SECONDS)
        except TimeoutError as err:
            raise TransportError(
                "TCP print failed", mode=self.mode, detail="timeout", status_code=502
            ) from err
        except OSError as err:
            raise TransportError(
                "TCP print failed", mode=self.mode, detail=str(err), status_code=502
            ) from err
        logger.info(f"Sent label to {self.host}:{self.port}")


class QueueTransport:
    """Hands a session snapshot to the agent job queue instead of a printer."""

    mode = "queued"

    def __init__(self, service: "PrintService", printer_id: str | None = None):
        """Initialize the transport.

        Args:
            service: Print service owning the job queue.
            printer_id: Target agent, None for any agent.
        """
        self.service = service
        self.printer_id = printer_id

    def send(self, session: dict) -> str:
        """Enqueue a job for the session.

        Returns:
            str: New job ID.
        """
        job = self.service.enqueue_job(session, printer_id=self.printer_id)
        return job.id
