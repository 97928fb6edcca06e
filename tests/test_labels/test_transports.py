"""Tests for print transports."""

import socket
import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from bmt.labels.errors import TransportError
from bmt.labels.transports import (
    LpTransport,
    QueueTransport,
    RawDeviceTransport,
    TcpTransport,
    build_lp_options,
)

PROGRAM = "SIZE 2.625,1.000\nCLS\nPRINT 1,1\n"


class TestRawDeviceTransport:
    """Tests for direct device writes."""

    def test_writes_program(self, tmp_path):
        """Should write the program bytes to the device path."""
        device = tmp_path / "lp0"

        RawDeviceTransport(str(device)).send(PROGRAM)

        assert device.read_bytes() == PROGRAM.encode()

    def test_missing_device_raises(self, tmp_path):
        """Should report write errors as TransportError."""
        transport = RawDeviceTransport(str(tmp_path / "missing" / "lp0"))

        with pytest.raises(TransportError) as exc_info:
            transport.send(PROGRAM)

        assert exc_info.value.mode == "tspl-direct"
        assert exc_info.value.detail


class TestBuildLpOptions:
    """Tests for lp argument building."""

    def test_raw(self):
        """TSPL jobs should pass through raw."""
        assert build_lp_options(raw=True) == ["-o", "raw"]

    def test_raw_with_printer(self):
        """Should target the configured queue."""
        assert build_lp_options(raw=True, printer="Polono") == ["-o", "raw", "-d", "Polono"]

    def test_pdf_fit_to_page(self):
        """PDF jobs should set media and fit to page by default."""
        assert build_lp_options(raw=False, media="Custom.189x72") == [
            "-o",
            "media=Custom.189x72",
            "-o",
            "fit-to-page",
        ]

    def test_pdf_scaling_landscape(self):
        """Without fit the PDF prints at 100%; landscape adds its flag."""
        args = build_lp_options(
            raw=False, printer="Dymo", media="w72h154", fit=False, orientation="Landscape"
        )

        assert args == [
            "-o",
            "media=w72h154",
            "-o",
            "scaling=100",
            "-o",
            "landscape",
            "-d",
            "Dymo",
        ]


class TestLpTransport:
    """Tests for the lp subprocess pipe."""

    @patch("bmt.labels.transports.subprocess.run")
    def test_pipes_program_to_lp(self, mock_run):
        """Should stream the program on stdin."""
        mock_run.return_value = MagicMock(returncode=0, stdout=b"request id is Polono-1", stderr=b"")

        LpTransport(["-o", "raw"], mode="tspl").send(PROGRAM)

        args, kwargs = mock_run.call_args
        assert args[0] == ["lp", "-o", "raw"]
        assert kwargs["input"] == PROGRAM.encode()

    @patch("bmt.labels.transports.subprocess.run")
    def test_nonzero_exit_raises_with_stderr(self, mock_run):
        """Should attach stderr when lp fails."""
        mock_run.return_value = MagicMock(
            returncode=1, stdout=b"", stderr=b"lp: No default destination."
        )

        with pytest.raises(TransportError) as exc_info:
            LpTransport(["-o", "raw"], mode="tspl").send(PROGRAM)

        assert exc_info.value.mode == "tspl"
        assert exc_info.value.status_code == 500
        assert "No default destination" in exc_info.value.detail

    @patch("bmt.labels.transports.subprocess.run", side_effect=FileNotFoundError)
    def test_missing_lp_raises(self, mock_run):
        """Should report a missing spooler as TransportError."""
        with pytest.raises(TransportError, match="Print failed"):
            LpTransport([], mode="pdf").send(b"%PDF-1.4")


class TestTcpTransport:
    """Tests for raw TCP printing."""

    def test_sends_program(self):
        """Should deliver the program to a listening printer."""
        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        server.bind(("127.0.0.1", 0))
        server.listen(1)
        port = server.getsockname()[1]
        received = bytearray()

        def accept():
            conn, _ = server.accept()
            with conn:
                while chunk := conn.recv(4096):
                    received.extend(chunk)

        thread = threading.Thread(target=accept)
        thread.start()
        try:
            TcpTransport("127.0.0.1", port, timeout_ms=2000).send(PROGRAM)
        finally:
            thread.join(5)
            server.close()

        assert bytes(received) == PROGRAM.encode()

    def test_printer_closing_early_is_not_an_error(self):
        """A printer that hangs up right after reading should count as success."""
        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        server.bind(("127.0.0.1", 0))
        server.listen(1)
        port = server.getsockname()[1]

        def accept_and_close():
            conn, _ = server.accept()
            conn.recv(4096)
            conn.close()

        thread = threading.Thread(target=accept_and_close)
        thread.start()
        try:
            TcpTransport("127.0.0.1", port, timeout_ms=2000).send(PROGRAM)
        finally:
            thread.join(5)
            server.close()

    def test_connection_refused_raises(self):
        """Should report refused connections as a 502 TransportError."""
        probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
        probe.close()

        with pytest.raises(TransportError) as exc_info:
            TcpTransport("127.0.0.1", port, timeout_ms=1000).send(PROGRAM)

        assert exc_info.value.mode == "tspl-tcp"
        assert exc_info.value.status_code == 502

    def test_unreachable_host_fails_within_timeout(self):
        """A printer that never answers should fail near the timeout, not hang."""

        def silent_printer(address, timeout):
            time.sleep(timeout)
            raise TimeoutError("timed out")

        start = time.monotonic()
        with patch(
            "bmt.labels.transports.socket.create_connection", side_effect=silent_printer
        ):
            with pytest.raises(TransportError) as exc_info:
                TcpTransport("10.255.255.1", 9100, timeout_ms=300).send(PROGRAM)
        elapsed = time.monotonic() - start

        assert exc_info.value.detail == "timeout"
        assert exc_info.value.status_code == 502
        assert 0.25 <= elapsed < 3

    @patch("bmt.labels.transports.socket.create_connection", side_effect=TimeoutError)
    def test_timeout_reported(self, mock_connect):
        """Timeouts should be reported as such."""
        with pytest.raises(TransportError) as exc_info:
            TcpTransport("printer.local", timeout_ms=250).send(PROGRAM)

        assert exc_info.value.detail == "timeout"
        mock_connect.assert_called_once_with(("printer.local", 9100), timeout=0.25)


class TestQueueTransport:
    """Tests for the agent queue transport."""

    def test_enqueues_and_returns_job_id(self, sample_session):
        """Should hand the session to the job queue."""
        service = MagicMock()
        service.enqueue_job.return_value = MagicMock(id="job-1")

        job_id = QueueTransport(service, printer_id="pi-1").send(sample_session)

        assert job_id == "job-1"
        service.enqueue_job.assert_called_once_with(sample_session, printer_id="pi-1")
