"""Errors raised by the print pipeline."""


class PrintError(Exception):
    """Base class for print pipeline errors."""

    pass


class SessionNotFoundError(PrintError):
    """Print request did not resolve to a session."""

    pass


class JobNotFoundError(PrintError):
    """Referenced print job does not exist."""

    def __init__(self, job_id: str):
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class TransportError(PrintError):
    """A transport failed to deliver a label program.

    Attributes:
        mode: Dispatch mode that failed (e.g. 'tspl-tcp', 'pdf').
        detail: Diagnostic text from the transport (stderr, socket error).
        status_code: HTTP status the API reports for this failure.
    """

    def __init__(self, message: str, mode: str, detail: str = "", status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.mode = mode
        self.detail = detail
        self.status_code = status_code
