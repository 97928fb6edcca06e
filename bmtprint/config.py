"""Configuration management for the print agent."""

import os
from dataclasses import dataclass

DEFAULT_CENTRAL_URL = "http://localhost:5000"
DEFAULT_PRINTER_ID = "default-printer"
DEFAULT_INTERVAL_MS = 2000
DEFAULT_DEVICE = "/dev/usb/lp0"


@dataclass
class AgentConfig:
    """Configuration for the print agent.

    Attributes:
        central_url: Base URL of the central BMT server.
        printer_id: Identity this agent claims jobs under.
        interval_ms: Pause between polling cycles.
        device: Raw printer device the labels are written to.
        label_timezone: Time zone label timestamps are printed in.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        request_timeout: Seconds to wait for each server call.
    """

    central_url: str = DEFAULT_CENTRAL_URL
    printer_id: str = DEFAULT_PRINTER_ID
    interval_ms: int = DEFAULT_INTERVAL_MS
    device: str = DEFAULT_DEVICE
    label_timezone: str = "America/New_York"
    log_level: str = "INFO"
    request_timeout: float = 10

    @property
    def interval_seconds(self) -> float:
        """Polling interval in seconds."""
        return self.interval_ms / 1000

    @classmethod
    def from_env(cls, environ: dict | None = None) -> "AgentConfig":
        """Load configuration from environment variables.

        Recognizes CENTRAL_URL, PRINTER_ID, INTERVAL_MS, DEVICE,
        LABEL_TIMEZONE and LOG_LEVEL.

        Args:
            environ: Mapping to read instead of os.environ.

        Returns:
            AgentConfig: Loaded configuration.
        """
        env = os.environ if environ is None else environ
        try:
            interval_ms = int(env.get("INTERVAL_MS", DEFAULT_INTERVAL_MS))
        except ValueError:
            interval_ms = DEFAULT_INTERVAL_MS

        return cls(
            central_url=env.get("CENTRAL_URL", DEFAULT_CENTRAL_URL),
            printer_id=env.get("PRINTER_ID", DEFAULT_PRINTER_ID),
            interval_ms=interval_ms,
            device=env.get("DEVICE", DEFAULT_DEVICE),
            label_timezone=env.get("LABEL_TIMEZONE", "America/New_York"),
            log_level=env.get("LOG_LEVEL", "INFO"),
        )


def get_config() -> AgentConfig:
    """Get the current configuration.

    Returns:
        AgentConfig: Configuration read from the environment.
    """
    return AgentConfig.from_env()
