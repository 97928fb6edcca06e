"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        app_name: Name of the application.
        debug: Enable debug mode.
        database_url: Database connection URL.
        print_mode: "tspl" for raw TSPL printing, anything else renders PDF.
        central_mode: Queue every print for a remote agent.
        printer: CUPS queue name passed to lp with -d.
        direct_print: Write TSPL straight to device_path before trying CUPS.
        device_path: Raw printer device node.
        label_media: CUPS media name for PDF labels.
        orientation: "landscape" adds -o landscape for PDF labels.
        print_fit: Fit PDF to page (False forces 100% scaling).
        tcp_print_timeout_ms: Connect/idle timeout for TCP label printers.
        label_timezone: Time zone used to render label timestamps.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "BMT"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./data/bmt.db"

    # Printing
    print_mode: str = ""
    central_mode: bool = False
    printer: str | None = Field(None, validation_alias=AliasChoices("printer", "bmt_printer"))
    direct_print: bool = False
    device_path: str = Field(
        "/dev/usb/lp0", validation_alias=AliasChoices("device_path", "device")
    )
    label_media: str = "Custom.189x72"
    orientation: str = Field(
        "", validation_alias=AliasChoices("orientation", "bmt_orientation")
    )
    print_fit: bool = True
    tcp_print_timeout_ms: int = 5000
    label_timezone: str = "America/New_York"

    # Build info reported by /api/version
    build_version: str = "1.0.0"
    build_commit: str = "unknown"
    build_time: str | None = None

    @property
    def tspl_enabled(self) -> bool:
        """Whether the configured print mode is TSPL."""
        return self.print_mode.strip().lower() == "tspl"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings.
    """
    return Settings()
