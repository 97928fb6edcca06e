"""Command-line interface for the print agent."""

import json
import logging
import sys
from pathlib import Path

import click

from bmt.labels.tspl import create_label_tspl
from bmtprint import __version__
from bmtprint.agent import get_agent
from bmtprint.config import (
    DEFAULT_CENTRAL_URL,
    DEFAULT_DEVICE,
    DEFAULT_INTERVAL_MS,
    DEFAULT_PRINTER_ID,
    AgentConfig,
)


def setup_logging(level: str) -> None:
    """Set up logging configuration.

    Args:
        level: Log level string.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def agent_options(func):
    """Shared server/printer options, each falling back to its env variable."""
    options = [
        click.option(
            "--central-url",
            envvar="CENTRAL_URL",
            default=DEFAULT_CENTRAL_URL,
            show_default=True,
            help="Central BMT server URL",
        ),
        click.option(
            "--printer-id",
            envvar="PRINTER_ID",
            default=DEFAULT_PRINTER_ID,
            show_default=True,
            help="Identity to claim jobs under",
        ),
        click.option(
            "--device",
            envvar="DEVICE",
            default=DEFAULT_DEVICE,
            show_default=True,
            help="Raw printer device",
        ),
        click.option(
            "--interval-ms",
            envvar="INTERVAL_MS",
            type=int,
            default=DEFAULT_INTERVAL_MS,
            show_default=True,
            help="Pause between polls",
        ),
        click.option(
            "--timezone",
            envvar="LABEL_TIMEZONE",
            default="America/New_York",
            show_default=True,
            help="Time zone printed on labels",
        ),
        click.option(
            "--log-level",
            envvar="LOG_LEVEL",
            default="INFO",
            show_default=True,
            help="Logging level",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_config(
    central_url: str,
    printer_id: str,
    device: str,
    interval_ms: int,
    timezone: str,
    log_level: str,
) -> AgentConfig:
    return AgentConfig(
        central_url=central_url.rstrip("/"),
        printer_id=printer_id,
        interval_ms=interval_ms,
        device=device,
        label_timezone=timezone,
        log_level=log_level,
    )


@click.group()
@click.version_option(version=__version__)
def main():
    """BMT Print - remote label print agent.

    Polls the central BMT server for queued labels and writes them to a
    local TSPL printer.
    """
    pass


@main.command()
@agent_options
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def start(verbose: bool, **options):
    """Start the polling loop (Ctrl+C to stop)."""
    config = _build_config(**options)
    setup_logging("DEBUG" if verbose else config.log_level)

    click.echo(
        f"Starting agent. CENTRAL_URL={config.central_url} "
        f"PRINTER_ID={config.printer_id} DEVICE={config.device}"
    )

    agent = get_agent(config)
    agent.install_signal_handlers()
    agent.run()


@main.command()
@agent_options
def once(**options):
    """Run a single heartbeat/claim/print cycle and exit."""
    config = _build_config(**options)
    setup_logging(config.log_level)

    agent = get_agent(config)
    printed = agent.run_once()
    click.echo("Printed 1 job" if printed else "No job printed")


@main.command()
@agent_options
def test(**options):
    """Test connection to server and printer device."""
    config = _build_config(**options)
    setup_logging(config.log_level)

    results = get_agent(config).test_connection()

    server = results["server"]
    server_icon = "+" if server["status"] == "ok" else "x"
    click.echo(f"{server_icon} Server: {server['message']}")
    if server.get("last_heartbeat"):
        click.echo(f"  Last heartbeat: {server['last_heartbeat']}")

    printer = results["printer"]
    printer_icon = "+" if printer["status"] == "ok" else "x"
    click.echo(f"{printer_icon} Printer: {printer['message']}")

    if not results["success"]:
        sys.exit(1)


@main.command()
@click.argument("session_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--timezone",
    envvar="LABEL_TIMEZONE",
    default="America/New_York",
    show_default=True,
    help="Time zone printed on labels",
)
def render(session_file: Path, timezone: str):
    """Print the TSPL program for a session JSON file to stdout."""
    try:
        session = json.loads(session_file.read_text())
    except json.JSONDecodeError as e:
        click.echo(f"Invalid session JSON: {e}", err=True)
        sys.exit(1)

    click.echo(create_label_tspl(session, timezone), nl=False)


if __name__ == "__main__":
    main()
