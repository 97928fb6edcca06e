"""Print request routing.

A print request goes to exactly one transport, chosen in this order:

1. ``directTcpPrinter.host`` given -> TCP label printer.
2. Central mode on, or a ``printerId`` given -> agent job queue.
3. ``PRINT_MODE=tspl`` -> raw device write when ``DIRECT_PRINT`` is set
   (falling back once to ``lp -o raw`` on failure), else ``lp -o raw``.
4. Otherwise -> PDF through ``lp``.
"""

import enum
import logging

from bmt.config import Settings
from bmt.labels.errors import SessionNotFoundError, TransportError
from bmt.labels.pdf_generator import create_label_pdf
from bmt.labels.print_service import PrintService, snapshot_session
from bmt.labels.schemas import PrintRequest, PrintResponse
from bmt.labels.transports import (
    LpTransport,
    QueueTransport,
    RawDeviceTransport,
    TcpTransport,
    build_lp_options,
)
from bmt.labels.tspl import create_label_tspl
from bmt.sessions.service import SessionService

logger = logging.getLogger(__name__)


class PrintRoute(str, enum.Enum):
    """Transport selected for a print request (value is the reported mode)."""

    TCP = "tspl-tcp"
    QUEUE = "agent"
    RAW_TSPL = "tspl-direct"
    SUBPROCESS_TSPL = "tspl"
    PDF = "pdf"


def resolve_route(request: PrintRequest, settings: Settings) -> PrintRoute:
    """Pick the transport for a request; first matching rule wins.

    Args:
        request: Incoming print request.
        settings: Print configuration.

    Returns:
        PrintRoute: Selected route.
    """
    if request.direct_tcp_printer and request.direct_tcp_printer.host:
        return PrintRoute.TCP
    if settings.central_mode or request.printer_id:
        return PrintRoute.QUEUE
    if settings.tspl_enabled:
        return PrintRoute.RAW_TSPL if settings.direct_print else PrintRoute.SUBPROCESS_TSPL
    return PrintRoute.PDF


class PrintDispatcher:
    """Resolves the session for a print request and runs the chosen transport."""

    def __init__(
        self,
        settings: Settings,
        print_service: PrintService,
        session_service: SessionService,
    ):
        """Initialize the dispatcher.

        Args:
            settings: Print configuration.
            print_service: Job queue used for agent printing.
            session_service: Store used to look up sessionId.
        """
        self.settings = settings
        self.print_service = print_service
        self.session_service = session_service

    def resolve_session(self, request: PrintRequest) -> dict:
        """Get the session fields for a request.

        Inline session data takes precedence over sessionId.

        Raises:
            SessionNotFoundError: If neither resolves to a session.
        """
        if request.session is not None:
            return snapshot_session(request.session.model_dump())
        if request.session_id:
            stored = self.session_service.get_session(request.session_id)
            if stored:
                return snapshot_session(stored.to_dict())
        raise SessionNotFoundError("No session provided")

    def dispatch(self, request: PrintRequest) -> PrintResponse:
        """Print or enqueue a label for the request.

        Args:
            request: Incoming print request.

        Returns:
            PrintResponse: Status and mode of the transport that handled it.

        Raises:
            SessionNotFoundError: Before any transport is tried.
            TransportError: If the selected transport fails.
        """
        session = self.resolve_session(request)
        route = resolve_route(request, self.settings)
        logger.info(f"Dispatching session {session.get('id')} via {route.value}")

        if route is PrintRoute.TCP:
            return self._print_tcp(request, session)
        if route is PrintRoute.QUEUE:
            return self._enqueue(request, session)
        if route is PrintRoute.RAW_TSPL:
            return self._print_tspl_direct(session)
        if route is PrintRoute.SUBPROCESS_TSPL:
            return self._print_tspl_lp(create_label_tspl(session, self.settings.label_timezone))
        return self._print_pdf(session)

    def _print_tcp(self, request: PrintRequest, session: dict) -> PrintResponse:
        target = request.direct_tcp_printer
        transport = TcpTransport(
            target.host, target.port, timeout_ms=self.settings.tcp_print_timeout_ms
        )
        transport.send(create_label_tspl(session, self.settings.label_timezone))
        return PrintResponse(
            status="printed", mode=PrintRoute.TCP.value, host=target.host, port=target.port
        )

    def _enqueue(self, request: PrintRequest, session: dict) -> PrintResponse:
        transport = QueueTransport(self.print_service, printer_id=request.printer_id)
        job_id = transport.send(session)
        return PrintResponse(
            status="queued",
            mode=PrintRoute.QUEUE.value,
            job_id=job_id,
            printer_id=request.printer_id or None,
        )

    def _print_tspl_direct(self, session: dict) -> PrintResponse:
        program = create_label_tspl(session, self.settings.label_timezone)
        try:
            RawDeviceTransport(self.settings.device_path).send(program)
        except TransportError as e:
            logger.warning(f"Direct print failed, falling back to lp: {e.detail}")
            return self._print_tspl_lp(program)
        return PrintResponse(status="printed", mode=PrintRoute.RAW_TSPL.value)

    def _print_tspl_lp(self, program: str) -> PrintResponse:
        options = build_lp_options(raw=True, printer=self.settings.printer)
        LpTransport(options, mode=PrintRoute.SUBPROCESS_TSPL.value).send(program)
        return PrintResponse(status="queued", mode=PrintRoute.SUBPROCESS_TSPL.value)

    def _print_pdf(self, session: dict) -> PrintResponse:
        pdf_data = create_label_pdf(session, self.settings.label_timezone)
        options = build_lp_options(
            raw=False,
            printer=self.settings.printer,
            media=self.settings.label_media,
            fit=self.settings.print_fit,
            orientation=self.settings.orientation,
        )
        LpTransport(options, mode=PrintRoute.PDF.value).send(pdf_data)
        return PrintResponse(status="queued", mode=PrintRoute.PDF.value)
