"""Utilities and constants for SDP handling."""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.pretty import Pretty
from rich.panel import Panel

# Rich Console for pretty printing
console = Console()

# Configure logging with RichHandler
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
)

# Get logger for the package
logger = logging.getLogger("sdpx")

EOL = "\r\n"

# RFC 4566 Section 5: session-level and media-level line order
OUTER_ORDER = ("v", "o", "s", "i", "u", "e", "p", "c", "b", "t", "r", "z", "a")
INNER_ORDER = ("i", "c", "b", "a")

# RTP header extension URIs with special meaning during negotiation
ABS_SEND_TIME_URI = "http://www.webrtc.org/experiments/rtp-hdrext/abs-send-time"
TRANSPORT_CC_URI = (
    "http://www.ietf.org/id/draft-holmer-rmcat-transport-wide-cc-extensions-01"
)

# RTP probator
PROBATOR_SSRC = 1234
PROBATOR_MID = "probator"


def print_session(session: Any, title: str = "SDP") -> None:
    """Pretty print a session document (or any part of it) to the console."""
    console.print(Panel(Pretty(session, expand_all=True), title=title))
