"""
Core types, configuration and exceptions for sdpx.
"""

from __future__ import annotations

import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional

# =============================================================================
# Document Types
# =============================================================================

# A parsed SDP is a plain JSON-like tree; keys keep their wire spelling.
SessionDocument = Dict[str, Any]
MediaObject = Dict[str, Any]

# ORTC capability/parameter documents
RtpCapabilities = Dict[str, Any]
RtpParameters = Dict[str, Any]
ExtendedRtpCapabilities = Dict[str, Any]
CodecParameters = Dict[str, typing.Union[str, int, float]]

IceCandidates = List[Dict[str, Any]]


# =============================================================================
# Session Configuration
# =============================================================================


@dataclass
class SessionConfig:
    """Defaults used when building local session descriptions."""

    # o= line
    username: str = "sdpx"
    session_id: int = 10000
    origin_address: str = "0.0.0.0"

    # Per media section
    connection_ip: str = "127.0.0.1"
    media_port: int = 7  # discard port, real transport is negotiated via ICE
    ice_options: str = "renomination"


class MediaSectionIdx(NamedTuple):
    """Position for the next media section and the mid it may reuse."""

    idx: int
    reuse_mid: str = ""


# =============================================================================
# DTLS Role
# =============================================================================


class DtlsRole(Enum):
    """DTLS role of the local endpoint (RFC 5763)."""

    AUTO = "auto"
    CLIENT = "client"
    SERVER = "server"

    @property
    def setup(self) -> str:
        """Value for the a=setup attribute."""
        return _SETUP_BY_ROLE[self]

    @classmethod
    def from_setup(cls, setup: str) -> Optional[DtlsRole]:
        """Map an a=setup value back to a role, None if unknown."""
        for role, value in _SETUP_BY_ROLE.items():
            if value == setup:
                return role
        return None


_SETUP_BY_ROLE = {
    DtlsRole.CLIENT: "active",
    DtlsRole.SERVER: "passive",
    DtlsRole.AUTO: "actpass",
}


# =============================================================================
# Exceptions
# =============================================================================


class SdpxError(Exception):
    """Base exception for sdpx errors."""

    pass


class SdpxTypeError(SdpxError, TypeError):
    """Raised when a document or parameter has an invalid shape."""

    pass


class UnsupportedError(SdpxError):
    """Raised when a feature is not supported."""

    pass


class InvalidStateError(SdpxError):
    """Raised when an operation is not valid in the current state."""

    pass


__all__ = [
    # Document types
    "SessionDocument",
    "MediaObject",
    "RtpCapabilities",
    "RtpParameters",
    "ExtendedRtpCapabilities",
    "CodecParameters",
    "IceCandidates",
    # Configuration
    "SessionConfig",
    "MediaSectionIdx",
    "DtlsRole",
    # Exceptions
    "SdpxError",
    "SdpxTypeError",
    "UnsupportedError",
    "InvalidStateError",
]
