"""
SDP Builder Package.

This package contains the media sections, the remote SDP built from them, and
helpers that read local SDP documents.
"""

from ._media_section import AnswerMediaSection, MediaSection, OfferMediaSection
from ._remote_sdp import RemoteSdp
from ._utils import (
    add_legacy_simulcast,
    apply_codec_parameters,
    extract_dtls_parameters,
    extract_rtp_capabilities,
    get_cname,
    get_rtp_encodings,
)

__all__ = [
    # Media sections - Base class
    "MediaSection",
    # Media sections - Implementations
    "AnswerMediaSection",
    "OfferMediaSection",
    # Remote SDP
    "RemoteSdp",
    # Local SDP helpers
    "extract_rtp_capabilities",
    "extract_dtls_parameters",
    "add_legacy_simulcast",
    "get_cname",
    "get_rtp_encodings",
    "apply_codec_parameters",
]
