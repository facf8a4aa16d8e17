"""sdpx - SDP transform and WebRTC capability negotiation for Python."""

from __future__ import annotations

# SDP transform
from ._grammar import GRAMMAR, Rule
from ._parser import (
    parse,
    parse_image_attributes,
    parse_params,
    parse_payloads,
    parse_simulcast_stream_list,
)
from ._writer import write, write_params

# Capability negotiation
from ._ortc import (
    can_receive,
    can_send,
    generate_probator_rtp_parameters,
    get_extended_rtp_capabilities,
    get_recv_rtp_capabilities,
    get_sending_remote_rtp_parameters,
    get_sending_rtp_parameters,
    is_rtx_codec,
    match_codecs,
    reduce_codecs,
    reduce_rtcp_feedback,
)
from ._h264 import (
    Level,
    Profile,
    ProfileLevelId,
    generate_profile_level_id_for_answer,
    is_same_profile,
    parse_profile_level_id,
    parse_sdp_profile_level_id,
    profile_level_id_to_string,
)
from ._scalability import parse_scalability_mode
from ._validators import (
    validate_dtls_fingerprint,
    validate_dtls_parameters,
    validate_ice_candidate,
    validate_ice_candidates,
    validate_ice_parameters,
    validate_num_sctp_streams,
    validate_producer_codec_options,
    validate_rtcp_feedback,
    validate_rtcp_parameters,
    validate_rtp_capabilities,
    validate_rtp_codec_capability,
    validate_rtp_codec_parameters,
    validate_rtp_encoding_parameters,
    validate_rtp_header_extension,
    validate_rtp_header_extension_parameters,
    validate_rtp_parameters,
    validate_sctp_capabilities,
    validate_sctp_parameters,
    validate_sctp_stream_parameters,
)

# Media-section builder
from ._sdp import (
    AnswerMediaSection,
    MediaSection,
    OfferMediaSection,
    RemoteSdp,
    add_legacy_simulcast,
    apply_codec_parameters,
    extract_dtls_parameters,
    extract_rtp_capabilities,
    get_cname,
    get_rtp_encodings,
)

# Types, configuration and exceptions
from ._types import (
    DtlsRole,
    InvalidStateError,
    MediaSectionIdx,
    SdpxError,
    SdpxTypeError,
    SessionConfig,
    UnsupportedError,
)

# Utilities
from ._utils import console, logger, print_session

__version__ = "0.1.0"

__all__ = [
    # SDP transform
    "parse",
    "write",
    "parse_params",
    "write_params",
    "parse_payloads",
    "parse_image_attributes",
    "parse_simulcast_stream_list",
    "GRAMMAR",
    "Rule",
    # Negotiation
    "get_extended_rtp_capabilities",
    "get_recv_rtp_capabilities",
    "get_sending_rtp_parameters",
    "get_sending_remote_rtp_parameters",
    "generate_probator_rtp_parameters",
    "can_send",
    "can_receive",
    "reduce_codecs",
    "reduce_rtcp_feedback",
    "match_codecs",
    "is_rtx_codec",
    # H264
    "Profile",
    "Level",
    "ProfileLevelId",
    "parse_profile_level_id",
    "profile_level_id_to_string",
    "parse_sdp_profile_level_id",
    "is_same_profile",
    "generate_profile_level_id_for_answer",
    # Scalability
    "parse_scalability_mode",
    # Validators
    "validate_rtp_capabilities",
    "validate_rtp_codec_capability",
    "validate_rtcp_feedback",
    "validate_rtp_header_extension",
    "validate_rtp_parameters",
    "validate_rtp_codec_parameters",
    "validate_rtp_header_extension_parameters",
    "validate_rtp_encoding_parameters",
    "validate_rtcp_parameters",
    "validate_sctp_capabilities",
    "validate_num_sctp_streams",
    "validate_sctp_parameters",
    "validate_sctp_stream_parameters",
    "validate_ice_parameters",
    "validate_ice_candidate",
    "validate_ice_candidates",
    "validate_dtls_fingerprint",
    "validate_dtls_parameters",
    "validate_producer_codec_options",
    # Media-section builder
    "MediaSection",
    "AnswerMediaSection",
    "OfferMediaSection",
    "RemoteSdp",
    "extract_rtp_capabilities",
    "extract_dtls_parameters",
    "add_legacy_simulcast",
    "get_cname",
    "get_rtp_encodings",
    "apply_codec_parameters",
    # Types
    "DtlsRole",
    "MediaSectionIdx",
    "SessionConfig",
    # Exceptions
    "SdpxError",
    "SdpxTypeError",
    "UnsupportedError",
    "InvalidStateError",
    # Utilities
    "console",
    "logger",
    "print_session",
    # Version
    "__version__",
]
