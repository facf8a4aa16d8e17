"""
Validators for ORTC documents.

Each validator checks the shape of a capability or parameter dict, raises
SdpxTypeError when it is invalid, and fills in missing optional fields with
their default values in place.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List

from ._types import SdpxTypeError

_MIME_TYPE = re.compile(r"^(audio|video)/(.+)$", re.IGNORECASE)
_ICE_PROTOCOL = re.compile(r"^(udp|tcp)$", re.IGNORECASE)
_ICE_TYPE = re.compile(r"^(host|srflx|prflx|relay)$", re.IGNORECASE)
_DTLS_ROLE = re.compile(r"^(auto|client|server)$", re.IGNORECASE)


# =============================================================================
# Helpers
# =============================================================================


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_unsigned(value: Any) -> bool:
    return _is_int(value) and value >= 0


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value != ""


# =============================================================================
# RTP
# =============================================================================


def validate_rtp_capabilities(caps: Dict[str, Any]) -> None:
    """
    Validate RtpCapabilities.

    ``codecs`` and ``headerExtensions`` are optional and default to empty
    lists. Every codec and header extension is validated too.

    Raises:
        SdpxTypeError: If the capabilities are malformed.
    """
    if not isinstance(caps, dict):
        raise SdpxTypeError("caps is not an object")

    codecs = caps.setdefault("codecs", [])
    if not isinstance(codecs, list):
        raise SdpxTypeError("caps.codecs is not an array")
    for codec in codecs:
        validate_rtp_codec_capability(codec)

    header_extensions = caps.setdefault("headerExtensions", [])
    if not isinstance(header_extensions, list):
        raise SdpxTypeError("caps.headerExtensions is not an array")
    for ext in header_extensions:
        validate_rtp_header_extension(ext)


def _validate_codec_common(codec: Dict[str, Any], kind: str) -> None:
    if not _is_int(codec.get("clockRate")):
        raise SdpxTypeError("missing codec.clockRate")

    if kind == "audio":
        if not _is_int(codec.get("channels")):
            codec["channels"] = 1
    else:
        codec.pop("channels", None)

    if not isinstance(codec.get("parameters"), dict):
        codec["parameters"] = {}
    for key, value in codec["parameters"].items():
        if value is not None and not isinstance(value, str) and not _is_number(value):
            raise SdpxTypeError("invalid codec parameter")
        if key == "apt" and not _is_int(value):
            raise SdpxTypeError("invalid codec apt parameter")

    if not isinstance(codec.get("rtcpFeedback"), list):
        codec["rtcpFeedback"] = []
    for fb in codec["rtcpFeedback"]:
        validate_rtcp_feedback(fb)


def _mime_kind(codec: Dict[str, Any]) -> str:
    mime_type = codec.get("mimeType")
    if not isinstance(mime_type, str):
        raise SdpxTypeError("missing codec.mimeType")
    match = _MIME_TYPE.match(mime_type)
    if not match:
        raise SdpxTypeError("invalid codec.mimeType")
    return match.group(1).lower()


def validate_rtp_codec_capability(codec: Dict[str, Any]) -> None:
    """Validate RtpCodecCapability. Sets ``kind`` from the mime type."""
    if not isinstance(codec, dict):
        raise SdpxTypeError("codec is not an object")

    kind = _mime_kind(codec)
    codec["kind"] = kind

    if "preferredPayloadType" in codec and not _is_int(codec["preferredPayloadType"]):
        raise SdpxTypeError("invalid codec.preferredPayloadType")

    _validate_codec_common(codec, kind)


def validate_rtcp_feedback(fb: Dict[str, Any]) -> None:
    if not isinstance(fb, dict):
        raise SdpxTypeError("fb is not an object")
    if not isinstance(fb.get("type"), str):
        raise SdpxTypeError("missing fb.type")
    if not isinstance(fb.get("parameter"), str):
        fb["parameter"] = ""


def validate_rtp_header_extension(ext: Dict[str, Any]) -> None:
    """Validate RtpHeaderExtension (capability side)."""
    if not isinstance(ext, dict):
        raise SdpxTypeError("ext is not an object")

    kind = ext.get("kind")
    if not isinstance(kind, str):
        raise SdpxTypeError("missing ext.kind")
    if kind not in ("audio", "video"):
        raise SdpxTypeError("invalid ext.kind")

    if not _is_non_empty_str(ext.get("uri")):
        raise SdpxTypeError("missing ext.uri")

    if not _is_int(ext.get("preferredId")):
        raise SdpxTypeError("missing ext.preferredId")

    if "preferredEncrypt" in ext:
        if not isinstance(ext["preferredEncrypt"], bool):
            raise SdpxTypeError("invalid ext.preferredEncrypt")
    else:
        ext["preferredEncrypt"] = False

    if "direction" in ext:
        if not isinstance(ext["direction"], str):
            raise SdpxTypeError("invalid ext.direction")
    else:
        ext["direction"] = "sendrecv"


def validate_rtp_parameters(params: Dict[str, Any]) -> None:
    """
    Validate RtpParameters.

    ``mid`` is optional (``None`` counts as unset) but must be a non-empty
    string when given. ``headerExtensions`` and ``encodings`` default to
    empty lists and ``rtcp`` to an empty dict.
    """
    if not isinstance(params, dict):
        raise SdpxTypeError("params is not an object")

    mid = params.get("mid")
    if mid is not None and not _is_non_empty_str(mid):
        raise SdpxTypeError("params.mid is not a string")

    codecs = params.get("codecs")
    if not isinstance(codecs, list):
        raise SdpxTypeError("missing params.codecs")
    for codec in codecs:
        validate_rtp_codec_parameters(codec)

    header_extensions = params.setdefault("headerExtensions", [])
    if not isinstance(header_extensions, list):
        raise SdpxTypeError("params.headerExtensions is not an array")
    for ext in header_extensions:
        validate_rtp_header_extension_parameters(ext)

    encodings = params.setdefault("encodings", [])
    if not isinstance(encodings, list):
        raise SdpxTypeError("params.encodings is not an array")
    for encoding in encodings:
        validate_rtp_encoding_parameters(encoding)

    rtcp = params.setdefault("rtcp", {})
    if not isinstance(rtcp, dict):
        raise SdpxTypeError("params.rtcp is not an object")
    validate_rtcp_parameters(rtcp)


def validate_rtp_codec_parameters(codec: Dict[str, Any]) -> None:
    """Validate RtpCodecParameters."""
    if not isinstance(codec, dict):
        raise SdpxTypeError("codec is not an object")

    kind = _mime_kind(codec)

    if not _is_int(codec.get("payloadType")):
        raise SdpxTypeError("missing codec.payloadType")

    _validate_codec_common(codec, kind)


def validate_rtp_header_extension_parameters(ext: Dict[str, Any]) -> None:
    if not isinstance(ext, dict):
        raise SdpxTypeError("ext is not an object")

    if not _is_non_empty_str(ext.get("uri")):
        raise SdpxTypeError("missing ext.uri")

    if not _is_int(ext.get("id")):
        raise SdpxTypeError("missing ext.id")

    if "encrypt" in ext:
        if not isinstance(ext["encrypt"], bool):
            raise SdpxTypeError("invalid ext.encrypt")
    else:
        ext["encrypt"] = False

    if not isinstance(ext.get("parameters"), dict):
        ext["parameters"] = {}
    for value in ext["parameters"].values():
        if not isinstance(value, str) and not _is_number(value):
            raise SdpxTypeError("invalid header extension parameter")


def validate_rtp_encoding_parameters(encoding: Dict[str, Any]) -> None:
    if not isinstance(encoding, dict):
        raise SdpxTypeError("encoding is not an object")

    if "ssrc" in encoding and not _is_int(encoding["ssrc"]):
        raise SdpxTypeError("invalid encoding.ssrc")

    if "rid" in encoding and not _is_non_empty_str(encoding["rid"]):
        raise SdpxTypeError("invalid encoding.rid")

    if "rtx" in encoding:
        rtx = encoding["rtx"]
        if not isinstance(rtx, dict):
            raise SdpxTypeError("invalid encoding.rtx")
        if not _is_int(rtx.get("ssrc")):
            raise SdpxTypeError("missing encoding.rtx.ssrc")

    if not isinstance(encoding.get("dtx"), bool):
        encoding["dtx"] = False

    if "scalabilityMode" in encoding and not _is_non_empty_str(
        encoding["scalabilityMode"]
    ):
        raise SdpxTypeError("invalid encoding.scalabilityMode")


def validate_rtcp_parameters(rtcp: Dict[str, Any]) -> None:
    if not isinstance(rtcp, dict):
        raise SdpxTypeError("rtcp is not an object")

    if "cname" in rtcp and not isinstance(rtcp["cname"], str):
        raise SdpxTypeError("invalid rtcp.cname")

    if not isinstance(rtcp.get("reducedSize"), bool):
        rtcp["reducedSize"] = True


# =============================================================================
# SCTP
# =============================================================================


def validate_sctp_capabilities(caps: Dict[str, Any]) -> None:
    if not isinstance(caps, dict):
        raise SdpxTypeError("caps is not an object")
    if not isinstance(caps.get("numStreams"), dict):
        raise SdpxTypeError("missing caps.numStreams")
    validate_num_sctp_streams(caps["numStreams"])


def validate_num_sctp_streams(num_streams: Dict[str, Any]) -> None:
    if not isinstance(num_streams, dict):
        raise SdpxTypeError("numStreams is not an object")
    if not _is_int(num_streams.get("OS")):
        raise SdpxTypeError("missing numStreams.OS")
    if not _is_int(num_streams.get("MIS")):
        raise SdpxTypeError("missing numStreams.MIS")


def validate_sctp_parameters(params: Dict[str, Any]) -> None:
    if not isinstance(params, dict):
        raise SdpxTypeError("params is not an object")
    for key in ("port", "OS", "MIS", "maxMessageSize"):
        if not _is_int(params.get(key)):
            raise SdpxTypeError(f"missing params.{key}")


def validate_sctp_stream_parameters(params: Dict[str, Any]) -> None:
    """
    Validate SctpStreamParameters.

    A stream is either reliable (ordered) or partially reliable through one
    of ``maxPacketLifeTime`` or ``maxRetransmits``. When ``ordered`` is not
    given and a partial reliability field is, ``ordered`` becomes False.
    """
    if not isinstance(params, dict):
        raise SdpxTypeError("params is not an object")

    if not _is_int(params.get("streamId")):
        raise SdpxTypeError("missing params.streamId")

    ordered_given = isinstance(params.get("ordered"), bool)
    if not ordered_given:
        params["ordered"] = True

    lifetime_given = "maxPacketLifeTime" in params
    retransmits_given = "maxRetransmits" in params

    if not _is_int(params.get("maxPacketLifeTime")):
        params["maxPacketLifeTime"] = 0
    if not _is_int(params.get("maxRetransmits")):
        params["maxRetransmits"] = 0

    if lifetime_given and retransmits_given:
        raise SdpxTypeError("cannot provide both maxPacketLifeTime and maxRetransmits")

    partially_reliable = lifetime_given or retransmits_given
    if ordered_given and params["ordered"] and partially_reliable:
        raise SdpxTypeError("cannot be ordered with maxPacketLifeTime or maxRetransmits")
    if not ordered_given and partially_reliable:
        params["ordered"] = False

    if not isinstance(params.get("label"), str):
        params["label"] = ""
    if not isinstance(params.get("protocol"), str):
        params["protocol"] = ""


# =============================================================================
# ICE / DTLS
# =============================================================================


def validate_ice_parameters(params: Dict[str, Any]) -> None:
    if not isinstance(params, dict):
        raise SdpxTypeError("params is not an object")
    if not _is_non_empty_str(params.get("usernameFragment")):
        raise SdpxTypeError("missing params.usernameFragment")
    if not _is_non_empty_str(params.get("password")):
        raise SdpxTypeError("missing params.password")
    if not isinstance(params.get("iceLite"), bool):
        params["iceLite"] = False


def validate_ice_candidate(params: Dict[str, Any]) -> None:
    if not isinstance(params, dict):
        raise SdpxTypeError("params is not an object")

    if not _is_non_empty_str(params.get("foundation")):
        raise SdpxTypeError("missing params.foundation")
    if not _is_unsigned(params.get("priority")):
        raise SdpxTypeError("missing params.priority")
    if not _is_non_empty_str(params.get("ip")):
        raise SdpxTypeError("missing params.ip")

    protocol = params.get("protocol")
    if not _is_non_empty_str(protocol):
        raise SdpxTypeError("missing params.protocol")
    if not _ICE_PROTOCOL.match(protocol):
        raise SdpxTypeError("invalid params.protocol")

    if not _is_unsigned(params.get("port")):
        raise SdpxTypeError("missing params.port")

    candidate_type = params.get("type")
    if not _is_non_empty_str(candidate_type):
        raise SdpxTypeError("missing params.type")
    if not _ICE_TYPE.match(candidate_type):
        raise SdpxTypeError("invalid params.type")


def validate_ice_candidates(params: List[Dict[str, Any]]) -> None:
    if not isinstance(params, list):
        raise SdpxTypeError("params is not an array")
    for candidate in params:
        validate_ice_candidate(candidate)


def validate_dtls_fingerprint(params: Dict[str, Any]) -> None:
    if not isinstance(params, dict):
        raise SdpxTypeError("params is not an object")
    if not _is_non_empty_str(params.get("algorithm")):
        raise SdpxTypeError("missing params.algorithm")
    if not _is_non_empty_str(params.get("value")):
        raise SdpxTypeError("missing params.value")


def validate_dtls_parameters(params: Dict[str, Any]) -> None:
    if not isinstance(params, dict):
        raise SdpxTypeError("params is not an object")

    role = params.get("role")
    if not _is_non_empty_str(role):
        raise SdpxTypeError("missing params.role")
    if not _DTLS_ROLE.match(role):
        raise SdpxTypeError("invalid params.role")

    fingerprints = params.get("fingerprints")
    if not isinstance(fingerprints, list) or not fingerprints:
        raise SdpxTypeError("missing params.fingerprints")
    for fingerprint in fingerprints:
        validate_dtls_fingerprint(fingerprint)


# =============================================================================
# Producer codec options
# =============================================================================

_BOOLEAN_CODEC_OPTIONS = ("opusStereo", "opusFec", "opusDtx", "opusCbr")
_UNSIGNED_CODEC_OPTIONS = ("opusMaxPlaybackRate", "opusMaxAverageBitrate")
_INTEGER_CODEC_OPTIONS = (
    "opusPtime",
    "videoGoogleStartBitrate",
    "videoGoogleMaxBitrate",
    "videoGoogleMinBitrate",
)


def validate_producer_codec_options(params: Dict[str, Any]) -> None:
    if not isinstance(params, dict):
        raise SdpxTypeError("params is not an object")

    for key in _BOOLEAN_CODEC_OPTIONS:
        if key in params and not isinstance(params[key], bool):
            raise SdpxTypeError(f"invalid params.{key}")
    for key in _UNSIGNED_CODEC_OPTIONS:
        if key in params and not _is_unsigned(params[key]):
            raise SdpxTypeError(f"invalid params.{key}")
    for key in _INTEGER_CODEC_OPTIONS:
        if key in params and not _is_int(params[key]):
            raise SdpxTypeError(f"invalid params.{key}")


__all__ = [
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
]
