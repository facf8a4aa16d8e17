"""
ORTC RTP capability negotiation.

Matches local capabilities against remote ones and derives the parameters used
to send and receive media. All documents are plain dicts keyed the way they
appear on the wire (``mimeType``, ``preferredPayloadType``, ...).
"""

from __future__ import annotations

import copy
import re
from typing import Any, Dict, List, Optional

from ._h264 import generate_profile_level_id_for_answer, is_same_profile
from ._types import (
    ExtendedRtpCapabilities,
    RtpCapabilities,
    RtpParameters,
    SdpxTypeError,
)
from ._utils import (
    ABS_SEND_TIME_URI,
    PROBATOR_MID,
    PROBATOR_SSRC,
    TRANSPORT_CC_URI,
    logger,
)
from ._validators import validate_rtp_capabilities, validate_rtp_parameters

_RTX_MIME_TYPE = re.compile(r"^(audio|video)/rtx$", re.IGNORECASE)

_FLIPPED_DIRECTION = {
    "sendrecv": "sendrecv",
    "recvonly": "sendonly",
    "sendonly": "recvonly",
    "inactive": "inactive",
}


# =============================================================================
# Codec Matching
# =============================================================================


def is_rtx_codec(codec: Dict[str, Any]) -> bool:
    return bool(_RTX_MIME_TYPE.match(codec.get("mimeType", "")))


def _h264_packetization_mode(codec: Dict[str, Any]) -> int:
    value = codec["parameters"].get("packetization-mode")
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def _h264_parameters(codec: Dict[str, Any]) -> Dict[str, str]:
    parameters = codec["parameters"]
    level_asymmetry_allowed = parameters.get("level-asymmetry-allowed")
    if not isinstance(level_asymmetry_allowed, int) or isinstance(
        level_asymmetry_allowed, bool
    ):
        level_asymmetry_allowed = 0

    result = {
        "level-asymmetry-allowed": str(level_asymmetry_allowed),
        "packetization-mode": str(_h264_packetization_mode(codec)),
    }
    if "profile-level-id" in parameters:
        result["profile-level-id"] = str(parameters["profile-level-id"])
    return result


def _vp9_profile_id(codec: Dict[str, Any]) -> str:
    return str(codec["parameters"].get("profile-id", "0"))


def match_codecs(
    a_codec: Dict[str, Any],
    b_codec: Dict[str, Any],
    strict: bool = False,
    modify: bool = False,
) -> bool:
    """
    Check whether two codecs are compatible.

    Mime types are compared case-insensitively, then clock rate and channels.
    In strict mode H264 codecs must also agree on packetization mode and
    profile, and VP9 codecs on profile-id.

    Args:
        a_codec: First codec (local side when negotiating).
        b_codec: Second codec (remote side when negotiating).
        strict: Compare codec specific parameters too.
        modify: Write the negotiated H264 profile-level-id into both codecs.
    """
    a_mime_type = a_codec["mimeType"].lower()
    b_mime_type = b_codec["mimeType"].lower()

    if a_mime_type != b_mime_type:
        return False
    if a_codec.get("clockRate") != b_codec.get("clockRate"):
        return False
    if ("channels" in a_codec) != ("channels" in b_codec):
        return False
    if "channels" in a_codec and a_codec["channels"] != b_codec["channels"]:
        return False

    if a_mime_type == "video/h264" and strict:
        if _h264_packetization_mode(a_codec) != _h264_packetization_mode(b_codec):
            return False

        a_parameters = _h264_parameters(a_codec)
        b_parameters = _h264_parameters(b_codec)

        if not is_same_profile(a_parameters, b_parameters):
            return False

        try:
            profile_level_id = generate_profile_level_id_for_answer(
                a_parameters, b_parameters
            )
        except SdpxTypeError as e:
            logger.debug(f"H264 codecs do not match: {e}")
            return False

        if modify:
            if profile_level_id is not None:
                a_codec["parameters"]["profile-level-id"] = profile_level_id
                b_codec["parameters"]["profile-level-id"] = profile_level_id
            else:
                a_codec["parameters"].pop("profile-level-id", None)
                b_codec["parameters"].pop("profile-level-id", None)

    elif a_mime_type == "video/vp9" and strict:
        if _vp9_profile_id(a_codec) != _vp9_profile_id(b_codec):
            return False

    return True


def _match_header_extensions(a_ext: Dict[str, Any], b_ext: Dict[str, Any]) -> bool:
    return a_ext["kind"] == b_ext["kind"] and a_ext["uri"] == b_ext["uri"]


def reduce_rtcp_feedback(
    codec_a: Dict[str, Any], codec_b: Dict[str, Any]
) -> List[Dict[str, Any]]:
    """Keep the RTCP feedback entries of ``codec_a`` that ``codec_b`` also has."""
    reduced = []
    for a_fb in codec_a.get("rtcpFeedback", []):
        for b_fb in codec_b.get("rtcpFeedback", []):
            if a_fb["type"] == b_fb["type"] and a_fb.get("parameter") == b_fb.get(
                "parameter"
            ):
                reduced.append(b_fb)
                break
    return reduced


def reduce_codecs(
    codecs: List[Dict[str, Any]], cap_codec: Optional[Dict[str, Any]] = None
) -> List[Dict[str, Any]]:
    """
    Pick the codec to use plus its RTX codec.

    Without ``cap_codec`` the first codec is taken. Otherwise the first codec
    matching ``cap_codec`` is. An RTX codec right after it is kept too.

    Raises:
        SdpxTypeError: If no codec matches ``cap_codec``.
    """
    filtered: List[Dict[str, Any]] = []

    if not isinstance(cap_codec, dict):
        filtered.append(codecs[0])
        if len(codecs) > 1 and is_rtx_codec(codecs[1]):
            filtered.append(codecs[1])
        return filtered

    for idx, codec in enumerate(codecs):
        if match_codecs(codec, cap_codec):
            filtered.append(codec)
            if idx + 1 < len(codecs) and is_rtx_codec(codecs[idx + 1]):
                filtered.append(codecs[idx + 1])
            break

    if not filtered:
        raise SdpxTypeError("no matching codec found")

    return filtered


# =============================================================================
# Negotiation
# =============================================================================


def get_extended_rtp_capabilities(
    local_caps: RtpCapabilities, remote_caps: RtpCapabilities
) -> ExtendedRtpCapabilities:
    """
    Generate extended RTP capabilities for sending and receiving.

    Codecs keep the order preferred by ``remote_caps``. Both capability
    documents are validated (and completed with defaults) first.

    Raises:
        SdpxTypeError: If either capability document is invalid.
    """
    validate_rtp_capabilities(local_caps)
    validate_rtp_capabilities(remote_caps)

    extended: ExtendedRtpCapabilities = {"codecs": [], "headerExtensions": []}

    for remote_codec in remote_caps["codecs"]:
        if is_rtx_codec(remote_codec):
            continue

        local_codec = next(
            (
                codec
                for codec in local_caps["codecs"]
                if match_codecs(codec, remote_codec, strict=True, modify=True)
            ),
            None,
        )
        if local_codec is None:
            logger.debug(f"No local codec matches {remote_codec['mimeType']}")
            continue

        extended_codec = {
            "mimeType": local_codec["mimeType"],
            "kind": local_codec["kind"],
            "clockRate": local_codec["clockRate"],
            "localPayloadType": local_codec.get("preferredPayloadType"),
            "localRtxPayloadType": None,
            "remotePayloadType": remote_codec.get("preferredPayloadType"),
            "remoteRtxPayloadType": None,
            "localParameters": copy.deepcopy(local_codec["parameters"]),
            "remoteParameters": copy.deepcopy(remote_codec["parameters"]),
            "rtcpFeedback": copy.deepcopy(
                reduce_rtcp_feedback(local_codec, remote_codec)
            ),
        }
        if "channels" in local_codec:
            extended_codec["channels"] = local_codec["channels"]

        extended["codecs"].append(extended_codec)

    for extended_codec in extended["codecs"]:
        local_rtx = next(
            (
                codec
                for codec in local_caps["codecs"]
                if is_rtx_codec(codec)
                and codec["parameters"].get("apt") == extended_codec["localPayloadType"]
            ),
            None,
        )
        if local_rtx is None:
            continue

        remote_rtx = next(
            (
                codec
                for codec in remote_caps["codecs"]
                if is_rtx_codec(codec)
                and codec["parameters"].get("apt")
                == extended_codec["remotePayloadType"]
            ),
            None,
        )
        if remote_rtx is None:
            continue

        extended_codec["localRtxPayloadType"] = local_rtx.get("preferredPayloadType")
        extended_codec["remoteRtxPayloadType"] = remote_rtx.get("preferredPayloadType")

    for remote_ext in remote_caps["headerExtensions"]:
        local_ext = next(
            (
                ext
                for ext in local_caps["headerExtensions"]
                if _match_header_extensions(ext, remote_ext)
            ),
            None,
        )
        if local_ext is None:
            continue

        extended_ext = {
            "kind": remote_ext["kind"],
            "uri": remote_ext["uri"],
            "sendId": local_ext["preferredId"],
            "recvId": remote_ext["preferredId"],
            "encrypt": local_ext["preferredEncrypt"],
        }
        direction = _FLIPPED_DIRECTION.get(remote_ext["direction"])
        if direction is not None:
            extended_ext["direction"] = direction

        extended["headerExtensions"].append(extended_ext)

    logger.debug(
        f"Negotiated {len(extended['codecs'])} codecs and "
        f"{len(extended['headerExtensions'])} header extensions"
    )
    return extended


def get_recv_rtp_capabilities(
    extended_rtp_capabilities: ExtendedRtpCapabilities,
) -> RtpCapabilities:
    """Generate RTP capabilities for receiving media."""
    rtp_capabilities: RtpCapabilities = {"codecs": [], "headerExtensions": []}

    for extended_codec in extended_rtp_capabilities["codecs"]:
        codec = {
            "mimeType": extended_codec["mimeType"],
            "kind": extended_codec["kind"],
            "preferredPayloadType": extended_codec["remotePayloadType"],
            "clockRate": extended_codec["clockRate"],
            "parameters": copy.deepcopy(extended_codec["localParameters"]),
            "rtcpFeedback": copy.deepcopy(extended_codec["rtcpFeedback"]),
        }
        if "channels" in extended_codec:
            codec["channels"] = extended_codec["channels"]

        rtp_capabilities["codecs"].append(codec)

        if extended_codec["remoteRtxPayloadType"] is None:
            continue

        rtp_capabilities["codecs"].append(
            {
                "mimeType": f"{extended_codec['kind']}/rtx",
                "kind": extended_codec["kind"],
                "preferredPayloadType": extended_codec["remoteRtxPayloadType"],
                "clockRate": extended_codec["clockRate"],
                "parameters": {"apt": extended_codec["remotePayloadType"]},
                "rtcpFeedback": [],
            }
        )

    for extended_ext in extended_rtp_capabilities["headerExtensions"]:
        if extended_ext.get("direction") not in ("sendrecv", "recvonly"):
            continue

        rtp_capabilities["headerExtensions"].append(
            {
                "kind": extended_ext["kind"],
                "uri": extended_ext["uri"],
                "preferredId": extended_ext["recvId"],
                "preferredEncrypt": extended_ext["encrypt"],
                "direction": extended_ext["direction"],
            }
        )

    return rtp_capabilities


def _sending_rtp_parameters(
    kind: str,
    extended_rtp_capabilities: ExtendedRtpCapabilities,
    parameters_key: str,
) -> RtpParameters:
    rtp_parameters: RtpParameters = {
        "mid": None,
        "codecs": [],
        "headerExtensions": [],
        "encodings": [],
        "rtcp": {},
    }

    for extended_codec in extended_rtp_capabilities["codecs"]:
        if extended_codec["kind"] != kind:
            continue

        codec = {
            "mimeType": extended_codec["mimeType"],
            "payloadType": extended_codec["localPayloadType"],
            "clockRate": extended_codec["clockRate"],
            "parameters": copy.deepcopy(extended_codec[parameters_key]),
            "rtcpFeedback": copy.deepcopy(extended_codec["rtcpFeedback"]),
        }
        if "channels" in extended_codec:
            codec["channels"] = extended_codec["channels"]

        rtp_parameters["codecs"].append(codec)

        if extended_codec["localRtxPayloadType"] is not None:
            rtp_parameters["codecs"].append(
                {
                    "mimeType": f"{extended_codec['kind']}/rtx",
                    "payloadType": extended_codec["localRtxPayloadType"],
                    "clockRate": extended_codec["clockRate"],
                    "parameters": {"apt": extended_codec["localPayloadType"]},
                    "rtcpFeedback": [],
                }
            )

        # A single media codec plus an optional RTX codec.
        break

    for extended_ext in extended_rtp_capabilities["headerExtensions"]:
        if extended_ext["kind"] != kind:
            continue
        if extended_ext.get("direction") not in ("sendrecv", "sendonly"):
            continue

        rtp_parameters["headerExtensions"].append(
            {
                "uri": extended_ext["uri"],
                "id": extended_ext["sendId"],
                "encrypt": extended_ext["encrypt"],
                "parameters": {},
            }
        )

    return rtp_parameters


def get_sending_rtp_parameters(
    kind: str, extended_rtp_capabilities: ExtendedRtpCapabilities
) -> RtpParameters:
    """
    Generate RTP parameters of the given kind for sending media.

    Only the first media codec of ``kind`` (plus its RTX) is used. ``mid``,
    ``encodings`` and ``rtcp`` are left empty for the caller to fill in.
    """
    return _sending_rtp_parameters(kind, extended_rtp_capabilities, "localParameters")


def get_sending_remote_rtp_parameters(
    kind: str, extended_rtp_capabilities: ExtendedRtpCapabilities
) -> RtpParameters:
    """
    Like ``get_sending_rtp_parameters`` but with the remote codec parameters.

    RTCP feedback is reduced to a single congestion control mechanism:
    transport-cc when its header extension was negotiated, goog-remb when
    only abs-send-time was, neither otherwise.
    """
    rtp_parameters = _sending_rtp_parameters(
        kind, extended_rtp_capabilities, "remoteParameters"
    )

    uris = {ext["uri"] for ext in rtp_parameters["headerExtensions"]}
    if TRANSPORT_CC_URI in uris:
        dropped = {"goog-remb"}
    elif ABS_SEND_TIME_URI in uris:
        dropped = {"transport-cc"}
    else:
        dropped = {"transport-cc", "goog-remb"}

    for codec in rtp_parameters["codecs"]:
        codec["rtcpFeedback"] = [
            fb for fb in codec["rtcpFeedback"] if fb["type"] not in dropped
        ]

    return rtp_parameters


def generate_probator_rtp_parameters(video_rtp_parameters: RtpParameters) -> RtpParameters:
    """
    Create RTP parameters for the bandwidth probator consumer.

    The given parameters are not modified.

    Raises:
        SdpxTypeError: If ``video_rtp_parameters`` is invalid.
    """
    validated = copy.deepcopy(video_rtp_parameters)
    validate_rtp_parameters(validated)

    return {
        "mid": PROBATOR_MID,
        "codecs": [validated["codecs"][0]],
        "headerExtensions": [
            ext
            for ext in validated["headerExtensions"]
            if ext["uri"] in (ABS_SEND_TIME_URI, TRANSPORT_CC_URI)
        ],
        "encodings": [{"ssrc": PROBATOR_SSRC}],
        "rtcp": {"cname": PROBATOR_MID},
    }


def can_send(kind: str, extended_rtp_capabilities: ExtendedRtpCapabilities) -> bool:
    """Whether media of ``kind`` can be sent."""
    return any(codec["kind"] == kind for codec in extended_rtp_capabilities["codecs"])


def can_receive(
    rtp_parameters: RtpParameters, extended_rtp_capabilities: ExtendedRtpCapabilities
) -> bool:
    """
    Whether the given RTP parameters can be received.

    Raises:
        SdpxTypeError: If ``rtp_parameters`` is invalid.
    """
    validate_rtp_parameters(rtp_parameters)

    if not rtp_parameters["codecs"]:
        return False

    first_media_codec = rtp_parameters["codecs"][0]
    return any(
        codec["remotePayloadType"] == first_media_codec["payloadType"]
        for codec in extended_rtp_capabilities["codecs"]
    )


__all__ = [
    "is_rtx_codec",
    "match_codecs",
    "reduce_rtcp_feedback",
    "reduce_codecs",
    "get_extended_rtp_capabilities",
    "get_recv_rtp_capabilities",
    "get_sending_rtp_parameters",
    "get_sending_remote_rtp_parameters",
    "generate_probator_rtp_parameters",
    "can_send",
    "can_receive",
]
