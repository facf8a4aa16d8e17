"""
Helpers that read local SDP documents and patch answers.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .._parser import parse_params
from .._types import (
    DtlsRole,
    MediaObject,
    RtpCapabilities,
    RtpParameters,
    SdpxError,
    SessionDocument,
)
from .._utils import logger
from .._writer import write_params


def extract_rtp_capabilities(session: SessionDocument) -> RtpCapabilities:
    """
    Extract RTP capabilities from a local SDP document.

    Only the first m=audio and the first m=video sections are read. Codecs are
    returned sorted by payload type.

    Args:
        session: Parsed SDP (usually a local offer).

    Returns:
        Dict with ``codecs``, ``headerExtensions`` and ``fecMechanisms``.
    """
    codecs: Dict[int, Dict[str, Any]] = {}
    header_extensions: List[Dict[str, Any]] = []
    got_audio = False
    got_video = False

    for media in session.get("media", []):
        kind = media.get("type")

        if kind == "audio":
            if got_audio:
                continue
            got_audio = True
        elif kind == "video":
            if got_video:
                continue
            got_video = True
        else:
            continue

        for rtp in media.get("rtp", []):
            codec: Dict[str, Any] = {
                "kind": kind,
                "mimeType": f"{kind}/{rtp['codec']}",
                "preferredPayloadType": rtp["payload"],
                "clockRate": rtp["rate"],
                "parameters": {},
                "rtcpFeedback": [],
            }
            if kind == "audio":
                encoding = rtp.get("encoding")
                codec["channels"] = (
                    int(encoding) if isinstance(encoding, str) and encoding.isdigit() else 1
                )

            codecs[codec["preferredPayloadType"]] = codec

        for fmtp in media.get("fmtp", []):
            codec = codecs.get(fmtp["payload"])
            if codec is None:
                continue

            parameters = parse_params(fmtp.get("config", ""))
            # profile-id (VP9) is an integer in RTP parameters.
            if isinstance(parameters.get("profile-id"), str):
                parameters["profile-id"] = int(parameters["profile-id"])

            codec["parameters"] = parameters

        for fb in media.get("rtcpFb", []):
            payload = str(fb["payload"])
            if not payload.isdigit():
                logger.debug(f"Skipping rtcp-fb for payload {payload!r}")
                continue

            codec = codecs.get(int(payload))
            if codec is None:
                continue

            feedback = {"type": fb["type"]}
            if "subtype" in fb:
                feedback["parameter"] = fb["subtype"]
            codec["rtcpFeedback"].append(feedback)

        for ext in media.get("ext", []):
            header_extensions.append(
                {"kind": kind, "uri": ext["uri"], "preferredId": ext["value"]}
            )

    return {
        "headerExtensions": header_extensions,
        "codecs": [codecs[payload] for payload in sorted(codecs)],
        "fecMechanisms": [],
    }


def extract_dtls_parameters(session: SessionDocument) -> Dict[str, Any]:
    """
    Extract DTLS parameters from an SDP document.

    The first active media section with ICE credentials is used. Its
    fingerprint wins over a session-level one.
    """
    media: MediaObject = next(
        (
            m
            for m in session.get("media", [])
            if "iceUfrag" in m and m.get("port") != 0
        ),
        {},
    )

    fingerprint = media.get("fingerprint") or session.get("fingerprint") or {}

    role = ""
    if "setup" in media:
        dtls_role = DtlsRole.from_setup(media["setup"])
        if dtls_role is None:
            logger.warning(f"Unknown a=setup value: {media['setup']!r}")
        else:
            role = dtls_role.value

    return {
        "role": role,
        "fingerprints": [
            {"algorithm": fingerprint.get("type"), "value": fingerprint.get("hash")}
        ],
    }


def add_legacy_simulcast(offer_media_object: MediaObject, num_streams: int) -> None:
    """
    Rewrite the ssrc lines of an offer for plan-b style simulcast.

    Consecutive SSRCs (and RTX SSRCs) are allocated from the first ones found
    and grouped with a=ssrc-group:SIM plus one FID group per stream.

    Raises:
        SdpxError: If the msid or cname ssrc attribute is missing.
    """
    if num_streams <= 1:
        return

    ssrcs = offer_media_object.get("ssrcs", [])

    msid_line = next((line for line in ssrcs if line.get("attribute") == "msid"), None)
    if msid_line is None:
        logger.error("a=ssrc line with msid information not found")
        raise SdpxError("a=ssrc line with msid information not found")

    stream_id, track_id = msid_line["value"].split(" ")[:2]
    first_ssrc = msid_line["id"]
    first_rtx_ssrc = 0

    for group in offer_media_object.get("ssrcGroups", []):
        if group.get("semantics") != "FID" or not isinstance(group.get("ssrcs"), str):
            continue
        ids = group["ssrcs"].split(" ")
        if int(ids[0]) == first_ssrc:
            first_rtx_ssrc = int(ids[1])
            break

    cname_line = next(
        (
            line
            for line in ssrcs
            if line.get("attribute") == "cname" and isinstance(line.get("id"), int)
        ),
        None,
    )
    if cname_line is None:
        logger.error("CNAME line not found")
        raise SdpxError("CNAME line not found")

    cname = cname_line["value"]
    msid = f"{stream_id} {track_id}"

    media_ssrcs = [first_ssrc + i for i in range(num_streams)]
    rtx_ssrcs = [first_rtx_ssrc + i for i in range(num_streams)] if first_rtx_ssrc else []

    offer_media_object["ssrcGroups"] = [
        {"semantics": "SIM", "ssrcs": " ".join(str(ssrc) for ssrc in media_ssrcs)}
    ]
    offer_media_object["ssrcs"] = []

    for ssrc in media_ssrcs:
        offer_media_object["ssrcs"].append({"id": ssrc, "attribute": "cname", "value": cname})
        offer_media_object["ssrcs"].append({"id": ssrc, "attribute": "msid", "value": msid})

    for ssrc, rtx_ssrc in zip(media_ssrcs, rtx_ssrcs):
        offer_media_object["ssrcGroups"].append(
            {"semantics": "FID", "ssrcs": f"{ssrc} {rtx_ssrc}"}
        )
        offer_media_object["ssrcs"].append(
            {"id": rtx_ssrc, "attribute": "cname", "value": cname}
        )
        offer_media_object["ssrcs"].append(
            {"id": rtx_ssrc, "attribute": "msid", "value": msid}
        )


def get_cname(offer_media_object: MediaObject) -> str:
    """Value of the first ssrc attribute line, or ``""``."""
    for line in offer_media_object.get("ssrcs", []):
        if isinstance(line.get("attribute"), str):
            return line.get("value", "")
    return ""


def get_rtp_encodings(offer_media_object: MediaObject) -> List[Dict[str, Any]]:
    """
    Build RTP encodings from the ssrc lines of an offer.

    SSRCs keep the order in which they appear. RTX SSRCs paired through an
    FID group are attached to their media SSRC instead of being listed.

    Raises:
        SdpxError: If the section has no a=ssrc lines.
    """
    ssrcs: List[int] = []
    for line in offer_media_object.get("ssrcs", []):
        ssrc = line["id"]
        # Lines of the same SSRC are consecutive.
        if not ssrcs or ssrcs[-1] != ssrc:
            ssrcs.append(ssrc)

    if not ssrcs:
        raise SdpxError("no a=ssrc lines found")

    ssrc_to_rtx_ssrc: Dict[int, int] = {}
    for group in offer_media_object.get("ssrcGroups", []):
        if group["semantics"] != "FID":
            continue

        ssrc, rtx_ssrc = (int(value) for value in group["ssrcs"].split(" ")[:2])
        ssrcs = [s for s in ssrcs if s != rtx_ssrc]
        ssrc_to_rtx_ssrc[ssrc] = rtx_ssrc

    encodings = []
    for ssrc in ssrcs:
        encoding: Dict[str, Any] = {"ssrc": ssrc}
        if ssrc in ssrc_to_rtx_ssrc:
            encoding["rtx"] = {"ssrc": ssrc_to_rtx_ssrc[ssrc]}
        encodings.append(encoding)

    return encodings


def apply_codec_parameters(
    offer_rtp_parameters: RtpParameters, answer_media_object: MediaObject
) -> None:
    """
    Copy codec parameters the remote side needs into an answer.

    Only opus is handled: ``sprop-stereo`` in the offer becomes ``stereo`` in
    the answer's fmtp.
    """
    for codec in offer_rtp_parameters["codecs"]:
        mime_type = codec["mimeType"].lower()
        if mime_type != "audio/opus":
            continue

        payload_type = codec["payloadType"]
        if not any(rtp["payload"] == payload_type for rtp in answer_media_object.get("rtp", [])):
            continue

        fmtps = answer_media_object.setdefault("fmtp", [])
        fmtp = next((f for f in fmtps if f["payload"] == payload_type), None)
        if fmtp is None:
            fmtp = {"payload": payload_type, "config": ""}
            fmtps.append(fmtp)

        parameters = parse_params(fmtp.get("config", ""))

        sprop_stereo = codec["parameters"].get("sprop-stereo")
        if isinstance(sprop_stereo, bool):
            parameters["stereo"] = 1 if sprop_stereo else 0

        fmtp["config"] = write_params(parameters)


__all__ = [
    "extract_rtp_capabilities",
    "extract_dtls_parameters",
    "add_legacy_simulcast",
    "get_cname",
    "get_rtp_encodings",
    "apply_codec_parameters",
]
