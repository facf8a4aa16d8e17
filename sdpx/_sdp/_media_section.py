"""
Media sections of a remote SDP.

A media section owns the dict for one m= block. ``AnswerMediaSection`` answers
a local offer (we are sending), ``OfferMediaSection`` builds a remote offer
(we are receiving).
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .._types import (
    DtlsRole,
    IceCandidates,
    MediaObject,
    RtpParameters,
    SessionConfig,
    UnsupportedError,
)
from .._utils import logger
from .._writer import write_params

_MIME_TYPE_PREFIX = re.compile(r"^(audio|video)/", re.IGNORECASE)

_VIDEO_BITRATE_CODECS = ("video/vp8", "video/vp9", "video/h264", "video/h265")


def _codec_name(codec: Dict[str, Any]) -> str:
    return _MIME_TYPE_PREFIX.sub("", codec["mimeType"])


def _setup_for_role(role: str) -> Optional[str]:
    try:
        return DtlsRole(role).setup
    except ValueError:
        logger.warning(f"Unknown DTLS role: {role!r}")
        return None


class MediaSection(ABC):
    """
    Base class for a single m= section.

    Fills in the ICE attributes shared by every section: credentials, the
    candidate list (always component 1, since rtcp-mux is mandatory) and the
    end-of-candidates marker.
    """

    def __init__(
        self,
        ice_parameters: Dict[str, Any],
        ice_candidates: IceCandidates,
        config: Optional[SessionConfig] = None,
    ) -> None:
        self._config = config or SessionConfig()
        self._media_object: MediaObject = {}

        self.set_ice_parameters(ice_parameters)

        self._media_object["candidates"] = []
        for candidate in ice_candidates:
            candidate_object = {
                "component": 1,
                "foundation": candidate["foundation"],
                "ip": candidate["ip"],
                "port": candidate["port"],
                "priority": candidate["priority"],
                "transport": candidate["protocol"],
                "type": candidate["type"],
            }
            if "tcpType" in candidate:
                candidate_object["tcptype"] = candidate["tcpType"]

            self._media_object["candidates"].append(candidate_object)

        self._media_object["endOfCandidates"] = "end-of-candidates"
        self._media_object["iceOptions"] = self._config.ice_options

    @property
    def mid(self) -> str:
        return self._media_object["mid"]

    @property
    def closed(self) -> bool:
        return self._media_object.get("port") == 0

    def get_object(self) -> MediaObject:
        """The live media dict, as placed in the session document."""
        return self._media_object

    def set_ice_parameters(self, ice_parameters: Dict[str, Any]) -> None:
        self._media_object["iceUfrag"] = ice_parameters["usernameFragment"]
        self._media_object["icePwd"] = ice_parameters["password"]

    @abstractmethod
    def set_dtls_role(self, role: str) -> None:
        """Update a=setup for the given local DTLS role."""
        ...

    def disable(self) -> None:
        """Make the section inactive but keep its transport (port stays)."""
        self._media_object["direction"] = "inactive"
        for key in ("ext", "ssrcs", "ssrcGroups", "simulcast", "rids"):
            self._media_object.pop(key, None)

    def close(self) -> None:
        """Reject the section (port 0) so it can be recycled."""
        self.disable()
        self._media_object["port"] = 0
        self._media_object.pop("extmapAllowMixed", None)

    def _set_transport(self, mid: str, kind: str, protocol: str) -> None:
        self._media_object["mid"] = mid
        self._media_object["type"] = kind
        self._media_object["protocol"] = protocol
        self._media_object["connection"] = {
            "ip": self._config.connection_ip,
            "version": 4,
        }
        self._media_object["port"] = self._config.media_port

    def _add_codecs(
        self, codecs: List[Dict[str, Any]], parameters_by_payload: Dict[int, Any]
    ) -> None:
        self._media_object["rtp"] = []
        self._media_object["rtcpFb"] = []
        self._media_object["fmtp"] = []

        for codec in codecs:
            rtp = {
                "payload": codec["payloadType"],
                "codec": _codec_name(codec),
                "rate": codec["clockRate"],
            }
            if codec.get("channels", 1) > 1:
                rtp["encoding"] = codec["channels"]
            self._media_object["rtp"].append(rtp)

            parameters = parameters_by_payload.get(codec["payloadType"], codec["parameters"])
            config = write_params(parameters)
            if config:
                self._media_object["fmtp"].append(
                    {"payload": codec["payloadType"], "config": config}
                )

            for fb in codec.get("rtcpFeedback", []):
                self._media_object["rtcpFb"].append(
                    {
                        "payload": codec["payloadType"],
                        "type": fb["type"],
                        "subtype": fb.get("parameter", ""),
                    }
                )

        self._media_object["payloads"] = " ".join(
            str(codec["payloadType"]) for codec in codecs
        )


class AnswerMediaSection(MediaSection):
    """
    Answer to a local offer m= section.

    For audio and video the answer is recvonly from the remote point of view
    and only carries header extensions the offer also has. Producer codec
    options, when given, are written into both the offer codec parameters and
    the answer fmtp.

    Example:
        >>> section = AnswerMediaSection(
        ...     ice_parameters, ice_candidates, dtls_parameters, None,
        ...     offer_media_object, offer_rtp_parameters, answer_rtp_parameters,
        ... )
        >>> section.get_object()["direction"]
        'recvonly'
    """

    def __init__(
        self,
        ice_parameters: Dict[str, Any],
        ice_candidates: IceCandidates,
        dtls_parameters: Dict[str, Any],
        sctp_parameters: Optional[Dict[str, Any]],
        offer_media_object: MediaObject,
        offer_rtp_parameters: RtpParameters,
        answer_rtp_parameters: RtpParameters,
        codec_options: Optional[Dict[str, Any]] = None,
        config: Optional[SessionConfig] = None,
    ) -> None:
        super().__init__(ice_parameters, ice_candidates, config)

        kind = offer_media_object["type"]
        self._set_transport(offer_media_object["mid"], kind, offer_media_object["protocol"])
        self.set_dtls_role(dtls_parameters["role"])

        if kind in ("audio", "video"):
            self._build_rtp(
                offer_media_object, offer_rtp_parameters, answer_rtp_parameters, codec_options
            )
        elif kind == "application":
            self._media_object["payloads"] = "webrtc-datachannel"
            self._media_object["sctpPort"] = sctp_parameters["port"]
            self._media_object["maxMessageSize"] = sctp_parameters["maxMessageSize"]
        else:
            logger.error(f"Unsupported media kind: {kind!r}")
            raise UnsupportedError(f"unsupported media kind: {kind}")

    def _build_rtp(
        self,
        offer_media_object: MediaObject,
        offer_rtp_parameters: RtpParameters,
        answer_rtp_parameters: RtpParameters,
        codec_options: Optional[Dict[str, Any]],
    ) -> None:
        self._media_object["direction"] = "recvonly"

        answer_codecs = answer_rtp_parameters["codecs"]
        parameters_by_payload: Dict[int, Dict[str, Any]] = {}

        for codec in answer_codecs:
            codec_parameters = dict(codec["parameters"])
            if codec_options:
                offer_codec = next(
                    (
                        c
                        for c in offer_rtp_parameters["codecs"]
                        if c["payloadType"] == codec["payloadType"]
                    ),
                    None,
                )
                if offer_codec is not None:
                    _apply_codec_options(codec, offer_codec, codec_parameters, codec_options)
            parameters_by_payload[codec["payloadType"]] = codec_parameters

        self._add_codecs(answer_codecs, parameters_by_payload)

        offer_uris = {ext["uri"] for ext in offer_media_object.get("ext", [])}
        self._media_object["ext"] = [
            {"uri": ext["uri"], "value": ext["id"]}
            for ext in answer_rtp_parameters.get("headerExtensions", [])
            if ext["uri"] in offer_uris
        ]

        # One and two byte header extensions.
        if isinstance(offer_media_object.get("extmapAllowMixed"), str):
            self._media_object["extmapAllowMixed"] = "extmap-allow-mixed"

        simulcast = offer_media_object.get("simulcast")
        rids = offer_media_object.get("rids")
        if isinstance(simulcast, dict) and isinstance(rids, list):
            self._media_object["simulcast"] = {
                "dir1": "recv",
                "list1": simulcast.get("list1"),
            }
            self._media_object["rids"] = [
                {"id": rid["id"], "direction": "recv"}
                for rid in rids
                if rid.get("direction") == "send"
            ]

        self._media_object["rtcpMux"] = "rtcp-mux"
        self._media_object["rtcpRsize"] = "rtcp-rsize"

    def set_dtls_role(self, role: str) -> None:
        setup = _setup_for_role(role)
        if setup is not None:
            self._media_object["setup"] = setup


def _apply_codec_options(
    codec: Dict[str, Any],
    offer_codec: Dict[str, Any],
    codec_parameters: Dict[str, Any],
    codec_options: Dict[str, Any],
) -> None:
    mime_type = codec["mimeType"].lower()

    if mime_type == "audio/opus":
        # Boolean options go into both the offer and the answer.
        for option, offer_key, answer_key in (
            ("opusStereo", "sprop-stereo", "stereo"),
            ("opusFec", "useinbandfec", "useinbandfec"),
            ("opusDtx", "usedtx", "usedtx"),
            ("opusCbr", "cbr", "cbr"),
        ):
            if option in codec_options:
                value = 1 if codec_options[option] else 0
                offer_codec["parameters"][offer_key] = value
                codec_parameters[answer_key] = value

        for option, answer_key in (
            ("opusMaxPlaybackRate", "maxplaybackrate"),
            ("opusMaxAverageBitrate", "maxaveragebitrate"),
            ("opusPtime", "ptime"),
        ):
            if option in codec_options:
                codec_parameters[answer_key] = codec_options[option]

    elif mime_type in _VIDEO_BITRATE_CODECS:
        for option, answer_key in (
            ("videoGoogleStartBitrate", "x-google-start-bitrate"),
            ("videoGoogleMaxBitrate", "x-google-max-bitrate"),
            ("videoGoogleMinBitrate", "x-google-min-bitrate"),
        ):
            if option in codec_options:
                codec_parameters[answer_key] = codec_options[option]


class OfferMediaSection(MediaSection):
    """
    Remote offer m= section for media we receive.

    The section is sendonly and signals the sender's SSRC (and RTX SSRC) with
    cname and msid attributes. An offer always uses ``a=setup:actpass``.
    """

    def __init__(
        self,
        ice_parameters: Dict[str, Any],
        ice_candidates: IceCandidates,
        dtls_parameters: Dict[str, Any],
        sctp_parameters: Optional[Dict[str, Any]],
        mid: str,
        kind: str,
        offer_rtp_parameters: RtpParameters,
        stream_id: str = "",
        track_id: str = "",
        config: Optional[SessionConfig] = None,
    ) -> None:
        super().__init__(ice_parameters, ice_candidates, config)

        protocol = "UDP/TLS/RTP/SAVPF" if sctp_parameters is None else "UDP/DTLS/SCTP"
        self._set_transport(mid, kind, protocol)
        self._media_object["setup"] = DtlsRole.AUTO.setup

        if kind in ("audio", "video"):
            self._build_rtp(offer_rtp_parameters, stream_id, track_id)
        elif kind == "application":
            self._media_object["payloads"] = "webrtc-datachannel"
            self._media_object["sctpPort"] = sctp_parameters["port"]
            self._media_object["maxMessageSize"] = sctp_parameters["maxMessageSize"]
        else:
            logger.error(f"Unsupported media kind: {kind!r}")
            raise UnsupportedError(f"unsupported media kind: {kind}")

    def _build_rtp(
        self, offer_rtp_parameters: RtpParameters, stream_id: str, track_id: str
    ) -> None:
        self._media_object["direction"] = "sendonly"

        self._add_codecs(offer_rtp_parameters["codecs"], {})

        self._media_object["ext"] = [
            {"uri": ext["uri"], "value": ext["id"]}
            for ext in offer_rtp_parameters.get("headerExtensions", [])
        ]

        self._media_object["rtcpMux"] = "rtcp-mux"
        self._media_object["rtcpRsize"] = "rtcp-rsize"

        encoding = offer_rtp_parameters["encodings"][0]
        ssrc = encoding["ssrc"]
        rtx_ssrc = encoding.get("rtx", {}).get("ssrc", 0)

        self._media_object["ssrcs"] = []
        self._media_object["ssrcGroups"] = []

        cname = offer_rtp_parameters.get("rtcp", {}).get("cname")
        if not isinstance(cname, str):
            return

        msid = f"{stream_id} {track_id}"
        ssrc_ids = [ssrc, rtx_ssrc] if rtx_ssrc else [ssrc]
        for ssrc_id in ssrc_ids:
            self._media_object["ssrcs"].append(
                {"id": ssrc_id, "attribute": "cname", "value": cname}
            )
            self._media_object["ssrcs"].append(
                {"id": ssrc_id, "attribute": "msid", "value": msid}
            )

        if rtx_ssrc:
            self._media_object["ssrcGroups"].append(
                {"semantics": "FID", "ssrcs": f"{ssrc} {rtx_ssrc}"}
            )

    def set_dtls_role(self, role: str) -> None:
        # An SDP offer always has a=setup:actpass.
        self._media_object["setup"] = DtlsRole.AUTO.setup


__all__ = ["MediaSection", "AnswerMediaSection", "OfferMediaSection"]
