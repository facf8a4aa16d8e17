"""Shared test fixtures."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

from sdpx._utils import ABS_SEND_TIME_URI, TRANSPORT_CC_URI

DATA_DIR = Path(__file__).parent / "data"

AUDIO_LEVEL_URI = "urn:ietf:params:rtp-hdrext:ssrc-audio-level"
MID_URI = "urn:ietf:params:rtp-hdrext:sdes:mid"
TOFFSET_URI = "urn:ietf:params:rtp-hdrext:toffset"
VIDEO_ORIENTATION_URI = "urn:3gpp:video-orientation"


def _read_sdp(name: str) -> str:
    """Fixture files are stored with LF line endings; SDP uses CRLF."""
    text = (DATA_DIR / name).read_text()
    return "".join(f"{line}\r\n" for line in text.splitlines())


@pytest.fixture
def load_sdp() -> Callable[[str], str]:
    return _read_sdp


# ---------------------------------------------------------------------------
# RTP capabilities
# ---------------------------------------------------------------------------

_ROUTER_RTP_CAPABILITIES: Dict[str, Any] = {
    "codecs": [
        {
            "mimeType": "audio/opus",
            "kind": "audio",
            "preferredPayloadType": 100,
            "clockRate": 48000,
            "channels": 2,
            "parameters": {"useinbandfec": 1},
            "rtcpFeedback": [],
        },
        {
            "mimeType": "video/VP8",
            "kind": "video",
            "preferredPayloadType": 101,
            "clockRate": 90000,
            "parameters": {"x-google-start-bitrate": "1500"},
            "rtcpFeedback": [
                {"type": "nack"},
                {"type": "nack", "parameter": "pli"},
                {"type": "nack", "parameter": "sli"},
                {"type": "nack", "parameter": "rpsi"},
                {"type": "nack", "parameter": "app"},
                {"type": "ccm", "parameter": "fir"},
                {"type": "goog-remb"},
            ],
        },
        {
            "mimeType": "video/rtx",
            "kind": "video",
            "preferredPayloadType": 102,
            "clockRate": 90000,
            "parameters": {"apt": 101},
            "rtcpFeedback": [],
        },
        {
            "mimeType": "video/H264",
            "kind": "video",
            "preferredPayloadType": 103,
            "clockRate": 90000,
            "parameters": {
                "level-asymmetry-allowed": 1,
                "packetization-mode": 1,
                "profile-level-id": "42e01f",
            },
            "rtcpFeedback": [
                {"type": "nack"},
                {"type": "nack", "parameter": "pli"},
                {"type": "ccm", "parameter": "fir"},
                {"type": "goog-remb"},
            ],
        },
        {
            "mimeType": "video/rtx",
            "kind": "video",
            "preferredPayloadType": 104,
            "clockRate": 90000,
            "parameters": {"apt": 103},
            "rtcpFeedback": [],
        },
    ],
    "headerExtensions": [
        {"kind": "audio", "uri": MID_URI, "preferredId": 1},
        {"kind": "video", "uri": MID_URI, "preferredId": 1},
        {"kind": "audio", "uri": AUDIO_LEVEL_URI, "preferredId": 10},
        {"kind": "video", "uri": TOFFSET_URI, "preferredId": 2},
        {"kind": "video", "uri": ABS_SEND_TIME_URI, "preferredId": 4},
        {"kind": "video", "uri": TRANSPORT_CC_URI, "preferredId": 5},
        {
            "kind": "video",
            "uri": VIDEO_ORIENTATION_URI,
            "preferredId": 13,
            "direction": "sendonly",
        },
    ],
    "fecMechanisms": [],
}

_LOCAL_RTP_CAPABILITIES: Dict[str, Any] = {
    "codecs": [
        {
            "mimeType": "audio/opus",
            "kind": "audio",
            "preferredPayloadType": 111,
            "clockRate": 48000,
            "channels": 2,
            "parameters": {"minptime": 10, "useinbandfec": 1},
            "rtcpFeedback": [{"type": "transport-cc"}],
        },
        {
            "mimeType": "audio/ISAC",
            "kind": "audio",
            "preferredPayloadType": 103,
            "clockRate": 16000,
            "channels": 1,
        },
        {
            "mimeType": "video/VP8",
            "kind": "video",
            "preferredPayloadType": 96,
            "clockRate": 90000,
            "rtcpFeedback": [
                {"type": "goog-remb"},
                {"type": "transport-cc"},
                {"type": "ccm", "parameter": "fir"},
                {"type": "nack"},
                {"type": "nack", "parameter": "pli"},
            ],
        },
        {
            "mimeType": "video/rtx",
            "kind": "video",
            "preferredPayloadType": 97,
            "clockRate": 90000,
            "parameters": {"apt": 96},
        },
        {
            "mimeType": "video/H264",
            "kind": "video",
            "preferredPayloadType": 102,
            "clockRate": 90000,
            "parameters": {
                "level-asymmetry-allowed": 1,
                "packetization-mode": 1,
                "profile-level-id": "42e034",
            },
            "rtcpFeedback": [
                {"type": "goog-remb"},
                {"type": "transport-cc"},
                {"type": "ccm", "parameter": "fir"},
                {"type": "nack"},
                {"type": "nack", "parameter": "pli"},
            ],
        },
        {
            "mimeType": "video/rtx",
            "kind": "video",
            "preferredPayloadType": 125,
            "clockRate": 90000,
            "parameters": {"apt": 102},
        },
    ],
    "headerExtensions": [
        {"kind": "audio", "uri": AUDIO_LEVEL_URI, "preferredId": 1},
        {"kind": "audio", "uri": MID_URI, "preferredId": 9},
        {"kind": "video", "uri": TOFFSET_URI, "preferredId": 2},
        {"kind": "video", "uri": ABS_SEND_TIME_URI, "preferredId": 3},
        {"kind": "video", "uri": TRANSPORT_CC_URI, "preferredId": 5},
        {"kind": "video", "uri": VIDEO_ORIENTATION_URI, "preferredId": 4},
        {"kind": "video", "uri": MID_URI, "preferredId": 9},
    ],
}


@pytest.fixture
def router_rtp_capabilities() -> Dict[str, Any]:
    return copy.deepcopy(_ROUTER_RTP_CAPABILITIES)


@pytest.fixture
def local_rtp_capabilities() -> Dict[str, Any]:
    return copy.deepcopy(_LOCAL_RTP_CAPABILITIES)


# ---------------------------------------------------------------------------
# Transport parameters
# ---------------------------------------------------------------------------


@pytest.fixture
def ice_parameters() -> Dict[str, Any]:
    return {
        "usernameFragment": "5I2uVefP13X1wzOY",
        "password": "e46UjXntt0K/xTncQcDBQePn",
        "iceLite": True,
    }


@pytest.fixture
def ice_candidates() -> list:
    return [
        {
            "foundation": "udpcandidate",
            "ip": "9.9.9.9",
            "port": 40533,
            "priority": 1078862079,
            "protocol": "udp",
            "type": "host",
        },
        {
            "foundation": "tcpcandidate",
            "ip": "9.9.9.9",
            "port": 41333,
            "priority": 1078862078,
            "protocol": "tcp",
            "type": "host",
            "tcpType": "passive",
        },
    ]


@pytest.fixture
def dtls_parameters() -> Dict[str, Any]:
    return {
        "role": "auto",
        "fingerprints": [
            {
                "algorithm": "sha-1",
                "value": "42:89:C5:C6:55:9D:6E:C8:E8:83:55:2A:39:F9:B6:EB:E9:A3:A9:E7",
            },
            {
                "algorithm": "sha-256",
                "value": (
                    "79:14:AB:AB:93:7F:07:E8:91:1A:11:16:36:D0:11:66:"
                    "C4:4F:31:A0:74:46:65:58:70:E5:09:95:48:F4:4B:D9"
                ),
            },
        ],
    }


@pytest.fixture
def sctp_parameters() -> Dict[str, Any]:
    return {"port": 5000, "OS": 1024, "MIS": 1024, "maxMessageSize": 262144}


# ---------------------------------------------------------------------------
# RTP parameters of a local audio/video offer (see data/audio_video.sdp)
# ---------------------------------------------------------------------------


@pytest.fixture
def audio_offer_rtp_parameters() -> Dict[str, Any]:
    return {
        "mid": "0",
        "codecs": [
            {
                "mimeType": "audio/opus",
                "payloadType": 111,
                "clockRate": 48000,
                "channels": 2,
                "parameters": {"minptime": 10, "useinbandfec": 1},
                "rtcpFeedback": [{"type": "transport-cc", "parameter": ""}],
            }
        ],
        "headerExtensions": [
            {"uri": AUDIO_LEVEL_URI, "id": 1},
            {"uri": MID_URI, "id": 9},
        ],
        "encodings": [{"ssrc": 1001}],
        "rtcp": {"cname": "3p5uM8Xs5QnN9Rx1"},
    }


@pytest.fixture
def audio_answer_rtp_parameters() -> Dict[str, Any]:
    return {
        "mid": "0",
        "codecs": [
            {
                "mimeType": "audio/opus",
                "payloadType": 111,
                "clockRate": 48000,
                "channels": 2,
                "parameters": {"useinbandfec": 1},
                "rtcpFeedback": [{"type": "transport-cc", "parameter": ""}],
            }
        ],
        "headerExtensions": [
            {"uri": AUDIO_LEVEL_URI, "id": 10},
            {"uri": VIDEO_ORIENTATION_URI, "id": 13},
        ],
        "encodings": [],
        "rtcp": {},
    }


@pytest.fixture
def video_rtp_parameters() -> Dict[str, Any]:
    return {
        "mid": "1",
        "codecs": [
            {
                "mimeType": "video/VP8",
                "payloadType": 96,
                "clockRate": 90000,
                "parameters": {},
                "rtcpFeedback": [
                    {"type": "nack", "parameter": ""},
                    {"type": "nack", "parameter": "pli"},
                ],
            },
            {
                "mimeType": "video/rtx",
                "payloadType": 97,
                "clockRate": 90000,
                "parameters": {"apt": 96},
                "rtcpFeedback": [],
            },
        ],
        "headerExtensions": [
            {"uri": TOFFSET_URI, "id": 2},
            {"uri": ABS_SEND_TIME_URI, "id": 3},
            {"uri": MID_URI, "id": 9},
        ],
        "encodings": [{"ssrc": 3142507807, "rtx": {"ssrc": 3142507806}}],
        "rtcp": {"cname": "3p5uM8Xs5QnN9Rx1"},
    }
