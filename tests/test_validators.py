import pytest

from sdpx import (
    SdpxTypeError,
    validate_dtls_parameters,
    validate_ice_candidate,
    validate_ice_candidates,
    validate_ice_parameters,
    validate_producer_codec_options,
    validate_rtcp_feedback,
    validate_rtp_capabilities,
    validate_rtp_codec_capability,
    validate_rtp_encoding_parameters,
    validate_rtp_header_extension,
    validate_rtp_parameters,
    validate_sctp_capabilities,
    validate_sctp_parameters,
    validate_sctp_stream_parameters,
)


# ---------------------------------------------------------------------------
# RTP capabilities
# ---------------------------------------------------------------------------


def test_rtp_capabilities_defaults():
    caps = {}
    validate_rtp_capabilities(caps)
    assert caps == {"codecs": [], "headerExtensions": []}


def test_rtp_capabilities_fill_codec_and_extension_defaults(local_rtp_capabilities):
    validate_rtp_capabilities(local_rtp_capabilities)

    isac = local_rtp_capabilities["codecs"][1]
    assert isac["kind"] == "audio"
    assert isac["parameters"] == {}
    assert isac["rtcpFeedback"] == []

    vp8 = local_rtp_capabilities["codecs"][2]
    assert {"type": "goog-remb", "parameter": ""} in vp8["rtcpFeedback"]

    ext = local_rtp_capabilities["headerExtensions"][0]
    assert ext["preferredEncrypt"] is False
    assert ext["direction"] == "sendrecv"


def test_rtp_capabilities_not_a_dict():
    with pytest.raises(SdpxTypeError, match="caps is not an object"):
        validate_rtp_capabilities([])


def test_rtp_capabilities_codecs_not_a_list():
    with pytest.raises(SdpxTypeError, match="caps.codecs is not an array"):
        validate_rtp_capabilities({"codecs": {}})


def test_codec_capability_kind_from_mime_type():
    codec = {"mimeType": "VIDEO/VP8", "clockRate": 90000, "channels": 2}
    validate_rtp_codec_capability(codec)

    assert codec["kind"] == "video"
    assert "channels" not in codec


def test_codec_capability_audio_channels_default():
    codec = {"mimeType": "audio/PCMU", "clockRate": 8000}
    validate_rtp_codec_capability(codec)
    assert codec["channels"] == 1


@pytest.mark.parametrize(
    "codec, message",
    [
        ({"clockRate": 90000}, "missing codec.mimeType"),
        ({"mimeType": "text/plain", "clockRate": 90000}, "invalid codec.mimeType"),
        ({"mimeType": "video/VP8"}, "missing codec.clockRate"),
        (
            {"mimeType": "video/VP8", "clockRate": 90000, "preferredPayloadType": "96"},
            "invalid codec.preferredPayloadType",
        ),
        (
            {"mimeType": "video/rtx", "clockRate": 90000, "parameters": {"apt": "96"}},
            "invalid codec apt parameter",
        ),
        (
            {"mimeType": "video/VP8", "clockRate": 90000, "parameters": {"foo": [1]}},
            "invalid codec parameter",
        ),
    ],
)
def test_invalid_codec_capability(codec, message):
    with pytest.raises(SdpxTypeError, match=message):
        validate_rtp_codec_capability(codec)


def test_rtcp_feedback():
    fb = {"type": "nack"}
    validate_rtcp_feedback(fb)
    assert fb == {"type": "nack", "parameter": ""}

    with pytest.raises(SdpxTypeError, match="missing fb.type"):
        validate_rtcp_feedback({"parameter": "pli"})


@pytest.mark.parametrize(
    "ext, message",
    [
        ({"uri": "urn:x", "preferredId": 1}, "missing ext.kind"),
        ({"kind": "data", "uri": "urn:x", "preferredId": 1}, "invalid ext.kind"),
        ({"kind": "audio", "uri": "", "preferredId": 1}, "missing ext.uri"),
        ({"kind": "audio", "uri": "urn:x"}, "missing ext.preferredId"),
        (
            {"kind": "audio", "uri": "urn:x", "preferredId": 1, "preferredEncrypt": 1},
            "invalid ext.preferredEncrypt",
        ),
        (
            {"kind": "audio", "uri": "urn:x", "preferredId": 1, "direction": 1},
            "invalid ext.direction",
        ),
    ],
)
def test_invalid_header_extension(ext, message):
    with pytest.raises(SdpxTypeError, match=message):
        validate_rtp_header_extension(ext)


# ---------------------------------------------------------------------------
# RTP parameters
# ---------------------------------------------------------------------------


def test_rtp_parameters_defaults():
    params = {"codecs": [{"mimeType": "audio/opus", "payloadType": 111, "clockRate": 48000}]}
    validate_rtp_parameters(params)

    assert params["headerExtensions"] == []
    assert params["encodings"] == []
    assert params["rtcp"] == {"reducedSize": True}
    assert params["codecs"][0]["channels"] == 1


def test_rtp_parameters_mid_none_is_unset(video_rtp_parameters):
    video_rtp_parameters["mid"] = None
    validate_rtp_parameters(video_rtp_parameters)


def test_rtp_parameters_empty_mid():
    with pytest.raises(SdpxTypeError, match="params.mid is not a string"):
        validate_rtp_parameters({"mid": "", "codecs": []})


def test_rtp_parameters_missing_codecs():
    with pytest.raises(SdpxTypeError, match="missing params.codecs"):
        validate_rtp_parameters({"mid": "0"})


def test_rtp_parameters_missing_payload_type():
    with pytest.raises(SdpxTypeError, match="missing codec.payloadType"):
        validate_rtp_parameters({"codecs": [{"mimeType": "audio/opus", "clockRate": 48000}]})


def test_rtp_parameters_header_extension_defaults(video_rtp_parameters):
    validate_rtp_parameters(video_rtp_parameters)

    ext = video_rtp_parameters["headerExtensions"][0]
    assert ext["encrypt"] is False
    assert ext["parameters"] == {}


def test_rtp_parameters_header_extension_missing_id():
    with pytest.raises(SdpxTypeError, match="missing ext.id"):
        validate_rtp_parameters({"codecs": [], "headerExtensions": [{"uri": "urn:x"}]})


def test_encoding_parameters():
    encoding = {"ssrc": 1111, "rtx": {"ssrc": 2222}}
    validate_rtp_encoding_parameters(encoding)
    assert encoding["dtx"] is False

    with pytest.raises(SdpxTypeError, match="invalid encoding.ssrc"):
        validate_rtp_encoding_parameters({"ssrc": "1111"})
    with pytest.raises(SdpxTypeError, match="invalid encoding.rid"):
        validate_rtp_encoding_parameters({"rid": ""})
    with pytest.raises(SdpxTypeError, match="missing encoding.rtx.ssrc"):
        validate_rtp_encoding_parameters({"rtx": {}})
    with pytest.raises(SdpxTypeError, match="invalid encoding.scalabilityMode"):
        validate_rtp_encoding_parameters({"scalabilityMode": ""})


def test_rtcp_parameters_invalid_cname():
    with pytest.raises(SdpxTypeError, match="invalid rtcp.cname"):
        validate_rtp_parameters({"codecs": [], "rtcp": {"cname": 1}})


# ---------------------------------------------------------------------------
# SCTP
# ---------------------------------------------------------------------------


def test_sctp_capabilities():
    validate_sctp_capabilities({"numStreams": {"OS": 1024, "MIS": 1024}})

    with pytest.raises(SdpxTypeError, match="missing caps.numStreams"):
        validate_sctp_capabilities({})
    with pytest.raises(SdpxTypeError, match="missing numStreams.MIS"):
        validate_sctp_capabilities({"numStreams": {"OS": 1024}})


def test_sctp_parameters(sctp_parameters):
    validate_sctp_parameters(sctp_parameters)

    del sctp_parameters["maxMessageSize"]
    with pytest.raises(SdpxTypeError, match="missing params.maxMessageSize"):
        validate_sctp_parameters(sctp_parameters)


def test_sctp_stream_parameters_reliable_defaults():
    params = {"streamId": 1}
    validate_sctp_stream_parameters(params)

    assert params == {
        "streamId": 1,
        "ordered": True,
        "maxPacketLifeTime": 0,
        "maxRetransmits": 0,
        "label": "",
        "protocol": "",
    }


def test_sctp_stream_parameters_partially_reliable_is_unordered():
    params = {"streamId": 1, "maxRetransmits": 3}
    validate_sctp_stream_parameters(params)
    assert params["ordered"] is False
    assert params["maxRetransmits"] == 3


def test_sctp_stream_parameters_conflicts():
    with pytest.raises(SdpxTypeError, match="missing params.streamId"):
        validate_sctp_stream_parameters({})
    with pytest.raises(SdpxTypeError, match="cannot provide both"):
        validate_sctp_stream_parameters(
            {"streamId": 1, "maxPacketLifeTime": 100, "maxRetransmits": 3}
        )
    with pytest.raises(SdpxTypeError, match="cannot be ordered"):
        validate_sctp_stream_parameters(
            {"streamId": 1, "ordered": True, "maxPacketLifeTime": 100}
        )


# ---------------------------------------------------------------------------
# ICE / DTLS
# ---------------------------------------------------------------------------


def test_ice_parameters():
    params = {"usernameFragment": "ufrag", "password": "pwd"}
    validate_ice_parameters(params)
    assert params["iceLite"] is False

    with pytest.raises(SdpxTypeError, match="missing params.password"):
        validate_ice_parameters({"usernameFragment": "ufrag"})


def test_ice_candidates(ice_candidates):
    validate_ice_candidates(ice_candidates)

    with pytest.raises(SdpxTypeError, match="params is not an array"):
        validate_ice_candidates({})


@pytest.mark.parametrize(
    "changes, message",
    [
        ({"foundation": ""}, "missing params.foundation"),
        ({"priority": -1}, "missing params.priority"),
        ({"protocol": "sctp"}, "invalid params.protocol"),
        ({"port": "40533"}, "missing params.port"),
        ({"type": "peer"}, "invalid params.type"),
    ],
)
def test_invalid_ice_candidate(ice_candidates, changes, message):
    candidate = {**ice_candidates[0], **changes}
    with pytest.raises(SdpxTypeError, match=message):
        validate_ice_candidate(candidate)


def test_ice_candidate_protocol_is_case_insensitive(ice_candidates):
    validate_ice_candidate({**ice_candidates[0], "protocol": "UDP", "type": "HOST"})


def test_dtls_parameters(dtls_parameters):
    validate_dtls_parameters(dtls_parameters)

    with pytest.raises(SdpxTypeError, match="invalid params.role"):
        validate_dtls_parameters({**dtls_parameters, "role": "master"})
    with pytest.raises(SdpxTypeError, match="missing params.fingerprints"):
        validate_dtls_parameters({**dtls_parameters, "fingerprints": []})
    with pytest.raises(SdpxTypeError, match="missing params.value"):
        validate_dtls_parameters({**dtls_parameters, "fingerprints": [{"algorithm": "sha-1"}]})


# ---------------------------------------------------------------------------
# Producer codec options
# ---------------------------------------------------------------------------


def test_producer_codec_options():
    validate_producer_codec_options(
        {"opusStereo": True, "opusPtime": 20, "opusMaxPlaybackRate": 48000}
    )

    with pytest.raises(SdpxTypeError, match="invalid params.opusStereo"):
        validate_producer_codec_options({"opusStereo": 1})
    with pytest.raises(SdpxTypeError, match="invalid params.opusMaxPlaybackRate"):
        validate_producer_codec_options({"opusMaxPlaybackRate": -1})
    with pytest.raises(SdpxTypeError, match="invalid params.videoGoogleStartBitrate"):
        validate_producer_codec_options({"videoGoogleStartBitrate": True})
