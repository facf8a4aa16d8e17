import pytest

from sdpx import (
    parse,
    parse_image_attributes,
    parse_params,
    parse_payloads,
    parse_simulcast_stream_list,
)


def test_parse_params_converts_numbers():
    assert parse_params("minptime=10;useinbandfec=1;sprop-maxcapturerate=16000") == {
        "minptime": 10,
        "useinbandfec": 1,
        "sprop-maxcapturerate": 16000,
    }


def test_parse_params_keeps_strings():
    params = parse_params("profile-level-id=42e01f;packetization-mode=1")
    assert params == {"profile-level-id": "42e01f", "packetization-mode": 1}


def test_parse_params_float_and_sign():
    assert parse_params("a=2.5;b=-3;c=.5") == {"a": 2.5, "b": -3, "c": 0.5}


def test_parse_params_key_without_value():
    assert parse_params("foo;bar=1") == {"foo": "", "bar": 1}


def test_parse_params_tolerates_spaces_and_empty_items():
    assert parse_params(" a = 1 ; ;b=2;") == {"a": 1, "b": 2}


def test_parse_params_of_parsed_fmtp(load_sdp):
    video = parse(load_sdp("normal.sdp"))["media"][1]
    assert parse_params(video["fmtp"][0]["config"]) == {
        "profile-level-id": "4d0028",
        "packetization-mode": 1,
    }


def test_parse_payloads():
    assert parse_payloads("111 103 9") == [111, 103, 9]
    assert parse_payloads("0") == [0]


def test_parse_payloads_rejects_non_numeric():
    with pytest.raises(ValueError):
        parse_payloads("webrtc-datachannel")


def test_parse_image_attributes():
    assert parse_image_attributes("[x=800,y=640,sar=1.1,q=0.6] [x=480,y=320]") == [
        {"x": 800, "y": 640, "sar": 1.1, "q": 0.6},
        {"x": 480, "y": 320},
    ]


def test_parse_image_attributes_wildcard():
    assert parse_image_attributes("*") == "*"


def test_parse_image_attributes_ranges_stay_strings():
    assert parse_image_attributes("[x=[480:16:800],y=[320:16:640]]") == [
        {"x": "[480:16:800]", "y": "[320:16:640]"}
    ]


def test_parse_simulcast_stream_list():
    assert parse_simulcast_stream_list("1,~4;2;3") == [
        [{"scid": "1", "paused": False}, {"scid": "4", "paused": True}],
        [{"scid": "2", "paused": False}],
        [{"scid": "3", "paused": False}],
    ]


def test_parse_simulcast_stream_list_of_parsed_line():
    media = parse("m=video 9 RTP/AVP 96\r\na=simulcast:recv 6;~7,~8\r\n")["media"][0]
    assert parse_simulcast_stream_list(media["simulcast"]["list1"]) == [
        [{"scid": "6", "paused": False}],
        [{"scid": "7", "paused": True}, {"scid": "8", "paused": True}],
    ]
