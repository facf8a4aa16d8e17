"""
SDP grammar table.

Each leading line character (``v``, ``o``, ``a``...) maps to an ordered list of
rules. The parser applies the first rule whose pattern is found in the line
body, and the writer renders the same rules back using their templates.

A rule stores its result either as a singular field (``name``) or appends a
new record to a list field (``push``). Rules with both ``name`` and ``names``
store a nested dict under ``name``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple, Union

FormatFunc = Callable[[Any], str]


@dataclass(frozen=True)
class Rule:
    """One recognized line or attribute sub-type."""

    reg: re.Pattern
    name: str = ""
    push: str = ""
    names: Tuple[str, ...] = ()
    types: str = "s"  # one of s/d/f per capture group
    format: Union[str, FormatFunc] = "%s"

    def template(self, record: Any) -> str:
        """Return the template to render ``record`` with."""
        if callable(self.format):
            return self.format(record)
        return self.format


def _rule(
    reg: str,
    *,
    name: str = "",
    push: str = "",
    names: Tuple[str, ...] = (),
    types: str = "s",
    format: Union[str, FormatFunc] = "%s",
) -> Rule:
    return Rule(re.compile(reg), name, push, names, types, format)


def has_value(record: Any, key: str) -> bool:
    """Whether ``record[key]`` holds a non-empty string or a number."""
    if not isinstance(record, dict) or key not in record:
        return False
    value = record[key]
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        return value != ""
    return isinstance(value, (int, float))


# =============================================================================
# Template selection
# =============================================================================


def _connection_format(o: Any) -> str:
    return "IN IP%d %s/%d" if has_value(o, "ttl") else "IN IP%d %s"


def _media_format(o: Any) -> str:
    return "%s %d/%d %s %s" if has_value(o, "numPorts") else "%s %d%v %s %s"


def _rtpmap_format(o: Any) -> str:
    if has_value(o, "encoding"):
        return "rtpmap:%d %s/%s/%s"
    if has_value(o, "rate"):
        return "rtpmap:%d %s/%s"
    return "rtpmap:%d %s"


def _rtcp_format(o: Any) -> str:
    return "rtcp:%d %s IP%d %s" if has_value(o, "address") else "rtcp:%d"


def _rtcp_fb_format(o: Any) -> str:
    return "rtcp-fb:%s %s %s" if has_value(o, "subtype") else "rtcp-fb:%s %s"


def _extmap_format(o: Any) -> str:
    return (
        "extmap:%d"
        + ("/%s" if has_value(o, "direction") else "%v")
        + (" %s" if has_value(o, "encrypt-uri") else "%v")
        + " %s"
        + (" %s" if has_value(o, "config") else "")
    )


def _crypto_format(o: Any) -> str:
    if has_value(o, "sessionConfig"):
        return "crypto:%d %s %s %s"
    return "crypto:%d %s %s"


def _candidate_format(o: Any) -> str:
    # Optional chunks that are missing still consume their arguments via %v.
    template = "candidate:%s %d %s %d %s %d typ %s"
    template += " raddr %s rport %d" if has_value(o, "raddr") else "%v%v"
    template += " tcptype %s" if has_value(o, "tcptype") else "%v"
    template += " generation %d" if has_value(o, "generation") else "%v"
    template += " network-id %d" if has_value(o, "network-id") else "%v"
    template += " network-cost %d" if has_value(o, "network-cost") else "%v"
    return template


def _ssrc_format(o: Any) -> str:
    template = "ssrc:%d"
    if has_value(o, "attribute"):
        template += " %s"
        if has_value(o, "value"):
            template += ":%s"
    return template


def _sctpmap_format(o: Any) -> str:
    if has_value(o, "maxMessageSize"):
        return "sctpmap:%s %s %s"
    return "sctpmap:%s %s"


def _rid_format(o: Any) -> str:
    return "rid:%s %s %s" if has_value(o, "params") else "rid:%s %s"


def _imageattr_format(o: Any) -> str:
    return "imageattr:%s %s %s" + (" %s %s" if has_value(o, "dir2") else "")


def _simulcast_format(o: Any) -> str:
    return "simulcast:%s %s" + (" %s %s" if has_value(o, "dir2") else "")


# =============================================================================
# Rules
# =============================================================================

GRAMMAR: Dict[str, List[Rule]] = {
    # v=0
    "v": [_rule(r"^(\d*)$", name="version", types="d", format="%d")],
    # o=- 20518 0 IN IP4 203.0.113.1
    "o": [
        _rule(
            r"^(\S*) (\d*) (\d*) (\S*) IP(\d) (\S*)",
            name="origin",
            names=(
                "username",
                "sessionId",
                "sessionVersion",
                "netType",
                "ipVer",
                "address",
            ),
            types="sddsds",
            format="%s %d %d %s IP%d %s",
        )
    ],
    # Free text lines, kept as is.
    "s": [_rule(r"(.*)", name="name")],
    "i": [_rule(r"(.*)", name="description")],
    "u": [_rule(r"(.*)", name="uri")],
    "e": [_rule(r"(.*)", name="email")],
    "p": [_rule(r"(.*)", name="phone")],
    "z": [_rule(r"(.*)", name="timezones")],
    "r": [_rule(r"(.*)", name="repeats")],
    # t=0 0
    "t": [
        _rule(
            r"^(\d*) (\d*)",
            name="timing",
            names=("start", "stop"),
            types="dd",
            format="%d %d",
        )
    ],
    # c=IN IP4 10.47.197.26
    # c=IN IP4 224.2.36.42/127
    "c": [
        _rule(
            r"^IN IP(\d) ([^\\/]+)(?:/(\d*))?",
            name="connection",
            names=("version", "ip", "ttl"),
            types="dsd",
            format=_connection_format,
        )
    ],
    # b=AS:4000
    "b": [
        _rule(
            r"^(TIAS|AS|CT|RR|RS):(\d*)",
            push="bandwidth",
            names=("type", "limit"),
            types="sd",
            format="%s:%d",
        )
    ],
    # m=video 51744 RTP/AVP 126 97 98 34 31
    # Fields go straight onto the media element.
    "m": [
        _rule(
            r"^(\w*) (\d*)(?:/(\d*))? ([\w/]*)(?: (.*))?",
            names=("type", "port", "numPorts", "protocol", "payloads"),
            types="sddss",
            format=_media_format,
        )
    ],
    "a": [
        # a=rtpmap:110 opus/48000/2
        _rule(
            r"^rtpmap:(\d*) ([\w\-.]*)(?:\s*/(\d*)(?:\s*/(\S*))?)?",
            push="rtp",
            names=("payload", "codec", "rate", "encoding"),
            types="dsds",
            format=_rtpmap_format,
        ),
        # a=fmtp:108 profile-level-id=24;object=23;bitrate=64000
        _rule(
            r"^fmtp:(\d*) (.*)",
            push="fmtp",
            names=("payload", "config"),
            types="ds",
            format="fmtp:%d %s",
        ),
        # a=control:streamid=0
        _rule(r"^control:(.*)", name="control", format="control:%s"),
        # a=rtcp:65179 IN IP4 193.84.77.194
        _rule(
            r"^rtcp:(\d*)(?: (\S*) IP(\d) (\S*))?",
            name="rtcp",
            names=("port", "netType", "ipVer", "address"),
            types="dsds",
            format=_rtcp_format,
        ),
        # a=rtcp-fb:98 trr-int 100
        _rule(
            r"^rtcp-fb:(\*|\d*) trr-int (\d*)",
            push="rtcpFbTrrInt",
            names=("payload", "value"),
            types="sd",
            format="rtcp-fb:%s trr-int %d",
        ),
        # a=rtcp-fb:98 nack rpsi
        _rule(
            r"^rtcp-fb:(\*|\d*) ([\w\-_]*)(?: ([\w\-_]*))?",
            push="rtcpFb",
            names=("payload", "type", "subtype"),
            types="sss",
            format=_rtcp_fb_format,
        ),
        # a=extmap:2 urn:ietf:params:rtp-hdrext:toffset
        # a=extmap:1/recvonly URI-gps-string
        # a=extmap:3 urn:ietf:params:rtp-hdrext:encrypt urn:ietf:params:rtp-hdrext:smpte-tc 25@600/24
        _rule(
            r"^extmap:(\d+)(?:/(\w+))?(?: (urn:ietf:params:rtp-hdrext:encrypt))?"
            r" (\S*)(?: (\S*))?",
            push="ext",
            names=("value", "direction", "encrypt-uri", "uri", "config"),
            types="dssss",
            format=_extmap_format,
        ),
        # a=extmap-allow-mixed
        _rule(r"^(extmap-allow-mixed)", name="extmapAllowMixed"),
        # a=crypto:1 AES_CM_128_HMAC_SHA1_80 inline:PS1uQCVeeCFCanVmcjkpPywjNWhcYD0mXXtxaVBR|2^20|1:32
        _rule(
            r"^crypto:(\d*) ([\w_]*) (\S*)(?: (\S*))?",
            push="crypto",
            names=("id", "suite", "config", "sessionConfig"),
            types="dsss",
            format=_crypto_format,
        ),
        # a=setup:actpass
        _rule(r"^setup:(\w*)", name="setup", format="setup:%s"),
        # a=mid:1
        _rule(r"^mid:([^\s]*)", name="mid", format="mid:%s"),
        # a=msid:0c8b064d-d807-43b4-b434-f92a889d8587 98178685-d409-46e0-8e16-7ef0db0db64a
        _rule(r"^msid:(.*)", name="msid", format="msid:%s"),
        # a=ptime:20
        _rule(r"^ptime:(\d*)", name="ptime", types="d", format="ptime:%d"),
        # a=maxptime:60
        _rule(r"^maxptime:(\d*)", name="maxptime", types="d", format="maxptime:%d"),
        # a=sendrecv
        _rule(r"^(sendrecv|recvonly|sendonly|inactive)", name="direction"),
        # a=ice-lite
        _rule(r"^(ice-lite)", name="icelite"),
        # a=ice-ufrag:F7gI
        _rule(r"^ice-ufrag:(\S*)", name="iceUfrag", format="ice-ufrag:%s"),
        # a=ice-pwd:x9cml/YzichV2+XlhiMu8g
        _rule(r"^ice-pwd:(\S*)", name="icePwd", format="ice-pwd:%s"),
        # a=fingerprint:SHA-1 00:11:22:33:44:55:66:77:88:99:AA:BB:CC:DD:EE:FF:00:11:22:33
        _rule(
            r"^fingerprint:(\S*) (\S*)",
            name="fingerprint",
            names=("type", "hash"),
            types="ss",
            format="fingerprint:%s %s",
        ),
        # a=candidate:0 1 UDP 2113667327 203.0.113.1 54400 typ host
        # a=candidate:3289912957 2 udp 1845501695 193.84.77.194 60017 typ srflx raddr 192.168.34.75 rport 60017 generation 0 network-id 3 network-cost 10
        _rule(
            r"^candidate:(\S*) (\d*) (\S*) (\d*) (\S*) (\d*) typ (\S*)"
            r"(?: raddr (\S*) rport (\d*))?"
            r"(?: tcptype (\S*))?"
            r"(?: generation (\d*))?"
            r"(?: network-id (\d*))?"
            r"(?: network-cost (\d*))?",
            push="candidates",
            names=(
                "foundation",
                "component",
                "transport",
                "priority",
                "ip",
                "port",
                "type",
                "raddr",
                "rport",
                "tcptype",
                "generation",
                "network-id",
                "network-cost",
            ),
            types="sdsdsdssdsddd",
            format=_candidate_format,
        ),
        # a=end-of-candidates
        _rule(r"^(end-of-candidates)", name="endOfCandidates"),
        # a=remote-candidates:1 203.0.113.1 54400 2 203.0.113.1 54401
        _rule(
            r"^remote-candidates:(.*)",
            name="remoteCandidates",
            format="remote-candidates:%s",
        ),
        # a=ice-options:google-ice
        _rule(r"^ice-options:(\S*)", name="iceOptions", format="ice-options:%s"),
        # a=ssrc:2566107569 cname:t9YU8M1UxTF8Y1A1
        _rule(
            r"^ssrc:(\d*) ([\w_-]*)(?::(.*))?",
            push="ssrcs",
            names=("id", "attribute", "value"),
            types="dss",
            format=_ssrc_format,
        ),
        # a=ssrc-group:FEC-FR 3004364195 1080772241
        _rule(
            r"^ssrc-group:([\x21\x23\x24\x25\x26\x27\x2A\x2B\x2D\x2E\w]*) (.*)",
            push="ssrcGroups",
            names=("semantics", "ssrcs"),
            types="ss",
            format="ssrc-group:%s %s",
        ),
        # a=msid-semantic: WMS Jvlam5X3SX1OP6pn20zWogvaKJz5Hjf9OnlV
        _rule(
            r"^msid-semantic:\s?(\w*) (\S*)",
            name="msidSemantic",
            names=("semantic", "token"),
            types="ss",
            format="msid-semantic: %s %s",
        ),
        # a=group:BUNDLE audio video
        _rule(
            r"^group:(\w*) (.*)",
            push="groups",
            names=("type", "mids"),
            types="ss",
            format="group:%s %s",
        ),
        # a=rtcp-mux
        _rule(r"^(rtcp-mux)", name="rtcpMux"),
        # a=rtcp-rsize
        _rule(r"^(rtcp-rsize)", name="rtcpRsize"),
        # a=sctpmap:5000 webrtc-datachannel 1024
        _rule(
            r"^sctpmap:(\d+) (\S*)(?: (\d*))?",
            name="sctpmap",
            names=("sctpmapNumber", "app", "maxMessageSize"),
            types="dsd",
            format=_sctpmap_format,
        ),
        # a=sctp-port:5000
        _rule(r"^sctp-port:(\d+)", name="sctpPort", types="d", format="sctp-port:%s"),
        # a=max-message-size:262144
        _rule(
            r"^max-message-size:(\d+)",
            name="maxMessageSize",
            types="d",
            format="max-message-size:%s",
        ),
        # a=x-google-flag:conference
        _rule(r"x-google-flag:([^\s]*)", name="xGoogleFlag", format="x-google-flag:%s"),
        # a=rid:1 send max-width=1280;max-height=720;max-fps=30;depend=0
        _rule(
            r"^rid:([\d\w]+) (\w+)(?: (.*))?",
            push="rids",
            names=("id", "direction", "params"),
            types="sss",
            format=_rid_format,
        ),
        # a=imageattr:97 send [x=800,y=640,sar=1.1,q=0.6] [x=480,y=320] recv [x=330,y=250]
        # a=imageattr:* send [x=800,y=640] recv *
        _rule(
            r"^imageattr:(\d+|\*)"
            r"[\s\t]+(send|recv)[\s\t]+(\*|\[\S+\](?:[\s\t]+\[\S+\])*)"
            r"(?:[\s\t]+(recv|send)[\s\t]+(\*|\[\S+\](?:[\s\t]+\[\S+\])*))?",
            push="imageattrs",
            names=("pt", "dir1", "attrs1", "dir2", "attrs2"),
            types="sssss",
            format=_imageattr_format,
        ),
        # a=simulcast:send 1,2,3;~4,~5 recv 6;~7,~8
        _rule(
            r"^simulcast:"
            r"(send|recv) ([a-zA-Z0-9\-_~;,]+)"
            r"(?:\s?(send|recv) ([a-zA-Z0-9\-_~;,]+))?"
            r"$",
            name="simulcast",
            names=("dir1", "list1", "dir2", "list2"),
            types="ssss",
            format=_simulcast_format,
        ),
        # Draft 03 simulcast (Firefox)
        # a=simulcast: recv pt=97;98 send pt=97
        _rule(
            r"^simulcast: (.+)$",
            name="simulcast_03",
            names=("value",),
            format="simulcast: %s",
        ),
        # a=framerate:29.97
        _rule(
            r"^framerate:(\d+(?:$|\.\d+))",
            name="framerate",
            types="f",
            format="framerate:%s",
        ),
        # a=source-filter: incl IN IP4 239.5.2.31 10.1.15.5
        _rule(
            r"^source-filter:[\s\t]+(excl|incl) (\S*) (IP4|IP6|\*) (\S*) (.*)",
            name="sourceFilter",
            names=("filterMode", "netType", "addressTypes", "destAddress", "srcList"),
            types="sssss",
            format="source-filter: %s %s %s %s %s",
        ),
        # a=ts-refclk:ptp=IEEE1588-2008:00-50-C2-FF-FE-90-04-37:0
        _rule(r"^ts-refclk:(.*)", name="tsRefclk", format="ts-refclk:%s"),
        # a=mediaclk:direct=0
        _rule(r"^mediaclk:(.*)", name="mediaclk", format="mediaclk:%s"),
        # a=bundle-only
        _rule(r"^(bundle-only)", name="bundleOnly"),
        # a=label:1
        _rule(r"^label:(.+)", name="label", format="label:%s"),
        # a=content:main
        _rule(r"^content:(.+)", name="content", format="content:%s"),
        # Anything else is kept verbatim.
        _rule(r"(.*)", push="invalid", names=("value",)),
    ],
}


__all__ = [
    "Rule",
    "GRAMMAR",
    "has_value",
]
