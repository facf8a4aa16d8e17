"""
SDP parser and the small sub-grammars embedded in attribute values.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Union

from ._grammar import GRAMMAR, Rule
from ._types import CodecParameters, MediaObject, SessionDocument
from ._utils import logger

_VALID_LINE = re.compile(r"^([a-z])=(.*)")
_KEY_VALUE = re.compile(r"^\s*([^= ]+)(?:\s*=\s*([^ ]+))?$")
_INT = re.compile(r"^[-+]?\d+$")
_FLOAT = re.compile(r"^[-+]?(?:\d+\.\d*|\.\d+)$")


def parse(sdp: str) -> SessionDocument:
    """
    Parse SDP text into a session document.

    Lines that do not look like ``<letter>=<value>`` are dropped, as are lines
    whose body matches none of the rules for their letter. Unknown ``a=``
    attributes are kept verbatim under ``invalid``.

    Args:
        sdp: Raw SDP text, LF or CRLF separated.

    Returns:
        Session dict with a ``media`` list (one dict per m= section).

    Example:
        >>> session = parse("v=0\\r\\nm=audio 9 RTP/AVP 0\\r\\n")
        >>> session["media"][0]["port"]
        9
    """
    session: SessionDocument = {}
    media: List[MediaObject] = []
    location: Dict[str, Any] = session

    for line in sdp.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]

        if not _VALID_LINE.search(line):
            if line:
                logger.debug(f"Dropping malformed SDP line: {line!r}")
            continue

        kind = line[0]
        content = line[2:]

        if kind == "m":
            media.append({"rtp": [], "fmtp": []})
            location = media[-1]

        rules = GRAMMAR.get(kind)
        if rules is None:
            logger.debug(f"Ignoring unknown SDP line type: {line!r}")
            continue

        for rule in rules:
            match = rule.reg.search(content)
            if match:
                _apply_rule(rule, location, match)
                break
        else:
            logger.debug(f"No rule matched SDP line: {line!r}")

    session["media"] = media
    return session


def _apply_rule(rule: Rule, location: Dict[str, Any], match: re.Match) -> None:
    needs_blank = bool(rule.name and rule.names)

    if rule.push:
        location.setdefault(rule.push, [])
    elif needs_blank:
        location.setdefault(rule.name, {})

    if rule.push:
        target: Dict[str, Any] = {}
    elif needs_blank:
        target = location[rule.name]
    else:
        target = location

    _attach_properties(match, target, rule)

    if rule.push:
        location[rule.push].append(target)


def _attach_properties(match: re.Match, location: Dict[str, Any], rule: Rule) -> None:
    if rule.name and not rule.names:
        location[rule.name] = _to_type(match.group(1) or "", rule.types[0])
        return

    groups = match.groups()
    for i, name in enumerate(rule.names):
        value = groups[i] if i < len(groups) else None
        if value:
            location[name] = _to_type(value, rule.types[i])


def _to_type(value: str, type_code: str) -> Union[str, int, float]:
    if type_code == "d":
        return int(value) if _INT.match(value) else 0
    if type_code == "f":
        try:
            return float(value)
        except ValueError:
            return 0.0
    return value


# =============================================================================
# Sub-grammars
# =============================================================================


def _insert_param(params: Dict[str, Any], expr: str) -> None:
    match = _KEY_VALUE.match(expr)
    if not match:
        return

    key, value = match.group(1), match.group(2) or ""
    if _INT.match(value):
        params[key] = int(value)
    elif _FLOAT.match(value):
        params[key] = float(value)
    else:
        params[key] = value


def parse_params(value: str) -> CodecParameters:
    """
    Parse a ``key=value;key=value`` list (fmtp config, rid params).

    Values are converted to int or float when they look like one. Keys
    without a value map to an empty string.

    Example:
        >>> parse_params("a=1;b=2.5;c=foo")
        {'a': 1, 'b': 2.5, 'c': 'foo'}
    """
    params: CodecParameters = {}
    for expr in value.split(";"):
        expr = expr.strip()
        if expr:
            _insert_param(params, expr)
    return params


def parse_payloads(value: str) -> List[int]:
    """Parse the payload list of an m= line. Raises ValueError on junk."""
    return [int(payload) for payload in value.split(" ")]


def parse_image_attributes(value: str) -> Union[str, List[Dict[str, Any]]]:
    """
    Parse the attribute sets of an a=imageattr line.

    ``"[x=1280,y=720] [x=320,y=180]"`` gives one dict per bracketed set,
    while ``"*"`` is returned as is.
    """
    attributes: List[Dict[str, Any]] = []
    for item in value.split(" "):
        item = item.strip()
        if item == "*":
            return item
        if len(item) < 5:  # [x=0]
            continue

        params: Dict[str, Any] = {}
        for expr in item[1:-1].split(","):
            expr = expr.strip()
            if expr:
                _insert_param(params, expr)
        attributes.append(params)
    return attributes


def parse_simulcast_stream_list(value: str) -> List[List[Dict[str, Any]]]:
    """
    Parse an a=simulcast stream list.

    ``;`` separates alternatives and ``,`` separates streams inside one. A
    leading ``~`` marks the stream as paused.

    Example:
        >>> parse_simulcast_stream_list("1,~4;2")
        [[{'scid': '1', 'paused': False}, {'scid': '4', 'paused': True}], [{'scid': '2', 'paused': False}]]
    """
    streams: List[List[Dict[str, Any]]] = []
    for group in value.split(";"):
        if not group:
            continue
        alternatives = []
        for scid in group.split(","):
            if not scid:
                continue
            if scid.startswith("~"):
                alternatives.append({"scid": scid[1:], "paused": True})
            else:
                alternatives.append({"scid": scid, "paused": False})
        streams.append(alternatives)
    return streams


__all__ = [
    "parse",
    "parse_params",
    "parse_payloads",
    "parse_image_attributes",
    "parse_simulcast_stream_list",
]
