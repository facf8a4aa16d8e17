"""SDP writer: renders a session document back to text."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Sequence

from ._grammar import GRAMMAR, Rule
from ._types import SdpxTypeError, SessionDocument
from ._utils import EOL, INNER_ORDER, OUTER_ORDER

_PLACEHOLDER = re.compile(r"%[sdv%]")


def write(
    session: SessionDocument,
    outer_order: Sequence[str] = OUTER_ORDER,
    inner_order: Sequence[str] = INNER_ORDER,
) -> str:
    """
    Render a session document to SDP text.

    Missing mandatory fields are filled in on the given document (``version``,
    ``name``, ``media`` and each media's ``payloads``).

    Integral floats are written without a fractional part, so a parsed
    ``a=framerate:30.0`` comes back as ``a=framerate:30``.

    Args:
        session: Session dict as returned by ``parse``.
        outer_order: Line types rendered at session level, in order.
        inner_order: Line types rendered after each m= line, in order.

    Returns:
        CRLF-terminated SDP text.

    Raises:
        SdpxTypeError: If ``session`` is not a dict.
    """
    if not isinstance(session, dict):
        raise SdpxTypeError("given session is not a dict")

    session.setdefault("version", 0)
    session.setdefault("name", "-")
    session.setdefault("media", [])
    for media in session["media"]:
        media.setdefault("payloads", "")

    lines: List[str] = []

    for kind in outer_order:
        _render_rules(lines, kind, session)

    for media in session["media"]:
        lines.append(_make_line("m", GRAMMAR["m"][0], media))
        for kind in inner_order:
            _render_rules(lines, kind, media)

    return "".join(lines)


def _render_rules(lines: List[str], kind: str, location: Dict[str, Any]) -> None:
    for rule in GRAMMAR[kind]:
        if rule.name and location.get(rule.name) is not None:
            lines.append(_make_line(kind, rule, location))
        elif rule.push and isinstance(location.get(rule.push), list):
            for record in location[rule.push]:
                lines.append(_make_line(kind, rule, record))


def _make_line(kind: str, rule: Rule, location: Dict[str, Any]) -> str:
    if rule.push:
        template = rule.template(location)
    elif rule.name:
        template = rule.template(location[rule.name])
    else:
        template = rule.template(location)

    args: List[Any] = []
    if rule.names:
        nested = location.get(rule.name) if rule.name else None
        for name in rule.names:
            if isinstance(nested, dict) and name in nested:
                args.append(nested[name])
            elif name in location:
                args.append(location[name])
            else:
                args.append("")
    elif rule.name in location:
        args.append(location[rule.name])

    return f"{kind}={_format(template, args)}{EOL}"


def _format(template: str, args: List[Any]) -> str:
    remaining = iter(args)

    def substitute(match: re.Match) -> str:
        placeholder = match.group(0)
        try:
            arg = next(remaining)
        except StopIteration:
            return placeholder
        if placeholder == "%%":
            return "%"
        if placeholder == "%v":
            return ""
        return _to_text(arg)

    return _PLACEHOLDER.sub(substitute, template)


def write_params(params: Dict[str, Any]) -> str:
    """
    Render a parameter dict as an fmtp config string.

    Keys keep their insertion order.

    Example:
        >>> write_params({"minptime": 10, "useinbandfec": 1})
        'minptime=10;useinbandfec=1'
    """
    return ";".join(f"{key}={_to_text(value)}" for key, value in params.items())


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if value is None:
        return ""
    return str(value)


__all__ = ["write", "write_params"]
