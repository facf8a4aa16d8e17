"""Parsing of SVC scalability modes (``L<spatial>T<temporal>``)."""

from __future__ import annotations

import re
from typing import Dict

from ._types import SdpxError

_SCALABILITY_MODE = re.compile(r"^L(\d+)T(\d+)")


def parse_scalability_mode(scalability_mode: str) -> Dict[str, int]:
    """
    Parse a scalability mode into its layer counts.

    Suffixes such as ``_KEY`` are ignored.

    Example:
        >>> parse_scalability_mode("L3T2")
        {'spatialLayers': 3, 'temporalLayers': 2}

    Raises:
        SdpxError: If the mode does not start with ``L<n>T<m>``.
    """
    match = _SCALABILITY_MODE.match(scalability_mode or "")
    if not match:
        raise SdpxError(f"invalid scalabilityMode: {scalability_mode}")

    return {
        "spatialLayers": int(match.group(1)),
        "temporalLayers": int(match.group(2)),
    }


__all__ = ["parse_scalability_mode"]
