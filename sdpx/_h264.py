"""
H264 profile-level-id handling (RFC 6184 Section 8.1).

Used by codec matching to check that two H264 codecs share a profile and to
compute the profile-level-id to use in an answer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Mapping, Optional

from ._types import SdpxTypeError


class Profile(IntEnum):
    CONSTRAINED_BASELINE = 1
    BASELINE = 2
    MAIN = 3
    CONSTRAINED_HIGH = 4
    HIGH = 5
    PREDICTIVE_HIGH_444 = 6


class Level(IntEnum):
    L1_B = 0
    L1 = 10
    L1_1 = 11
    L1_2 = 12
    L1_3 = 13
    L2 = 20
    L2_1 = 21
    L2_2 = 22
    L3 = 30
    L3_1 = 31
    L3_2 = 32
    L4 = 40
    L4_1 = 41
    L4_2 = 42
    L5 = 50
    L5_1 = 51
    L5_2 = 52


@dataclass(frozen=True)
class ProfileLevelId:
    profile: Profile
    level: Level


# Default when profile-level-id is absent (RFC 6184 Section 8.1).
DEFAULT_PROFILE_LEVEL_ID = ProfileLevelId(Profile.CONSTRAINED_BASELINE, Level.L3_1)

_CONSTRAINT_SET3_FLAG = 0x10


class _BitPattern:
    """Matches a profile_iop byte against a pattern like ``x1xx0000``."""

    def __init__(self, pattern: str) -> None:
        self.mask = ~_byte_mask("x", pattern) & 0xFF
        self.masked_value = _byte_mask("1", pattern)

    def is_match(self, value: int) -> bool:
        return self.masked_value == (value & self.mask)


def _byte_mask(char: str, pattern: str) -> int:
    mask = 0
    for bit, c in enumerate(pattern):
        if c == char:
            mask |= 1 << (7 - bit)
    return mask


# Table 5 of RFC 6184 plus the profiles WebRTC cares about.
_PROFILE_PATTERNS = (
    (0x42, _BitPattern("x1xx0000"), Profile.CONSTRAINED_BASELINE),
    (0x4D, _BitPattern("1xxx0000"), Profile.CONSTRAINED_BASELINE),
    (0x58, _BitPattern("11xx0000"), Profile.CONSTRAINED_BASELINE),
    (0x42, _BitPattern("x0xx0000"), Profile.BASELINE),
    (0x58, _BitPattern("10xx0000"), Profile.BASELINE),
    (0x4D, _BitPattern("0x0x0000"), Profile.MAIN),
    (0x64, _BitPattern("00000000"), Profile.HIGH),
    (0x64, _BitPattern("00001100"), Profile.CONSTRAINED_HIGH),
    (0xF4, _BitPattern("00000000"), Profile.PREDICTIVE_HIGH_444),
)

_PROFILE_IDC_IOP = {
    Profile.CONSTRAINED_BASELINE: "42e0",
    Profile.BASELINE: "4200",
    Profile.MAIN: "4d00",
    Profile.CONSTRAINED_HIGH: "640c",
    Profile.HIGH: "6400",
    Profile.PREDICTIVE_HIGH_444: "f400",
}


def parse_profile_level_id(value: str) -> Optional[ProfileLevelId]:
    """Parse a 6 hex digit profile-level-id, None if invalid."""
    if not isinstance(value, str) or len(value) != 6:
        return None
    try:
        numeric = int(value, 16)
    except ValueError:
        return None
    if numeric == 0:
        return None

    level_idc = numeric & 0xFF
    profile_iop = (numeric >> 8) & 0xFF
    profile_idc = (numeric >> 16) & 0xFF

    if level_idc == Level.L1_1:
        level = Level.L1_B if profile_iop & _CONSTRAINT_SET3_FLAG else Level.L1_1
    else:
        try:
            level = Level(level_idc)
        except ValueError:
            return None
        if level == Level.L1_B:
            return None

    for idc, pattern, profile in _PROFILE_PATTERNS:
        if idc == profile_idc and pattern.is_match(profile_iop):
            return ProfileLevelId(profile, level)
    return None


def profile_level_id_to_string(profile_level_id: ProfileLevelId) -> Optional[str]:
    """Render a ProfileLevelId back to its 6 hex digit form."""
    if profile_level_id.level == Level.L1_B:
        return {
            Profile.CONSTRAINED_BASELINE: "42f00b",
            Profile.BASELINE: "42100b",
            Profile.MAIN: "4d100b",
        }.get(profile_level_id.profile)

    profile_idc_iop = _PROFILE_IDC_IOP.get(profile_level_id.profile)
    if profile_idc_iop is None:
        return None
    return f"{profile_idc_iop}{int(profile_level_id.level):02x}"


def parse_sdp_profile_level_id(params: Mapping[str, Any]) -> Optional[ProfileLevelId]:
    """Profile-level-id of a codec parameter map, with the RFC default."""
    value = params.get("profile-level-id")
    if value is None or value == "":
        return DEFAULT_PROFILE_LEVEL_ID
    return parse_profile_level_id(str(value))


def is_same_profile(params1: Mapping[str, Any], params2: Mapping[str, Any]) -> bool:
    profile_level_id1 = parse_sdp_profile_level_id(params1)
    profile_level_id2 = parse_sdp_profile_level_id(params2)
    return (
        profile_level_id1 is not None
        and profile_level_id2 is not None
        and profile_level_id1.profile == profile_level_id2.profile
    )


def _is_level_asymmetry_allowed(params: Mapping[str, Any]) -> bool:
    return str(params.get("level-asymmetry-allowed", "")) == "1"


def _is_less_level(a: Level, b: Level) -> bool:
    # Level 1b sorts between 1 and 1.1.
    if a == Level.L1_B:
        return b not in (Level.L1, Level.L1_B)
    if b == Level.L1_B:
        return a != Level.L1
    return a < b


def _min_level(a: Level, b: Level) -> Level:
    return a if _is_less_level(a, b) else b


def generate_profile_level_id_for_answer(
    local_supported_params: Mapping[str, Any],
    remote_offered_params: Mapping[str, Any],
) -> Optional[str]:
    """
    Compute the profile-level-id for an SDP answer.

    Returns None when neither side signals a profile-level-id, in which case
    the answer must not carry one either.

    Raises:
        SdpxTypeError: If a profile-level-id is invalid or profiles differ.
    """
    if (
        "profile-level-id" not in local_supported_params
        and "profile-level-id" not in remote_offered_params
    ):
        return None

    local_profile_level_id = parse_sdp_profile_level_id(local_supported_params)
    remote_profile_level_id = parse_sdp_profile_level_id(remote_offered_params)

    if local_profile_level_id is None:
        raise SdpxTypeError("invalid local_profile_level_id")
    if remote_profile_level_id is None:
        raise SdpxTypeError("invalid remote_profile_level_id")
    if local_profile_level_id.profile != remote_profile_level_id.profile:
        raise SdpxTypeError("H264 Profile mismatch")

    level_asymmetry_allowed = _is_level_asymmetry_allowed(
        local_supported_params
    ) and _is_level_asymmetry_allowed(remote_offered_params)

    local_level = local_profile_level_id.level
    remote_level = remote_profile_level_id.level
    min_level = _min_level(local_level, remote_level)

    # Level asymmetry lets the answerer receive at its own level.
    answer_level = local_level if level_asymmetry_allowed else min_level

    return profile_level_id_to_string(
        ProfileLevelId(local_profile_level_id.profile, answer_level)
    )


__all__ = [
    "Profile",
    "Level",
    "ProfileLevelId",
    "DEFAULT_PROFILE_LEVEL_ID",
    "parse_profile_level_id",
    "profile_level_id_to_string",
    "parse_sdp_profile_level_id",
    "is_same_profile",
    "generate_profile_level_id_for_answer",
]
