"""Built-in effect programs and their protocol codes.

The firmware exposes 22 canned programs in three families: jump (hard
switch between colors), crossfade (smooth transition) and blink. Codes are
fixed by the firmware; names follow the colors each program cycles through.
"""

from __future__ import annotations

from enum import IntEnum
from types import MappingProxyType
from typing import Mapping

from ..errors import UnknownEffectError


class Effect(IntEnum):
    """Effect program codes."""

    JUMP_RED_GREEN_BLUE = 0x87
    JUMP_RED_GREEN_BLUE_YELLOW_CYAN_MAGENTA_WHITE = 0x88
    CROSSFADE_RED_GREEN_BLUE = 0x89
    CROSSFADE_RED_GREEN_BLUE_YELLOW_CYAN_MAGENTA_WHITE = 0x8A
    CROSSFADE_RED = 0x8B
    CROSSFADE_GREEN = 0x8C
    CROSSFADE_BLUE = 0x8D
    CROSSFADE_YELLOW = 0x8E
    CROSSFADE_CYAN = 0x8F
    CROSSFADE_MAGENTA = 0x90
    CROSSFADE_WHITE = 0x91
    CROSSFADE_RED_GREEN = 0x92
    CROSSFADE_RED_BLUE = 0x93
    CROSSFADE_GREEN_BLUE = 0x94
    BLINK_RED_GREEN_BLUE_YELLOW_CYAN_MAGENTA_WHITE = 0x95
    BLINK_RED = 0x96
    BLINK_GREEN = 0x97
    BLINK_BLUE = 0x98
    BLINK_YELLOW = 0x99
    BLINK_CYAN = 0x9A
    BLINK_MAGENTA = 0x9B
    BLINK_WHITE = 0x9C


EFFECTS: Mapping[str, int] = MappingProxyType(
    {effect.name.lower(): effect.value for effect in Effect}
)

_NAMES_BY_CODE: Mapping[int, str] = MappingProxyType(
    {code: name for name, code in EFFECTS.items()}
)


def lookup_effect(name: str) -> int:
    """Resolve an effect name such as ``"blink_white"`` to its code.

    Matching ignores case and accepts ``-`` in place of ``_``.

    Raises:
        UnknownEffectError: If the name is not in the table.
    """
    key = name.strip().lower().replace("-", "_")
    try:
        return EFFECTS[key]
    except KeyError:
        raise UnknownEffectError(
            f"Unknown effect '{name}'. Valid: {list(EFFECTS)}"
        ) from None


def effect_name(code: int) -> str | None:
    """Reverse lookup: effect code to name, or ``None`` if unknown."""
    return _NAMES_BY_CODE.get(code)
