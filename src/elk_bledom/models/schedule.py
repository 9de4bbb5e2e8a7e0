"""Weekday bitmask and schedule entry model.

Bit order is fixed by the firmware and easy to get backwards::

    bit 6   5   4   3   2   1   0
        Sun Sat Fri Thu Wed Tue Mon

Monday is the least significant bit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Iterable, Union

from ..errors import InvalidInputError

logger = logging.getLogger(__name__)


class Weekday(IntFlag):
    """Days of the week as firmware bitmask values."""

    NONE = 0x00
    MONDAY = 0x01
    TUESDAY = 0x02
    WEDNESDAY = 0x04
    THURSDAY = 0x08
    FRIDAY = 0x10
    SATURDAY = 0x20
    SUNDAY = 0x40
    WEEK_DAYS = MONDAY | TUESDAY | WEDNESDAY | THURSDAY | FRIDAY
    WEEKEND_DAYS = SATURDAY | SUNDAY
    ALL = WEEK_DAYS | WEEKEND_DAYS


WEEKDAY_MASK = int(Weekday.ALL)

WeekdaySet = Union[Weekday, int, Iterable[Union[Weekday, int]]]

_DAY_ALIASES: dict[str, Weekday] = {
    "mon": Weekday.MONDAY,
    "monday": Weekday.MONDAY,
    "tue": Weekday.TUESDAY,
    "tuesday": Weekday.TUESDAY,
    "wed": Weekday.WEDNESDAY,
    "wednesday": Weekday.WEDNESDAY,
    "thu": Weekday.THURSDAY,
    "thursday": Weekday.THURSDAY,
    "fri": Weekday.FRIDAY,
    "friday": Weekday.FRIDAY,
    "sat": Weekday.SATURDAY,
    "saturday": Weekday.SATURDAY,
    "sun": Weekday.SUNDAY,
    "sunday": Weekday.SUNDAY,
    "all": Weekday.ALL,
    "weekdays": Weekday.WEEK_DAYS,
    "weekend": Weekday.WEEKEND_DAYS,
    "none": Weekday.NONE,
}


class ScheduleDirection(IntEnum):
    """Whether a schedule switches the light on or off."""

    ON = 0x00
    OFF = 0x01


def encode_weekday_set(days: WeekdaySet) -> int:
    """Fold a weekday flag, int mask or iterable of them into a 7-bit mask.

    Raises:
        InvalidInputError: If a mask has bits above Sunday set.
    """
    if isinstance(days, int):
        values = [days]
    else:
        values = list(days)

    mask = 0
    for value in values:
        if not isinstance(value, int) or not 0 <= value <= WEEKDAY_MASK:
            raise InvalidInputError(
                f"Weekday mask must be 0-{WEEKDAY_MASK:#04x}, got {value!r}"
            )
        mask |= int(value)
    return mask


def decode_weekday_set(mask: int) -> Weekday:
    """Turn a mask from a frame back into a ``Weekday`` flag."""
    return Weekday(mask & WEEKDAY_MASK)


def parse_days(text: str) -> Weekday:
    """Parse ``"mon,thu"``, ``"weekdays"``, ``"all"`` and similar.

    Raises:
        InvalidInputError: On an unrecognised day name.
    """
    result = Weekday.NONE
    for part in text.split(","):
        key = part.strip().lower()
        if key not in _DAY_ALIASES:
            raise InvalidInputError(
                f"Unknown day '{part.strip()}'. Valid: {list(_DAY_ALIASES)}"
            )
        result |= _DAY_ALIASES[key]
    logger.debug("Days %r parsed to bitmask %#04x", text, result)
    return result


@dataclass(frozen=True)
class ScheduleEntry:
    """One on/off timer slot as sent to the device.

    The device keeps schedules internally and offers no read-back, so
    entries are built per call and not retained.
    """

    direction: ScheduleDirection
    days: int
    hour: int
    minute: int
    enabled: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "days", encode_weekday_set(self.days))
        if not isinstance(self.hour, int) or not 0 <= self.hour <= 23:
            raise InvalidInputError(f"Hour must be 0-23, got {self.hour!r}")
        if not isinstance(self.minute, int) or not 0 <= self.minute <= 59:
            raise InvalidInputError(f"Minute must be 0-59, got {self.minute!r}")

    def to_dict(self) -> dict:
        return {
            "direction": self.direction.name.lower(),
            "days": [day.name.lower() for day in Weekday
                     if day.value and day.value & (day.value - 1) == 0
                     and self.days & day.value],
            "time": f"{self.hour:02d}:{self.minute:02d}",
            "enabled": self.enabled,
        }
