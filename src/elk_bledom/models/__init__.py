"""Lookup tables for effect programs and schedule weekdays."""

from .effects import EFFECTS, Effect, effect_name, lookup_effect
from .schedule import (
    ScheduleDirection,
    ScheduleEntry,
    Weekday,
    decode_weekday_set,
    encode_weekday_set,
    parse_days,
)
