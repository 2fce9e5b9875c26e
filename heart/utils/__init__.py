"""Shared helpers for the heart engine."""
from heart.utils.clock import clamp, ensure_utc, minutes_between, parse_timestamp, utc_now
from heart.utils.periodic import PeriodicLoop
from heart.utils.weighted import Weighted, choose, pick_weighted

__all__ = [
    "clamp",
    "ensure_utc",
    "minutes_between",
    "parse_timestamp",
    "utc_now",
    "PeriodicLoop",
    "Weighted",
    "choose",
    "pick_weighted",
]
