from __future__ import annotations

from dataclasses import dataclass
from datetime import time, timedelta
from enum import Enum
from typing import Union


ALERT_TITLE = "Error, unable to calculate your bedtime."
ALERT_MESSAGE = "Error"


class FormField(str, Enum):
    WAKE = "wake"
    SLEEP = "sleep"
    COFFEE = "coffee"


@dataclass(frozen=True, slots=True)
class BedtimeForm:
    wake_time: time = time(hour=7)
    sleep_hours: float = 8.0
    coffee_cups: int = 1


@dataclass(frozen=True, slots=True)
class BedtimeEstimate:
    bedtime: time
    predicted_sleep: timedelta
    display: str


@dataclass(frozen=True, slots=True)
class PredictionFailure:
    """Single "unable to compute" signal; carries only the fixed alert texts."""

    title: str = ALERT_TITLE
    message: str = ALERT_MESSAGE


BedtimeResult = Union[BedtimeEstimate, PredictionFailure]
