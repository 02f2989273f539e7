from __future__ import annotations

import re
from dataclasses import replace
from datetime import datetime, time
from typing import Any, Mapping, Optional

from dateutil import parser as date_parser

from app.config import settings
from app.models import BedtimeForm
from app.services.sleep import minutes_to_time, seconds_since_midnight


SLEEP_HOURS_MIN = 4.0
SLEEP_HOURS_MAX = 12.0
SLEEP_HOURS_STEP = 0.25
COFFEE_CUPS_MIN = 1
COFFEE_CUPS_MAX = 20

TIME_REGEX = re.compile(
    r"^\s*(?:\d{1,2}[:.]\d{2}|\d{1,2})\s*(?:[ap]\.?m\.?)?\s*$",
    re.IGNORECASE,
)
MERIDIEM_REGEX = re.compile(r"[ap]\.?m\.?", re.IGNORECASE)


def default_form() -> BedtimeForm:
    return BedtimeForm(
        wake_time=settings.default_wake_time,
        sleep_hours=settings.default_sleep_hours,
        coffee_cups=settings.default_coffee_cups,
    )


def _clamp(value, lower, upper):
    return min(max(value, lower), upper)


def step_sleep_hours(form: BedtimeForm, delta: float) -> BedtimeForm:
    hours = _clamp(form.sleep_hours + delta, SLEEP_HOURS_MIN, SLEEP_HOURS_MAX)
    return replace(form, sleep_hours=hours)


def step_coffee(form: BedtimeForm, delta: int) -> BedtimeForm:
    cups = _clamp(form.coffee_cups + delta, COFFEE_CUPS_MIN, COFFEE_CUPS_MAX)
    return replace(form, coffee_cups=cups)


def shift_wake_time(form: BedtimeForm, minutes: int) -> BedtimeForm:
    total = seconds_since_midnight(form.wake_time) // 60 + minutes
    return replace(form, wake_time=minutes_to_time(total))


def set_wake_time(form: BedtimeForm, wake: time) -> BedtimeForm:
    return replace(form, wake_time=wake.replace(second=0, microsecond=0))


def parse_wake_time(text: str) -> Optional[time]:
    """Parse ``07:30``, ``7.30``, ``7am`` or ``6:45 pm``; bare hours need am/pm."""
    if not text or not TIME_REGEX.match(text):
        return None
    if not any(sep in text for sep in ":.") and not MERIDIEM_REGEX.search(text):
        return None
    value = MERIDIEM_REGEX.sub(lambda m: m.group(0).replace(".", ""), text.strip())
    value = re.sub(r"(\d)\.(\d{2})", r"\1:\2", value)
    try:
        parsed = date_parser.parse(value, default=datetime(2000, 1, 1))
    except (ValueError, OverflowError):
        return None
    return parsed.time().replace(second=0, microsecond=0)


def form_to_state(form: BedtimeForm) -> dict[str, Any]:
    return {
        "wake_time": form.wake_time.strftime("%H:%M"),
        "sleep_hours": form.sleep_hours,
        "coffee_cups": form.coffee_cups,
    }


def form_from_state(data: Mapping[str, Any]) -> Optional[BedtimeForm]:
    if "wake_time" not in data:
        return None
    wake = datetime.strptime(data["wake_time"], "%H:%M").time()
    return BedtimeForm(
        wake_time=wake,
        sleep_hours=float(data["sleep_hours"]),
        coffee_cups=int(data["coffee_cups"]),
    )
