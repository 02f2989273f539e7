from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from app.config import settings
from app.models import BedtimeEstimate, BedtimeForm, BedtimeResult, PredictionFailure
from app.services.prediction import PredictorLoader


logger = logging.getLogger(__name__)

# Only the time of day matters; the date is a fixed anchor for the subtraction.
REFERENCE_DATE = date(2000, 1, 2)


def minutes_to_time(total_minutes: int) -> time:
    total_minutes %= 24 * 60
    hours, minutes = divmod(total_minutes, 60)
    return time(hour=hours, minute=minutes)


def seconds_since_midnight(wake: time) -> int:
    return wake.hour * 60 * 60 + wake.minute * 60


def calculate_bedtime(wake: time, sleep_seconds: float) -> time:
    wake_at = datetime.combine(REFERENCE_DATE, wake.replace(second=0, microsecond=0))
    return (wake_at - timedelta(seconds=sleep_seconds)).time()


def format_bedtime(bedtime: time, time_format: Optional[str] = None) -> str:
    return bedtime.strftime(time_format or settings.time_format)


def format_sleep_hours(hours: float) -> str:
    return f"{hours:g}"


def estimate_bedtime(
    wake_time: time,
    sleep_hours: float,
    coffee_cups: int,
    predictor_loader: PredictorLoader,
    time_format: Optional[str] = None,
) -> BedtimeResult:
    """Suggest a bedtime for the given wake time, sleep wish and caffeine intake.

    The model is loaded through ``predictor_loader`` on every call. Inputs are
    forwarded as-is; range checks belong to the form. Any failure, whether
    loading, predicting or building the time, collapses into
    ``PredictionFailure``.
    """
    try:
        predictor = predictor_loader()
        wake_seconds = seconds_since_midnight(wake_time)
        predicted = float(predictor.predict(float(wake_seconds), float(sleep_hours), float(coffee_cups)))
        bedtime = calculate_bedtime(wake_time, predicted)
        display = format_bedtime(bedtime, time_format)
        predicted_sleep = timedelta(seconds=predicted)
    except Exception as exc:
        logger.error(
            f"Unable to estimate bedtime for wake={wake_time}, sleep={sleep_hours}, coffee={coffee_cups}: {exc}",
            exc_info=True,
        )
        return PredictionFailure()
    return BedtimeEstimate(bedtime=bedtime, predicted_sleep=predicted_sleep, display=display)


def estimate_for_form(
    form: BedtimeForm,
    predictor_loader: PredictorLoader,
    time_format: Optional[str] = None,
) -> BedtimeResult:
    return estimate_bedtime(
        form.wake_time,
        form.sleep_hours,
        form.coffee_cups,
        predictor_loader,
        time_format=time_format,
    )
