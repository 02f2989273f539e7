from __future__ import annotations

from aiogram.utils.keyboard import InlineKeyboardBuilder

from app.config import settings
from app.services.form import SLEEP_HOURS_STEP
from app.services.sleep import format_sleep_hours


def bedtime_form_keyboard() -> InlineKeyboardBuilder:
    step = settings.wake_step_minutes
    sleep_step = format_sleep_hours(SLEEP_HOURS_STEP)
    builder = InlineKeyboardBuilder()
    builder.button(text=f"⏰ −{step} min", callback_data=f"form:wake:-{step}")
    builder.button(text=f"⏰ +{step} min", callback_data=f"form:wake:{step}")
    builder.button(text=f"🛌 −{sleep_step} h", callback_data=f"form:sleep:-{SLEEP_HOURS_STEP}")
    builder.button(text=f"🛌 +{sleep_step} h", callback_data=f"form:sleep:{SLEEP_HOURS_STEP}")
    builder.button(text="☕ −1", callback_data="form:coffee:-1")
    builder.button(text="☕ +1", callback_data="form:coffee:1")
    builder.button(text="Reset", callback_data="form:reset")
    builder.adjust(2, 2, 2, 1)
    return builder


def alert_keyboard() -> InlineKeyboardBuilder:
    builder = InlineKeyboardBuilder()
    builder.button(text="Ok", callback_data="alert:ok")
    builder.adjust(1)
    return builder
