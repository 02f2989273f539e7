from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from app.config import settings
from app.services.form import (
    COFFEE_CUPS_MAX,
    COFFEE_CUPS_MIN,
    SLEEP_HOURS_MAX,
    SLEEP_HOURS_MIN,
    SLEEP_HOURS_STEP,
)
from app.services.sleep import format_sleep_hours


router = Router(name="commands")


def help_text() -> str:
    return (
        "I suggest a bedtime from your wake-up time, how long you want to sleep "
        "and how much coffee you drink.\n"
        "/start or /bedtime - open the form\n"
        "/help - show this message\n\n"
        f"Wake time: send HH:MM or use the ±{settings.wake_step_minutes} min buttons.\n"
        f"Sleep: {format_sleep_hours(SLEEP_HOURS_MIN)}-{format_sleep_hours(SLEEP_HOURS_MAX)} hours "
        f"in steps of {format_sleep_hours(SLEEP_HOURS_STEP)}.\n"
        f"Coffee: {COFFEE_CUPS_MIN}-{COFFEE_CUPS_MAX} cups a day."
    )


@router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(help_text())
