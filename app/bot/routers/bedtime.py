from __future__ import annotations

import logging
from typing import Optional

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State, StatesGroup
from aiogram.types import CallbackQuery, Message

from app.bot.keyboards.common import alert_keyboard, bedtime_form_keyboard
from app.models import BedtimeForm, FormField, PredictionFailure
from app.services.form import (
    default_form,
    form_from_state,
    form_to_state,
    parse_wake_time,
    set_wake_time,
    shift_wake_time,
    step_coffee,
    step_sleep_hours,
)
from app.services.prediction import PredictorLoader
from app.services.sleep import estimate_for_form, format_bedtime, format_sleep_hours


logger = logging.getLogger(__name__)

router = Router(name="bedtime")

FORM_TITLE = "BetterRest"
WAKE_TIME_HINT = "Enter the time as HH:MM, for example 06:45."


class BedtimeFormStates(StatesGroup):
    active = State()


def render_form(form: BedtimeForm, suggested_bedtime: str) -> str:
    cups = "cup" if form.coffee_cups == 1 else "cups"
    return (
        f"<b>{FORM_TITLE}</b>\n\n"
        "<b>When do you want to wake up?</b>\n"
        f"{format_bedtime(form.wake_time)}\n"
        "<i>Send a time like 06:45 to change it.</i>\n\n"
        "<b>Desired amount of sleep</b>\n"
        f"{format_sleep_hours(form.sleep_hours)} hours\n\n"
        "<b>Daily coffee intake</b>\n"
        f"{form.coffee_cups} {cups}\n\n"
        "<b>Suggested Bedtime</b>\n"
        f"{suggested_bedtime or '-'}"
    )


def apply_form_action(form: BedtimeForm, callback_data: str) -> BedtimeForm:
    """Apply one button press; unknown or malformed data leaves the form as is."""
    parts = callback_data.split(":")
    if parts[1:] == ["reset"]:
        return default_form()
    if len(parts) != 3:
        return form
    try:
        field = FormField(parts[1])
        if field is FormField.WAKE:
            return shift_wake_time(form, int(parts[2]))
        if field is FormField.SLEEP:
            return step_sleep_hours(form, float(parts[2]))
        return step_coffee(form, int(parts[2]))
    except ValueError:
        logger.warning(f"Ignoring malformed form callback {callback_data!r}")
        return form


def _recalculate(
    form: BedtimeForm,
    previous: str,
    predictor_loader: PredictorLoader,
) -> tuple[str, Optional[PredictionFailure]]:
    result = estimate_for_form(form, predictor_loader)
    if isinstance(result, PredictionFailure):
        logger.warning(f"Bedtime unavailable for {form}, keeping previous value {previous!r}")
        return previous, result
    return result.display, None


async def _send_alert(message: Message, failure: PredictionFailure) -> None:
    await message.answer(
        f"<b>{failure.title}</b>\n{failure.message}",
        reply_markup=alert_keyboard().as_markup(),
    )


@router.message(Command("start", "bedtime"))
async def open_form(message: Message, state: FSMContext, predictor_loader: PredictorLoader) -> None:
    form = default_form()
    suggested, failure = _recalculate(form, "", predictor_loader)
    sent = await message.answer(
        render_form(form, suggested),
        reply_markup=bedtime_form_keyboard().as_markup(),
    )
    await state.set_state(BedtimeFormStates.active)
    await state.set_data(
        {**form_to_state(form), "suggested_bedtime": suggested, "form_message_id": sent.message_id}
    )
    if failure:
        await _send_alert(message, failure)


@router.callback_query(F.data.startswith("form:"))
async def change_form(callback: CallbackQuery, state: FSMContext, predictor_loader: PredictorLoader) -> None:
    data = await state.get_data()
    form = form_from_state(data)
    if form is None:
        await callback.answer("This form has expired. Send /start to open a new one.", show_alert=True)
        return
    updated = apply_form_action(form, callback.data)
    if updated == form:
        # bound reached or nothing to apply, no recompute
        await callback.answer()
        return
    suggested, failure = _recalculate(updated, data.get("suggested_bedtime", ""), predictor_loader)
    await state.update_data(**form_to_state(updated), suggested_bedtime=suggested)
    await callback.message.edit_text(
        render_form(updated, suggested),
        reply_markup=bedtime_form_keyboard().as_markup(),
    )
    if failure:
        await callback.answer(f"{failure.title}\n\n{failure.message}", show_alert=True)
    else:
        await callback.answer()


@router.message(BedtimeFormStates.active, F.text, ~F.text.startswith("/"))
async def enter_wake_time(message: Message, state: FSMContext, predictor_loader: PredictorLoader) -> None:
    wake = parse_wake_time(message.text)
    if wake is None:
        await message.answer(WAKE_TIME_HINT)
        return
    data = await state.get_data()
    form = form_from_state(data) or default_form()
    updated = set_wake_time(form, wake)
    if updated == form and data.get("form_message_id"):
        return
    suggested, failure = _recalculate(updated, data.get("suggested_bedtime", ""), predictor_loader)
    await state.update_data(**form_to_state(updated), suggested_bedtime=suggested)

    text = render_form(updated, suggested)
    message_id = data.get("form_message_id")
    edited = False
    if message_id is not None:
        try:
            await message.bot.edit_message_text(
                text,
                chat_id=message.chat.id,
                message_id=message_id,
                reply_markup=bedtime_form_keyboard().as_markup(),
            )
            edited = True
        except TelegramBadRequest as exc:
            logger.info(f"Form message {message_id} not editable ({exc}), sending a new one")
    if not edited:
        sent = await message.answer(text, reply_markup=bedtime_form_keyboard().as_markup())
        await state.update_data(form_message_id=sent.message_id)
    if failure:
        await _send_alert(message, failure)


@router.callback_query(F.data == "alert:ok")
async def dismiss_alert(callback: CallbackQuery) -> None:
    await callback.message.delete()
    await callback.answer()
