from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiogram.exceptions import TelegramBadRequest
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.base import StorageKey
from aiogram.fsm.storage.memory import MemoryStorage

from app.bot.routers import bedtime
from app.models import ALERT_TITLE, BedtimeForm

from conftest import StubPredictor, failing_loader


def make_state() -> FSMContext:
    return FSMContext(storage=MemoryStorage(), key=StorageKey(bot_id=1, chat_id=1, user_id=1))


def make_message(text: str = "/start", message_id: int = 10) -> MagicMock:
    message = MagicMock()
    message.text = text
    message.chat.id = 1
    message.answer = AsyncMock(return_value=SimpleNamespace(message_id=message_id))
    message.bot.edit_message_text = AsyncMock()
    return message


def make_callback(data: str) -> MagicMock:
    callback = MagicMock()
    callback.data = data
    callback.answer = AsyncMock()
    callback.message.edit_text = AsyncMock()
    callback.message.delete = AsyncMock()
    return callback


def loader_for(predictor):
    return lambda: predictor


@pytest.mark.asyncio
async def test_open_form_computes_once(stub_predictor):
    message = make_message()
    state = make_state()
    await bedtime.open_form(message, state, loader_for(stub_predictor))

    text = message.answer.await_args.args[0]
    assert "Suggested Bedtime" in text
    assert "22:48" in text
    assert len(stub_predictor.calls) == 1
    data = await state.get_data()
    assert data["suggested_bedtime"] == "22:48"
    assert data["form_message_id"] == 10
    assert await state.get_state() == bedtime.BedtimeFormStates.active.state


@pytest.mark.asyncio
async def test_open_form_failure_sends_alert():
    message = make_message()
    state = make_state()
    await bedtime.open_form(message, state, failing_loader)

    assert message.answer.await_count == 2
    alert_text = message.answer.await_args_list[1].args[0]
    assert ALERT_TITLE in alert_text
    assert (await state.get_data())["suggested_bedtime"] == ""


@pytest.mark.asyncio
async def test_stepper_recomputes_with_new_value(stub_predictor):
    state = make_state()
    await bedtime.open_form(make_message(), state, loader_for(stub_predictor))

    callback = make_callback("form:sleep:0.25")
    await bedtime.change_form(callback, state, loader_for(stub_predictor))

    assert stub_predictor.calls[-1] == (25200.0, 8.25, 1.0)
    assert "8.25 hours" in callback.message.edit_text.await_args.args[0]
    callback.answer.assert_awaited_once_with()


@pytest.mark.asyncio
async def test_stepper_at_bound_skips_recompute(stub_predictor):
    state = make_state()
    await bedtime.open_form(make_message(), state, loader_for(stub_predictor))

    callback = make_callback("form:coffee:-1")
    await bedtime.change_form(callback, state, loader_for(stub_predictor))

    assert len(stub_predictor.calls) == 1
    callback.message.edit_text.assert_not_awaited()


@pytest.mark.asyncio
async def test_failure_keeps_previous_bedtime(stub_predictor):
    state = make_state()
    await bedtime.open_form(make_message(), state, loader_for(stub_predictor))

    callback = make_callback("form:coffee:1")
    await bedtime.change_form(callback, state, failing_loader)

    data = await state.get_data()
    assert data["suggested_bedtime"] == "22:48"
    assert data["coffee_cups"] == 2
    assert "22:48" in callback.message.edit_text.await_args.args[0]
    assert ALERT_TITLE in callback.answer.await_args.args[0]
    assert callback.answer.await_args.kwargs["show_alert"] is True


@pytest.mark.asyncio
async def test_expired_form_asks_to_restart(stub_predictor):
    callback = make_callback("form:sleep:0.25")
    await bedtime.change_form(callback, make_state(), loader_for(stub_predictor))

    assert callback.answer.await_args.kwargs["show_alert"] is True
    assert not stub_predictor.calls


@pytest.mark.asyncio
async def test_reset_restores_defaults():
    predictor = StubPredictor()
    state = make_state()
    await bedtime.open_form(make_message(), state, loader_for(predictor))
    await bedtime.change_form(make_callback("form:wake:-15"), state, loader_for(predictor))
    await bedtime.change_form(make_callback("form:reset"), state, loader_for(predictor))

    data = await state.get_data()
    assert data["wake_time"] == "07:00"
    assert predictor.calls[-1] == (25200.0, 8.0, 1.0)


@pytest.mark.asyncio
async def test_typed_wake_time_edits_form():
    predictor = StubPredictor(seconds=8 * 3600)
    state = make_state()
    await bedtime.open_form(make_message(), state, loader_for(predictor))

    message = make_message("06:30")
    await bedtime.enter_wake_time(message, state, loader_for(predictor))

    assert predictor.calls[-1] == (23400.0, 8.0, 1.0)
    kwargs = message.bot.edit_message_text.await_args.kwargs
    assert kwargs["message_id"] == 10
    assert "22:30" in message.bot.edit_message_text.await_args.args[0]


@pytest.mark.asyncio
async def test_typed_wake_time_sends_new_form_when_edit_fails():
    predictor = StubPredictor(seconds=8 * 3600)
    state = make_state()
    await bedtime.open_form(make_message(), state, loader_for(predictor))

    message = make_message("06:30", message_id=42)
    message.bot.edit_message_text.side_effect = TelegramBadRequest(
        method=MagicMock(), message="message to edit not found"
    )
    await bedtime.enter_wake_time(message, state, loader_for(predictor))

    message.answer.assert_awaited_once()
    assert (await state.get_data())["form_message_id"] == 42


@pytest.mark.asyncio
async def test_unparseable_wake_time_gets_hint(stub_predictor):
    state = make_state()
    await bedtime.open_form(make_message(), state, loader_for(stub_predictor))

    message = make_message("soon")
    await bedtime.enter_wake_time(message, state, loader_for(stub_predictor))

    message.answer.assert_awaited_once_with(bedtime.WAKE_TIME_HINT)
    assert len(stub_predictor.calls) == 1


@pytest.mark.asyncio
async def test_dismiss_alert_deletes_message():
    callback = make_callback("alert:ok")
    await bedtime.dismiss_alert(callback)
    callback.message.delete.assert_awaited_once()
    callback.answer.assert_awaited_once()


@pytest.mark.parametrize("data", ["form:", "form:wake", "form:sleep:lots", "form:tea:1", "form:coffee:1:2"])
def test_malformed_form_action_leaves_form(data):
    form = BedtimeForm()
    assert bedtime.apply_form_action(form, data) == form


@pytest.mark.asyncio
async def test_malformed_callback_is_acknowledged_silently(stub_predictor):
    state = make_state()
    await bedtime.open_form(make_message(), state, loader_for(stub_predictor))

    callback = make_callback("form:wake")
    await bedtime.change_form(callback, state, loader_for(stub_predictor))

    callback.answer.assert_awaited_once_with()
    callback.message.edit_text.assert_not_awaited()
    assert len(stub_predictor.calls) == 1
