"""Tests for Telegram handler glue and error recovery."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram.error import BadRequest, TelegramError

from azanbot.bot.callbacks import callback_router
from azanbot.bot.handlers import answer_callback, handle_text, run_step, start_command
from azanbot.engine.conversation import Reply
from azanbot.utils.error_handler import (
    GENERIC_ERROR_MESSAGE,
    error_handler,
    handle_action_error,
    is_stale_interaction,
)
from azanbot.utils.errors import StaleInteractionError
from azanbot.utils.locks import UserLocks


def make_update(text=None, callback_data=None, user_id=1001):
    """Minimal stand-in for a telegram.Update."""
    message = MagicMock()
    message.text = text
    message.reply_text = AsyncMock()

    update = MagicMock()
    update.effective_user = SimpleNamespace(
        id=user_id, first_name="Amina", last_name="Khan", username="amina"
    )
    update.effective_message = message
    update.message = message if callback_data is None else None

    if callback_data is None:
        update.callback_query = None
    else:
        update.callback_query = MagicMock()
        update.callback_query.data = callback_data
        update.callback_query.answer = AsyncMock()
    return update


def make_context(conversation):
    return SimpleNamespace(bot_data={"conversation": conversation, "locks": UserLocks()})


def test_stale_interaction_detection():
    assert is_stale_interaction(StaleInteractionError("expired"))
    assert is_stale_interaction(
        BadRequest("Query is too old and response timeout expired or query id is invalid")
    )
    assert not is_stale_interaction(BadRequest("Message is not modified"))
    assert not is_stale_interaction(ValueError("query is too old"))


@pytest.mark.asyncio
async def test_stale_error_is_acknowledged_silently():
    update = make_update(callback_data="finish")

    await handle_action_error(update, BadRequest("Query is too old"), "finish handler")

    update.effective_message.reply_text.assert_not_called()
    update.callback_query.answer.assert_awaited_once()


@pytest.mark.asyncio
async def test_generic_error_replies_and_acknowledges():
    update = make_update(callback_data="finish")

    await handle_action_error(update, RuntimeError("db down"), "finish handler")

    update.effective_message.reply_text.assert_awaited_once_with(GENERIC_ERROR_MESSAGE)
    update.callback_query.answer.assert_awaited_once()


@pytest.mark.asyncio
async def test_failed_acknowledgement_is_tolerated():
    update = make_update(callback_data="finish")
    update.callback_query.answer.side_effect = TelegramError("network")

    await handle_action_error(update, RuntimeError("db down"), "finish handler")

    update.effective_message.reply_text.assert_awaited_once_with(GENERIC_ERROR_MESSAGE)


@pytest.mark.asyncio
async def test_run_step_sends_replies_then_answers():
    update = make_update(callback_data="show_times")
    conversation = MagicMock()
    step = AsyncMock(return_value=[Reply("one"), Reply("two", parse_mode="Markdown")])

    await run_step(update, make_context(conversation), "test", step)

    step.assert_awaited_once()
    identity = step.call_args.args[1]
    assert identity.telegram_id == 1001
    assert identity.full_name == "Amina Khan"

    texts = [call.args[0] for call in update.effective_message.reply_text.call_args_list]
    assert texts == ["one", "two"]
    update.callback_query.answer.assert_awaited_once_with()


@pytest.mark.asyncio
async def test_run_step_failure_goes_to_error_handling():
    update = make_update(text="Cairo")
    step = AsyncMock(side_effect=RuntimeError("boom"))

    await run_step(update, make_context(MagicMock()), "text handler", step)

    update.effective_message.reply_text.assert_awaited_once_with(GENERIC_ERROR_MESSAGE)


@pytest.mark.asyncio
async def test_start_command_runs_conversation_start():
    update = make_update(text="/start")
    conversation = MagicMock()
    conversation.start = AsyncMock(return_value=[Reply("Welcome!")])

    await start_command(update, make_context(conversation))

    conversation.start.assert_awaited_once()
    update.effective_message.reply_text.assert_awaited_once()


@pytest.mark.asyncio
async def test_handle_text_passes_message_text():
    update = make_update(text="Cairo")
    conversation = MagicMock()
    conversation.handle_text = AsyncMock(return_value=[])

    await handle_text(update, make_context(conversation))

    assert conversation.handle_text.call_args.args[1] == "Cairo"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data, method, extra",
    [
        ("lang_ar", "select_language", ("ar",)),
        ("change_lang", "toggle_language", ()),
        ("change_city", "change_city", ()),
        ("confirm_location", "confirm_location", ()),
        ("reject_location", "reject_location", ()),
        ("prayer_all", "select_prayer", ("all",)),
        ("minutes_15", "select_offset", ("15",)),
        ("finish", "finish", ()),
        ("delete_all", "delete_all", ()),
        ("show_times", "show_times", ()),
    ],
)
async def test_callback_routing(data, method, extra):
    update = make_update(callback_data=data)
    conversation = MagicMock()
    setattr(conversation, method, AsyncMock(return_value=[]))

    await callback_router(update, make_context(conversation))

    handler = getattr(conversation, method)
    handler.assert_awaited_once()
    assert handler.call_args.args[1:] == extra
    update.callback_query.answer.assert_awaited_once_with()


@pytest.mark.asyncio
async def test_unknown_callback_is_answered():
    update = make_update(callback_data="bogus")

    await callback_router(update, make_context(MagicMock()))

    update.callback_query.answer.assert_awaited_once_with("Unknown action")


@pytest.mark.asyncio
async def test_global_error_handler_ignores_stale_queries():
    context = SimpleNamespace(error=BadRequest("query id is invalid"))
    update = MagicMock()
    update.effective_message.reply_text = AsyncMock()

    await error_handler(update, context)

    update.effective_message.reply_text.assert_not_called()


@pytest.mark.asyncio
async def test_expired_button_press_keeps_replies_and_skips_apology():
    update = make_update(callback_data="finish")
    update.callback_query.answer.side_effect = BadRequest(
        "Query is too old and response timeout expired or query id is invalid"
    )
    step = AsyncMock(return_value=[Reply("🕌 *Your Current Reminders:*")])

    await run_step(update, make_context(MagicMock()), "finish handler", step)

    texts = [call.args[0] for call in update.effective_message.reply_text.call_args_list]
    assert texts == ["🕌 *Your Current Reminders:*"]


@pytest.mark.asyncio
async def test_answer_callback_raises_stale_interaction():
    update = make_update(callback_data="finish")
    update.callback_query.answer.side_effect = BadRequest("Query is too old")

    with pytest.raises(StaleInteractionError):
        await answer_callback(update)


@pytest.mark.asyncio
async def test_answer_callback_reraises_other_bad_requests():
    update = make_update(callback_data="finish")
    update.callback_query.answer.side_effect = BadRequest("Message is not modified")

    with pytest.raises(BadRequest):
        await answer_callback(update)
