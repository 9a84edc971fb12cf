"""Command and text handlers."""

import logging
from typing import Awaitable, Callable

from telegram import Update
from telegram.error import BadRequest
from telegram.ext import ContextTypes

from azanbot.engine.conversation import ChatIdentity, Conversation, Reply
from azanbot.utils.error_handler import handle_action_error, is_stale_interaction
from azanbot.utils.errors import StaleInteractionError
from azanbot.utils.locks import UserLocks

logger = logging.getLogger(__name__)

Step = Callable[[Conversation, ChatIdentity], Awaitable[list[Reply]]]


def identity_from_update(update: Update) -> ChatIdentity | None:
    """Build the sender identity, or None for updates without a user."""
    user = update.effective_user
    if user is None:
        return None
    return ChatIdentity(
        telegram_id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        username=user.username,
    )


async def send_replies(update: Update, replies: list[Reply]) -> None:
    """Send replies into the chat the update came from."""
    message = update.effective_message
    if message is None:
        return
    for reply in replies:
        await message.reply_text(
            reply.text,
            reply_markup=reply.reply_markup,
            parse_mode=reply.parse_mode,
        )


async def answer_callback(update: Update) -> None:
    """Acknowledge the button press behind `update`, if any."""
    if not update.callback_query:
        return
    try:
        await update.callback_query.answer()
    except BadRequest as e:
        if is_stale_interaction(e):
            raise StaleInteractionError(str(e)) from e
        raise


async def run_step(
    update: Update, context: ContextTypes.DEFAULT_TYPE, action: str, step: Step
) -> None:
    """Run one conversation step for the sender.

    Steps for the same user never overlap; replies are sent and any button
    press acknowledged. Failures go through `handle_action_error`.
    """
    identity = identity_from_update(update)
    if identity is None:
        return

    conversation: Conversation = context.bot_data["conversation"]
    locks: UserLocks = context.bot_data["locks"]

    async with locks.hold(identity.telegram_id):
        try:
            replies = await step(conversation, identity)
            await send_replies(update, replies)
            await answer_callback(update)
        except Exception as e:
            await handle_action_error(update, e, action)


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command."""
    await run_step(update, context, "start", lambda c, who: c.start(who))


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command."""
    await run_step(update, context, "help", lambda c, who: c.help(who))


async def menu_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /menu command."""
    await run_step(update, context, "menu", lambda c, who: c.menu(who))


async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle plain text: a city name or a typed minute offset."""
    if not update.message or not update.message.text:
        return

    text = update.message.text
    await run_step(update, context, "text handler", lambda c, who: c.handle_text(who, text))
