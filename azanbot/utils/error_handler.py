"""Error handling for bot updates."""

import logging
import traceback

from telegram import Update
from telegram.error import BadRequest, TelegramError
from telegram.ext import ContextTypes

from azanbot.utils.constants import STALE_QUERY_MARKERS
from azanbot.utils.errors import StaleInteractionError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred. Please try again."


def is_stale_interaction(error: BaseException) -> bool:
    """Check whether an error means the button press expired at Telegram."""
    if isinstance(error, StaleInteractionError):
        return True
    if isinstance(error, BadRequest):
        description = str(error).lower()
        return any(marker in description for marker in STALE_QUERY_MARKERS)
    return False


async def _acknowledge(update: Update) -> None:
    """Answer the callback query if there is one, ignoring failures."""
    if not update.callback_query:
        return
    try:
        await update.callback_query.answer()
    except TelegramError as e:
        logger.debug(f"Could not answer callback query: {e}")


async def handle_action_error(update: Update, error: Exception, action: str) -> None:
    """Recover from a failed conversation step.

    Expired button presses are only logged. Anything else gets a generic
    reply, and the button press is still acknowledged so the client does not
    keep spinning.
    """
    if is_stale_interaction(error):
        logger.info(f"Ignoring expired interaction in {action}: {error}")
        await _acknowledge(update)
        return

    logger.error(f"Error in {action}: {error}", exc_info=error)

    if update.effective_message:
        try:
            await update.effective_message.reply_text(GENERIC_ERROR_MESSAGE)
        except TelegramError as e:
            logger.error(f"Failed to send error message to user: {e}")

    await _acknowledge(update)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle errors that escaped the per-action handling."""
    if context.error is not None and is_stale_interaction(context.error):
        logger.info(f"Ignoring expired interaction: {context.error}")
        return

    # Log the error
    logger.error("Exception while handling an update:", exc_info=context.error)

    if context.error is not None:
        tb_list = traceback.format_exception(None, context.error, context.error.__traceback__)
        logger.debug("Traceback:\n" + "".join(tb_list))

    # Try to notify the user
    if isinstance(update, Update) and update.effective_message:
        try:
            await update.effective_message.reply_text(GENERIC_ERROR_MESSAGE)
        except Exception as e:
            logger.error(f"Failed to send error message to user: {e}")
