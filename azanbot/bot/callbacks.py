"""Callback query handlers for inline buttons."""

import logging

from telegram import Update
from telegram.ext import ContextTypes

from azanbot.bot.handlers import run_step

logger = logging.getLogger(__name__)


async def callback_router(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Route callback queries to the matching conversation step."""
    if not update.callback_query:
        return

    query = update.callback_query
    data = query.data

    if not data:
        return

    if data.startswith("lang_"):
        code = data.split("_", 1)[1]
        await run_step(
            update, context, "language selection", lambda c, who: c.select_language(who, code)
        )

    elif data == "change_lang":
        await run_step(update, context, "language change", lambda c, who: c.toggle_language(who))

    elif data == "change_city":
        await run_step(update, context, "city change", lambda c, who: c.change_city(who))

    elif data == "confirm_location":
        await run_step(
            update, context, "location confirmation", lambda c, who: c.confirm_location(who)
        )

    elif data == "reject_location":
        await run_step(
            update, context, "location rejection", lambda c, who: c.reject_location(who)
        )

    elif data.startswith("prayer_"):
        prayer = data.split("_", 1)[1]
        await run_step(
            update, context, "prayer selection", lambda c, who: c.select_prayer(who, prayer)
        )

    elif data.startswith("minutes_"):
        raw = data.split("_", 1)[1]
        await run_step(
            update, context, "minute selection", lambda c, who: c.select_offset(who, raw)
        )

    elif data == "finish":
        await run_step(update, context, "finish handler", lambda c, who: c.finish(who))

    elif data == "delete_all":
        await run_step(update, context, "delete all", lambda c, who: c.delete_all(who))

    elif data == "show_times":
        await run_step(update, context, "showing prayer times", lambda c, who: c.show_times(who))

    else:
        logger.warning(f"Unknown callback data: {data!r}")
        await query.answer("Unknown action")
