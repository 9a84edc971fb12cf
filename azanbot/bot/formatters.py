"""Message text formatters."""

from datetime import datetime
from typing import Sequence

from azanbot.bot.messages import get_messages
from azanbot.db.models import PrayerTimes, ReminderSummary
from azanbot.utils.constants import ALL_PRAYERS, Language, Prayer
from azanbot.utils.time_utils import format_clock, localize_number


def format_reminder_list(reminders: Sequence[ReminderSummary], lang: Language) -> str:
    """Format a user's reminders (Markdown), in the order they were set."""
    messages = get_messages(lang)
    if not reminders:
        return messages.no_reminders

    lines = [
        messages.reminder_line.format(
            prayer=messages.prayer_name(reminder.prayer),
            offset=localize_number(reminder.offset_minutes, lang),
        )
        for reminder in reminders
    ]

    return messages.reminders_header + "\n\n" + "\n\n".join(lines)


def format_prayer_times(times: PrayerTimes, city: str, tz: str, lang: Language) -> str:
    """Format today's prayer times in the user's timezone."""
    messages = get_messages(lang)
    lines = [
        f"{messages.prayer_name(prayer)}: {format_clock(at, tz, lang)}"
        for prayer, at in times.items()
    ]
    return messages.prayer_times_header.format(city=city) + "\n\n" + "\n".join(lines)


def format_azan_message(prayer: Prayer, at: datetime, tz: str, lang: Language) -> str:
    """Message sent at the exact Azan minute."""
    messages = get_messages(lang)
    return messages.azan_message.format(
        prayer=messages.prayer_name(prayer), time=format_clock(at, tz, lang)
    )


def format_reminder_message(prayer: Prayer, offset_minutes: int, lang: Language) -> str:
    """Message sent `offset_minutes` before the Azan."""
    messages = get_messages(lang)
    return messages.reminder_message.format(
        prayer=messages.prayer_name(prayer),
        offset=localize_number(offset_minutes, lang),
    )


def format_reminder_set(prayer: str, offset_minutes: int, lang: Language) -> str:
    """Confirmation after a reminder was saved (`prayer` may be ALL_PRAYERS)."""
    messages = get_messages(lang)
    if prayer == ALL_PRAYERS:
        return messages.reminder_set_all.format(offset=offset_minutes)
    return messages.reminder_set.format(
        prayer=messages.prayer_name(prayer), offset=offset_minutes
    )


def format_full_name(first_name: str | None, last_name: str | None) -> str | None:
    """Join a Telegram first and last name."""
    parts = [part for part in (first_name, last_name) if part]
    return " ".join(parts) or None
