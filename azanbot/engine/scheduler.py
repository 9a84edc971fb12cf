"""Per-minute sweep that sends Azan alerts and pre-Azan reminders."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from telegram import Bot
from telegram.constants import ParseMode
from telegram.error import TelegramError

from azanbot.bot.formatters import format_azan_message, format_reminder_message
from azanbot.db.models import PrayerTimes, Reminder, User
from azanbot.db.repository import Repository
from azanbot.engine.prayer_times import PrayerTimesCalculator
from azanbot.utils.constants import DEFAULT_LANGUAGE, Language, Prayer
from azanbot.utils.time_utils import same_local_minute

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    """A message due for one user in the current minute."""

    kind: str  # "azan" or "reminder"
    prayer: Prayer
    text: str


@dataclass
class SweepResult:
    """Outcome of one tick."""

    users_checked: int = 0
    messages_sent: int = 0
    failures: int = 0


def due_notifications(
    user: User,
    times: PrayerTimes,
    reminders: list[Reminder],
    lang: Language,
    now: datetime,
) -> list[Notification]:
    """Work out which messages fire for `user` in the minute containing `now`.

    Both checks compare the local wall-clock hour and minute only:
    an Azan alert when a prayer instant falls in this minute, and a reminder
    when `prayer instant - offset` does.
    """
    notifications = []

    for prayer, azan_at in times.items():
        if same_local_minute(azan_at, now, user.timezone):
            notifications.append(
                Notification(
                    kind="azan",
                    prayer=prayer,
                    text=format_azan_message(prayer, azan_at, user.timezone, lang),
                )
            )

    for reminder in reminders:
        try:
            notify_at = times.get(reminder.prayer) - timedelta(minutes=reminder.offset_minutes)
        except (OverflowError, ValueError) as e:
            logger.warning(
                f"Skipping reminder {reminder.id} for user {user.telegram_id} "
                f"(offset {reminder.offset_minutes}): {e}"
            )
            continue
        if same_local_minute(notify_at, now, user.timezone):
            notifications.append(
                Notification(
                    kind="reminder",
                    prayer=reminder.prayer,
                    text=format_reminder_message(reminder.prayer, reminder.offset_minutes, lang),
                )
            )

    return notifications


async def process_user(
    bot: Bot,
    repo: Repository,
    calculator: PrayerTimesCalculator,
    user: User,
    lang: Language,
    now: datetime,
) -> int:
    """Evaluate and send everything due for one user.

    Returns:
        Number of messages delivered
    """
    times = calculator.compute_for_user_day(user.latitude, user.longitude, now, user.timezone)
    reminders = await repo.get_reminders_by_user(user.id)  # type: ignore

    sent = 0
    for notification in due_notifications(user, times, reminders, lang, now):
        try:
            await bot.send_message(
                chat_id=user.telegram_id,
                text=notification.text,
                parse_mode=ParseMode.MARKDOWN,
            )
            sent += 1
            logger.info(
                f"Sent {notification.kind} for {notification.prayer.value} "
                f"to user {user.telegram_id}"
            )
        except TelegramError as e:
            # Keep going: the user's other notifications this minute still go out
            logger.error(
                f"Failed to send {notification.kind} for {notification.prayer.value} "
                f"to user {user.telegram_id}: {e}"
            )

    return sent


async def sweep(
    bot: Bot,
    repo: Repository,
    calculator: PrayerTimesCalculator,
    now: datetime | None = None,
    concurrency: int = 20,
) -> SweepResult:
    """Check every user once for the minute containing `now`.

    Users are evaluated in parallel (at most `concurrency` at a time), each in
    its own task, so one failing user cannot hold up or abort the others.
    Never raises.
    """
    if now is None:
        now = datetime.now(ZoneInfo("UTC"))

    result = SweepResult()

    try:
        users = await repo.list_users()
        languages = await repo.get_session_languages()
    except Exception as e:
        logger.error(f"Sweep aborted, could not load users: {e}")
        result.failures += 1
        return result

    if not users:
        return result

    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def run(user: User) -> int:
        async with semaphore:
            lang = languages.get(user.telegram_id, DEFAULT_LANGUAGE)
            return await process_user(bot, repo, calculator, user, lang, now)

    outcomes = await asyncio.gather(*(run(user) for user in users), return_exceptions=True)

    for user, outcome in zip(users, outcomes):
        result.users_checked += 1
        if isinstance(outcome, BaseException):
            result.failures += 1
            logger.error(f"Error processing user {user.telegram_id}: {outcome!r}")
        else:
            result.messages_sent += outcome

    if result.messages_sent or result.failures:
        logger.info(
            f"Sweep at {now:%H:%M}: {result.users_checked} users, "
            f"{result.messages_sent} sent, {result.failures} failed"
        )

    return result
