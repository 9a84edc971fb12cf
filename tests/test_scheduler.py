"""Tests for the per-minute notification sweep."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from telegram.error import Forbidden

from azanbot.db.models import Reminder, Session, User
from azanbot.engine.scheduler import due_notifications, sweep
from azanbot.utils.constants import Language, Prayer
from tests.helpers import DEFAULT_TIMES, UTC, FakeCalculator


def at(hour, minute, second=0):
    return datetime(2026, 3, 15, hour, minute, second, tzinfo=UTC)


async def add_user(repo, telegram_id, latitude=24.7136, timezone="Asia/Riyadh"):
    return await repo.upsert_user(
        telegram_id=telegram_id,
        city="Riyadh",
        latitude=latitude,
        longitude=46.6753,
        timezone=timezone,
    )


def sent_texts(bot):
    return [call.kwargs["text"] for call in bot.send_message.call_args_list]


@pytest.fixture
def bot():
    return AsyncMock()


@pytest.mark.asyncio
async def test_azan_fires_only_in_its_minute(repo, calculator, bot):
    await add_user(repo, 1)

    for now in (at(1, 59), at(2, 1)):
        result = await sweep(bot, repo, calculator, now=now)
        assert result.messages_sent == 0
    bot.send_message.assert_not_called()

    result = await sweep(bot, repo, calculator, now=at(2, 0, 30))

    assert result.messages_sent == 1
    bot.send_message.assert_awaited_once()
    call = bot.send_message.call_args
    assert call.kwargs["chat_id"] == 1
    assert call.kwargs["parse_mode"] == "Markdown"
    assert call.kwargs["text"].startswith("🕌 *It's time for 🌅 FAJR Azan*")
    assert "5:00 AM" in call.kwargs["text"]


@pytest.mark.asyncio
async def test_reminder_fires_offset_minutes_before(repo, calculator, bot):
    user = await add_user(repo, 1)
    await repo.replace_reminder(user.id, Prayer.DHUHR, 15)

    for now in (at(9, 14), at(9, 16)):
        await sweep(bot, repo, calculator, now=now)
    bot.send_message.assert_not_called()

    result = await sweep(bot, repo, calculator, now=at(9, 15))

    assert result.messages_sent == 1
    text = bot.send_message.call_args.kwargs["text"]
    assert "*15* minutes until ☀️ DHUHR Azan" in text


@pytest.mark.asyncio
async def test_zero_offset_sends_reminder_and_azan(repo, calculator, bot):
    user = await add_user(repo, 1)
    await repo.replace_reminder(user.id, Prayer.ASR, 0)

    result = await sweep(bot, repo, calculator, now=at(12, 50))

    assert result.messages_sent == 2
    texts = sent_texts(bot)
    assert texts[0].startswith("🕌 *It's time for 🌤️ ASR Azan*")
    assert texts[1].startswith("🕌 *Prayer Time Reminder*")


@pytest.mark.asyncio
async def test_failing_user_does_not_block_others(repo, bot):
    calculator = FakeCalculator(DEFAULT_TIMES, failing_latitudes=[-91.0])
    await add_user(repo, 1, latitude=-91.0)
    await add_user(repo, 2)

    result = await sweep(bot, repo, calculator, now=at(2, 0))

    assert result.users_checked == 2
    assert result.failures == 1
    assert result.messages_sent == 1
    assert bot.send_message.call_args.kwargs["chat_id"] == 2


@pytest.mark.asyncio
async def test_send_failure_does_not_stop_other_sends(repo, calculator, bot):
    user = await add_user(repo, 1)
    await repo.replace_reminder(user.id, Prayer.FAJR, 0)
    bot.send_message.side_effect = [Forbidden("bot was blocked by the user"), None]

    result = await sweep(bot, repo, calculator, now=at(2, 0))

    assert bot.send_message.await_count == 2
    assert result.messages_sent == 1
    assert result.failures == 0


@pytest.mark.asyncio
async def test_uses_session_language(repo, calculator, bot):
    await add_user(repo, 1)
    await add_user(repo, 2)
    await repo.save_session(Session(telegram_id=2, lang=Language.AR))

    await sweep(bot, repo, calculator, now=at(2, 0))

    by_chat = {
        call.kwargs["chat_id"]: call.kwargs["text"]
        for call in bot.send_message.call_args_list
    }
    assert "🌅 FAJR" in by_chat[1]
    assert by_chat[2].startswith("🕌 *حان الآن موعد آذان 🌅 الفجر*")
    assert "٥:٠٠ ص" in by_chat[2]


@pytest.mark.asyncio
async def test_user_timezone_sets_the_day(repo, calculator, bot):
    """Times come from the user's local date, not the UTC date."""
    await add_user(repo, 1)
    requested = []
    original = calculator.compute

    def spy(latitude, longitude, day):
        requested.append(day)
        return original(latitude, longitude, day)

    calculator.compute = spy

    # 22:30 UTC is already the 16th in Riyadh
    await sweep(bot, repo, calculator, now=at(22, 30))

    assert [d.day for d in requested] == [16]


@pytest.mark.asyncio
async def test_sweep_with_no_users(repo, calculator, bot):
    result = await sweep(bot, repo, calculator, now=at(2, 0))

    assert result.users_checked == 0
    bot.send_message.assert_not_called()


@pytest.mark.asyncio
async def test_sweep_survives_repository_failure(calculator, bot):
    repo = AsyncMock()
    repo.list_users.side_effect = RuntimeError("Database not connected")

    result = await sweep(bot, repo, calculator, now=at(2, 0))

    assert result.failures == 1
    bot.send_message.assert_not_called()


def test_due_notifications_multiple_reminders(calculator):
    user = User(telegram_id=1, city="Riyadh", latitude=0, longitude=0, timezone="Asia/Riyadh", id=1)
    times = calculator.compute(0, 0, at(0, 0).date())
    reminders = [
        Reminder(user_id=1, prayer=Prayer.MAGHRIB, offset_minutes=10),
        Reminder(user_id=1, prayer=Prayer.ISHA, offset_minutes=100),
    ]

    # maghrib 15:40 - 10 and isha 17:10 - 100 both land on 15:30
    due = due_notifications(user, times, reminders, Language.EN, at(15, 30))

    assert [(n.kind, n.prayer) for n in due] == [
        ("reminder", Prayer.MAGHRIB),
        ("reminder", Prayer.ISHA),
    ]


@pytest.mark.asyncio
async def test_unusable_offset_does_not_silence_other_alerts(repo, calculator, bot):
    """A reminder whose time cannot be computed is skipped on its own."""
    user = await add_user(repo, 1)
    await repo.create_reminders(user.id, [(Prayer.ISHA, 9_999_999_999), (Prayer.DHUHR, 15)])

    result = await sweep(bot, repo, calculator, now=at(2, 0))
    assert result.failures == 0
    assert result.messages_sent == 1
    assert sent_texts(bot)[0].startswith("🕌 *It's time for 🌅 FAJR Azan*")

    bot.send_message.reset_mock()
    result = await sweep(bot, repo, calculator, now=at(9, 15))
    assert result.failures == 0
    assert result.messages_sent == 1
    assert "*15* minutes until ☀️ DHUHR Azan" in sent_texts(bot)[0]
