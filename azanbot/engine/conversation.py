"""Setup dialogue: language -> city -> confirmation -> prayer -> offset.

Every step loads the user's session, applies one transition and persists the
session again. Steps return the replies to send; the Telegram handlers in
`azanbot.bot.handlers` deliver them.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from telegram import InlineKeyboardMarkup
from telegram.constants import ParseMode

from azanbot.bot.formatters import (
    format_full_name,
    format_prayer_times,
    format_reminder_list,
    format_reminder_set,
)
from azanbot.bot.keyboards import (
    confirm_location_keyboard,
    language_keyboard,
    minutes_keyboard,
    prayer_keyboard,
)
from azanbot.bot.messages import get_messages
from azanbot.db.models import ConversationState, PendingLocation, Session, User
from azanbot.db.repository import Repository
from azanbot.engine.prayer_times import PrayerTimesCalculator
from azanbot.services.location import LocationResolver
from azanbot.utils.constants import (
    ALL_PRAYERS,
    DEFAULT_LANGUAGE,
    MAX_OFFSET_MINUTES,
    Language,
    Prayer,
)

logger = logging.getLogger(__name__)

# States in which free text is read as a city name
CITY_INPUT_STATES = {
    ConversationState.AWAITING_LANGUAGE,
    ConversationState.AWAITING_CITY,
    ConversationState.AWAITING_LOCATION_CONFIRMATION,
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass
class Reply:
    """One outbound chat message."""

    text: str
    reply_markup: InlineKeyboardMarkup | None = None
    parse_mode: str | None = None


@dataclass
class ChatIdentity:
    """Who sent the update, as reported by Telegram."""

    telegram_id: int
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None

    @property
    def full_name(self) -> str | None:
        return format_full_name(self.first_name, self.last_name)


def parse_offset(raw: str | int) -> int | None:
    """Read a minute offset from button data or free text.

    Accepts the leading integer of the text ("10", "10 min"), so "0" is
    valid and "abc" is not. Offsets beyond a day either way are rejected.
    """
    if isinstance(raw, int):
        offset = raw
    else:
        match = _LEADING_INT.match(raw)
        if not match:
            return None
        offset = int(match.group(1))

    if abs(offset) > MAX_OFFSET_MINUTES:
        return None
    return offset


class Conversation:
    """The per-user setup state machine."""

    def __init__(
        self,
        repo: Repository,
        resolver: LocationResolver,
        calculator: PrayerTimesCalculator,
    ):
        self.repo = repo
        self.resolver = resolver
        self.calculator = calculator

    async def load_session(self, telegram_id: int) -> Session:
        """Stored session, or a fresh one for first-time users."""
        session = await self.repo.get_session(telegram_id)
        if session is None:
            session = Session(telegram_id=telegram_id, lang=DEFAULT_LANGUAGE)
        return session

    # Commands

    async def start(self, identity: ChatIdentity) -> list[Reply]:
        """Begin (or restart) setup with the language choice."""
        session = await self.load_session(identity.telegram_id)
        session.state = ConversationState.AWAITING_LANGUAGE
        session.last_prayer = None
        session.pending_location = None
        await self.repo.save_session(session)

        return [Reply(get_messages(Language.EN).welcome, language_keyboard())]

    async def help(self, identity: ChatIdentity) -> list[Reply]:
        session = await self.load_session(identity.telegram_id)
        return [Reply(get_messages(session.lang).help)]

    async def menu(self, identity: ChatIdentity) -> list[Reply]:
        """Show the prayer menu, or ask for a city if none is confirmed."""
        session = await self.load_session(identity.telegram_id)
        user = await self.repo.get_user_by_telegram_id(identity.telegram_id)

        if user is None:
            session.await_city()
            await self.repo.save_session(session)
            return [self._city_prompt(session.lang)]

        session.await_prayer()
        await self.repo.save_session(session)
        return [self._menu(session.lang)]

    # Language

    async def select_language(self, identity: ChatIdentity, code: str) -> list[Reply]:
        """Set the language picked on the welcome keyboard."""
        session = await self.load_session(identity.telegram_id)

        try:
            lang = Language(code)
        except ValueError:
            logger.warning(f"Invalid language code {code!r} from {identity.telegram_id}")
            return [Reply(get_messages(session.lang).invalid_language)]

        session.lang = lang
        session.await_city()
        await self.repo.save_session(session)

        return [self._city_prompt(lang)]

    async def toggle_language(self, identity: ChatIdentity) -> list[Reply]:
        """Switch between English and Arabic without touching reminders."""
        session = await self.load_session(identity.telegram_id)
        user = await self.repo.get_user_by_telegram_id(identity.telegram_id)

        session.lang = session.lang.toggled()
        messages = get_messages(session.lang)

        if user is None:
            session.await_city()
            await self.repo.save_session(session)
            return [Reply(messages.language_changed), self._city_prompt(session.lang)]

        session.await_prayer()
        await self.repo.save_session(session)
        return [Reply(messages.language_changed), self._menu(session.lang)]

    # Location

    async def change_city(self, identity: ChatIdentity) -> list[Reply]:
        session = await self.load_session(identity.telegram_id)
        session.await_city()
        await self.repo.save_session(session)
        return [self._city_prompt(session.lang)]

    async def handle_text(self, identity: ChatIdentity, text: str) -> list[Reply]:
        """Route free text by conversation state: city name or minute offset."""
        text = text.strip()
        session = await self.load_session(identity.telegram_id)
        user = await self.repo.get_user_by_telegram_id(identity.telegram_id)

        if user is None or session.state in CITY_INPUT_STATES:
            return await self._lookup_city(session, text)

        if session.state is ConversationState.AWAITING_OFFSET:
            return await self._apply_offset(session, user, text)

        return [self._menu(session.lang)]

    async def confirm_location(self, identity: ChatIdentity) -> list[Reply]:
        """Save the staged location as the user's city."""
        session = await self.load_session(identity.telegram_id)
        pending = session.pending_location

        if pending is None:
            session.await_city()
            await self.repo.save_session(session)
            return [self._city_prompt(session.lang)]

        await self.repo.upsert_user(
            telegram_id=identity.telegram_id,
            city=pending.city,
            latitude=pending.latitude,
            longitude=pending.longitude,
            timezone=pending.timezone,
            full_name=identity.full_name,
            username=identity.username,
        )

        session.await_prayer()
        await self.repo.save_session(session)

        return [Reply(get_messages(session.lang).city_changed), self._menu(session.lang)]

    async def reject_location(self, identity: ChatIdentity) -> list[Reply]:
        session = await self.load_session(identity.telegram_id)
        session.await_city()
        await self.repo.save_session(session)
        return [self._city_prompt(session.lang)]

    # Prayers and offsets

    async def select_prayer(self, identity: ChatIdentity, prayer: str) -> list[Reply]:
        """Remember which prayer (or all) the next offset applies to."""
        session = await self.load_session(identity.telegram_id)
        messages = get_messages(session.lang)

        if prayer != ALL_PRAYERS and prayer not in {p.value for p in Prayer}:
            logger.warning(f"Unknown prayer {prayer!r} from {identity.telegram_id}")
            return [self._menu(session.lang)]

        session.await_offset(prayer)
        await self.repo.save_session(session)

        prompt = messages.enter_offset_all if prayer == ALL_PRAYERS else messages.enter_offset
        return [Reply(prompt, minutes_keyboard(session.lang))]

    async def select_offset(self, identity: ChatIdentity, raw: str | int) -> list[Reply]:
        """Apply an offset from a minute button or typed digits."""
        session = await self.load_session(identity.telegram_id)
        user = await self.repo.get_user_by_telegram_id(identity.telegram_id)

        if user is None:
            return [self._menu(session.lang)]

        return await self._apply_offset(session, user, raw)

    async def finish(self, identity: ChatIdentity) -> list[Reply]:
        """List the user's reminders."""
        session = await self.load_session(identity.telegram_id)
        user = await self.repo.get_user_by_telegram_id(identity.telegram_id)

        if user is None:
            return [self._city_prompt(session.lang)]

        reminders = await self.repo.get_reminders_by_user(user.id)  # type: ignore
        session.reminders = [r.summary() for r in reminders]
        await self.repo.save_session(session)

        return [
            Reply(
                format_reminder_list(session.reminders, session.lang),
                parse_mode=ParseMode.MARKDOWN,
            )
        ]

    async def delete_all(self, identity: ChatIdentity) -> list[Reply]:
        """Remove every reminder of the user."""
        session = await self.load_session(identity.telegram_id)
        user = await self.repo.get_user_by_telegram_id(identity.telegram_id)

        if user is None:
            return [self._menu(session.lang)]

        deleted = await self.repo.delete_reminders(user.id)  # type: ignore
        logger.info(f"Deleted {deleted} reminders for user {identity.telegram_id}")

        session.reminders = []
        await self.repo.save_session(session)

        return [Reply(get_messages(session.lang).delete_all_success), self._menu(session.lang)]

    async def show_times(
        self, identity: ChatIdentity, now: datetime | None = None
    ) -> list[Reply]:
        """Today's prayer times for the user's city."""
        if now is None:
            now = datetime.now(ZoneInfo("UTC"))

        session = await self.load_session(identity.telegram_id)
        user = await self.repo.get_user_by_telegram_id(identity.telegram_id)

        if user is None:
            return [self._city_prompt(session.lang)]

        times = self.calculator.compute_for_user_day(
            user.latitude, user.longitude, now, user.timezone
        )
        return [Reply(format_prayer_times(times, user.city, user.timezone, session.lang))]

    # Helpers

    async def _lookup_city(self, session: Session, text: str) -> list[Reply]:
        """Geocode a city and stage it for confirmation."""
        messages = get_messages(session.lang)

        if not text:
            return [self._city_prompt(session.lang)]

        match = await self.resolver.geocode(text)
        if match is None:
            return [Reply(messages.city_not_found)]

        timezone = await self.resolver.timezone_for(match.latitude, match.longitude)

        session.await_confirmation(
            PendingLocation(
                city=text,
                latitude=match.latitude,
                longitude=match.longitude,
                timezone=timezone,
                display_name=match.display_name,
            )
        )
        await self.repo.save_session(session)

        return [
            Reply(
                messages.confirm_location.format(display_name=match.display_name),
                confirm_location_keyboard(session.lang),
            )
        ]

    async def _apply_offset(self, session: Session, user: User, raw: str | int) -> list[Reply]:
        """Replace the reminder(s) for the pending prayer selection."""
        messages = get_messages(session.lang)
        prayer = session.last_prayer

        if session.state is not ConversationState.AWAITING_OFFSET or not prayer:
            return [self._menu(session.lang)]

        offset = parse_offset(raw)
        if offset is None:
            return [Reply(messages.invalid_offset)]

        if prayer == ALL_PRAYERS:
            await self.repo.replace_all_reminders(user.id, offset)  # type: ignore
        else:
            await self.repo.replace_reminder(user.id, Prayer(prayer), offset)  # type: ignore

        logger.info(f"User {user.telegram_id} set {prayer} reminder {offset} min before Azan")

        reminders = await self.repo.get_reminders_by_user(user.id)  # type: ignore
        session.reminders = [r.summary() for r in reminders]
        session.await_prayer()
        await self.repo.save_session(session)

        return [
            Reply(format_reminder_set(prayer, offset, session.lang)),
            self._menu(session.lang),
        ]

    def _menu(self, lang: Language) -> Reply:
        return Reply(get_messages(lang).select_prayer, prayer_keyboard(lang))

    def _city_prompt(self, lang: Language) -> Reply:
        return Reply(get_messages(lang).city_prompt)
