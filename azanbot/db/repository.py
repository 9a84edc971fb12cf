"""Database repository - all SQL queries."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List

import aiosqlite

from azanbot.db.models import Reminder, ReminderWithOwner, Session, User
from azanbot.utils.constants import (
    DEFAULT_TIMEZONE,
    MAX_OFFSET_MINUTES,
    PRAYERS,
    Language,
    Prayer,
)
from azanbot.utils.errors import UserInputError

logger = logging.getLogger(__name__)


class Repository:
    """Database access layer."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open database connection."""
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        # Needed for reminders to cascade when a user is deleted
        await self._db.execute("PRAGMA foreign_keys = ON")
        logger.info(f"Connected to database at {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._db:
            await self._db.close()
            self._db = None
            logger.info("Database connection closed")

    @property
    def db(self) -> aiosqlite.Connection:
        """Get the database connection."""
        if self._db is None:
            raise RuntimeError("Database not connected")
        return self._db

    # User operations

    async def get_user_by_telegram_id(self, telegram_id: int) -> User | None:
        """Get user by Telegram ID."""
        async with self.db.execute(
            "SELECT * FROM users WHERE telegram_id = ?", (telegram_id,)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return self._row_to_user(row)
            return None

    async def list_users(self) -> List[User]:
        """Get every registered user."""
        async with self.db.execute("SELECT * FROM users ORDER BY id") as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_user(row) for row in rows]

    async def upsert_user(
        self,
        telegram_id: int,
        city: str,
        latitude: float,
        longitude: float,
        timezone: str,
        full_name: str | None = None,
        username: str | None = None,
    ) -> User:
        """Insert a user or update the location of an existing one."""
        async with self.db.execute(
            """
            INSERT INTO users (
                telegram_id, full_name, username, city, latitude, longitude, timezone
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(telegram_id) DO UPDATE SET
                full_name = excluded.full_name,
                username = excluded.username,
                city = excluded.city,
                latitude = excluded.latitude,
                longitude = excluded.longitude,
                timezone = excluded.timezone,
                updated_at = datetime('now')
            RETURNING *
            """,
            (telegram_id, full_name, username, city, latitude, longitude, timezone),
        ) as cursor:
            row = await cursor.fetchone()
            await self.db.commit()

            logger.info(f"Saved location for user {telegram_id}: {city} ({timezone})")
            return self._row_to_user(row)

    async def delete_user(self, telegram_id: int) -> None:
        """Delete a user and, by cascade, their reminders."""
        await self.db.execute("DELETE FROM users WHERE telegram_id = ?", (telegram_id,))
        await self.db.commit()

    # Reminder operations

    async def get_reminders_by_user(self, user_id: int) -> List[Reminder]:
        """Get all reminders for a user in the order they were set."""
        async with self.db.execute(
            "SELECT * FROM reminders WHERE user_id = ? ORDER BY id", (user_id,)
        ) as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_reminder(row) for row in rows]

    async def create_reminders(
        self, user_id: int, reminders: Iterable[tuple[Prayer, int]]
    ) -> None:
        """Insert several reminders in one batch."""
        await self.db.executemany(
            "INSERT INTO reminders (user_id, prayer, offset_minutes) VALUES (?, ?, ?)",
            [(user_id, prayer.value, offset) for prayer, offset in reminders],
        )
        await self.db.commit()

    async def delete_reminders(self, user_id: int, prayer: Prayer | None = None) -> int:
        """Delete a user's reminders, optionally only those for one prayer.

        Returns:
            Number of rows deleted
        """
        if prayer is None:
            query = "DELETE FROM reminders WHERE user_id = ?"
            params: tuple = (user_id,)
        else:
            query = "DELETE FROM reminders WHERE user_id = ? AND prayer = ?"
            params = (user_id, prayer.value)

        cursor = await self.db.execute(query, params)
        await self.db.commit()
        return cursor.rowcount

    async def replace_reminder(self, user_id: int, prayer: Prayer, offset_minutes: int) -> None:
        """Set the single reminder for (user, prayer).

        Delete and insert are separate commits; a crash in between leaves the
        prayer without a reminder until the next write.
        """
        await self.delete_reminders(user_id, prayer)
        await self.create_reminders(user_id, [(prayer, offset_minutes)])

    async def replace_all_reminders(self, user_id: int, offset_minutes: int) -> None:
        """Drop every reminder of a user and set one per prayer."""
        await self.delete_reminders(user_id)
        await self.create_reminders(user_id, [(prayer, offset_minutes) for prayer in PRAYERS])

    async def list_reminders_with_owner(self) -> List[ReminderWithOwner]:
        """Get all reminders joined with their owner's Telegram ID and city."""
        async with self.db.execute(
            """
            SELECT reminders.*, users.telegram_id, users.city
            FROM reminders
            JOIN users ON reminders.user_id = users.id
            ORDER BY reminders.id
            """
        ) as cursor:
            rows = await cursor.fetchall()
            return [
                ReminderWithOwner(
                    id=row["id"],
                    user_id=row["user_id"],
                    prayer=Prayer(row["prayer"]),
                    offset_minutes=row["offset_minutes"],
                    telegram_id=row["telegram_id"],
                    city=row["city"],
                )
                for row in rows
            ]

    async def create_reminder_for_telegram_id(
        self, telegram_id: int, prayer: str, offset_minutes: int
    ) -> Reminder | None:
        """Create a reminder for the user with the given Telegram ID.

        Returns:
            The stored reminder, or None if no such user exists
        """
        try:
            prayer_id = Prayer(prayer)
        except ValueError:
            raise UserInputError(f"Unknown prayer: {prayer}") from None

        offset_minutes = int(offset_minutes)
        if abs(offset_minutes) > MAX_OFFSET_MINUTES:
            raise UserInputError(f"Offset out of range: {offset_minutes}")

        user = await self.get_user_by_telegram_id(telegram_id)
        if user is None:
            return None

        await self.replace_reminder(user.id, prayer_id, offset_minutes)  # type: ignore
        reminders = await self.get_reminders_by_user(user.id)  # type: ignore
        return next(r for r in reversed(reminders) if r.prayer is prayer_id)

    async def delete_reminder(self, reminder_id: int) -> bool:
        """Delete a reminder by ID."""
        cursor = await self.db.execute("DELETE FROM reminders WHERE id = ?", (reminder_id,))
        await self.db.commit()
        return cursor.rowcount > 0

    # Session operations

    async def get_session(self, telegram_id: int) -> Session | None:
        """Get the stored conversation session for a user."""
        async with self.db.execute(
            "SELECT * FROM sessions WHERE telegram_id = ?", (telegram_id,)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return self._row_to_session(row)
            return None

    async def save_session(self, session: Session) -> None:
        """Insert or overwrite a session (last writer wins)."""
        await self.db.execute(
            """
            INSERT INTO sessions (telegram_id, lang, data, updated_at)
            VALUES (?, ?, ?, datetime('now'))
            ON CONFLICT(telegram_id) DO UPDATE SET
                lang = excluded.lang,
                data = excluded.data,
                updated_at = excluded.updated_at
            """,
            (
                session.telegram_id,
                session.lang.value,
                json.dumps(session.to_data(), ensure_ascii=False),
            ),
        )
        await self.db.commit()

    async def delete_session(self, telegram_id: int) -> None:
        """Delete a user's session."""
        await self.db.execute("DELETE FROM sessions WHERE telegram_id = ?", (telegram_id,))
        await self.db.commit()

    async def list_sessions(self) -> List[Session]:
        """Get all sessions."""
        async with self.db.execute("SELECT * FROM sessions ORDER BY telegram_id") as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_session(row) for row in rows]

    async def get_session_languages(self) -> dict[int, Language]:
        """Map Telegram ID to the language stored on each session."""
        languages: dict[int, Language] = {}
        async with self.db.execute("SELECT telegram_id, lang FROM sessions") as cursor:
            async for row in cursor:
                try:
                    languages[int(row["telegram_id"])] = Language(row["lang"])
                except ValueError:
                    logger.warning(f"Unknown language {row['lang']!r} for {row['telegram_id']}")
        return languages

    # Helper methods

    def _row_to_user(self, row: aiosqlite.Row) -> User:
        """Convert a database row to a User object."""
        return User(
            id=row["id"],
            telegram_id=row["telegram_id"],
            full_name=row["full_name"],
            username=row["username"],
            city=row["city"],
            latitude=row["latitude"],
            longitude=row["longitude"],
            timezone=row["timezone"] or DEFAULT_TIMEZONE,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_reminder(self, row: aiosqlite.Row) -> Reminder:
        """Convert a database row to a Reminder object."""
        return Reminder(
            id=row["id"],
            user_id=row["user_id"],
            prayer=Prayer(row["prayer"]),
            offset_minutes=row["offset_minutes"],
        )

    def _row_to_session(self, row: aiosqlite.Row) -> Session:
        """Convert a database row to a Session object."""
        data = json.loads(row["data"] or "{}")
        # The lang column is authoritative when the payload lacks it
        data.setdefault("lang", row["lang"])
        session = Session.from_data(int(row["telegram_id"]), data)
        session.created_at = datetime.fromisoformat(row["created_at"])
        session.updated_at = datetime.fromisoformat(row["updated_at"])
        return session
