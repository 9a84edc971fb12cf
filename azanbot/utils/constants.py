"""Constants and default values."""

from enum import Enum


class Prayer(str, Enum):
    """The six daily prayer events, in the order they occur."""

    FAJR = "fajr"
    SUNRISE = "sunrise"
    DHUHR = "dhuhr"
    ASR = "asr"
    MAGHRIB = "maghrib"
    ISHA = "isha"


class Language(str, Enum):
    """Supported conversation languages."""

    EN = "en"
    AR = "ar"

    def toggled(self) -> "Language":
        return Language.AR if self is Language.EN else Language.EN


PRAYERS = tuple(Prayer)

# Callback value meaning "every prayer"
ALL_PRAYERS = "all"

# Offsets offered on the minute keyboard
MINUTE_OPTIONS = [5, 10, 15, 20, 25, 30]

# Largest lead time accepted for a reminder, in either direction (one day)
MAX_OFFSET_MINUTES = 24 * 60

# Default timezone
DEFAULT_TIMEZONE = "UTC"

DEFAULT_LANGUAGE = Language.EN

# Telegram error descriptions for callback queries that can no longer be answered
STALE_QUERY_MARKERS = ("query is too old", "query id is invalid")
