"""Localized message catalog.

Every language must provide every field of `Messages`; a missing entry fails
at import time instead of at send time.
"""

from dataclasses import dataclass

from azanbot.utils.constants import ALL_PRAYERS, Language, Prayer


@dataclass(frozen=True)
class Messages:
    """All user-facing text for one language."""

    welcome: str
    city_prompt: str
    city_not_found: str
    confirm_location: str  # {display_name}
    confirm_yes: str
    confirm_no: str
    city_changed: str
    language_changed: str
    invalid_language: str
    select_prayer: str
    enter_offset: str
    enter_offset_all: str
    invalid_offset: str
    minutes_unit: str
    reminder_set: str  # {prayer}, {offset}
    reminder_set_all: str  # {offset}
    reminders_header: str
    reminder_line: str  # {prayer}, {offset}
    no_reminders: str
    delete_all_success: str
    prayer_times_header: str  # {city}
    azan_message: str  # {prayer}, {time}
    reminder_message: str  # {prayer}, {offset}
    help: str
    button_finish: str
    button_change_city: str
    button_switch_language: str
    button_delete_all: str
    button_show_times: str
    prayers: dict[str, str]

    def prayer_name(self, prayer: Prayer | str) -> str:
        key = prayer.value if isinstance(prayer, Prayer) else prayer
        return self.prayers[key]


MESSAGES: dict[Language, Messages] = {
    Language.EN: Messages(
        welcome="Welcome! Please select your language:",
        city_prompt="Please send your city name.",
        city_not_found="City not found.",
        confirm_location=(
            "Is this your correct location?\n\n{display_name}\n\n"
            "Please confirm the location by clicking the button below."
        ),
        confirm_yes="✅ Yes",
        confirm_no="❌ No",
        city_changed="✅ City changed successfully!",
        language_changed="✅ Language changed successfully!",
        invalid_language="Invalid language selection. Please try again.",
        select_prayer="Please select a prayer first:",
        enter_offset="Now please select how many minutes before the prayer for the reminder.",
        enter_offset_all="Now please select how many minutes before the prayers for the reminder.",
        invalid_offset="Please select a valid number of minutes for the reminder.",
        minutes_unit="minutes",
        reminder_set="✅ Reminder for {prayer} set {offset} mins before Azan.",
        reminder_set_all="✅ Reminders for ALL prayers set {offset} mins before Azan.",
        reminders_header="🕌 *Your Current Reminders:*",
        reminder_line="⏰ {prayer}: *{offset}* minutes before Azan",
        no_reminders="No reminders set yet.",
        delete_all_success="✅ All reminders have been deleted successfully.",
        prayer_times_header="🕌 Prayer Times for {city}:",
        azan_message=(
            "🕌 *It's time for {prayer} Azan*\n\n"
            "⏰ Current time: {time}\n\n"
            "📱 Azan Reminder"
        ),
        reminder_message=(
            "🕌 *Prayer Time Reminder*\n\n"
            "⏰ *{offset}* minutes until {prayer} Azan\n\n"
            "📱 Azan Reminder"
        ),
        help=(
            "🕌 Azan Reminder\n\n"
            "1. Send your city name and confirm the location.\n"
            "2. Pick a prayer (or all prayers).\n"
            "3. Pick how many minutes before the Azan to be reminded.\n\n"
            "You will also get a message at every Azan.\n"
            "Use the 🏙️ Change City button in the menu to switch cities.\n"
            "/start - choose language\n"
            "/menu - show the prayer menu"
        ),
        button_finish="📋 Show All Reminders",
        button_change_city="🏙️ Change City",
        button_switch_language="🌐 العربية",
        button_delete_all="🗑️ Delete All",
        button_show_times="🕒 Show Prayer Times",
        prayers={
            Prayer.FAJR.value: "🌅 FAJR",
            Prayer.SUNRISE.value: "🌞 SUNRISE",
            Prayer.DHUHR.value: "☀️ DHUHR",
            Prayer.ASR.value: "🌤️ ASR",
            Prayer.MAGHRIB.value: "🌅 MAGHRIB",
            Prayer.ISHA.value: "🌙 ISHA",
            ALL_PRAYERS: "🕌 ALL PRAYERS",
        },
    ),
    Language.AR: Messages(
        welcome="مرحباً! الرجاء اختيار اللغة:",
        city_prompt="الرجاء إرسال اسم مدينتك.",
        city_not_found="لم يتم العثور على المدينة.",
        confirm_location=(
            "هل هذا هو موقعك الصحيح؟\n\n{display_name}\n\n"
            "الرجاء تأكيد الموقع بالضغط على الزر أدناه."
        ),
        confirm_yes="✅ نعم",
        confirm_no="❌ لا",
        city_changed="✅ تم تغيير المدينة بنجاح!",
        language_changed="✅ تم تغيير اللغة بنجاح!",
        invalid_language="اختيار لغة غير صالح. الرجاء المحاولة مرة أخرى.",
        select_prayer="الرجاء اختيار الصلاة أولاً:",
        enter_offset="الآن الرجاء اختيار عدد الدقائق قبل الصلاة للتذكير.",
        enter_offset_all="الآن الرجاء اختيار عدد الدقائق قبل الصلوات للتذكير.",
        invalid_offset="الرجاء اختيار عدد دقائق صحيح للتذكير.",
        minutes_unit="دقائق",
        reminder_set="✅ تم تعيين تذكير لصلاة {prayer} قبل {offset} دقيقة من الأذان.",
        reminder_set_all="✅ تم تعيين تذكير لجميع الصلوات قبل {offset} دقيقة من الأذان.",
        reminders_header="🕌 *تذكيراتك الحالية:*",
        reminder_line="⏰ {prayer}: *{offset}* دقيقة قبل الأذان",
        no_reminders="لم يتم تعيين أي تذكيرات بعد.",
        delete_all_success="✅ تم حذف جميع التذكيرات بنجاح.",
        prayer_times_header="🕌 مواقيت الصلاة في {city}:",
        azan_message=(
            "🕌 *حان الآن موعد آذان {prayer}*\n\n"
            "⏰ الوقت الآن: {time}\n\n"
            "📱 منبه الأذان"
        ),
        reminder_message=(
            "🕌 *تذكير بموعد الصلاة*\n\n"
            "⏰ باقي *{offset}* دقائق على آذان {prayer}\n\n"
            "📱 منبه الأذان"
        ),
        help=(
            "🕌 منبه الأذان\n\n"
            "١. أرسل اسم مدينتك وأكد الموقع.\n"
            "٢. اختر صلاة (أو جميع الصلوات).\n"
            "٣. اختر عدد الدقائق قبل الأذان للتذكير.\n\n"
            "ستصلك أيضاً رسالة عند كل أذان.\n"
            "لتغيير مدينتك استخدم زر 🏙️ تغيير المدينة في القائمة.\n"
            "/start - اختيار اللغة\n"
            "/menu - عرض قائمة الصلوات"
        ),
        button_finish="📋 عرض جميع التذكيرات",
        button_change_city="🏙️ تغيير المدينة",
        button_switch_language="🌐 English",
        button_delete_all="🗑️ حذف الكل",
        button_show_times="🕒 عرض مواقيت الصلاة",
        prayers={
            Prayer.FAJR.value: "🌅 الفجر",
            Prayer.SUNRISE.value: "🌞 الشروق",
            Prayer.DHUHR.value: "☀️ الظهر",
            Prayer.ASR.value: "🌤️ العصر",
            Prayer.MAGHRIB.value: "🌅 المغرب",
            Prayer.ISHA.value: "🌙 العشاء",
            ALL_PRAYERS: "🕌 جميع الصلوات",
        },
    ),
}

_PRAYER_KEYS = {prayer.value for prayer in Prayer} | {ALL_PRAYERS}

for _lang in Language:
    if _lang not in MESSAGES:
        raise RuntimeError(f"No messages defined for language {_lang.value}")
    if set(MESSAGES[_lang].prayers) != _PRAYER_KEYS:
        raise RuntimeError(f"Incomplete prayer names for language {_lang.value}")


def get_messages(lang: Language) -> Messages:
    """Message catalog for a language."""
    return MESSAGES[lang]
