"""Inline keyboard builders."""

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from azanbot.bot.messages import get_messages
from azanbot.utils.constants import ALL_PRAYERS, MINUTE_OPTIONS, PRAYERS, Language


def language_keyboard() -> InlineKeyboardMarkup:
    """Keyboard for the first language choice."""
    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton("English 🇬🇧", callback_data="lang_en")],
            [InlineKeyboardButton("العربية 🇸🇦", callback_data="lang_ar")],
        ]
    )


def prayer_keyboard(lang: Language) -> InlineKeyboardMarkup:
    """Main menu: one button per prayer plus the account actions."""
    messages = get_messages(lang)
    rows = [
        [InlineKeyboardButton(messages.prayer_name(prayer), callback_data=f"prayer_{prayer.value}")]
        for prayer in PRAYERS
    ]
    rows.append(
        [InlineKeyboardButton(messages.prayer_name(ALL_PRAYERS), callback_data=f"prayer_{ALL_PRAYERS}")]
    )
    rows.append(
        [
            InlineKeyboardButton(messages.button_switch_language, callback_data="change_lang"),
            InlineKeyboardButton(messages.button_change_city, callback_data="change_city"),
        ]
    )
    rows.append(
        [
            InlineKeyboardButton(messages.button_finish, callback_data="finish"),
            InlineKeyboardButton(messages.button_delete_all, callback_data="delete_all"),
        ]
    )
    rows.append([InlineKeyboardButton(messages.button_show_times, callback_data="show_times")])
    return InlineKeyboardMarkup(rows)


def minutes_keyboard(lang: Language) -> InlineKeyboardMarkup:
    """Offset choices, two per row."""
    unit = get_messages(lang).minutes_unit
    buttons = [
        InlineKeyboardButton(f"{minutes} {unit}", callback_data=f"minutes_{minutes}")
        for minutes in MINUTE_OPTIONS
    ]
    return InlineKeyboardMarkup([buttons[i : i + 2] for i in range(0, len(buttons), 2)])


def confirm_location_keyboard(lang: Language) -> InlineKeyboardMarkup:
    """Keyboard for location confirmation: Yes, No."""
    messages = get_messages(lang)
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton(messages.confirm_yes, callback_data="confirm_location"),
                InlineKeyboardButton(messages.confirm_no, callback_data="reject_location"),
            ]
        ]
    )
