"""Telegram bot that reminds users of prayer times."""
