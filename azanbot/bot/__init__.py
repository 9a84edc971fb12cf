"""Telegram-facing handlers, keyboards and message text."""
