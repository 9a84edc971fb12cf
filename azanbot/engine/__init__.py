"""Conversation state machine, prayer time calculation and the notification sweep."""
