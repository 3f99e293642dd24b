"""Outbound notifications to the bot endpoint."""

from .notifier import RoomNotifier

__all__ = ["RoomNotifier"]
