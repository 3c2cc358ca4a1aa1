"""Sender module."""

from .telegram import ISender, ReplyMarkup, TelegramSender

__all__ = ["ISender", "ReplyMarkup", "TelegramSender"]
