"""Telegram application wiring."""
