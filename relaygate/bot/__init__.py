"""Telegram-facing glue: command router, poll loop and composition root."""
