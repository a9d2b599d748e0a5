"""Telegram to OpenAI relay bot with per-chat daily quotas."""
