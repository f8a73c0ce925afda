"""Cogs registered on the bot by :func:`cwebot.main.load_cogs`."""
