"""
Configuration management for CWE Bot.

- **app_configuration.py**: File-locked YAML loader for ``config/app_config.yml``
  (command prefix, database path, staff roles, mute role and the mute expiry
  interval). Falls back to defaults on missing or malformed files.

The Discord token is not part of this file; it is read from ``DISCORD_BOT_TOKEN``
in ``.env`` at startup.
"""
