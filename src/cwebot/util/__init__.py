"""
Utility helpers shared across the bot.

- **logger.py**: Console and session-file logging
- **duration.py**: ``1h15m`` style duration parsing and formatting
- **pagination.py**: Fixed-size paging of loaded sequences
- **time_utils.py**: UTC helpers and the storage time format
"""
