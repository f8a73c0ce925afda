from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict, List, Optional
import yaml

from cwebot.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_COMMAND_PREFIX = "!"
DEFAULT_DATABASE_PATH = "data/cwebot.db"
DEFAULT_MUTE_EXPIRY_INTERVAL = 30.0


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    Caches the contents of ``./config/app_config.yml`` and exposes typed
    properties with defaults, so a missing or malformed file still yields a
    usable configuration.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            if data is not None:
                logger.error("[APP CONFIGURATION] Config %s is not a mapping, ignoring it.", self.config_path)
            return {}
        return data

    def _section(self, key: str) -> Dict[str, Any]:
        value = self._data.get(key, {})
        return value if isinstance(value, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Re-read the YAML file, replace the cache and return it.

        An empty dict is cached when the file is missing or invalid.
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """The cached mapping. Callers should not mutate it."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def command_prefix(self) -> str:
        """Prefix for text commands such as ``!warn``."""
        value = self._data.get("command_prefix")
        return str(value) if value else DEFAULT_COMMAND_PREFIX

    @property
    def database_path(self) -> Path:
        """SQLite file location, relative paths resolved against the working directory."""
        value = self._section("database").get("path") or DEFAULT_DATABASE_PATH
        return Path(str(value)).resolve()

    @property
    def staff_role_ids(self) -> List[int]:
        """Role IDs whose holders may run moderation commands."""
        roles = self._section("moderation").get("staff_role_ids") or []
        if not isinstance(roles, list):
            logger.warning("[APP CONFIGURATION] moderation.staff_role_ids must be a list")
            return []
        result = []
        for role in roles:
            try:
                result.append(int(role))
            except (TypeError, ValueError):
                logger.warning("[APP CONFIGURATION] Ignoring invalid staff role id %r", role)
        return result

    @property
    def mute_role_id(self) -> Optional[int]:
        """Role given to muted members. None means Discord timeouts are used instead."""
        value = self._section("moderation").get("mute_role_id")
        if value in (None, "", 0):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("[APP CONFIGURATION] Ignoring invalid mute_role_id %r", value)
            return None

    @property
    def mute_expiry_interval(self) -> float:
        """Seconds between sweeps for expired mutes. Default is 30 seconds."""
        value = self._section("mute_expiry").get("interval_seconds", DEFAULT_MUTE_EXPIRY_INTERVAL)
        try:
            interval = float(value)
        except (TypeError, ValueError):
            return DEFAULT_MUTE_EXPIRY_INTERVAL
        return interval if interval > 0 else DEFAULT_MUTE_EXPIRY_INTERVAL


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
