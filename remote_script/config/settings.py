"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

ENV_PREFIX = "REMOTE_SCRIPT_"


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Remote endpoint
    host: str = field(default="")
    port: int = field(default=22)
    user: str = field(default="root")

    # Private key: environment variable first, file as fallback
    private_key_env: str = field(default="SSH_PRIVATE_KEY")
    private_key_path: str = field(default="~/.ssh/id_rsa")

    # Host key verification
    known_hosts: str | None = field(default=None)
    strict_host_key_checking: bool = field(default=True)
    host_fingerprint: str | None = field(default=None)

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from REMOTE_SCRIPT_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            host=os.getenv(f"{ENV_PREFIX}HOST", ""),
            port=cls._get_int(f"{ENV_PREFIX}PORT", 22),
            user=os.getenv(f"{ENV_PREFIX}USER", "root"),
            private_key_env=os.getenv(f"{ENV_PREFIX}PRIVATE_KEY_ENV", "SSH_PRIVATE_KEY"),
            private_key_path=os.getenv(f"{ENV_PREFIX}PRIVATE_KEY_PATH", "~/.ssh/id_rsa"),
            known_hosts=os.getenv(f"{ENV_PREFIX}KNOWN_HOSTS") or None,
            strict_host_key_checking=cls._get_bool(
                f"{ENV_PREFIX}STRICT_HOST_KEY_CHECKING", True
            ),
            host_fingerprint=os.getenv(f"{ENV_PREFIX}HOST_FINGERPRINT") or None,
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool(f"{ENV_PREFIX}LOG_COLORS", True),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")
