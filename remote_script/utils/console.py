"""Colorful console logging for remote_script."""

import logging
import re
import sys
from datetime import datetime

# ANSI color codes
COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "white": "\033[37m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    "bg_red": "\033[41m",
}

LEVEL_COLORS = {
    "DEBUG": COLORS["bright_black"],
    "INFO": COLORS["bright_green"],
    "WARNING": COLORS["bright_yellow"],
    "ERROR": COLORS["bright_red"],
    "CRITICAL": COLORS["bg_red"] + COLORS["white"] + COLORS["bold"],
}

# Component colors for logger names
COMPONENT_COLORS = {
    "remote_script.services.connection": COLORS["bright_magenta"],
    "remote_script.services.executors": COLORS["bright_cyan"],
    "remote_script.services.copy": COLORS["bright_blue"],
    "remote_script.services": COLORS["cyan"],
    "remote_script.config": COLORS["green"],
    "remote_script.routines": COLORS["yellow"],
    "default": COLORS["white"],
}

# "[ REMOTE RUN ]:", "[ COPY FILE ]:" and friends
_ACTION_PATTERN = re.compile(r"^(\[ [A-Z ]+ \]:)")
_SSH_PATTERN = re.compile(r"(\w+@[\w.\-]+:\d+)")
_BYTES_PATTERN = re.compile(r"(\d+ bytes)")

NOISY_LOGGERS = ["asyncssh", "asyncio"]


class ColorfulFormatter(logging.Formatter):
    """Log formatter with colored levels and component highlighting."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to use ANSI colors.
        """
        super().__init__()
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        if not self.use_colors:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _get_component_color(self, name: str) -> str:
        for prefix, color in COMPONENT_COLORS.items():
            if prefix != "default" and name.startswith(prefix):
                return color
        return COMPONENT_COLORS["default"]

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created)
        return f"{dt.strftime('%H:%M:%S')}.{int(record.msecs):03d}"

    def _format_level(self, record: logging.LogRecord) -> str:
        level = record.levelname
        color = LEVEL_COLORS.get(level, COLORS["white"])
        return self._colorize(f"{level:<8}", color)

    def _format_component(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith("remote_script."):
            name = name[len("remote_script."):]
        color = self._get_component_color(record.name)
        return self._colorize(f"{name:<20}", color)

    def _highlight_message(self, message: str) -> str:
        if not self.use_colors:
            return message

        message = _ACTION_PATTERN.sub(
            f"{COLORS['bold']}{COLORS['bright_cyan']}\\1{COLORS['reset']}", message
        )
        message = _SSH_PATTERN.sub(
            f"{COLORS['bright_magenta']}\\1{COLORS['reset']}", message
        )
        message = _BYTES_PATTERN.sub(
            f"{COLORS['bright_yellow']}\\1{COLORS['reset']}", message
        )
        return message

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as ``time | level | component | message``."""
        timestamp = self._colorize(self._format_timestamp(record), COLORS["dim"])
        level = self._format_level(record)
        component = self._format_component(record)
        sep = self._colorize("|", COLORS["dim"])
        message = self._highlight_message(record.getMessage())

        line = f"{timestamp} {sep} {level} {sep} {component} {sep} {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str = "INFO", use_colors: bool = True) -> None:
    """Configure the remote_script logger hierarchy.

    Args:
        level: Log level name for remote_script loggers
        use_colors: Whether to emit ANSI colors (ignored when stderr is not a TTY)
    """
    if not sys.stderr.isatty():
        use_colors = False

    package_logger = logging.getLogger("remote_script")
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Only add handler if not already configured
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    for noisy_logger in NOISY_LOGGERS:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)
