"""Utility helpers for remote_script."""

from remote_script.utils.console import ColorfulFormatter, configure_logging
from remote_script.utils.shell import (
    batch_command,
    mkdir_command,
    quote_arg,
    quote_path,
    sink_command,
    write_file_command,
)
from remote_script.utils.substitution import substitute

__all__ = [
    "ColorfulFormatter",
    "batch_command",
    "configure_logging",
    "mkdir_command",
    "quote_arg",
    "quote_path",
    "sink_command",
    "substitute",
    "write_file_command",
]
