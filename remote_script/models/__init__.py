"""Data models for remote_script."""

from remote_script.models.command import CommandResult
from remote_script.models.copy import CopyRequest
from remote_script.models.response import ResponseMessage, ResponseType
from remote_script.models.ssh import SSHTarget

__all__ = [
    "CommandResult",
    "CopyRequest",
    "ResponseMessage",
    "ResponseType",
    "SSHTarget",
]
