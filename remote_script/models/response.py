"""Acknowledgement models for the copy handshake."""

from dataclasses import dataclass
from enum import IntEnum


class ResponseType(IntEnum):
    """Status byte sent by the remote sink program."""

    OK = 0
    WARNING = 1
    ERROR = 2


@dataclass(frozen=True)
class ResponseMessage:
    """Decoded acknowledgement.

    The message is only populated for non-Ok statuses.
    """

    type: ResponseType
    message: str = ""

    @property
    def ok(self) -> bool:
        """Whether the remote side acknowledged the step."""
        return self.type is ResponseType.OK
