"""Acknowledgement parser for the sink handshake.

The sink answers every step with one status byte. A non-Ok byte is followed
by a message terminated by a newline.
"""

from typing import Protocol

import asyncssh

from remote_script.errors import ProtocolError, RemoteIOError
from remote_script.models import ResponseMessage, ResponseType


class ByteReader(Protocol):
    """Subset of the asyncssh/asyncio stream reader API used here."""

    async def read(self, n: int = -1) -> bytes: ...

    async def readline(self) -> bytes: ...


async def parse_response(reader: ByteReader) -> ResponseMessage:
    """Read one acknowledgement from the stream.

    Args:
        reader: Stream connected to the sink's standard output

    Returns:
        Decoded acknowledgement. The message is empty for Ok.

    Raises:
        RemoteIOError: If the stream closes before the status byte or the message terminator
        ProtocolError: If the status byte is not a known acknowledgement
    """
    try:
        status = await reader.read(1)
    except (OSError, asyncssh.Error) as e:
        raise RemoteIOError(f"Failed to read acknowledgement: {e}") from e

    if not status:
        raise RemoteIOError("Stream closed before acknowledgement")

    try:
        response_type = ResponseType(status[0])
    except ValueError:
        raise ProtocolError(f"Unknown acknowledgement byte 0x{status[0]:02x}") from None

    if response_type is ResponseType.OK:
        return ResponseMessage(response_type)

    try:
        line = await reader.readline()
    except (OSError, asyncssh.Error) as e:
        raise RemoteIOError(f"Failed to read acknowledgement message: {e}") from e

    if not line.endswith(b"\n"):
        raise RemoteIOError("Stream closed before end of acknowledgement message")

    return ResponseMessage(response_type, line[:-1].decode("utf-8", errors="replace"))


async def check_response(reader: ByteReader) -> None:
    """Read one acknowledgement and fail unless it is Ok.

    Raises:
        ProtocolError: If the sink reported a warning or an error
        RemoteIOError: If the stream closed early
    """
    response = await parse_response(reader)
    if response.ok:
        return

    message = response.message.strip()
    if not message:
        message = f"remote sink reported {response.type.name.lower()} without a message"
    raise ProtocolError(message)
