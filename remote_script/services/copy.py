"""File copy over the SCP sink handshake.

Per file, one session runs ``scp -qt <remote file>`` and a background task
drives the handshake on its stdin/stdout:

    -> C<permissions> <size> <filename>\\n
    <- ack
    -> <size bytes of content> \\0
    <- ack

while the foreground waits for the sink to exit. Both outcomes are joined
before the session is released.
"""

import asyncio
import logging
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

import asyncssh

from remote_script.errors import CommandError, RemoteIOError
from remote_script.models import CopyRequest
from remote_script.services.executors import run_remote
from remote_script.services.response import check_response
from remote_script.utils.shell import mkdir_command, sink_command

if TYPE_CHECKING:
    from remote_script.services.connection import Connection

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 32 * 1024
END_OF_DATA = b"\x00"


async def _write(stdin: "asyncssh.SSHWriter[bytes]", data: bytes) -> None:
    try:
        stdin.write(data)
        await stdin.drain()
    except (OSError, asyncssh.Error) as e:
        raise RemoteIOError(f"Failed to write to remote sink: {e}") from e


async def send_file(
    process: "asyncssh.SSHClientProcess[bytes]", request: CopyRequest
) -> int:
    """Drive the sink handshake for one file.

    Stdin is closed on every path so the sink can exit.

    Args:
        process: Session running the sink program
        request: File to send

    Returns:
        Number of content bytes sent

    Raises:
        ProtocolError: If the sink rejects the header or the content
        RemoteIOError: If a stream fails, closes early, or the source is short
    """
    try:
        await _write(process.stdin, request.header)
        await check_response(process.stdout)

        remaining = request.size
        while remaining > 0:
            try:
                chunk = request.source.read(min(COPY_CHUNK_SIZE, remaining))
            except OSError as e:
                raise RemoteIOError(f"Failed to read {request.filename}: {e}") from e
            if not chunk:
                raise RemoteIOError(
                    f"{request.filename}: source ended after {request.size - remaining} "
                    f"of {request.size} bytes"
                )
            await _write(process.stdin, chunk)
            remaining -= len(chunk)

        await _write(process.stdin, END_OF_DATA)
        await check_response(process.stdout)
        return request.size
    finally:
        try:
            process.stdin.write_eof()
        except (OSError, asyncssh.Error):
            logger.debug("Sink stdin for %s already closed", request.filename)


async def copy_to_remote(
    connection: "Connection",
    source: BinaryIO,
    remote_file: str,
    permissions: str,
    size: int,
) -> None:
    """Copy one byte stream to ``remote_file`` on the remote host.

    Args:
        connection: Open connection
        source: Readable binary stream with at least ``size`` bytes
        remote_file: Destination path on the remote host
        permissions: Textual mode for the created file (e.g. "0644")
        size: Number of bytes to transfer

    Raises:
        SessionError: If the session cannot be opened
        ProtocolError: If the sink rejects a handshake step
        RemoteIOError: If a stream fails or closes early
        CommandError: If the handshake succeeded but the sink exited non-zero
    """
    request = CopyRequest(
        permissions=permissions,
        size=size,
        filename=posixpath.basename(remote_file),
        source=source,
    )
    command = sink_command(remote_file)

    async with connection.session(command) as process:
        handshake = asyncio.create_task(send_file(process, request))
        closed = asyncio.create_task(process.wait_closed())
        try:
            await asyncio.wait({handshake, closed}, return_when=asyncio.FIRST_COMPLETED)
            if handshake.done():
                # A failed handshake is raised without waiting for the sink
                await handshake
            await closed
            # Handshake errors take precedence over the sink's exit status
            await handshake
        finally:
            for task in (handshake, closed):
                if not task.done():
                    task.cancel()
        exit_status = process.exit_status

    if exit_status != 0:
        raise CommandError([command], exit_status)


async def copy_files(
    connection: "Connection",
    permissions: str,
    remote_path: str,
    workspace: str | Path,
    *paths: str,
) -> None:
    """Copy workspace-relative files into a remote directory.

    The remote directory is created first. Files are copied one at a time in
    the given order; the first failure aborts the call and files copied
    before it are left in place.

    Args:
        connection: Open connection
        permissions: Textual mode for every created file
        remote_path: Remote destination directory
        workspace: Local directory the paths are relative to
        *paths: File paths relative to ``workspace``

    Raises:
        RemoteIOError: If a local file cannot be stat'ed or opened
        CommandError: If creating the remote directory fails
        ProtocolError: If the sink rejects a file
    """
    await run_remote(connection, mkdir_command(remote_path))

    root = Path(workspace)
    for relative in paths:
        local_path = root / relative
        remote_file = posixpath.join(remote_path, local_path.name)

        try:
            size = local_path.stat().st_size
            source = local_path.open("rb")
        except OSError as e:
            raise RemoteIOError(f"Cannot read local file {local_path}: {e}") from e

        with source:
            logger.info("[ COPY FILE ]: '%s' -> '%s': %d bytes", local_path, remote_path, size)
            await copy_to_remote(connection, source, remote_file, permissions, size)
