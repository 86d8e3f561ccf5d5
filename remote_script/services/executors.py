"""Remote command execution over ephemeral sessions."""

import asyncio
import logging
import sys
from typing import TYPE_CHECKING, TextIO

import asyncssh

from remote_script.errors import CommandError, RemoteIOError
from remote_script.models import CommandResult
from remote_script.utils.shell import batch_command

if TYPE_CHECKING:
    from remote_script.services.connection import Connection

logger = logging.getLogger(__name__)

DRAIN_CHUNK_SIZE = 4096


async def drain_stream(reader: "asyncssh.SSHReader[bytes]", sink: TextIO) -> str:
    """Copy a remote stream to a local text stream until end-of-stream.

    Args:
        reader: Remote stream (binary)
        sink: Local text stream receiving the decoded output

    Returns:
        Everything that was read, decoded as UTF-8

    Raises:
        RemoteIOError: If reading the remote stream fails
    """
    captured: list[str] = []
    while True:
        try:
            chunk = await reader.read(DRAIN_CHUNK_SIZE)
        except (OSError, asyncssh.Error) as e:
            raise RemoteIOError(f"Failed to read remote error stream: {e}") from e
        if not chunk:
            break
        text = chunk.decode("utf-8", errors="replace")
        captured.append(text)
        sink.write(text)
        sink.flush()
    return "".join(captured)


async def run_remote(
    connection: "Connection",
    *commands: str,
    stderr: TextIO | None = None,
) -> None:
    """Run commands on the remote host as one shell invocation.

    The commands are joined with newlines, so there is a single exit status
    for the whole batch. Remote stderr is streamed to ``stderr`` while the
    batch runs; remote stdout is discarded.

    Args:
        connection: Open connection
        *commands: Shell command lines, run in order
        stderr: Local stream for remote error output (defaults to sys.stderr)

    Raises:
        SessionError: If the session cannot be opened
        CommandError: If the batch exits with a non-zero status
    """
    sink = stderr if stderr is not None else sys.stderr
    command_list = list(commands)

    for command in command_list:
        logger.info("[ REMOTE RUN ]: %s", command)

    async with connection.session(
        batch_command(command_list), stdout=asyncssh.DEVNULL
    ) as process:
        process.stdin.write_eof()
        drain = asyncio.create_task(drain_stream(process.stderr, sink))
        try:
            await process.wait_closed()
            error_output = await drain
        finally:
            if not drain.done():
                drain.cancel()
        exit_status = process.exit_status

    if exit_status != 0:
        logger.error(
            "Remote batch on %s failed with exit status %s", connection.target, exit_status
        )
        raise CommandError(command_list, exit_status, error_output)


async def run_each(connection: "Connection", *commands: str) -> list[CommandResult]:
    """Run each command in its own session and collect per-command results.

    Stops after the first command that exits with a non-zero status; the
    failing command's result is the last element.

    Args:
        connection: Open connection
        *commands: Shell command lines

    Returns:
        One CommandResult per command that was run

    Raises:
        SessionError: If a session cannot be opened
        RemoteIOError: If reading a command's output fails
    """
    results: list[CommandResult] = []

    for command in commands:
        logger.info("[ REMOTE RUN ]: %s", command)
        async with connection.session(command) as process:
            process.stdin.write_eof()
            try:
                stdout, stderr = await asyncio.gather(
                    process.stdout.read(), process.stderr.read()
                )
            except (OSError, asyncssh.Error) as e:
                raise RemoteIOError(f"Failed to read output of {command!r}: {e}") from e
            await process.wait_closed()
            result = CommandResult(
                command=command,
                exit_status=process.exit_status,
                output=stdout.decode("utf-8", errors="replace"),
                error=stderr.decode("utf-8", errors="replace"),
            )

        results.append(result)
        if not result.ok:
            logger.warning(
                "Command exited with status %s, skipping %d remaining",
                result.exit_status,
                len(commands) - len(results),
            )
            break

    return results
