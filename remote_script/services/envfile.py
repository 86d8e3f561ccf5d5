"""Environment file materialization on the remote host."""

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, TextIO

from remote_script.services.executors import run_remote
from remote_script.utils.shell import write_file_command
from remote_script.utils.substitution import substitute

if TYPE_CHECKING:
    from remote_script.services.connection import Connection

logger = logging.getLogger(__name__)


def render_env_file(env: Mapping[str, str], variables: Mapping[str, str]) -> str:
    """Render ``KEY=VALUE`` lines sorted by key.

    Args:
        env: Keys and values; values may contain ``${NAME}`` placeholders
        variables: Substitution values for the placeholders

    Returns:
        File content, one newline-terminated line per key
    """
    return "".join(
        f"{key}={substitute(env[key], variables)}\n" for key in sorted(env)
    )


def env_file_command(path: str, content: str) -> str:
    """Build the shell command that writes ``content`` to ``path``."""
    return write_file_command(path, content)


async def create_env_file(
    connection: "Connection",
    path: str,
    env: Mapping[str, str],
    variables: Mapping[str, str],
    stderr: TextIO | None = None,
) -> None:
    """Write an environment file on the remote host.

    Args:
        connection: Open connection
        path: Remote destination file
        env: Keys and values to write
        variables: Substitution values for ``${NAME}`` placeholders
        stderr: Local stream for remote error output

    Raises:
        CommandError: If writing the file fails
    """
    content = render_env_file(env, variables)
    logger.debug("Writing %d variable(s) to %s", len(env), path)
    await run_remote(connection, env_file_command(path, content), stderr=stderr)
