"""Local command runner with the same substitution rules as the remote side."""

import asyncio
import logging
import shlex
from collections.abc import Mapping
from pathlib import Path

from remote_script.errors import CommandError
from remote_script.utils.substitution import substitute

logger = logging.getLogger(__name__)

WORKSPACE_PLACEHOLDER = "${workspace}"


def expand_local_command(
    command: str, workspace: str | Path, variables: Mapping[str, str]
) -> str:
    """Replace ``${workspace}`` and then ``${NAME}`` placeholders."""
    command = command.replace(WORKSPACE_PLACEHOLDER, str(workspace))
    return substitute(command, variables)


async def run_local(
    workspace: str | Path,
    *commands: str,
    variables: Mapping[str, str],
) -> None:
    """Run commands on the local machine, one process per command.

    Processes inherit stdin, stdout and stderr. The first failure aborts the
    remaining commands.

    Args:
        workspace: Value for the ``${workspace}`` placeholder
        *commands: Command lines, split shell-style (no shell is involved)
        variables: Substitution values for ``${NAME}`` placeholders

    Raises:
        CommandError: If a command cannot be started or exits non-zero
    """
    for raw in commands:
        command = expand_local_command(raw, workspace, variables)
        logger.info("[ LOCAL RUN ]: %s", command)

        args = shlex.split(command)
        if not args:
            continue

        try:
            process = await asyncio.create_subprocess_exec(*args)
        except OSError as e:
            raise CommandError([command], None, str(e)) from e

        returncode = await process.wait()
        if returncode != 0:
            raise CommandError([command], returncode)
