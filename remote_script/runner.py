"""Runner: one connection plus the substitution variables for a deployment.

The substitution variables are captured once, when the runner is built, so
``${NAME}`` expansion does not depend on later changes to the process
environment.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import TextIO

from remote_script.config import Settings, policy_from_settings
from remote_script.errors import ConfigError
from remote_script.models import CommandResult
from remote_script.services import (
    Connection,
    ConnectionBuilder,
    copy_files,
    create_env_file,
    run_each,
    run_local,
    run_remote,
)


class Runner:
    """Remote and local command runner bound to one host."""

    def __init__(
        self,
        connection: Connection,
        variables: Mapping[str, str] | None = None,
        stderr: TextIO | None = None,
    ):
        """Initialize runner.

        Args:
            connection: Open connection to the remote host
            variables: Substitution values, defaults to a snapshot of os.environ
            stderr: Local stream for remote error output, defaults to sys.stderr
        """
        self.connection = connection
        self.variables = dict(os.environ if variables is None else variables)
        self.stderr = stderr

    @classmethod
    async def create(
        cls,
        settings: Settings | None = None,
        variables: Mapping[str, str] | None = None,
    ) -> "Runner":
        """Connect using settings (REMOTE_SCRIPT_* environment by default).

        Raises:
            ConfigError: If no host is configured or known_hosts is missing
            AuthError: If no usable private key is found
            ConnectError: If the host cannot be reached
        """
        settings = settings or Settings.from_env()
        if not settings.host:
            raise ConfigError("address", "No remote host configured (set REMOTE_SCRIPT_HOST)")

        connection = await (
            ConnectionBuilder()
            .with_address(settings.host, settings.port)
            .with_user(settings.user)
            .with_private_key(settings.private_key_env, settings.private_key_path)
            .with_host_key_policy(policy_from_settings(settings))
            .connect()
        )
        return cls(connection, variables=variables)

    async def create_env_file(self, path: str, env: Mapping[str, str]) -> None:
        await create_env_file(self.connection, path, env, self.variables, stderr=self.stderr)

    async def run_remote(self, *commands: str) -> None:
        await run_remote(self.connection, *commands, stderr=self.stderr)

    async def run_each(self, *commands: str) -> list[CommandResult]:
        return await run_each(self.connection, *commands)

    async def copy_files(
        self,
        permissions: str,
        remote_path: str,
        workspace: str | Path,
        *paths: str,
    ) -> None:
        await copy_files(self.connection, permissions, remote_path, workspace, *paths)

    async def run_local(self, workspace: str | Path, *commands: str) -> None:
        await run_local(workspace, *commands, variables=self.variables)

    async def close(self) -> None:
        await self.connection.close()

    async def __aenter__(self) -> "Runner":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
