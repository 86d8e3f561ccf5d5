"""SSH connection builder and connection handle."""

import asyncio
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import asyncssh

from remote_script.config.host_keys import HostKeyPolicy, KnownHostsPolicy
from remote_script.errors import AuthError, ConfigError, ConnectError, SessionError
from remote_script.models import SSHTarget

logger = logging.getLogger(__name__)


class Connection:
    """Authenticated SSH transport to one remote host.

    Sessions are short lived and opened one at a time; the internal lock
    serializes them. The connection must be closed explicitly (or used as an
    async context manager).
    """

    def __init__(self, target: SSHTarget, conn: "asyncssh.SSHClientConnection"):
        self.target = target
        self._conn = conn
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def is_closed(self) -> bool:
        """Whether close() was called or the transport went away."""
        return self._closed or bool(self._conn.is_closed())

    @asynccontextmanager
    async def session(
        self, command: str, **kwargs: Any
    ) -> AsyncIterator["asyncssh.SSHClientProcess[bytes]"]:
        """Run a command in a new session and yield its process.

        The session is closed when the block exits, on success and failure.

        Args:
            command: Remote command line
            **kwargs: Extra asyncssh.create_process arguments (I/O redirection)

        Yields:
            asyncssh process with binary stdin/stdout/stderr

        Raises:
            SessionError: If the connection is closed or the channel cannot be opened
        """
        async with self._lock:
            if self.is_closed:
                raise SessionError(command, f"connection to {self.target} is closed")

            try:
                process = await self._conn.create_process(command, encoding=None, **kwargs)
            except (asyncssh.Error, OSError) as e:
                raise SessionError(command, e) from e

            logger.debug("Opened session on %s: %s", self.target, command)
            try:
                yield process
            finally:
                process.close()
                await process.wait_closed()
                logger.debug("Closed session on %s", self.target)

    async def close(self) -> None:
        """Close the transport. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        logger.info("Closing SSH connection to %s", self.target)
        self._conn.close()
        await self._conn.wait_closed()

    async def __aenter__(self) -> "Connection":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


class ConnectionBuilder:
    """Collects connection parameters and dials the remote host.

    Each item can be set at most once.

    Example:
        conn = await (
            ConnectionBuilder()
            .with_address("10.0.0.5", 22)
            .with_user("deploy")
            .with_private_key("SSH_PRIVATE_KEY", "~/.ssh/id_ed25519")
            .connect()
        )
    """

    def __init__(self) -> None:
        self._host: str | None = None
        self._port = 22
        self._user: str | None = None
        self._private_key: str | None = None
        self._host_key_policy: HostKeyPolicy | None = None

    def with_address(self, host: str, port: int = 22) -> "ConnectionBuilder":
        if self._host is not None:
            raise ConfigError("address", f"address already set to {self._host}:{self._port}")
        self._host = host
        self._port = port
        return self

    def with_user(self, user: str) -> "ConnectionBuilder":
        if self._user is not None:
            raise ConfigError("user", f"user already set to {self._user}")
        self._user = user
        return self

    def with_private_key_from_env(self, env_key: str) -> "ConnectionBuilder":
        """Use private key text stored in an environment variable.

        Raises:
            ConfigError: If a private key was already set
            AuthError: If the variable is unset or empty
        """
        self._ensure_key_unset()
        value = os.environ.get(env_key, "")
        if not value:
            raise AuthError(f"Environment variable {env_key!r} is not set for SSH private key")
        self._private_key = value
        return self

    def with_private_key_from_file(self, path: str) -> "ConnectionBuilder":
        """Use private key text read from a file (leading ``~`` expanded).

        Raises:
            ConfigError: If a private key was already set
            AuthError: If the file cannot be read or is empty
        """
        self._ensure_key_unset()
        key_path = Path(path).expanduser()
        try:
            content = key_path.read_text()
        except OSError as e:
            raise AuthError(f"Failed to read SSH private key {key_path}: {e}") from e
        if not content:
            raise AuthError(f"The content of private key file {key_path} is empty")
        self._private_key = content
        return self

    def with_private_key(self, env_key: str, path: str) -> "ConnectionBuilder":
        """Use the key from ``env_key``, falling back to the file at ``path``.

        Raises:
            ConfigError: If a private key was already set
            AuthError: If neither source yields key material
        """
        self._ensure_key_unset()
        try:
            return self.with_private_key_from_env(env_key)
        except AuthError:
            logger.debug("%s not set, reading private key from %s", env_key, path)
        return self.with_private_key_from_file(path)

    def with_host_key_policy(self, policy: HostKeyPolicy) -> "ConnectionBuilder":
        if self._host_key_policy is not None:
            raise ConfigError("host_key_policy", "host key policy already set")
        self._host_key_policy = policy
        return self

    def _ensure_key_unset(self) -> None:
        if self._private_key is not None:
            raise ConfigError("private_key", "private key already set")

    async def connect(self) -> Connection:
        """Parse the key and dial the remote host.

        Returns:
            Connection ready for sessions

        Raises:
            ConfigError: If address, user or private key is missing, or the
                default known_hosts file does not exist
            AuthError: If the private key cannot be parsed
            ConnectError: If dialing or the SSH handshake fails
        """
        if self._host is None:
            raise ConfigError("address", "address is not set")
        if self._user is None:
            raise ConfigError("user", "user is not set")
        if self._private_key is None:
            raise ConfigError("private_key", "private key is not set")

        try:
            key = asyncssh.import_private_key(self._private_key)
        except (asyncssh.KeyImportError, ValueError) as e:
            raise AuthError(f"Failed to parse SSH private key: {e}") from e

        policy = self._host_key_policy or KnownHostsPolicy()
        target = SSHTarget(host=self._host, port=self._port, user=self._user)

        logger.info(
            "Opening SSH connection to %s (host keys: %s)", target, policy.description
        )
        try:
            conn = await asyncssh.connect(
                target.host,
                port=target.port,
                username=target.user,
                client_keys=[key],
                **policy.connect_options(),
            )
        except (asyncssh.Error, OSError) as e:
            logger.error("Connection to %s failed: %s", target, e)
            raise ConnectError(target.address, e) from e

        logger.info("SSH connection established to %s", target)
        return Connection(target, conn)
