"""SSH host key verification policies.

A policy turns into the keyword arguments handed to ``asyncssh.connect``.
The default is the strictest option: verify against ``~/.ssh/known_hosts``
and fail closed when the file is missing.
"""

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import asyncssh

from remote_script.errors import ConfigError

if TYPE_CHECKING:
    from remote_script.config.settings import Settings

logger = logging.getLogger(__name__)


class HostKeyPolicy:
    """Base class for host identity verification policies."""

    def connect_options(self) -> dict[str, Any]:
        """Build asyncssh.connect keyword arguments for this policy.

        Returns:
            Keyword arguments controlling host key validation
        """
        raise NotImplementedError

    @property
    def description(self) -> str:
        """Short description used in log messages."""
        return type(self).__name__


class AcceptAnyHostKey(HostKeyPolicy):
    """Accept any host key. Only for trusted networks."""

    def connect_options(self) -> dict[str, Any]:
        logger.critical(
            "SSH HOST KEY VERIFICATION DISABLED - vulnerable to MITM attacks. "
            "Only use in trusted networks."
        )
        return {"known_hosts": None}

    @property
    def description(self) -> str:
        return "accept-any"


class KnownHostsPolicy(HostKeyPolicy):
    """Verify the host key against a known_hosts file."""

    def __init__(self, path: str | None = None, strict: bool = True):
        """Initialize known_hosts policy.

        Args:
            path: Path to known_hosts file, defaults to ~/.ssh/known_hosts
            strict: Fail when the file is missing instead of disabling checks

        Raises:
            ConfigError: If strict mode and the file is missing
        """
        self.strict = strict
        self.path = self._resolve(path)

    def _resolve(self, path: str | None) -> Path | None:
        resolved = Path(os.path.expanduser(path)) if path else Path.home() / ".ssh" / "known_hosts"
        if resolved.exists():
            return resolved

        if self.strict:
            raise ConfigError(
                "known_hosts",
                f"SSH host key verification required but known_hosts not found at "
                f"{resolved}.\n\n"
                f"To fix this:\n"
                f"1. Add host keys: ssh-keyscan <hostname> >> {resolved}\n"
                f"2. Or pin the key: export REMOTE_SCRIPT_HOST_FINGERPRINT=SHA256:...\n"
                f"3. Or disable verification (NOT RECOMMENDED): "
                f"export REMOTE_SCRIPT_KNOWN_HOSTS=none",
            )

        logger.warning(
            "known_hosts not found at %s, verification disabled. This is insecure!",
            resolved,
        )
        return None

    def connect_options(self) -> dict[str, Any]:
        if self.path is None:
            return {"known_hosts": None}
        return {"known_hosts": str(self.path)}

    @property
    def description(self) -> str:
        if self.path is None:
            return "known-hosts (disabled)"
        return f"known-hosts ({self.path})"


class _PinnedKeyClient(asyncssh.SSHClient):
    """asyncssh client that accepts a single host key fingerprint."""

    def __init__(self, fingerprint: str):
        self._fingerprint = fingerprint

    def validate_host_public_key(
        self, host: str, addr: str, port: int, key: asyncssh.SSHKey
    ) -> bool:
        actual = key.get_fingerprint("sha256")
        if actual != self._fingerprint:
            logger.error(
                "Host key fingerprint mismatch for %s:%d: expected %s, got %s",
                host,
                port,
                self._fingerprint,
                actual,
            )
            return False
        return True


class PinnedFingerprintPolicy(HostKeyPolicy):
    """Accept only a host key with the pinned SHA256 fingerprint."""

    def __init__(self, fingerprint: str):
        if not fingerprint.startswith("SHA256:"):
            fingerprint = f"SHA256:{fingerprint}"
        self.fingerprint = fingerprint

    def connect_options(self) -> dict[str, Any]:
        # No trusted keys, so every host key goes through the client callback
        return {
            "known_hosts": ([], [], []),
            "client_factory": lambda: _PinnedKeyClient(self.fingerprint),
        }

    @property
    def description(self) -> str:
        return f"pinned ({self.fingerprint})"


def policy_from_settings(settings: "Settings") -> HostKeyPolicy:
    """Select the host key policy described by settings.

    Args:
        settings: Application settings

    Returns:
        Policy instance

    Raises:
        ConfigError: If strict known_hosts checking is requested but the file is missing
    """
    if settings.host_fingerprint:
        return PinnedFingerprintPolicy(settings.host_fingerprint)
    if settings.known_hosts and settings.known_hosts.lower() == "none":
        return AcceptAnyHostKey()
    return KnownHostsPolicy(settings.known_hosts, strict=settings.strict_host_key_checking)
