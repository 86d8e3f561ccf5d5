"""Shared fixtures."""

import pytest

from remote_script.models import SSHTarget
from remote_script.services.connection import Connection
from fakes import FakeSSHConnection


@pytest.fixture
def ssh_conn() -> FakeSSHConnection:
    """Fake asyncssh connection with the default process factory."""
    return FakeSSHConnection()


@pytest.fixture
def target() -> SSHTarget:
    return SSHTarget(host="10.0.0.5", port=22, user="deploy")


@pytest.fixture
def connection(target: SSHTarget, ssh_conn: FakeSSHConnection) -> Connection:
    """Connection wrapping the fake transport."""
    return Connection(target, ssh_conn)  # type: ignore[arg-type]
