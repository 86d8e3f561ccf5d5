"""Tests for the SCP sink copy handshake."""

import asyncio
import io
import logging
from pathlib import Path

import pytest

from remote_script.errors import CommandError, ProtocolError, RemoteIOError
from remote_script.services.connection import Connection
from remote_script.services.copy import copy_files, copy_to_remote

from fakes import FakeProcess, FakeScpSink, FakeSSHConnection


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    (tmp_path / "bin").mkdir()
    (tmp_path / "bin" / "app.bin").write_bytes(b"\x7fELF" + b"x" * 1020)
    (tmp_path / "config.yml").write_text("port: 8080\n")
    (tmp_path / "empty.txt").write_bytes(b"")
    return tmp_path


def sinks(ssh_conn: FakeSSHConnection) -> list[FakeScpSink]:
    return [p for p in ssh_conn.processes if isinstance(p, FakeScpSink)]


@pytest.mark.asyncio
async def test_copy_to_remote_sends_header_content_and_terminator(
    connection: Connection, ssh_conn: FakeSSHConnection
) -> None:
    await copy_to_remote(connection, io.BytesIO(b"hello"), "/srv/app/greeting.txt", "0644", 5)

    sink = sinks(ssh_conn)[0]
    assert sink.command == "scp -qt /srv/app/greeting.txt"
    assert sink.files == [(b"C0644 5 greeting.txt\n", b"hello", 0)]
    assert sink.stdin.eof
    assert sink.close_called


@pytest.mark.asyncio
async def test_transfers_exactly_declared_size(
    connection: Connection, ssh_conn: FakeSSHConnection
) -> None:
    """Bytes past the declared size are never sent."""
    source = io.BytesIO(b"0123456789EXTRA")

    await copy_to_remote(connection, source, "/srv/data.bin", "0600", 10)

    sink = sinks(ssh_conn)[0]
    assert sink.files[0][1] == b"0123456789"
    assert bytes(sink.stdin.data) == b"C0600 10 data.bin\n0123456789\x00"
    assert source.read() == b"EXTRA"


@pytest.mark.asyncio
async def test_zero_byte_file_still_needs_two_acks(
    connection: Connection, ssh_conn: FakeSSHConnection
) -> None:
    await copy_to_remote(connection, io.BytesIO(b""), "/srv/empty.txt", "0644", 0)

    sink = sinks(ssh_conn)[0]
    assert bytes(sink.stdin.data) == b"C0644 0 empty.txt\n\x00"
    assert sink.files == [(b"C0644 0 empty.txt\n", b"", 0)]


@pytest.mark.asyncio
async def test_zero_byte_file_fails_if_second_ack_is_error(
    connection: Connection, ssh_conn: FakeSSHConnection
) -> None:
    ssh_conn.factory = lambda cmd: FakeScpSink(cmd, second_ack=b"\x02write failed\n")

    with pytest.raises(ProtocolError, match="write failed"):
        await copy_to_remote(connection, io.BytesIO(b""), "/srv/empty.txt", "0644", 0)


@pytest.mark.asyncio
async def test_rejected_header_is_protocol_error(
    connection: Connection, ssh_conn: FakeSSHConnection
) -> None:
    """A non-Ok first ack stops the transfer before any content is sent."""
    ssh_conn.factory = lambda cmd: FakeScpSink(
        cmd, first_ack=b"\x02disk full\n", exit_status=1
    )

    with pytest.raises(ProtocolError, match="disk full"):
        await copy_to_remote(connection, io.BytesIO(b"data"), "/srv/a.txt", "0644", 4)

    sink = sinks(ssh_conn)[0]
    assert bytes(sink.stdin.data) == b"C0644 4 a.txt\n"
    assert sink.stdin.eof


class LingeringSink(FakeScpSink):
    """Sink that keeps running after its stdin is closed."""

    def on_stdin_eof(self) -> None:
        return None


@pytest.mark.asyncio
async def test_rejected_header_raised_while_sink_still_running(
    connection: Connection, ssh_conn: FakeSSHConnection
) -> None:
    """The handshake error is raised without waiting for the sink to exit."""
    ssh_conn.factory = lambda cmd: LingeringSink(cmd, first_ack=b"\x02disk full\n")

    with pytest.raises(ProtocolError, match="disk full"):
        await asyncio.wait_for(
            copy_to_remote(connection, io.BytesIO(b"data"), "/srv/a.txt", "0644", 4),
            timeout=5,
        )

    sink = sinks(ssh_conn)[0]
    assert sink.close_called


@pytest.mark.asyncio
async def test_hang_up_before_first_ack_is_io_error(
    connection: Connection, ssh_conn: FakeSSHConnection
) -> None:
    """A transport closing mid-handshake is an I/O failure, not a protocol one."""
    ssh_conn.factory = lambda cmd: FakeScpSink(cmd, hang_up_on_header=True)

    with pytest.raises(RemoteIOError):
        await copy_to_remote(connection, io.BytesIO(b"data"), "/srv/a.txt", "0644", 4)


@pytest.mark.asyncio
async def test_short_source_never_sends_terminator(
    connection: Connection, ssh_conn: FakeSSHConnection
) -> None:
    with pytest.raises(RemoteIOError, match="3 of 8 bytes"):
        await copy_to_remote(connection, io.BytesIO(b"abc"), "/srv/a.txt", "0644", 8)

    sink = sinks(ssh_conn)[0]
    assert sink.files == []
    assert not bytes(sink.stdin.data).endswith(b"\x00")


@pytest.mark.asyncio
async def test_sink_exit_failure_after_clean_handshake(
    connection: Connection, ssh_conn: FakeSSHConnection
) -> None:
    ssh_conn.factory = lambda cmd: FakeScpSink(cmd, exit_status=1)

    with pytest.raises(CommandError) as exc_info:
        await copy_to_remote(connection, io.BytesIO(b"x"), "/srv/a.txt", "0644", 1)

    assert exc_info.value.exit_status == 1


@pytest.mark.asyncio
async def test_copy_files_creates_directory_then_copies_in_order(
    connection: Connection, ssh_conn: FakeSSHConnection, workspace: Path
) -> None:
    await copy_files(connection, "0755", "/opt/app", workspace, "bin/app.bin", "config.yml")

    assert ssh_conn.commands == [
        "mkdir -p /opt/app",
        "scp -qt /opt/app/app.bin",
        "scp -qt /opt/app/config.yml",
    ]
    copied = [sink.files[0] for sink in sinks(ssh_conn)]
    assert copied[0][0] == b"C0755 1024 app.bin\n"
    assert len(copied[0][1]) == 1024
    assert copied[1] == (b"C0755 11 config.yml\n", b"port: 8080\n", 0)


@pytest.mark.asyncio
async def test_copy_files_reports_each_file(
    connection: Connection, workspace: Path, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="remote_script")

    await copy_files(connection, "0644", "/opt/app", workspace, "empty.txt")

    expected = f"[ COPY FILE ]: '{workspace / 'empty.txt'}' -> '/opt/app': 0 bytes"
    assert expected in [r.getMessage() for r in caplog.records]


@pytest.mark.asyncio
async def test_copy_files_missing_source_aborts_remaining(
    connection: Connection, ssh_conn: FakeSSHConnection, workspace: Path
) -> None:
    """Files before the failure stay copied; files after it are not attempted."""
    with pytest.raises(RemoteIOError, match="missing.txt"):
        await copy_files(
            connection, "0644", "/opt/app", workspace, "config.yml", "missing.txt", "empty.txt"
        )

    assert ssh_conn.commands == ["mkdir -p /opt/app", "scp -qt /opt/app/config.yml"]


@pytest.mark.asyncio
async def test_copy_files_mkdir_failure_copies_nothing(
    connection: Connection, ssh_conn: FakeSSHConnection, workspace: Path
) -> None:
    ssh_conn.factory = lambda cmd: FakeProcess(cmd, exit_status=1)

    with pytest.raises(CommandError):
        await copy_files(connection, "0644", "/opt/app", workspace, "config.yml")

    assert ssh_conn.commands == ["mkdir -p /opt/app"]


@pytest.mark.asyncio
async def test_copy_files_quotes_remote_path(
    connection: Connection, ssh_conn: FakeSSHConnection, workspace: Path
) -> None:
    await copy_files(connection, "0644", "/opt/my app", workspace, "config.yml")

    assert ssh_conn.commands == [
        "mkdir -p '/opt/my app'",
        "scp -qt '/opt/my app/config.yml'",
    ]
