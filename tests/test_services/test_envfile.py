"""Tests for environment file materialization."""

import io
import shlex

import pytest

from remote_script.services.connection import Connection
from remote_script.services.envfile import (
    create_env_file,
    env_file_command,
    render_env_file,
)

from fakes import FakeSSHConnection


def test_placeholder_resolved_from_variables() -> None:
    content = render_env_file({"API_KEY": "${SECRET}"}, {"SECRET": "abc123"})

    assert content == "API_KEY=abc123\n"


def test_unresolved_placeholder_left_verbatim() -> None:
    content = render_env_file({"API_KEY": "${SECRET}"}, {})

    assert content == "API_KEY=${SECRET}\n"


def test_keys_sorted_ascending() -> None:
    content = render_env_file({"B": "2", "A": "1"}, {})

    assert content == "A=1\nB=2\n"


def test_only_exact_tokens_are_substituted() -> None:
    """$NAME and partial tokens stay as they are."""
    content = render_env_file(
        {"URL": "postgres://${DB_USER}@$DB_HOST/${DB_NAME"},
        {"DB_USER": "app", "DB_HOST": "db", "DB_NAME": "prod"},
    )

    assert content == "URL=postgres://app@$DB_HOST/${DB_NAME\n"


def test_substituted_values_are_not_expanded_again() -> None:
    content = render_env_file({"A": "${X}"}, {"X": "${Y}", "Y": "nested"})

    assert content == "A=${Y}\n"


def test_empty_mapping_renders_empty_content() -> None:
    assert render_env_file({}, {"SECRET": "x"}) == ""


def test_command_quotes_shell_significant_values() -> None:
    """Quotes, dollars and backticks survive the remote shell unchanged."""
    content = "MSG=it's `date` and $HOME \"quoted\"\n"

    command = env_file_command("/srv/app/.env", content)

    tokens = shlex.split(command.split(" > ")[0])
    assert tokens == ["printf", "%s", content]
    assert command.endswith("> /srv/app/.env")


@pytest.mark.asyncio
async def test_create_env_file_runs_single_redirect_command(
    connection: Connection, ssh_conn: FakeSSHConnection
) -> None:
    await create_env_file(
        connection,
        "/srv/app/.env",
        {"PORT": "8080", "API_KEY": "${SECRET}"},
        {"SECRET": "abc123"},
        stderr=io.StringIO(),
    )

    assert ssh_conn.commands == [
        env_file_command("/srv/app/.env", "API_KEY=abc123\nPORT=8080\n")
    ]
