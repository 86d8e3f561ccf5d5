"""Shell command builders for remote sessions.

Every path or free-form value placed on a remote command line goes through
shlex quoting here.
"""

import shlex
from collections.abc import Iterable

SINK_PROGRAM = "scp"


def quote_path(path: str) -> str:
    """Quote a path for a POSIX shell."""
    return shlex.quote(path)


def quote_arg(arg: str) -> str:
    """Quote a free-form argument for a POSIX shell."""
    return shlex.quote(arg)


def batch_command(commands: Iterable[str]) -> str:
    """Join command lines into one script run by a single remote shell."""
    return "\n".join(commands)


def mkdir_command(path: str) -> str:
    return f"mkdir -p {quote_path(path)}"


def sink_command(remote_file: str) -> str:
    """Quiet copy sink receiving one file at ``remote_file``."""
    return f"{SINK_PROGRAM} -qt {quote_path(remote_file)}"


def write_file_command(path: str, content: str) -> str:
    """Write ``content`` verbatim to ``path`` via shell redirection."""
    return f"printf '%s' {quote_arg(content)} > {quote_path(path)}"
