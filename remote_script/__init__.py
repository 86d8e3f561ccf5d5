"""remote_script - run commands and copy files on a remote host over SSH.

Provides:
- ConnectionBuilder/Connection: authenticated asyncssh transport
- run_remote: batch of shell commands as one remote invocation
- copy_files: SCP sink handshake per file
- create_env_file: KEY=VALUE file with ${NAME} substitution
- Runner: the above bound to one host, plus local commands
- routine/registry: named deployment routines
"""

__version__ = "0.1.0"

from remote_script.errors import (
    AuthError,
    CommandError,
    ConfigError,
    ConnectError,
    DeploymentError,
    ProtocolError,
    RemoteIOError,
    RemoteScriptError,
    SessionError,
)
from remote_script.routines import RoutineRegistry, registry, routine
from remote_script.runner import Runner
from remote_script.services import Connection, ConnectionBuilder

__all__ = [
    "__version__",
    "AuthError",
    "CommandError",
    "ConfigError",
    "ConnectError",
    "Connection",
    "ConnectionBuilder",
    "DeploymentError",
    "ProtocolError",
    "RemoteIOError",
    "RemoteScriptError",
    "RoutineRegistry",
    "Runner",
    "SessionError",
    "registry",
    "routine",
]
