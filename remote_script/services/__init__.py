"""Services for remote_script."""

from remote_script.services.connection import Connection, ConnectionBuilder
from remote_script.services.copy import copy_files, copy_to_remote
from remote_script.services.envfile import create_env_file, render_env_file
from remote_script.services.executors import run_each, run_remote
from remote_script.services.local import run_local
from remote_script.services.response import check_response, parse_response

__all__ = [
    "Connection",
    "ConnectionBuilder",
    "check_response",
    "copy_files",
    "copy_to_remote",
    "create_env_file",
    "parse_response",
    "render_env_file",
    "run_each",
    "run_local",
    "run_remote",
]
