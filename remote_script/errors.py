"""Exception hierarchy for remote_script.

Every failure raised by the package derives from RemoteScriptError so callers
can catch a single type at the outer boundary (the CLI does exactly that).
"""


class RemoteScriptError(Exception):
    """Base class for all remote_script errors."""


class ConfigError(RemoteScriptError):
    """Connection or routine configuration is missing or set twice."""

    def __init__(self, field: str, message: str):
        """Initialize configuration error.

        Args:
            field: Name of the offending configuration item
            message: Human readable description
        """
        self.field = field
        super().__init__(message)


class AuthError(RemoteScriptError):
    """Private key material is missing, empty or unreadable."""


class ConnectError(RemoteScriptError):
    """Failed to dial or handshake with the remote host."""

    def __init__(self, address: str, original_error: Exception):
        self.address = address
        self.original_error = original_error
        super().__init__(f"Cannot connect to {address}: {original_error}")


class SessionError(RemoteScriptError):
    """Failed to open a session on an established connection."""

    def __init__(self, command: str, original_error: Exception | str):
        self.command = command
        self.original_error = original_error
        super().__init__(f"Cannot open session for {command!r}: {original_error}")


class ProtocolError(RemoteScriptError):
    """The remote side answered with a non-Ok acknowledgement or bad framing."""


class RemoteIOError(RemoteScriptError):
    """Reading from or writing to a stream failed, or it closed too early."""


class CommandError(RemoteScriptError):
    """A command batch exited with a non-zero status."""

    def __init__(
        self,
        commands: list[str],
        exit_status: int | None,
        stderr: str = "",
    ):
        """Initialize command error.

        Args:
            commands: Commands that were submitted as one invocation
            exit_status: Exit status reported for the invocation, None if missing
            stderr: Error output observed while the commands ran
        """
        self.commands = commands
        self.exit_status = exit_status
        self.stderr = stderr
        detail = stderr.strip()
        message = f"Command failed with exit status {exit_status}: {'; '.join(commands)}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)


class DeploymentError(RemoteScriptError):
    """A registered deployment routine failed."""

    def __init__(self, routine: str, original_error: Exception):
        self.routine = routine
        self.original_error = original_error
        super().__init__(f"Routine {routine} failed: {original_error}")
