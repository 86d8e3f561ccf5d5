"""Command execution data models."""

from dataclasses import dataclass


@dataclass
class CommandResult:
    """Result of a single remote command execution."""

    command: str
    exit_status: int | None
    output: str
    error: str

    @property
    def ok(self) -> bool:
        """Whether the command exited with status 0."""
        return self.exit_status == 0
