"""SSH-related data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SSHTarget:
    """Remote endpoint and identity used for a connection."""

    host: str
    port: int = 22
    user: str = "root"

    @property
    def address(self) -> str:
        """Get the dial address.

        Returns:
            host:port string
        """
        return f"{self.host}:{self.port}"

    def __str__(self) -> str:
        return f"{self.user}@{self.address}"
