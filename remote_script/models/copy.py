"""File copy request model."""

from dataclasses import dataclass
from typing import BinaryIO

from remote_script.errors import ProtocolError


@dataclass
class CopyRequest:
    """One file to push through the sink handshake.

    Attributes:
        permissions: Textual mode sent verbatim in the header (e.g. "0644")
        size: Number of content bytes announced and streamed
        filename: Name the sink creates inside its target directory
        source: Readable binary stream positioned at the start of the content
    """

    permissions: str
    size: int
    filename: str
    source: BinaryIO

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ProtocolError(f"Negative size {self.size} for {self.filename!r}")
        if not self.filename or "/" in self.filename or "\n" in self.filename:
            raise ProtocolError(f"Invalid file name for copy header: {self.filename!r}")

    @property
    def header(self) -> bytes:
        """Header line announcing the file to the sink."""
        return f"C{self.permissions} {self.size} {self.filename}\n".encode()
