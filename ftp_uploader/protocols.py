"""
Protocols (Interfaces) for Dependency Inversion.

The scheduler only talks to a transfer client through this interface.
"""
from typing import Callable, List, Optional, Protocol, runtime_checkable

from .models import RemoteEntry, RemoteStat


@runtime_checkable
class IUploadSource(Protocol):
    """Readable byte source that reports how far it has been read."""

    @property
    def position(self) -> int:
        ...

    def read(self, size: int = -1) -> bytes:
        ...


@runtime_checkable
class ITransferClient(Protocol):
    """Interface for remote file server operations."""

    def on(self, event_name: str, callback: Callable):
        """Subscribe to connection signals: error, end, close."""
        ...

    def is_connected(self) -> bool:
        ...

    async def connect(self) -> None:
        """Open the connection (no-op when already connected)."""
        ...

    async def disconnect(self) -> None:
        """Close the connection (no-op when already disconnected)."""
        ...

    async def upload_stream(self, source: IUploadSource, server_path: str, offset: int = 0) -> None:
        """Upload source to server_path, starting at byte offset."""
        ...

    async def stat(self, server_path: str) -> Optional[RemoteStat]:
        """Remote size info, None when the object does not exist."""
        ...

    async def list_directory(self, path: str) -> List[RemoteEntry]:
        """List a remote directory. Raises (any exception) when it does not exist."""
        ...

    async def make_directory_recursive(self, path: str) -> None:
        """Create path and any missing parents."""
        ...
