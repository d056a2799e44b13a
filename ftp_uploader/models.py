"""
Models for ftp_uploader.

Descriptors, credentials and config are immutable dataclasses; FileItem is
the only mutable model and is owned by the UploadQueue.
"""
import uuid
from dataclasses import dataclass, field
from typing import Optional
from enum import Enum


class ItemStatus(Enum):
    """Transfer status of a queued item."""
    READY = "Ready"
    UPLOADING = "Uploading"
    COMPLETE = "Complete"
    ERROR = "Error"


class Behavior(Enum):
    """What to do when the remote object already exists."""
    COVER = "Cover"    # always overwrite
    SKIP = "Skip"      # never transfer
    VERIFY = "Verify"  # compare sizes, resume when remote is shorter

    @classmethod
    def parse(cls, value: str) -> "Behavior":
        """Parse a behavior name case-insensitively ("cover", "Skip", ...)."""
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise ValueError(f"Unknown behavior: {value!r}")


@dataclass(frozen=True)
class Credentials:
    """FTP login credentials."""
    host: str
    port: int = 21
    user: str = "anonymous"
    password: str = ""


@dataclass(frozen=True)
class FileDescriptor:
    """Immutable description of a file or directory to upload."""
    name: str
    local_path: str
    server_path: str
    size: int = 0
    is_directory: bool = False


def generate_id() -> str:
    """Time-ordered unique id for a queue item."""
    return str(uuid.uuid1())


@dataclass
class FileItem:
    """One queued transfer. Mutated only through UploadQueue setters."""
    name: str
    local_path: str
    server_path: str = "/"
    size: int = 0
    is_directory: bool = False
    id: str = field(default_factory=generate_id)
    transferred: int = 0
    error: Optional[str] = None
    status: ItemStatus = ItemStatus.READY

    @classmethod
    def from_descriptor(cls, descriptor: FileDescriptor) -> "FileItem":
        return cls(
            name=descriptor.name,
            local_path=descriptor.local_path,
            server_path=descriptor.server_path,
            size=0 if descriptor.is_directory else descriptor.size,
            is_directory=descriptor.is_directory,
        )

    @property
    def percent(self) -> float:
        if self.size <= 0:
            return 100.0 if self.status == ItemStatus.COMPLETE else 0.0
        return min(self.transferred / self.size * 100, 100.0)


@dataclass(frozen=True)
class UploadConfig:
    """Immutable configuration for the upload scheduler and FTP client."""
    poll_interval: float = 0.5  # seconds between progress samples
    speed_window: int = 5       # number of speed samples averaged
    chunk_size: int = 64 * 1024
    socket_timeout: Optional[float] = None


@dataclass(frozen=True)
class TransferStatus:
    """Aggregate view of the queue and the scheduler."""
    is_uploading: bool = False
    is_finished: bool = False
    speed_average: int = 0
    total: int = 0
    finished_count: int = 0
    error_count: int = 0

    @property
    def all_success(self) -> bool:
        return self.error_count == 0 and self.finished_count == self.total


@dataclass(frozen=True)
class Progress:
    """Payload of the progress notification."""
    transfer_status: TransferStatus
    item: Optional[FileItem] = None


@dataclass(frozen=True)
class RemoteEntry:
    """One entry of a remote directory listing."""
    name: str
    size: int
    is_directory: bool
    path: str


@dataclass(frozen=True)
class RemoteStat:
    """Size information for an existing remote object."""
    name: str
    path: str
    size: int
