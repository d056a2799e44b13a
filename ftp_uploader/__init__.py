"""
ftp_uploader - Sequential, resumable FTP upload queue.

Usage:
    from ftp_uploader import Uploader, Credentials, Behavior, FileCollector

    credentials = Credentials("127.0.0.1", 21, "uploader", "secret")
    async with Uploader(credentials, Behavior.VERIFY) as uploader:
        uploader.on_item_fail(lambda item: print(f"{item.name}: {item.error}"))
        status = await uploader.upload(FileCollector.collect(Path("photos"), "/backup"))
"""
from .orchestrator import Uploader, FileCollector
from .models import (
    Behavior,
    Credentials,
    FileDescriptor,
    FileItem,
    ItemStatus,
    Progress,
    TransferStatus,
    UploadConfig,
)
from .errors import DirectoryCreateError, SourceNotFoundError, TransferError, UploaderError
from .services import FtpClient
from .upload_queue import UploadQueue

__version__ = "0.1.0"
__all__ = [
    # Main
    "Uploader",
    "UploadQueue",
    "FileCollector",
    "FtpClient",
    # Models
    "Behavior",
    "Credentials",
    "FileDescriptor",
    "FileItem",
    "ItemStatus",
    "Progress",
    "TransferStatus",
    "UploadConfig",
    # Errors
    "UploaderError",
    "SourceNotFoundError",
    "DirectoryCreateError",
    "TransferError",
]
