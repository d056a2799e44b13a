"""Services for ftp_uploader."""
from .ftp_client import FtpClient
from .local_source import LocalSource, local_size, source_exists

__all__ = [
    "FtpClient",
    "LocalSource",
    "local_size",
    "source_exists",
]
