"""Exceptions raised by ftp_uploader."""


class UploaderError(Exception):
    """Base class for item-level upload failures."""


class SourceNotFoundError(UploaderError):
    """Local file or directory does not exist."""

    def __init__(self, path: str):
        super().__init__(f"{path} not found")
        self.path = path


class DirectoryCreateError(UploaderError):
    """Remote directory could not be created."""


class TransferError(UploaderError):
    """FTP operation failed during listing, stat or byte transfer."""
