"""Local filesystem access: existence checks and counting read streams."""
import os
from pathlib import Path
from typing import BinaryIO, Optional, Union

PathLike = Union[str, Path]


def source_exists(path: PathLike) -> bool:
    return os.path.exists(path)


def local_size(path: PathLike) -> int:
    return os.lstat(path).st_size


class LocalSource:
    """
    Binary read stream over a local file that tracks its read position.

    The poller samples `position` while the FTP client reads from it, so the
    value includes the resume offset the stream was opened at.
    """

    def __init__(self, path: PathLike, offset: int = 0):
        self.path = str(path)
        self.offset = offset
        self._file: Optional[BinaryIO] = open(path, "rb")
        if offset:
            self._file.seek(offset)
        self._bytes_read = 0

    @property
    def bytes_read(self) -> int:
        return self._bytes_read

    @property
    def position(self) -> int:
        return self.offset + self._bytes_read

    @property
    def closed(self) -> bool:
        return self._file is None

    def read(self, size: int = -1) -> bytes:
        if self._file is None:
            raise ValueError("read from closed source")
        chunk = self._file.read(size)
        self._bytes_read += len(chunk)
        return chunk

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
