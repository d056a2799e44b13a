"""File collection utilities for folder uploads."""
import os
from pathlib import Path
from typing import List, Optional

from ..models import FileDescriptor
from ..utils.paths import join_remote


class FileCollector:
    """Builds upload descriptors from a local file or folder."""

    @staticmethod
    def collect(source: Path, dest: Optional[str] = None) -> List[FileDescriptor]:
        """
        Collect descriptors for a file, or for a folder recursively.

        A folder yields a directory descriptor for itself and every
        subfolder (server path ending in "/"), each followed by its files.

        Args:
            source: Local file or folder
            dest: Remote folder to upload into ("/" when omitted)

        Returns:
            Descriptors in upload order
        """
        source = Path(source).resolve()
        dest = dest or "/"

        if source.is_file():
            return [FileCollector._file(source, join_remote(dest, source.name))]

        descriptors = []
        for root, dirs, files in os.walk(source):
            dirs.sort()
            root_path = Path(root)
            rel = root_path.relative_to(source.parent).as_posix()
            remote_dir = join_remote(dest, rel)

            descriptors.append(FileDescriptor(
                name=root_path.name,
                local_path=str(root_path),
                server_path=remote_dir + "/",
                is_directory=True,
            ))
            for name in sorted(files):
                descriptors.append(FileCollector._file(root_path / name, join_remote(remote_dir, name)))
        return descriptors

    @staticmethod
    def _file(path: Path, server_path: str) -> FileDescriptor:
        return FileDescriptor(
            name=path.name,
            local_path=str(path),
            server_path=server_path,
            size=path.stat().st_size,
        )
