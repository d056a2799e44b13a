"""
FTP client - Single Responsibility: talk to the remote file server.

Wraps aioftp with a lazily opened connection, resumable uploads and
connection signals (error, end, close) for the scheduler.
"""
import asyncio
import logging
import posixpath
from contextlib import asynccontextmanager
from typing import Callable, List, Optional, Type

import aioftp

from ..errors import DirectoryCreateError, TransferError, UploaderError
from ..models import Credentials, RemoteEntry, RemoteStat, UploadConfig
from ..protocols import IUploadSource
from ..utils.events import EventEmitter
from ..utils.paths import normalize_path

logger = logging.getLogger(__name__)

CONNECTION_ERRORS = (OSError, asyncio.TimeoutError, EOFError)
# Peer went away rather than failing
CONNECTION_END_ERRORS = (ConnectionResetError, ConnectionAbortedError, BrokenPipeError, EOFError)


class FtpClient(EventEmitter):
    """
    Transfer client for FTP servers.

    Usage:
        client = FtpClient(Credentials("ftp.example.com", 21, "user", "secret"))
        client.on("error", lambda err: print(err))
        await client.make_directory_recursive("/backups/2026")
        with LocalSource("db.dump", offset=1024) as source:
            await client.upload_stream(source, "/backups/2026/db.dump", offset=1024)
        await client.disconnect()
    """

    def __init__(
        self,
        credentials: Credentials,
        config: Optional[UploadConfig] = None,
        client_factory: Callable[..., aioftp.Client] = aioftp.Client,
    ):
        """
        Initialize FTP client.

        Args:
            credentials: Host, port and login
            config: Upload configuration (chunk size, socket timeout)
            client_factory: Builds the underlying aioftp client
        """
        super().__init__()
        self._credentials = credentials
        self._config = config or UploadConfig()
        self._client_factory = client_factory
        self._client: Optional[aioftp.Client] = None
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        if self._connected:
            return

        cred = self._credentials
        client = self._client_factory(socket_timeout=self._config.socket_timeout, encoding="utf-8")
        logger.debug(f"Connecting to ftp://{cred.host}:{cred.port} as {cred.user}")
        try:
            await client.connect(cred.host, cred.port)
            await client.login(cred.user, cred.password)
        except (aioftp.AIOFTPException, *CONNECTION_ERRORS) as e:
            client.close()
            logger.warning(f"Connection to {cred.host}:{cred.port} failed: {e}")
            await self.emit("error", e)
            raise TransferError(f"cannot connect to {cred.host}:{cred.port}: {e}") from e

        self._client = client
        self._connected = True
        logger.info(f"Connected to ftp://{cred.host}:{cred.port}")

    async def disconnect(self) -> None:
        if not self._connected:
            return

        client = self._client
        self._connected = False
        self._client = None
        try:
            await client.quit()
        except (aioftp.AIOFTPException, *CONNECTION_ERRORS) as e:
            logger.debug(f"QUIT failed, closing anyway: {e}")
        finally:
            client.close()

        logger.info("Disconnected from FTP server")
        await self.emit("close")

    async def make_directory_recursive(self, path: str) -> None:
        path = normalize_path(path)
        if path in ("/", "."):
            return

        async with self._guard(f"mkdir {path}", DirectoryCreateError):
            client = await self._connection()
            await client.make_directory(path, parents=True)
        logger.debug(f"Directory ready: {path}")

    async def list_directory(self, path: str) -> List[RemoteEntry]:
        """
        List a remote directory.

        Raises:
            TransferError: the directory does not exist or the listing failed
        """
        path = normalize_path(path)
        async with self._guard(f"list {path}"):
            return await self._list(path)

    async def stat(self, server_path: str) -> Optional[RemoteStat]:
        """
        Find a remote object by listing its parent directory.

        Returns:
            RemoteStat, or None when the object (or its parent) does not exist
        """
        path = normalize_path(server_path)
        parent = posixpath.dirname(path) or "/"
        name = posixpath.basename(path)

        async with self._guard(f"stat {path}"):
            try:
                entries = await self._list(parent)
            except aioftp.StatusCodeError:
                return None

        for entry in entries:
            if entry.name == name:
                return RemoteStat(name=name, path=path, size=entry.size)
        return None

    async def upload_stream(self, source: IUploadSource, server_path: str, offset: int = 0) -> None:
        """
        Upload bytes read from source, resuming at offset when non-zero.

        The source must already be positioned at offset.
        """
        path = normalize_path(server_path)
        chunk_size = self._config.chunk_size

        async with self._guard(f"upload {path}"):
            client = await self._connection()
            if offset:
                logger.info(f"Resuming {path} at byte {offset}")
            async with client.upload_stream(path, offset=offset) as stream:
                while True:
                    chunk = await asyncio.to_thread(source.read, chunk_size)
                    if not chunk:
                        break
                    await stream.write(chunk)

    async def _connection(self) -> aioftp.Client:
        await self.connect()
        return self._client

    async def _list(self, path: str) -> List[RemoteEntry]:
        client = await self._connection()
        listing = await client.list(path)

        entries = []
        for entry_path, info in listing:
            name = posixpath.basename(str(entry_path))
            if name in (".", "..") or info.get("type") in ("cdir", "pdir"):
                continue
            entries.append(RemoteEntry(
                name=name,
                size=int(info.get("size") or 0),
                is_directory=info.get("type") == "dir",
                path=posixpath.join(path, name),
            ))
        return entries

    @asynccontextmanager
    async def _guard(self, action: str, error_cls: Type[UploaderError] = TransferError):
        """Convert aioftp and socket failures into item-level errors."""
        try:
            yield
        except aioftp.StatusCodeError as e:
            raise error_cls(f"{action} failed: {e}") from e
        except CONNECTION_ERRORS as e:
            await self._connection_lost(e)
            raise error_cls(f"{action} failed: {e}") from e
        except aioftp.AIOFTPException as e:
            raise error_cls(f"{action} failed: {e}") from e

    async def _connection_lost(self, exc: BaseException):
        if isinstance(exc, CONNECTION_END_ERRORS):
            logger.warning(f"FTP server closed the connection: {exc}")
            await self.emit("end")
        else:
            logger.error(f"FTP connection error: {exc}")
            await self.emit("error", exc)
        await self.disconnect()
