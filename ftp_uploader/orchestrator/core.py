"""Core orchestrator - sequential, resumable upload of a queue of items."""
import asyncio
import logging
import time
from typing import Callable, Optional, Sequence

from ..errors import SourceNotFoundError
from ..models import (
    Behavior,
    Credentials,
    FileDescriptor,
    FileItem,
    ItemStatus,
    Progress,
    TransferStatus,
    UploadConfig,
)
from ..protocols import ITransferClient
from ..services.ftp_client import FtpClient
from ..services.local_source import LocalSource, local_size, source_exists
from ..upload_queue import UploadQueue
from ..utils.events import EventEmitter
from ..utils.paths import remote_parent
from .policy import resolve_offset
from .progress import SpeedMeter

logger = logging.getLogger(__name__)


class Uploader:
    """
    Uploads queued files and directories one at a time.

    Usage:
        async with Uploader(credentials, Behavior.VERIFY) as uploader:
            uploader.on_item_complete(lambda item: print(f"Done: {item.name}"))
            uploader.on_progress(lambda p: print(p.transfer_status.speed_average))
            status = await uploader.upload(descriptors)

    Items submitted while a batch is running join the same batch. A failed
    item is recorded and the batch moves on to the next READY item.
    """

    def __init__(
        self,
        credentials: Credentials,
        behavior: Behavior = Behavior.VERIFY,
        config: Optional[UploadConfig] = None,
        client: Optional[ITransferClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize uploader.

        Args:
            credentials: FTP credentials
            behavior: Collision policy for existing remote files
            config: Upload configuration
            client: Transfer client (defaults to an FtpClient for credentials)
            clock: Monotonic clock used for speed sampling
        """
        self._behavior = behavior
        self._config = config or UploadConfig()
        self._queue = UploadQueue()
        self._client = client or FtpClient(credentials, self._config)
        self._events = EventEmitter()

        self._is_uploading = False
        self._is_finished = False
        self._current_item_id: Optional[str] = None
        self._speed = SpeedMeter(self._config.speed_window, clock)
        self._task: Optional[asyncio.Task] = None
        self._poll_task: Optional[asyncio.Task] = None
        self._source: Optional[LocalSource] = None
        self._last_connection_error: Optional[BaseException] = None

        self._client.on("error", self._on_client_error)
        self._client.on("end", self._on_client_end)
        self._client.on("close", self._on_client_close)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            await self.wait()
        await self.close()

    # Event subscription methods
    def on_item_start(self, callback: Callable[[FileItem], None]):
        """Called before an item is processed. Receives the FileItem."""
        self._events.on("item_start", callback)

    def on_item_complete(self, callback: Callable[[Optional[FileItem]], None]):
        """Called when an item completes. Receives the refreshed FileItem."""
        self._events.on("item_complete", callback)

    def on_item_fail(self, callback: Callable[[Optional[FileItem]], None]):
        """Called when an item fails. Receives the FileItem with its error."""
        self._events.on("item_fail", callback)

    def on_progress(self, callback: Callable[[Progress], None]):
        """Called on every progress sample after the first of a batch."""
        self._events.on("progress", callback)

    def on_finish(self, callback: Callable[[TransferStatus], None]):
        """Called when no READY item remains."""
        self._events.on("finish", callback)

    def on_connection_error(self, callback: Callable[[BaseException], None]):
        self._events.on("connection_error", callback)

    def on_connection_end(self, callback: Callable[[], None]):
        self._events.on("connection_end", callback)

    def on_connection_close(self, callback: Callable[[], None]):
        self._events.on("connection_close", callback)

    # State properties
    @property
    def queue(self) -> UploadQueue:
        return self._queue

    @property
    def behavior(self) -> Behavior:
        return self._behavior

    @property
    def current_item_id(self) -> Optional[str]:
        return self._current_item_id

    @property
    def last_connection_error(self) -> Optional[BaseException]:
        return self._last_connection_error

    @property
    def speed_history(self) -> list:
        return list(self._speed.history)

    @property
    def transfer_status(self) -> TransferStatus:
        counts = self._queue.status_count
        return TransferStatus(
            is_uploading=self._is_uploading,
            is_finished=self._is_finished,
            speed_average=self._speed.speed_average,
            total=self._queue.size,
            finished_count=counts["finished"],
            error_count=counts["error"],
        )

    # Control methods
    def submit(self, items: Sequence[FileDescriptor]) -> None:
        """
        Queue items and start uploading if idle.

        Must be called from a running event loop. An empty list is ignored.
        """
        if not items:
            return

        self._queue.bulk_add_items(items)
        if not self._is_uploading:
            self._is_uploading = True
            self._is_finished = False
            self._task = asyncio.create_task(self._run())

    async def wait(self) -> TransferStatus:
        """Wait until the queue has no READY items left."""
        while self._task is not None and not self._task.done():
            await self._task
        return self.transfer_status

    async def upload(self, items: Sequence[FileDescriptor]) -> TransferStatus:
        """Submit items and wait for the batch to finish."""
        self.submit(items)
        return await self.wait()

    async def close(self):
        """Stop the running batch (if any) and disconnect."""
        task, self._task = self._task, None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self._stop_polling()
        self._close_source()

        # An interrupted item goes back to READY so a later batch resumes it
        if self._current_item_id is not None:
            item = self._queue.get_item_by_id(self._current_item_id)
            if item and item.status == ItemStatus.UPLOADING:
                self._queue.set_status(item.id, ItemStatus.READY)

        self._is_uploading = False
        await self._client.disconnect()

    # Internal methods
    async def _run(self):
        while True:
            item = self._queue.next_ready_item()
            if item is not None:
                await self._process_item(item)
                continue

            try:
                await self._client.disconnect()
            except Exception as e:
                logger.warning(f"Disconnect failed: {e}")
            # Items may have been submitted while disconnecting
            if self._queue.next_ready_item() is None:
                break

        self._finish_queue()
        logger.info(
            "Upload queue finished: %s complete, %s failed",
            self._queue.status_count["finished"],
            self._queue.status_count["error"],
        )
        await self._events.emit("finish", self.transfer_status)

    async def _process_item(self, item: FileItem):
        await self._events.emit("item_start", item)
        self._current_item_id = item.id
        self._queue.set_status(item.id, ItemStatus.UPLOADING)

        kind = "directory" if item.is_directory else f"{item.size / (1024 * 1024):.2f} MB"
        logger.info(f"Uploading: {item.local_path} -> {item.server_path} ({kind})")

        try:
            if not source_exists(item.local_path):
                raise SourceNotFoundError(item.local_path)

            if item.is_directory:
                await self._client.make_directory_recursive(remote_parent(item.server_path))
            else:
                await self._ensure_remote_dir(remote_parent(item.server_path))
                await self._transfer(item)
        except Exception as e:
            await self._fail_item(item, e)
            return

        await self._complete_item(item)

    async def _ensure_remote_dir(self, directory: str):
        try:
            await self._client.list_directory(directory)
        except Exception as e:
            logger.debug(f"Remote directory {directory} missing, creating it ({e})")
            await self._client.make_directory_recursive(directory)

    async def _transfer(self, item: FileItem):
        offset = await resolve_offset(
            self._behavior,
            self._client,
            item.server_path,
            local_size(item.local_path),
        )

        self._poll_task = asyncio.create_task(self._poll(item))
        try:
            if offset is None:
                logger.info(f"Not sending {item.name}: remote copy kept ({self._behavior.value})")
            else:
                self._source = LocalSource(item.local_path, offset)
                await self._client.upload_stream(self._source, item.server_path, offset)
        finally:
            await self._stop_polling()
            self._close_source()

        # Final sample so the reported position reaches 100%
        await self._step(item.size, item)

    async def _poll(self, item: FileItem):
        while True:
            await asyncio.sleep(self._config.poll_interval)
            if self._source is not None:
                await self._step(self._source.position, item)

    async def _step(self, transferred: int, item: FileItem):
        self._queue.set_transferred(item.id, transferred)
        if self._speed.sample(transferred, item.local_path):
            progress = Progress(
                transfer_status=self.transfer_status,
                item=self._queue.get_item_by_id(item.id),
            )
            await self._events.emit("progress", progress)

    async def _stop_polling(self):
        task, self._poll_task = self._poll_task, None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _close_source(self):
        if self._source is not None:
            self._source.close()
            self._source = None

    async def _complete_item(self, item: FileItem):
        self._queue.set_status(item.id, ItemStatus.COMPLETE)
        self._queue.set_transferred(item.id, item.size)
        logger.info(f"Uploaded: {item.name}")
        await self._events.emit("item_complete", self._queue.get_item_by_id(item.id))

    async def _fail_item(self, item: FileItem, error: Exception):
        await self._stop_polling()
        self._close_source()

        message = str(error) or type(error).__name__
        logger.error(f"Failed: {item.name} - {message}")
        logger.debug("Failure details for %s", item.local_path, exc_info=error)
        self._queue.set_status(item.id, ItemStatus.ERROR, message)
        await self._events.emit("item_fail", self._queue.get_item_by_id(item.id))

    def _finish_queue(self):
        self._is_uploading = False
        self._is_finished = True
        self._current_item_id = None
        self._speed.reset()

    async def _on_client_error(self, error: BaseException):
        self._last_connection_error = error
        await self._events.emit("connection_error", error)

    async def _on_client_end(self):
        await self._events.emit("connection_end")

    async def _on_client_close(self):
        await self._events.emit("connection_close")
