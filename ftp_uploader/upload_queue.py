"""
Upload queue - ordered collection of FileItems.

Insertion order is the scheduling order. Reads hand out copies; every
mutation goes through a named method.
"""
import copy
import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .models import FileDescriptor, FileItem, ItemStatus
from .utils.events import EventEmitter

logger = logging.getLogger(__name__)


class UploadQueue:
    """
    Ordered queue of upload items.

    Events:
        item_added(descriptor), bulk_items_added(items), item_removed(item),
        queue_cleared()
    """

    def __init__(self):
        self._items: List[FileItem] = []
        self._events = EventEmitter()

    def on(self, event_name: str, callback: Callable):
        self._events.on(event_name, callback)

    def off(self, event_name: str, callback: Callable):
        self._events.off(event_name, callback)

    @property
    def size(self) -> int:
        return len(self._items)

    @property
    def status_count(self) -> Dict[str, int]:
        finished = 0
        error = 0
        for item in self._items:
            if item.status == ItemStatus.COMPLETE:
                finished += 1
            elif item.status == ItemStatus.ERROR:
                error += 1
        return {"finished": finished, "error": error}

    def count(self, status: ItemStatus) -> int:
        return sum(1 for item in self._items if item.status == status)

    def add_item(self, descriptor: FileDescriptor) -> int:
        """
        Append one item in READY status.

        Returns:
            Queue size after the append
        """
        self._items.append(FileItem.from_descriptor(descriptor))
        self._events.emit_sync("item_added", descriptor)
        return self.size

    def bulk_add_items(self, descriptors: Iterable[FileDescriptor]) -> List[FileItem]:
        """Append several items with a single notification."""
        bulk = [FileItem.from_descriptor(d) for d in descriptors]
        self._items.extend(bulk)
        logger.debug(f"Queued {len(bulk)} items (queue size {self.size})")

        copies = [copy.copy(item) for item in bulk]
        self._events.emit_sync("bulk_items_added", copies)
        return copies

    def remove_item_by_id(self, item_id: str) -> Optional[FileItem]:
        """Remove the first item with this id. Notifies even when nothing matched."""
        item, position = self._find(item_id)
        if position != -1:
            del self._items[position]

        removed = copy.copy(item) if item else None
        self._events.emit_sync("item_removed", removed)
        return removed

    def get_item_by_id(self, item_id: str) -> Optional[FileItem]:
        item, _ = self._find(item_id)
        return copy.copy(item) if item else None

    def get_items(self) -> List[FileItem]:
        return [copy.copy(item) for item in self._items]

    def clear(self):
        self._items = []
        self._events.emit_sync("queue_cleared")

    def set_status(self, item_id: str, status: ItemStatus, error: Optional[str] = None):
        item, _ = self._find(item_id)
        if item:
            item.status = status
            item.error = error or None

    def set_transferred(self, item_id: str, transferred: int):
        # Duplicate ids are not expected, but every match is updated
        for item in self._items:
            if item.id == item_id:
                item.transferred = transferred

    def next_ready_item(self) -> Optional[FileItem]:
        for item in self._items:
            if item.status == ItemStatus.READY:
                return copy.copy(item)
        return None

    def _find(self, item_id: str) -> Tuple[Optional[FileItem], int]:
        for position, item in enumerate(self._items):
            if item.id == item_id:
                return item, position
        return None, -1
