"""File intake and the observable batch collection."""

import logging
import mimetypes
import secrets
import string
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Set

from .errors import InvalidTransition
from .models import BatchItem, ItemStatus, JobDescription, ScorePayload, SourceHandle

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"
ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 9

BatchObserver = Callable[["Batch"], None]


def new_item_id(taken: Optional[Set[str]] = None) -> str:
    """Generate a short random item id not present in ``taken``."""
    taken = taken or set()
    while True:
        item_id = "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))
        if item_id not in taken:
            return item_id


def intake_files(handles: Iterable[SourceHandle], taken: Optional[Set[str]] = None) -> List[BatchItem]:
    """Wrap selected files as READY batch items with stable ids."""
    taken = set(taken or ())
    items = []
    for handle in handles:
        item_id = new_item_id(taken)
        taken.add(item_id)
        items.append(BatchItem(id=item_id, source=handle))
    return items


def handle_from_path(path) -> SourceHandle:
    """Build a source handle for a file on disk."""
    path = Path(path)
    media_type, _ = mimetypes.guess_type(path.name)
    try:
        size = path.stat().st_size
    except OSError:
        # Unreadable files are still accepted; the encoder reports the failure
        size = 0
    return SourceHandle(
        name=path.name,
        size=size,
        media_type=media_type or DEFAULT_MEDIA_TYPE,
        path=str(path),
    )


def intake_paths(paths: Iterable, taken: Optional[Set[str]] = None) -> List[BatchItem]:
    return intake_files((handle_from_path(p) for p in paths), taken)


class Batch:
    """Ordered set of batch items with change notification.

    Observers are called with the batch after every mutation. Item status
    changes go through :meth:`transition`, which only the orchestrator calls.
    """

    def __init__(self, items: Optional[Iterable[BatchItem]] = None):
        self._items: List[BatchItem] = []
        self._observers: List[BatchObserver] = []
        # Job the batch was last scored against, set by the orchestrator
        self.job: Optional[JobDescription] = None
        if items:
            self._extend(items)

    def __iter__(self) -> Iterator[BatchItem]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> List[BatchItem]:
        return list(self._items)

    @property
    def ids(self) -> Set[str]:
        return {item.id for item in self._items}

    def get(self, item_id: str) -> Optional[BatchItem]:
        return next((item for item in self._items if item.id == item_id), None)

    def subscribe(self, observer: BatchObserver) -> Callable[[], None]:
        """Register an observer; returns a function that removes it."""
        self._observers.append(observer)

        def unsubscribe():
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def notify(self) -> None:
        """Call every observer; an observer error is logged and never reaches the caller."""
        for observer in list(self._observers):
            try:
                observer(self)
            except Exception:
                logger.exception(f"Batch observer {observer!r} failed")

    def add(self, items: Iterable[BatchItem]) -> None:
        self._extend(items)
        self.notify()

    def add_files(self, handles: Iterable[SourceHandle]) -> List[BatchItem]:
        items = intake_files(handles, self.ids)
        self.add(items)
        return items

    def remove(self, item_id: str) -> bool:
        """Drop an item that is not currently being processed."""
        item = self.get(item_id)
        if item is None:
            return False
        if item.status in (ItemStatus.READING, ItemStatus.SCORING):
            raise InvalidTransition(f"Item {item_id} is in flight and cannot be removed")
        self._items.remove(item)
        self.notify()
        return True

    def retry_failed(self) -> List[BatchItem]:
        """Replace every failed item with a fresh READY attempt in the same slot."""
        retried = []
        taken = self.ids
        for index, item in enumerate(self._items):
            if item.status is ItemStatus.FAILED:
                attempt = BatchItem(id=new_item_id(taken), source=item.source)
                taken.add(attempt.id)
                self._items[index] = attempt
                retried.append(attempt)
        if retried:
            logger.info(f"Queued {len(retried)} failed item(s) for another attempt")
            self.notify()
        return retried

    def transition(
        self,
        item: BatchItem,
        status: ItemStatus,
        progress: int,
        result: Optional[ScorePayload] = None,
        error: Optional[str] = None,
    ) -> None:
        item.transition(status, progress, result=result, error=error)
        self.notify()

    def _extend(self, items: Iterable[BatchItem]) -> None:
        taken = self.ids
        for item in items:
            if item.id in taken:
                raise ValueError(f"Duplicate batch item id: {item.id}")
            taken.add(item.id)
            self._items.append(item)
