"""
File-backed item store.

``ItemStore`` owns the in-memory catalog and mirrors it to a single JSON
file holding an array of items.  The file is read once when the store is
created and again, in full, whenever its modification time changes
behind the store's back; every mutation rewrites the whole file.

Consistency rules:

* Mutations build a new list and swap it in only after the file has been
  written.  A failed write raises ``PersistenceError`` and leaves memory
  untouched, so memory never diverges from disk.
* A single re-entrant lock serializes mutations and reloads.  Readers do
  not lock; they grab the current list, which is never modified in place.
* The content fingerprint and last-modified instant are recomputed on
  load and on each mutation, never per read.

A file that cannot be read or parsed is logged and treated as an empty
catalog instead of failing startup.
"""

import hashlib
import json
import logging
import os
import tempfile
import threading
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError

from ..schemas.item import Item, ItemCreate, ItemUpdate
from .cache import ValidationToken
from .errors import PersistenceError

logger = logging.getLogger(__name__)

_items_adapter = TypeAdapter(List[Item])


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def serialize_items(items: Iterable[Item]) -> str:
    """Serialize items the way they are written to the data file."""
    payload = [item.model_dump(mode="json", by_alias=True, exclude_none=True) for item in items]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def compute_fingerprint(serialized: str) -> str:
    return hashlib.md5(serialized.encode("utf-8")).hexdigest()


class ItemStore:
    """In-memory catalog synchronized with a JSON file.

    Parameters
    ----------
    path : str
        Location of the data file.
    watch : bool
        Start polling the file for external changes right away.
    poll_interval : float
        Seconds between two modification-time checks of the watcher.
    """

    def __init__(self, path: str, watch: bool = False, poll_interval: float = 5.0) -> None:
        self.path = Path(path)
        self.poll_interval = poll_interval
        self._lock = threading.RLock()
        self._items: List[Item] = []
        self._fingerprint = compute_fingerprint(serialize_items([]))
        self._last_modified = _utcnow()
        self._known_mtime: Optional[int] = None
        self._stop_event = threading.Event()
        self._watcher: Optional[threading.Thread] = None
        self.load()
        if watch:
            self.start_watching()

    # ------------------------------------------------------------------
    # Loading and watching
    # ------------------------------------------------------------------

    def _stat_mtime(self) -> Optional[int]:
        try:
            return self.path.stat().st_mtime_ns
        except OSError:
            return None

    def load(self) -> None:
        """Replace the catalog with the content of the data file."""
        with self._lock:
            mtime = self._stat_mtime()
            try:
                raw = self.path.read_text(encoding="utf-8")
                items = _items_adapter.validate_json(raw)
            except (OSError, ValueError, ValidationError) as exc:
                logger.error("Failed to load items from %s: %s", self.path, exc)
                items = []
                last_modified = _utcnow()
            else:
                last_modified = datetime.fromtimestamp(mtime / 1e9, tz=timezone.utc) if mtime is not None else _utcnow()
                logger.info("Items loaded (count=%d)", len(items))
            self._items = items
            self._known_mtime = mtime
            self._last_modified = last_modified
            self._fingerprint = compute_fingerprint(serialize_items(items))

    def reload_if_changed(self) -> bool:
        """Reload the file if its modification time moved.

        Returns ``True`` when a reload happened.  The check and the reload
        run under the write lock so they never interleave with a mutation.
        """
        with self._lock:
            if self._stat_mtime() == self._known_mtime:
                return False
            logger.info("Items file changed, reloading...")
            self.load()
            return True

    def _watch_loop(self) -> None:
        while not self._stop_event.wait(self.poll_interval):
            try:
                self.reload_if_changed()
            except Exception:
                logger.exception("File watcher iteration failed")

    def start_watching(self) -> None:
        """Poll the data file in a daemon thread until ``stop_watching``."""
        if self._watcher is not None and self._watcher.is_alive():
            return
        self._stop_event.clear()
        self._watcher = threading.Thread(target=self._watch_loop, name="item-store-watcher", daemon=True)
        self._watcher.start()
        logger.debug("File watcher started for %s", self.path)

    watch = start_watching

    def stop_watching(self) -> None:
        if self._watcher is None:
            return
        self._stop_event.set()
        self._watcher.join(timeout=self.poll_interval + 1)
        self._watcher = None
        logger.debug("File watcher stopped")

    @property
    def watching(self) -> bool:
        return self._watcher is not None and self._watcher.is_alive()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_all(self) -> List[Item]:
        return list(self._items)

    def get_by_id(self, item_id: str) -> Optional[Item]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def get_by_ids(self, item_ids: Iterable[str]) -> List[Item]:
        """Return items whose id was requested, in catalog order.

        Duplicate identifiers in ``item_ids`` do not duplicate results.
        """
        wanted = set(item_ids)
        return [item for item in self._items if item.id in wanted]

    def fingerprint(self) -> str:
        return self._fingerprint

    def last_modified(self) -> datetime:
        return self._last_modified

    def validation_token(self) -> ValidationToken:
        # Read both under the lock so the pair belongs to the same state.
        with self._lock:
            return ValidationToken(self._fingerprint, self._last_modified)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _persist(self, items: List[Item]) -> None:
        """Write ``items`` to disk and commit them in memory.

        The payload goes to a temporary file in the target directory which
        is then renamed over the data file, so a concurrent reader sees
        either the old or the new content.  Memory is only updated once the
        rename succeeded.
        """
        serialized = serialize_items(items)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".items-", suffix=".json", dir=str(self.path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(serialized)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            logger.error("Failed to save items to %s: %s", self.path, exc)
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(str(self.path)) from exc

        self._items = items
        self._known_mtime = self._stat_mtime()
        self._last_modified = _utcnow()
        self._fingerprint = compute_fingerprint(serialized)
        logger.debug("Items saved to file")

    def create(self, data: ItemCreate) -> Item:
        fields = data.model_dump()
        if fields.get("image_url") is not None:
            fields["image_url"] = str(fields["image_url"])
        with self._lock:
            now = _utcnow()
            item = Item(id=str(uuid.uuid4()), created_at=now, updated_at=now, **fields)
            self._persist(self._items + [item])
        logger.info("Item created (id=%s)", item.id)
        return item

    def update(self, item_id: str, changes: ItemUpdate) -> Optional[Item]:
        """Merge the explicitly provided fields into an item.

        Returns ``None`` if the item does not exist.  ``id`` and
        ``createdAt`` are preserved; ``updatedAt`` always moves forward,
        even when ``changes`` is empty.
        """
        # ItemUpdate has no id or timestamp fields, so identity is never patched.
        patch = changes.changes()
        with self._lock:
            index = self._index_of(item_id)
            if index is None:
                logger.debug("Item not found for update (id=%s)", item_id)
                return None
            current = self._items[index]
            now = _utcnow()
            if now <= current.updated_at:
                # Clock did not advance (or file timestamps are in the future).
                now = current.updated_at + timedelta(microseconds=1)
            patch["updated_at"] = now
            updated = current.model_copy(update=patch)
            items = list(self._items)
            items[index] = updated
            self._persist(items)
        logger.info("Item updated (id=%s)", item_id)
        return updated

    def delete(self, item_id: str) -> bool:
        with self._lock:
            index = self._index_of(item_id)
            if index is None:
                logger.debug("Item not found for deletion (id=%s)", item_id)
                return False
            items = self._items[:index] + self._items[index + 1:]
            self._persist(items)
        logger.info("Item deleted (id=%s)", item_id)
        return True

    def _index_of(self, item_id: str) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None
