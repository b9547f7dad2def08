"""
Document store persisted to a local JSON file.

File layout::

    {
        "ScheduledMeetings": {
            "<booking id>": {...booking document...}
        }
    }

Writes hold an exclusive lock on ``<file>.lock`` from load to replace, so
conditional writes stay atomic across store instances and processes.
"""

import asyncio
import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from filelock import FileLock

from ..domain.exceptions import DocumentConflictError, StoreQueryError, StoreWriteError
from ..services.ports import Predicate
from .memory_store import find_conflict, matches

logger = logging.getLogger(__name__)


class JsonFileBookingStore:
    """
    File-backed store implementing ``BookingStoreProtocol``.

    The whole load-check-replace sequence of a write runs in one worker
    thread under the file lock. A write whose caller is cancelled or times
    out before the replace is abandoned, so a failed write never lands on
    disk after a later one.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")

    async def query(self, collection: str, predicates: Sequence[Predicate]) -> List[Dict[str, Any]]:
        try:
            data = await asyncio.to_thread(self._load)
        except (OSError, ValueError) as exc:
            raise StoreQueryError(f"Could not read {self.path}: {exc}") from exc

        documents = data.get(collection, {})
        try:
            return [doc for doc in documents.values() if matches(doc, predicates)]
        except ValueError as exc:
            raise StoreQueryError(str(exc)) from exc

    async def write(
        self,
        collection: str,
        doc_id: str,
        document: Dict[str, Any],
        *,
        unique_on: Optional[Sequence[str]] = None,
    ) -> None:
        abandoned = threading.Event()
        try:
            await asyncio.to_thread(
                self._write_locked, collection, doc_id, document, unique_on, abandoned
            )
        except asyncio.CancelledError:
            # The worker thread keeps running; it checks this before replacing the file
            abandoned.set()
            raise
        except (OSError, TypeError, ValueError) as exc:
            raise StoreWriteError(f"Could not write {self.path}: {exc}") from exc

        logger.debug("Stored %s/%s in %s", collection, doc_id, self.path)

    def _write_locked(
        self,
        collection: str,
        doc_id: str,
        document: Dict[str, Any],
        unique_on: Optional[Sequence[str]],
        abandoned: threading.Event,
    ) -> bool:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(self.lock_path):
            if abandoned.is_set():
                return False

            data = self._load()
            documents = data.setdefault(collection, {})
            if unique_on:
                existing_id = find_conflict(documents, document, unique_on)
                if existing_id is not None:
                    raise DocumentConflictError(
                        f"Document {existing_id} already holds {tuple(unique_on)}"
                    )
            documents[doc_id] = document

            tmp_path = self._stage(data)
            if abandoned.is_set():
                tmp_path.unlink(missing_ok=True)
                logger.warning("Abandoned write of %s/%s in %s", collection, doc_id, self.path)
                return False
            tmp_path.replace(self.path)
            return True

    def _load(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        if not self.path.exists():
            return {}

        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError("Store file must contain a mapping at the root level.")
        return data

    def _stage(self, data: Dict[str, Any]) -> Path:
        """Write ``data`` next to the store file and return the temp path."""
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        return tmp_path
