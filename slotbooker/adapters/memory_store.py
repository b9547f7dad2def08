"""
In-memory document store for local runs and tests.
"""

import asyncio
import copy
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..domain.exceptions import DocumentConflictError, StoreQueryError, StoreWriteError
from ..services.ports import Predicate

SUPPORTED_OPERATORS = ("==",)


def matches(document: Mapping[str, Any], predicates: Sequence[Predicate]) -> bool:
    """
    Check a document against ``(field, op, value)`` predicates.

    Raises:
        ValueError: If a predicate uses an operator other than ``==``
    """
    for field_name, op, value in predicates:
        if op not in SUPPORTED_OPERATORS:
            raise ValueError(f"Unsupported query operator: {op!r}")
        if field_name not in document or document[field_name] != value:
            return False
    return True


def find_conflict(
    documents: Mapping[str, Mapping[str, Any]],
    document: Mapping[str, Any],
    unique_on: Sequence[str],
) -> Optional[str]:
    """Return the id of a stored document sharing all ``unique_on`` values."""
    key = [(field_name, "==", document.get(field_name)) for field_name in unique_on]
    for doc_id, existing in documents.items():
        if matches(existing, key):
            return doc_id
    return None


class InMemoryBookingStore:
    """
    Dict-backed store implementing ``BookingStoreProtocol``.

    A single lock serialises conditional writes, so the absence check and
    the insert are atomic for every caller sharing this instance.
    """

    def __init__(self, collections: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = copy.deepcopy(collections or {})
        self._lock = asyncio.Lock()
        self.fail_queries = False
        self.fail_writes = False
        self.query_count = 0
        self.write_count = 0

    async def query(self, collection: str, predicates: Sequence[Predicate]) -> List[Dict[str, Any]]:
        self.query_count += 1
        if self.fail_queries:
            raise StoreQueryError("Store is unavailable")

        documents = self._collections.get(collection, {})
        try:
            return [copy.deepcopy(doc) for doc in documents.values() if matches(doc, predicates)]
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
        async with self._lock:
            self.write_count += 1
            if self.fail_writes:
                raise StoreWriteError("Store is unavailable")

            documents = self._collections.setdefault(collection, {})
            if unique_on:
                existing_id = find_conflict(documents, document, unique_on)
                if existing_id is not None:
                    raise DocumentConflictError(
                        f"Document {existing_id} already holds {tuple(unique_on)}"
                    )
            documents[doc_id] = copy.deepcopy(document)

    def documents(self, collection: str) -> List[Dict[str, Any]]:
        """Snapshot of a collection, in insertion order."""
        return [copy.deepcopy(doc) for doc in self._collections.get(collection, {}).values()]
