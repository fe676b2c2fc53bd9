"""Collection-oriented document store interface and its in-memory backend.

Documents are JSON-compatible dicts addressed by ``(collection, id)``.
Listing returns documents in insertion order.
"""
import copy
import threading
import time
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from pathways.core.logging import get_logger

logger = get_logger(__name__)

Document = Dict[str, Any]


class DocumentStore(ABC):
    """Minimal document database API used by the repositories."""

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Return the document, or None when it does not exist."""

    @abstractmethod
    def set(self, collection: str, doc_id: str, doc: Document, ttl_seconds: Optional[int] = None) -> None:
        """Create or overwrite a document, optionally expiring after ``ttl_seconds``."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns False when it did not exist."""

    @abstractmethod
    def list(self, collection: str) -> List[Tuple[str, Document]]:
        """All ``(id, document)`` pairs in insertion order."""

    def add(self, collection: str, doc: Document) -> str:
        """Store a new document under a generated id and return the id."""
        doc_id = uuid.uuid4().hex
        self.set(collection, doc_id, doc)
        return doc_id

    def update(self, collection: str, doc_id: str, partial: Document) -> Document:
        """Shallow-merge ``partial`` into an existing document. Clears any expiry.

        Raises:
            KeyError: if the document does not exist
        """
        current = self.get(collection, doc_id)
        if current is None:
            raise KeyError(f"{collection}/{doc_id}")
        merged = {**current, **partial}
        self.set(collection, doc_id, merged)
        return merged


class InMemoryDocumentStore(DocumentStore):
    """Process-local store. Data lives as long as the process does.

    Example:
        >>> store = InMemoryDocumentStore()
        >>> doc_id = store.add("students", {"name": "Maya Chen"})
        >>> store.get("students", doc_id)["name"]
        'Maya Chen'
    """

    def __init__(self):
        self._collections: Dict[str, Dict[str, Tuple[Document, Optional[float]]]] = {}
        self._lock = threading.RLock()
        logger.info("InMemoryDocumentStore initialized")

    def _live(self, collection: str) -> Dict[str, Tuple[Document, Optional[float]]]:
        docs = self._collections.setdefault(collection, {})
        now = time.monotonic()
        expired = [doc_id for doc_id, (_, expires) in docs.items() if expires is not None and expires <= now]
        for doc_id in expired:
            del docs[doc_id]
        return docs

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            entry = self._live(collection).get(doc_id)
            return copy.deepcopy(entry[0]) if entry else None

    def set(self, collection: str, doc_id: str, doc: Document, ttl_seconds: Optional[int] = None) -> None:
        expires = time.monotonic() + ttl_seconds if ttl_seconds else None
        with self._lock:
            self._live(collection)[doc_id] = (copy.deepcopy(doc), expires)

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self._live(collection).pop(doc_id, None) is not None

    def list(self, collection: str) -> List[Tuple[str, Document]]:
        with self._lock:
            return [(doc_id, copy.deepcopy(doc)) for doc_id, (doc, _) in self._live(collection).items()]

    def update(self, collection: str, doc_id: str, partial: Document) -> Document:
        with self._lock:
            return super().update(collection, doc_id, partial)
