"""Repositories mapping domain models onto the document store.

Every write goes through ``sanitize`` so unset optional fields never reach
the store.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pathways.core.config import settings
from pathways.core.errors import StudentNotFoundError
from pathways.core.logging import get_logger
from pathways.domain.analytics import DEFAULT_INTERVENTIONS, ClassAnalytics, TeachingMethod
from pathways.domain.student import Student
from pathways.infrastructure.store import DocumentStore, InMemoryDocumentStore
from pathways.utils.records import sanitize

logger = get_logger(__name__)

_store: Optional[DocumentStore] = None


def get_document_store() -> DocumentStore:
    """Return the process-wide document store for the configured backend.

    Falls back to the in-memory store when Redis is selected but unreachable.
    """
    global _store

    if _store is None:
        if settings.storage_backend == "redis":
            from pathways.infrastructure.redis import RedisDocumentStore, get_redis_client

            client = get_redis_client()
            if client is not None:
                _store = RedisDocumentStore(client)
            else:
                logger.warning("Redis unavailable, falling back to in-memory storage")
        if _store is None:
            _store = InMemoryDocumentStore()

    return _store


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class StudentRepository:
    """Students collection. Ids are assigned by the store on ``save``."""

    collection = "students"

    def __init__(self, store: DocumentStore):
        self.store = store

    def _to_student(self, doc_id: str, doc: Dict[str, Any]) -> Student:
        return Student.model_validate({**doc, "id": doc_id})

    def load_all(self) -> List[Student]:
        return [self._to_student(doc_id, doc) for doc_id, doc in self.store.list(self.collection)]

    def get(self, student_id: str) -> Student:
        doc = self.store.get(self.collection, student_id)
        if doc is None:
            raise StudentNotFoundError(student_id)
        return self._to_student(student_id, doc)

    def save(self, student: Student) -> str:
        """Persist a new student and return the assigned id."""
        now = _timestamp()
        doc = sanitize({**student.to_document(), "createdAt": now, "updatedAt": now})
        student_id = self.store.add(self.collection, doc)
        logger.info(f"Student saved: {student.name}", extra={"student_id": student_id})
        return student_id

    def update(self, student_id: str, partial: Dict[str, Any]) -> None:
        """Merge camelCase fields into a stored student."""
        doc = sanitize({**partial, "updatedAt": _timestamp()})
        try:
            self.store.update(self.collection, student_id, doc)
        except KeyError:
            raise StudentNotFoundError(student_id)
        logger.debug("Student updated", extra={"student_id": student_id})

    def delete(self, student_id: str) -> None:
        if not self.store.delete(self.collection, student_id):
            raise StudentNotFoundError(student_id)
        logger.info("Student deleted", extra={"student_id": student_id})


class AnalyticsRepository:
    """Cached class analytics plus the teacher-maintained interventions list.

    The analytics document is only a cache and expires after
    ANALYTICS_CACHE_TTL_HOURS (0 keeps it until the next recompute).
    """

    collection = "analytics"
    analytics_id = "class"
    interventions_id = "interventions"

    def __init__(self, store: DocumentStore, ttl_hours: Optional[int] = None):
        self.store = store
        ttl_hours = settings.analytics_cache_ttl_hours if ttl_hours is None else ttl_hours
        self.ttl_seconds = int(ttl_hours * 3600) or None

    def load(self) -> Optional[ClassAnalytics]:
        doc = self.store.get(self.collection, self.analytics_id)
        if doc is None:
            logger.debug("Analytics cache miss")
            return None
        return ClassAnalytics.model_validate(doc)

    def save(self, analytics: ClassAnalytics) -> None:
        doc = sanitize(analytics.model_dump(mode="json", by_alias=True))
        self.store.set(self.collection, self.analytics_id, doc, ttl_seconds=self.ttl_seconds)

    def get_interventions(self) -> List[str]:
        doc = self.store.get(self.collection, self.interventions_id)
        if doc is None:
            return list(DEFAULT_INTERVENTIONS)
        return list(doc.get("names", []))

    def save_intervention(self, name: str) -> List[str]:
        """Append ``name`` unless already listed; returns the resulting list."""
        names = self.get_interventions()
        if name not in names:
            names.append(name)
            self.store.set(self.collection, self.interventions_id, {"names": names})
            logger.info(f"Intervention added: {name}")
        return names


class TeachingMethodRepository:
    collection = "teachingMethods"

    def __init__(self, store: DocumentStore):
        self.store = store

    def _all(self) -> List[TeachingMethod]:
        return [
            TeachingMethod.model_validate({**doc, "id": doc_id})
            for doc_id, doc in self.store.list(self.collection)
        ]

    def find(self, subject: str, learning_style: str) -> List[TeachingMethod]:
        return [m for m in self._all() if m.subject == subject and m.learning_style == learning_style]

    def find_general(self, learning_style: str) -> List[TeachingMethod]:
        return [m for m in self._all() if m.is_general and m.learning_style == learning_style]

    def add(self, method: TeachingMethod) -> str:
        doc = sanitize(method.model_dump(mode="json", by_alias=True, exclude={"id"}))
        return self.store.add(self.collection, doc)
