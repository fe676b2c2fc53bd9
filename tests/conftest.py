"""Pytest configuration and shared fixtures."""
import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("STORAGE_BACKEND", "memory")

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from pathways.domain.student import BehavioralMetrics, ProgressMetrics, Student, TestResult
from pathways.infrastructure.repositories import (
    AnalyticsRepository,
    StudentRepository,
    TeachingMethodRepository,
)
from pathways.infrastructure.store import InMemoryDocumentStore


NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_result():
    """Factory for TestResult; ``days_ago`` sets the attempt date relative to NOW."""
    def _make(subject="Mathematics", score=80, total=100, days_ago=None, **kwargs):
        attempt_date = NOW - timedelta(days=days_ago) if days_ago is not None else None
        return TestResult(
            subject=subject,
            score=score,
            total_possible=total,
            attempt_date=attempt_date,
            **kwargs
        )
    return _make


@pytest.fixture
def make_student():
    """Factory for Student with optional improvement rate and behaviour."""
    def _make(name="Maya Chen", results=None, improvement_rate=None, behavior=None, **kwargs):
        progress = None
        if improvement_rate is not None:
            progress = ProgressMetrics(
                start_date=NOW - timedelta(days=30),
                current_date=NOW,
                initial_score=60,
                current_score=60 + improvement_rate,
                improvement_rate=improvement_rate,
                consistency_score=7,
            )
        return Student(
            name=name,
            test_results=results or [],
            progress_metrics=progress,
            behavioral_metrics=behavior,
            **kwargs
        )
    return _make


@pytest.fixture
def calm_behavior():
    """Behaviour snapshot that triggers no risk rule."""
    return BehavioralMetrics(
        class_participation=7,
        homework_completion=90,
        attention_span=30,
        peer_collaboration=7,
        frustration_tolerance=7,
        motivation_level=8,
        anxiety_level=3,
    )


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def student_repo(store):
    return StudentRepository(store)


@pytest.fixture
def analytics_repo(store):
    return AnalyticsRepository(store, ttl_hours=0)


@pytest.fixture
def method_repo(store):
    return TeachingMethodRepository(store)


@pytest.fixture
def mock_redis():
    """Mock Redis client with an in-process key space."""
    data = {}
    lists = {}
    client = Mock()
    client.get.side_effect = lambda key: data.get(key)
    client.exists.side_effect = lambda key: int(key in data)
    client.set.side_effect = lambda key, value: data.__setitem__(key, value)
    client.setex.side_effect = lambda key, ttl, value: data.__setitem__(key, value)
    client.delete.side_effect = lambda key: int(data.pop(key, None) is not None)
    client.rpush.side_effect = lambda key, value: lists.setdefault(key, []).append(value)
    client.lrem.side_effect = lambda key, count, value: lists.__setitem__(
        key, [v for v in lists.get(key, []) if v != value]
    )
    client.lrange.side_effect = lambda key, start, end: list(lists.get(key, []))
    client.mget.side_effect = lambda keys: [data.get(k) for k in keys]
    client.ping.return_value = True
    client.data = data
    client.lists = lists
    return client


@pytest.fixture
def test_client(store):
    """FastAPI test client backed by a fresh in-memory store."""
    from main import app
    from pathways.api import routes

    app.dependency_overrides[routes.get_student_repository] = lambda: StudentRepository(store)
    app.dependency_overrides[routes.get_analytics_repository] = lambda: AnalyticsRepository(store, ttl_hours=0)
    app.dependency_overrides[routes.get_teaching_method_repository] = lambda: TeachingMethodRepository(store)
    yield TestClient(app)
    app.dependency_overrides.clear()
