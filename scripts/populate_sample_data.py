#!/usr/bin/env python3
"""
Sample Data Loader for Smart Learning Pathways

Fills the configured document store (STORAGE_BACKEND) with random sample
students and saves fresh class analytics.

Usage:
    python scripts/populate_sample_data.py --count 25 --seed 42
"""

import argparse
import random
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pathways.core.config import settings
from pathways.core.errors import ConnectivityError
from pathways.infrastructure.repositories import (
    AnalyticsRepository,
    StudentRepository,
    get_document_store,
)
from pathways.infrastructure.store import InMemoryDocumentStore
from pathways.services.analytics import get_class_analytics
from pathways.services.sample_data import populate_sample_data


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Populate the store with sample students.")
    parser.add_argument("--count", type=int, default=10, help="number of students to create (default: 10)")
    parser.add_argument("--seed", type=int, default=None, help="random seed for reproducible data")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    if args.count < 1:
        print("[ERROR] --count must be at least 1")
        return 1

    print("=" * 60)
    print("Smart Learning Pathways - Sample Data Loader")
    print("=" * 60)
    print(f"\nStorage backend: {settings.storage_backend}")

    store = get_document_store()
    if isinstance(store, InMemoryDocumentStore):
        print("[WARNING] Using the in-memory store; data is discarded when this script exits.")

    students = StudentRepository(store)
    analytics_repo = AnalyticsRepository(store)

    try:
        created = populate_sample_data(students, analytics_repo, count=args.count, rng=random.Random(args.seed))
        analytics = get_class_analytics(students, analytics_repo)
    except ConnectivityError as e:
        print(f"[ERROR] {e.message}")
        return 1

    print(f"\n[SUCCESS] Created {len(created)} students")
    print(f"   Total students: {analytics.total_students}")
    print(f"   Slow learners: {analytics.slow_learner_percentage}%")
    print(f"   Average improvement: {analytics.average_improvement}")
    print(f"   Most challenged subjects: {', '.join(analytics.most_challenged_subjects) or '-'}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
