"""Teacher roster view: per-student triage rows with filtering and sorting."""
from typing import List, Optional, Sequence

from pathways.domain.analytics import RiskLevel, RosterEntry
from pathways.domain.student import Student
from pathways.services.progress import improvement_band
from pathways.services.risk import classify_risk, is_slow_learner


SORT_KEYS = ("risk", "name", "improvement")

_RISK_ORDER = {RiskLevel.HIGH: 0, RiskLevel.MEDIUM: 1, RiskLevel.LOW: 2}


def _entry(student: Student) -> RosterEntry:
    rate = student.progress_metrics.improvement_rate if student.progress_metrics else None
    return RosterEntry(
        id=student.id,
        name=student.name,
        risk_level=classify_risk(student),
        improvement_rate=rate,
        improvement_band=improvement_band(rate) if rate is not None else None,
        slow_learner=is_slow_learner(student),
    )


def roster(students: Sequence[Student], subject: Optional[str] = None, sort_by: str = "risk") -> List[RosterEntry]:
    """Build roster rows.

    Args:
        students: Students to list
        subject: Keep only students with at least one attempt in this subject
        sort_by: "risk" (high first), "name", or "improvement" (best first,
            missing rates count as 0)

    Raises:
        ValueError: for an unknown ``sort_by``
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(f"sort_by must be one of {', '.join(SORT_KEYS)}")

    if subject:
        students = [s for s in students if any(t.subject == subject for t in s.test_results)]

    entries = [_entry(s) for s in students]

    if sort_by == "name":
        return sorted(entries, key=lambda e: e.name.lower())
    if sort_by == "improvement":
        return sorted(entries, key=lambda e: e.improvement_rate or 0, reverse=True)
    return sorted(entries, key=lambda e: _RISK_ORDER[e.risk_level])
