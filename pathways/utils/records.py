"""Record cleaning for the persistence boundary.

Document stores reject unset values, while the data model is full of
optional fields. ``None`` stands for "unset" here: it is stripped from
mappings and sequences at every depth before a record is written.
"""
from typing import Any, Mapping


def sanitize(record: Any) -> Any:
    """Return a copy of ``record`` with every unset value removed.

    - mapping keys whose value is ``None`` are dropped
    - ``None`` elements are dropped from lists and tuples (which come back
      as lists); remaining elements keep their order and duplicates
    - nested mappings and sequences are cleaned recursively
    - scalars are returned unchanged

    The input is never mutated.

    Examples:
        >>> sanitize({"a": 1, "b": None, "c": [None, {"d": None}]})
        {'a': 1, 'c': [{}]}
    """
    if isinstance(record, Mapping):
        return {key: sanitize(value) for key, value in record.items() if value is not None}
    if isinstance(record, (list, tuple)):
        return [sanitize(item) for item in record if item is not None]
    return record
