from datetime import datetime, timezone
from typing import Tuple


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the DateTime columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def canonical_pair(a: int, b: int) -> Tuple[int, int]:
    return (a, b) if a < b else (b, a)
