"""
Calendar period helpers
"""

from datetime import datetime


def period_bounds(year: int, month: int | None = None) -> tuple[datetime, datetime]:
    """
    Half-open ``[start, end)`` window for a whole year or a single month.

    Example:
        >>> period_bounds(2024, 12)
        (datetime(2024, 12, 1, 0, 0), datetime(2025, 1, 1, 0, 0))
    """
    if month is None:
        return datetime(year, 1, 1), datetime(year + 1, 1, 1)
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end
