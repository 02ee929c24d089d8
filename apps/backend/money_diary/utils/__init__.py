"""
Utils package
"""

from .periods import period_bounds

__all__ = [
    "period_bounds",
]
