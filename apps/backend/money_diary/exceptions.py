"""Domain errors raised by the services.

The API layer maps them onto HTTP status codes (see ``money_diary.main``).
"""

from __future__ import annotations


class MoneyDiaryError(Exception):
    """Base class for all domain errors."""


class InvalidCsvError(MoneyDiaryError):
    """The uploaded CSV cannot be interpreted as a PayPay export."""


class EmptyInputError(InvalidCsvError):
    """The CSV contained no non-blank lines."""

    def __init__(self, message: str = "CSV file is empty") -> None:
        super().__init__(message)


class NotFoundError(MoneyDiaryError):
    pass


class ForbiddenError(MoneyDiaryError):
    pass


class ConflictError(MoneyDiaryError):
    pass
