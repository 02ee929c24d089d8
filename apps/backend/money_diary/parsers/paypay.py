"""
PayPay transaction-history CSV parser

Turns the raw export text into structured rows and extracts the expense
(payment) rows. The export is UTF-8, optionally BOM-prefixed, with a header
row followed by 13 fixed columns:

    取引日, 出金金額（円）, 入金金額（円）, 海外出金金額, 通貨, 変換レート（円）,
    利用国, 取引内容, 取引先, 取引方法, 支払い区分, 利用者, 取引番号
"""

from __future__ import annotations

import re
from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Any

from money_diary.core.config import settings
from money_diary.exceptions import EmptyInputError, InvalidCsvError

EXPECTED_COLUMNS = 13

_BOM = "\ufeff"
_AMOUNT_NOISE = re.compile(r'[,"\s]')
_LEADING_INT = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class RawCsvRow:
    """One row of the export, verbatim (trimmed, quotes removed)."""

    transaction_date: str
    withdrawal_amount: str
    deposit_amount: str
    foreign_amount: str
    currency: str
    exchange_rate: str
    country: str
    transaction_type: str
    merchant: str
    payment_method: str
    payment_category: str
    user: str
    transaction_id: str

    @classmethod
    def from_columns(cls, columns: list[str]) -> "RawCsvRow":
        return cls(*columns[:EXPECTED_COLUMNS])

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class ParsedExpense:
    transaction_date: datetime
    amount: int
    merchant: str
    payment_method: str
    external_transaction_id: str


@dataclass
class CsvParseResult:
    expenses: list[ParsedExpense] = field(default_factory=list)
    raw_data: list[RawCsvRow] = field(default_factory=list)
    total_rows: int = 0
    skipped_rows: int = 0

    @property
    def expense_rows(self) -> int:
        return len(self.expenses)

    def raw_data_as_dicts(self) -> list[dict[str, Any]]:
        return [row.to_dict() for row in self.raw_data]


def split_csv_line(line: str) -> list[str]:
    """Split one line on commas that are not inside double quotes.

    Quote characters are dropped and every field is stripped.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    fields.append("".join(current).strip())
    return fields


def parse_amount(value: str | None) -> int:
    """Parse a vendor amount such as ``"3,600"``; ``"-"``/empty/garbage -> 0."""
    if not value or value == "-":
        return 0
    cleaned = _AMOUNT_NOISE.sub("", value)
    m = _LEADING_INT.match(cleaned)
    if not m:
        return 0
    return int(m.group(0))


def parse_date(value: str) -> datetime:
    """Parse ``YYYY/MM/DD[ HH:MM:SS]`` into a naive datetime.

    Raises:
        InvalidCsvError: when the value does not follow the export format.
    """
    try:
        date_part, _, time_part = value.strip().partition(" ")
        year, month, day = (int(p) for p in date_part.split("/"))
        hour = minute = second = 0
        if time_part.strip():
            pieces = [int(p) for p in time_part.strip().split(":")]
            hour, minute, second = (pieces + [0, 0, 0])[:3]
        return datetime(year, month, day, hour, minute, second)
    except ValueError as exc:
        raise InvalidCsvError(f"Invalid transaction date: {value!r}") from exc


def is_expense_row(row: RawCsvRow) -> bool:
    return (
        row.transaction_type == settings.PAYMENT_TRANSACTION_TYPE
        and parse_amount(row.withdrawal_amount) > 0
    )


def parse_paypay_csv(content: str) -> CsvParseResult:
    """Parse PayPay CSV text.

    Rows with fewer than 13 columns are counted in ``skipped_rows`` and left
    out of ``raw_data``. Only payment rows with a positive withdrawal amount
    become ``ParsedExpense`` entries; point awards, deposits and zero-amount
    rows stay in ``raw_data`` only.

    Raises:
        EmptyInputError: no non-blank lines after BOM removal.
        InvalidCsvError: an expense row carries an unparseable date.
    """
    if content.startswith(_BOM):
        content = content[len(_BOM):]

    lines = [line for line in content.split("\n") if line.strip()]
    if not lines:
        raise EmptyInputError()

    data_lines = lines[1:]  # header
    result = CsvParseResult(total_rows=len(data_lines))

    for line in data_lines:
        columns = split_csv_line(line)
        if len(columns) < EXPECTED_COLUMNS:
            result.skipped_rows += 1
            continue

        row = RawCsvRow.from_columns(columns)
        result.raw_data.append(row)

        if is_expense_row(row):
            result.expenses.append(
                ParsedExpense(
                    transaction_date=parse_date(row.transaction_date),
                    amount=parse_amount(row.withdrawal_amount),
                    merchant=row.merchant,
                    payment_method=row.payment_method,
                    external_transaction_id=row.transaction_id,
                )
            )

    return result
