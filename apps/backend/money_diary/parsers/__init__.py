"""
CSV parsers for vendor exports
"""

from .paypay import CsvParseResult, ParsedExpense, RawCsvRow, parse_paypay_csv

__all__ = [
    "CsvParseResult",
    "ParsedExpense",
    "RawCsvRow",
    "parse_paypay_csv",
]
