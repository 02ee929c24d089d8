"""
Repository contracts and their SQLAlchemy implementations

Repositories only ``flush``; the calling service owns commit/rollback.
"""

from .category_repository import CategoryRepository, SqlCategoryRepository
from .csv_upload_repository import CsvUploadRepository, SqlCsvUploadRepository
from .default_category_repository import (
    DefaultCategoryRepository,
    DefaultCategoryRuleRepository,
    SqlDefaultCategoryRepository,
    SqlDefaultCategoryRuleRepository,
)
from .rule_repository import RuleRepository, SqlRuleRepository
from .transaction_repository import SqlTransactionRepository, TransactionFilters, TransactionRepository

__all__ = [
    "CategoryRepository",
    "CsvUploadRepository",
    "DefaultCategoryRepository",
    "DefaultCategoryRuleRepository",
    "RuleRepository",
    "TransactionRepository",
    "TransactionFilters",
    "SqlCategoryRepository",
    "SqlCsvUploadRepository",
    "SqlDefaultCategoryRepository",
    "SqlDefaultCategoryRuleRepository",
    "SqlRuleRepository",
    "SqlTransactionRepository",
]
