"""
Services package

Business logic over the repositories; each service owns its commits.
"""

from .category_initialization_service import CategoryInitializationService
from .category_service import CategoryService
from .csv_import_service import CsvImportService
from .csv_service import CsvService
from .recategorization_service import ReCategorizationService
from .rule_service import RuleService
from .transaction_service import TransactionService

__all__ = [
    "CategoryInitializationService",
    "CategoryService",
    "CsvImportService",
    "CsvService",
    "ReCategorizationService",
    "RuleService",
    "TransactionService",
]
