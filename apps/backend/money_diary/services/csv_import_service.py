"""
CSV upload pipeline

parse -> upload audit record -> category assignment -> per-row deduplicated
insert -> mark upload processed.

Each row is its own unit of work: rows inserted before a failure stay
committed. The ``(user_id, external_transaction_id)`` unique constraint is the
final arbiter when two identical uploads race; a violation counts as a
duplicate.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from money_diary import models, schemas
from money_diary.parsers.paypay import ParsedExpense
from money_diary.repositories import SqlCsvUploadRepository, SqlTransactionRepository
from money_diary.services.csv_service import CsvService

logger = logging.getLogger(__name__)


def is_unique_violation(exc: IntegrityError) -> bool:
    message = str(getattr(exc, "orig", None) or exc).lower()
    return "unique" in message or "duplicate key" in message


class CsvImportService:
    def __init__(
        self,
        db: Session,
        csv_service: CsvService | None = None,
        transaction_repository: SqlTransactionRepository | None = None,
        upload_repository: SqlCsvUploadRepository | None = None,
    ) -> None:
        self.db = db
        self.csv_service = csv_service or CsvService(db)
        self.transactions = transaction_repository or SqlTransactionRepository(db)
        self.uploads = upload_repository or SqlCsvUploadRepository(db)

    def execute(self, *, user_id: int, file_name: str, csv_content: str) -> schemas.CsvUploadResult:
        # 1. parse; InvalidCsvError escapes before anything is written
        parsed = self.csv_service.parse_csv(csv_content)

        # 2. audit record, committed up-front so an aborted import leaves a trace
        upload = self.uploads.create(
            user_id=user_id,
            file_name=file_name,
            raw_data=parsed.raw_data_as_dicts(),
            row_count=parsed.total_rows,
        )
        self.db.commit()
        upload_id = upload.id
        logger.info(
            "upload %s (%s) for user %s: %d rows, %d expenses, %d skipped",
            upload_id,
            file_name,
            user_id,
            parsed.total_rows,
            parsed.expense_rows,
            parsed.skipped_rows,
        )

        # 3. one category per distinct merchant
        assignments = self.csv_service.assign_categories(parsed.expenses, user_id)

        # 4. rows, in file order
        imported_rows = 0
        duplicate_rows = 0
        for expense in parsed.expenses:
            if self._import_row(user_id, upload_id, expense, assignments.get(expense.merchant)):
                imported_rows += 1
            else:
                duplicate_rows += 1

        # 5. finalize
        self.uploads.update_status(upload_id, models.CsvUploadStatus.PROCESSED)
        self.db.commit()
        logger.info(
            "upload %s processed: %d imported, %d duplicates",
            upload_id,
            imported_rows,
            duplicate_rows,
        )

        return schemas.CsvUploadResult(
            upload_id=upload_id,
            total_rows=parsed.total_rows,
            imported_rows=imported_rows,
            skipped_rows=parsed.skipped_rows,
            duplicate_rows=duplicate_rows,
        )

    # ==================== Private Methods ====================

    def _import_row(
        self,
        user_id: int,
        upload_id: int,
        expense: ParsedExpense,
        category_id: int | None,
    ) -> bool:
        """Insert one expense; False when it already exists for the user."""
        external_id = expense.external_transaction_id or None
        if external_id and self.transactions.exists_by_external_id(user_id, external_id):
            return False

        try:
            self.transactions.create(
                {
                    "user_id": user_id,
                    "upload_id": upload_id,
                    "transaction_date": expense.transaction_date,
                    "amount": expense.amount,
                    "merchant": expense.merchant,
                    "category_id": category_id,
                    "payment_method": expense.payment_method,
                    "external_transaction_id": external_id,
                }
            )
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if not is_unique_violation(exc):
                raise
            logger.debug("concurrent insert of %s for user %s; counted as duplicate", external_id, user_id)
            return False
        return True
