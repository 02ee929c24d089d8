from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy.orm import Session

from money_diary import models


class CsvUploadRepository(Protocol):
    def create(self, *, user_id: int, file_name: str, raw_data: list[dict[str, Any]], row_count: int) -> models.CsvUpload: ...
    def update_status(self, upload_id: int, status: models.CsvUploadStatus) -> None: ...


class SqlCsvUploadRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def create(
        self,
        *,
        user_id: int,
        file_name: str,
        raw_data: list[dict[str, Any]],
        row_count: int,
    ) -> models.CsvUpload:
        row = models.CsvUpload(
            user_id=user_id,
            file_name=file_name,
            raw_data=raw_data,
            row_count=row_count,
            status=models.CsvUploadStatus.PROCESSING.value,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def find_by_id(self, upload_id: int) -> models.CsvUpload | None:
        return self.db.get(models.CsvUpload, upload_id)

    def update_status(self, upload_id: int, status: models.CsvUploadStatus) -> None:
        self.db.query(models.CsvUpload).filter(models.CsvUpload.id == upload_id).update(
            {models.CsvUpload.status: status.value}, synchronize_session=False
        )
        self.db.flush()
