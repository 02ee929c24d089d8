from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from money_diary import models
from money_diary.core.config import settings
from money_diary.core.database import get_db
from money_diary.core.deps import get_current_user
from money_diary.repositories import TransactionFilters
from money_diary.schemas import (
    CsvUploadResult,
    ReCategorizeRequest,
    ReCategorizeResult,
    TransactionCreate,
    TransactionListOut,
    TransactionOut,
    TransactionSummaryOut,
    TransactionUpdate,
)
from money_diary.services import CsvImportService, ReCategorizationService, TransactionService


router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("/upload", response_model=CsvUploadResult)
def upload_csv(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    # sync route: the import runs in the threadpool, off the event loop
    raw = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if not raw:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(raw) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Uploaded file is too large")
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV must be UTF-8 encoded")
    svc = CsvImportService(db)
    return svc.execute(user_id=current_user.id, file_name=file.filename or "upload.csv", csv_content=content)


@router.post("/re-categorize", response_model=ReCategorizeResult)
def re_categorize(
    payload: ReCategorizeRequest,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return ReCategorizationService(db).execute(current_user.id, payload)


@router.get("", response_model=TransactionListOut)
def list_transactions(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    category_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    if month is not None and year is None:
        raise HTTPException(status_code=400, detail="month requires year")
    filters = TransactionFilters(
        year=year, month=month, category_id=category_id, search=search, page=page, limit=limit
    )
    return TransactionService(db).list_for_user(current_user.id, filters)


@router.post("", response_model=TransactionOut, status_code=201)
def create_transaction(
    payload: TransactionCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return TransactionService(db).create_manual(current_user.id, payload)


@router.get("/years", response_model=list[int])
def available_years(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return TransactionService(db).available_years(current_user.id)


@router.get("/summary", response_model=TransactionSummaryOut)
def transaction_summary(
    year: int = Query(..., ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return TransactionService(db).summary(current_user.id, year, month)


@router.patch("/{txn_id}", response_model=TransactionOut)
def update_transaction(
    txn_id: int,
    payload: TransactionUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return TransactionService(db).update(current_user.id, txn_id, payload)


@router.delete("/{txn_id}", status_code=204)
def delete_transaction(txn_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    TransactionService(db).delete(current_user.id, txn_id)
    return None
