from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from money_diary import models
from money_diary.core.database import get_db
from money_diary.core.deps import get_current_user
from money_diary.schemas import (
    CategoryCreate,
    CategoryInitializeResult,
    CategoryOut,
    CategoryReorderRequest,
    CategoryUpdate,
)
from money_diary.services import CategoryInitializationService, CategoryService


router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryOut])
def list_categories(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return CategoryService(db).list_for_user(current_user.id)


@router.post("", response_model=CategoryOut, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return CategoryService(db).create(current_user.id, payload)


@router.post("/initialize", response_model=CategoryInitializeResult)
def initialize_categories(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return CategoryInitializationService(db).initialize_for_user(current_user.id)


@router.post("/reorder", response_model=list[CategoryOut])
def reorder_categories(
    payload: CategoryReorderRequest,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return CategoryService(db).reorder(current_user.id, payload.category_ids)


@router.patch("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return CategoryService(db).update(current_user.id, category_id, payload)


@router.delete("/{category_id}", status_code=204)
def delete_category(category_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    CategoryService(db).delete(current_user.id, category_id)
    return None
