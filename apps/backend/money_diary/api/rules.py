from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from money_diary import models
from money_diary.core.database import get_db
from money_diary.core.deps import get_current_user
from money_diary.schemas import RuleCreate, RuleOut, RuleUpdate
from money_diary.services import RuleService


router = APIRouter(prefix="/rules", tags=["rules"])


@router.get("", response_model=list[RuleOut])
def list_rules(
    category_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return RuleService(db).list_for_user(current_user.id, category_id)


@router.post("", response_model=RuleOut, status_code=201)
def create_rule(payload: RuleCreate, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    return RuleService(db).create(current_user.id, payload)


@router.patch("/{rule_id}", response_model=RuleOut)
def update_rule(
    rule_id: int,
    payload: RuleUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    return RuleService(db).update(current_user.id, rule_id, payload)


@router.delete("/{rule_id}", status_code=204)
def delete_rule(rule_id: int, db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    RuleService(db).delete(current_user.id, rule_id)
    return None
