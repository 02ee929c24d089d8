from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from money_diary.core.database import get_db
from money_diary import models
from money_diary.services.category_initialization_service import CategoryInitializationService


def get_current_user(db: Session = Depends(get_db)) -> models.User:
    """Very lightweight current user resolver.

    Authentication lives outside this service; until a real resolver is
    plugged in, the first user is returned (a demo user is created if the
    table is empty). Tests override this dependency to act as other users.
    """
    user = db.query(models.User).order_by(models.User.id).first()
    if not user:
        user = models.User(email="demo@example.com", name="Demo", is_active=True)
        db.add(user)
        db.commit()
        db.refresh(user)
        # stands in for signup: give the new user their own copy of the defaults
        CategoryInitializationService(db).initialize_for_user(user.id)
    return user
