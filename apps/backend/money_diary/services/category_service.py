from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from money_diary import models, schemas
from money_diary.exceptions import ConflictError, ForbiddenError, NotFoundError
from money_diary.repositories import SqlCategoryRepository


class CategoryService:
    """User category CRUD. System categories are never mutated."""

    def __init__(self, db: Session, category_repository: SqlCategoryRepository | None = None) -> None:
        self.db = db
        self.categories = category_repository or SqlCategoryRepository(db)

    def list_for_user(self, user_id: int) -> list[models.Category]:
        """The user's own categories; system templates are not listed."""
        return self.categories.find_by_user_id(user_id)

    def get_visible(self, user_id: int, category_id: int) -> models.Category:
        category = self.categories.find_by_id(category_id)
        if category is None:
            raise NotFoundError("Category not found")
        if not category.visible_to(user_id):
            raise ForbiddenError("You do not have access to this category")
        return category

    def get_owned(self, user_id: int, category_id: int) -> models.Category:
        category = self.get_visible(user_id, category_id)
        if category.user_id != user_id:
            raise ForbiddenError("System categories cannot be modified")
        return category

    def create(self, user_id: int, payload: schemas.CategoryCreate) -> models.Category:
        if self.categories.find_by_name(user_id, payload.name):
            raise ConflictError(f"Category '{payload.name}' already exists")
        data = payload.model_dump()
        if data.get("display_order") is None:
            existing = self.categories.find_by_user_id(user_id)
            data["display_order"] = max((c.display_order for c in existing if not c.is_other), default=0) + 1
        try:
            row = self.categories.create(user_id, data)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(f"Category '{payload.name}' already exists") from exc
        self.db.refresh(row)
        return row

    def update(self, user_id: int, category_id: int, payload: schemas.CategoryUpdate) -> models.Category:
        category = self.get_owned(user_id, category_id)
        patch = payload.model_dump(exclude_unset=True)
        if not patch:
            return category
        new_name = patch.get("name")
        if new_name and new_name != category.name and self.categories.find_by_name(user_id, new_name):
            raise ConflictError(f"Category '{new_name}' already exists")
        self.categories.update(category, patch)
        self.db.commit()
        self.db.refresh(category)
        return category

    def delete(self, user_id: int, category_id: int) -> None:
        category = self.get_owned(user_id, category_id)
        if category.is_default:
            raise ForbiddenError("Default categories cannot be deleted")
        self.categories.delete(category)
        self.db.commit()

    def reorder(self, user_id: int, category_ids: list[int]) -> list[models.Category]:
        """
        Renumber the user's categories 1..n in the given order.

        The list must name every category except "Other" exactly once;
        "Other" keeps its fixed position at the end.
        """
        owned = {c.id: c for c in self.categories.find_by_user_id(user_id)}
        unknown = [cid for cid in category_ids if cid not in owned]
        if unknown:
            raise NotFoundError(f"Unknown categories: {unknown}")
        if len(set(category_ids)) != len(category_ids):
            raise ConflictError("Duplicate category ids in reorder request")
        if any(owned[cid].is_other for cid in category_ids):
            raise ForbiddenError("The 'Other' category always stays last and cannot be reordered")
        missing = sorted(cid for cid, c in owned.items() if not c.is_other and cid not in category_ids)
        if missing:
            raise ConflictError(f"Reorder list must include every category except 'Other'; missing: {missing}")

        try:
            for position, cid in enumerate(category_ids, start=1):
                self.categories.update(owned[cid], {"display_order": position})
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self.categories.find_by_user_id(user_id)
