from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo
from enum import Enum
from typing import Any

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .core.config import settings
from .core.database import Base


try:
    LOCAL_ZONE = ZoneInfo(getattr(settings, "TIMEZONE", "Asia/Tokyo"))
except Exception:
    LOCAL_ZONE = ZoneInfo("Asia/Tokyo")


def now_local_naive() -> datetime:
    """Return naive datetime normalized to configured local timezone."""
    return datetime.now(LOCAL_ZONE).replace(tzinfo=None)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now_local_naive, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now_local_naive, onupdate=now_local_naive, nullable=False)


class User(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)


# ---- System templates --------------------------------------------------------
# Read-only seeds; cloned into each user's namespace on initialization.


class DefaultCategory(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False)
    icon: Mapped[str | None] = mapped_column(String(50))
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_other: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class DefaultCategoryRule(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    keyword: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    default_category_id: Mapped[int] = mapped_column(
        ForeignKey("defaultcategory.id", ondelete="CASCADE"), nullable=False
    )
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


# ---- Per-user (and system-wide) categories / rules ---------------------------


class Category(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # NULL owner = system category, visible to everyone
    user_id: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"))
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False)
    icon: Mapped[str | None] = mapped_column(String(50))
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_other: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_category_user_name"),
    )

    @property
    def is_system(self) -> bool:
        return self.user_id is None

    def visible_to(self, user_id: int) -> bool:
        return self.user_id is None or self.user_id == user_id


class CategoryRule(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # NULL owner = system rule, applied to every user in addition to their own
    user_id: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"))
    keyword: Mapped[str] = mapped_column(String(100), nullable=False)
    category_id: Mapped[int] = mapped_column(ForeignKey("category.id", ondelete="CASCADE"), nullable=False)
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    category: Mapped[Category] = relationship()

    __table_args__ = (
        Index("ix_categoryrule_user_priority", "user_id", "priority"),
    )

    @property
    def is_system(self) -> bool:
        return self.user_id is None

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category is not None else None


# ---- Imports -----------------------------------------------------------------


class CsvUploadStatus(str, Enum):
    PROCESSING = "processing"
    PROCESSED = "processed"


class CsvUpload(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    raw_data: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    row_count: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=CsvUploadStatus.PROCESSING.value, nullable=False)


class Expense(Base, TimestampMixin):
    """A persisted transaction (imported from CSV or entered manually)."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    upload_id: Mapped[int | None] = mapped_column(ForeignKey("csvupload.id", ondelete="SET NULL"))
    transaction_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    merchant: Mapped[str] = mapped_column(String(200), nullable=False)
    category_id: Mapped[int | None] = mapped_column(ForeignKey("category.id", ondelete="SET NULL"))
    payment_method: Mapped[str | None] = mapped_column(String(100))
    external_transaction_id: Mapped[str | None] = mapped_column(String(50))

    category: Mapped[Category | None] = relationship()

    __table_args__ = (
        UniqueConstraint("user_id", "external_transaction_id", name="uq_expense_external_id"),
        Index("ix_expense_user_date", "user_id", "transaction_date"),
        Index("ix_expense_user_category", "user_id", "category_id"),
    )

    # Display fields resolved through the category row at read time
    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category is not None else None

    @property
    def category_color(self) -> str | None:
        return self.category.color if self.category is not None else None

    @property
    def display_order(self) -> int:
        return self.category.display_order if self.category is not None else 0

    def is_manual(self) -> bool:
        return self.payment_method == settings.MANUAL_PAYMENT_METHOD
