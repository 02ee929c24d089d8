from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _validate_color(value: str | None) -> str | None:
    if value is None:
        return value
    if not _COLOR_RE.match(value):
        raise ValueError("color must be a hex code like #FF6B6B")
    return value.upper()


# ---- Categories --------------------------------------------------------------


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    color: str = Field(..., min_length=7, max_length=7)
    icon: Optional[str] = Field(default=None, max_length=50)
    display_order: Optional[int] = Field(default=None, ge=0)

    @field_validator("color")
    @classmethod
    def check_color(cls, v):
        return _validate_color(v)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    color: Optional[str] = Field(default=None, min_length=7, max_length=7)
    icon: Optional[str] = Field(default=None, max_length=50)
    display_order: Optional[int] = Field(default=None, ge=0)

    @field_validator("color")
    @classmethod
    def check_color(cls, v):
        return _validate_color(v)


class CategoryOut(BaseModel):
    id: int
    name: str
    color: str
    icon: Optional[str] = None
    display_order: int
    is_default: bool
    is_other: bool
    is_system: bool
    user_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class CategoryReorderRequest(BaseModel):
    category_ids: list[int] = Field(..., min_length=1)


class CategoryInitializeResult(BaseModel):
    categories_created: int
    rules_created: int


# ---- Rules -------------------------------------------------------------------


class RuleCreate(BaseModel):
    keyword: str = Field(..., min_length=1, max_length=100)
    category_id: int
    priority: int = 0

    @field_validator("keyword")
    @classmethod
    def strip_keyword(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("keyword must not be blank")
        return v


class RuleUpdate(BaseModel):
    keyword: Optional[str] = Field(default=None, min_length=1, max_length=100)
    category_id: Optional[int] = None
    priority: Optional[int] = None

    @field_validator("keyword")
    @classmethod
    def strip_keyword(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("keyword must not be blank")
        return v


class RuleOut(BaseModel):
    id: int
    keyword: str
    category_id: int
    category_name: Optional[str] = None
    priority: int
    is_system: bool
    user_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


# ---- Transactions ------------------------------------------------------------


class TransactionCreate(BaseModel):
    """Manual (cash) entry."""

    transaction_date: datetime
    merchant: str = Field(..., min_length=1, max_length=200)
    amount: int = Field(..., gt=0)
    category_id: Optional[int] = None


class TransactionUpdate(BaseModel):
    category_id: Optional[int] = None
    # editable on manual entries only
    transaction_date: Optional[datetime] = None
    merchant: Optional[str] = Field(default=None, min_length=1, max_length=200)
    amount: Optional[int] = Field(default=None, gt=0)


class TransactionOut(BaseModel):
    id: int
    user_id: int
    transaction_date: datetime
    merchant: str
    amount: int
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    category_color: Optional[str] = None
    display_order: int = 0
    payment_method: Optional[str] = None
    external_transaction_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionListOut(BaseModel):
    items: list[TransactionOut]
    total: int
    total_amount: int
    page: int
    limit: Optional[int] = None


class CategorySummaryItem(BaseModel):
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    category_color: Optional[str] = None
    total_amount: int
    count: int


class MonthlyCategoryAmount(BaseModel):
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    category_color: Optional[str] = None
    display_order: int = 0
    amount: int


class MonthlyBreakdownItem(BaseModel):
    month: int
    total_amount: int
    categories: list[MonthlyCategoryAmount]


class TransactionSummaryOut(BaseModel):
    year: int
    month: Optional[int] = None
    total_amount: int
    transaction_count: int
    categories: list[CategorySummaryItem]
    # whole-year summaries only
    monthly_breakdown: list[MonthlyBreakdownItem] = Field(default_factory=list)


class CsvUploadResult(BaseModel):
    upload_id: int
    total_rows: int
    imported_rows: int
    skipped_rows: int
    duplicate_rows: int


class ReCategorizeRequest(BaseModel):
    year: int = Field(..., ge=1900, le=9999)
    month: Optional[int] = Field(default=None, ge=1, le=12)


class ReCategorizeResult(BaseModel):
    message: str
    updated_count: int
