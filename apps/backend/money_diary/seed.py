from __future__ import annotations

from sqlalchemy.orm import Session

from .core.config import settings
from .core.database import session_scope
from .models import DefaultCategory, DefaultCategoryRule, User

DEFAULT_CATEGORIES: list[dict] = [
    {"name": "食費", "color": "#FF6B6B", "icon": "utensils", "display_order": 1},
    {"name": "交通費", "color": "#4ECDC4", "icon": "train", "display_order": 2},
    {"name": "日用品", "color": "#45B7D1", "icon": "shopping-cart", "display_order": 3},
    {"name": "娯楽", "color": "#96CEB4", "icon": "gamepad-2", "display_order": 4},
    {"name": "通信費", "color": "#FFEAA7", "icon": "wifi", "display_order": 5},
    {"name": "光熱費", "color": "#DDA0DD", "icon": "zap", "display_order": 6},
    {"name": "医療費", "color": "#98D8C8", "icon": "stethoscope", "display_order": 7},
    {"name": settings.OTHER_CATEGORY_NAME, "color": "#9C9C9C", "icon": "circle-dot", "display_order": 999, "is_other": True},
]

# (keyword, category name, priority)
DEFAULT_RULES: list[tuple[str, str, int]] = [
    ("ファミリーマート", "日用品", 0),
    ("セブン－イレブン", "日用品", 0),
    ("ローソン", "日用品", 0),
    ("マクドナルド", "食費", 0),
    ("吉野家", "食費", 0),
    ("スターバックス", "食費", 0),
    ("ＪＲ", "交通費", 0),
    ("地下鉄", "交通費", 0),
    ("タクシー", "交通費", 0),
    ("ソフトバンク", "通信費", 0),
    ("ドコモ", "通信費", 0),
    ("ａｕ", "通信費", 0),
]


def seed_defaults(db: Session) -> None:
    """Insert missing system templates; existing rows (by name/keyword) are left as is."""
    by_name: dict[str, DefaultCategory] = {c.name: c for c in db.query(DefaultCategory).all()}
    for data in DEFAULT_CATEGORIES:
        if data["name"] in by_name:
            continue
        row = DefaultCategory(**data)
        db.add(row)
        db.flush()
        by_name[row.name] = row

    existing_keywords = {r.keyword for r in db.query(DefaultCategoryRule).all()}
    for keyword, category_name, priority in DEFAULT_RULES:
        if keyword in existing_keywords:
            continue
        db.add(
            DefaultCategoryRule(
                keyword=keyword,
                default_category_id=by_name[category_name].id,
                priority=priority,
            )
        )
    db.flush()


def seed() -> None:
    with session_scope() as db:
        seed_defaults(db)

        # demo user
        if not db.query(User).filter_by(email="demo@example.com").first():
            db.add(User(email="demo@example.com", name="Demo", is_active=True))


if __name__ == "__main__":
    seed()
