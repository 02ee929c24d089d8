from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    APP_NAME: str = "PayPay Money Diary"
    ENV: str = "dev"

    # apps/backend/db.sqlite3 as an absolute path so the CWD does not matter
    _default_db_path = Path(__file__).resolve().parents[2] / "db.sqlite3"
    DATABASE_URL: str = f"sqlite:///{_default_db_path}"

    CORS_ORIGINS: list[str] = ["*"]
    TIMEZONE: str = "Asia/Tokyo"
    LOG_LEVEL: str = "INFO"

    # PayPay export vocabulary
    PAYMENT_TRANSACTION_TYPE: str = "支払い"
    OTHER_CATEGORY_NAME: str = "その他"
    MANUAL_PAYMENT_METHOD: str = "手動"

    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="MONEY_DIARY_", case_sensitive=False)


settings = Settings()
