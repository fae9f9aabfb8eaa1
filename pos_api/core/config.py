from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List, Literal
import os
from pathlib import Path


DATA_DIR = Path(__file__).parent.parent.parent / "data"

StockUnderflowPolicy = Literal["block", "clamp", "allow"]


class Config(BaseSettings):
    # Database Configuration (SQLite via aiosqlite unless overridden)
    database_url: str = Field(
        default=f"sqlite+aiosqlite:///{DATA_DIR / 'pos.db'}", alias="DB_URL"
    )

    # JWT Configuration
    secret_key: str = Field(default="change-me", alias="JWT_SECRET")
    algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24, alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )

    cors_origins: List[str] = Field(
        default=["http://localhost", "http://localhost:3000"], alias="CORS_ORIGINS"
    )

    # Business rules
    business_timezone: str = Field(default="UTC", alias="BUSINESS_TIMEZONE")
    low_stock_threshold: int = Field(default=5, alias="LOW_STOCK_THRESHOLD")
    stock_underflow_policy: StockUnderflowPolicy = Field(default="clamp", alias="STOCK_UNDERFLOW_POLICY")

    # Pagination
    default_page_size: int = Field(default=10, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, alias="MAX_PAGE_SIZE")

    # WhatsApp notifications (Fonnte)
    fonnte_token: str = Field(default="", alias="FONNTE_TOKEN")
    fonnte_url: str = Field(default="https://api.fonnte.com/send", alias="FONNTE_URL")
    notify_target: str = Field(default="", alias="NOTIFY_TARGET")
    notification_queue_size: int = Field(default=100, alias="NOTIFICATION_QUEUE_SIZE")

    is_production: bool = (
        os.getenv("ENVIRONMENT", "development").lower() == "production"
    )

    @field_validator("stock_underflow_policy", mode="before")
    @classmethod
    def lowercase_underflow_policy(cls, value):
        return value.lower() if isinstance(value, str) else value

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Instantiate the settings
config = Config()
