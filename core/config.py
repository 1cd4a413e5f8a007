from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "BMS API"
    ENV: str = "development"

    # -------------------------------------------------
    # Frontend Domains
    # -------------------------------------------------
    FRONTEND_URL: Optional[str] = Field(None, env="FRONTEND_URL")

    EXTRA_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # MongoDB (Primary DB)
    # -------------------------------------------------
    MONGODB_URI: str = Field("mongodb://localhost:27017", env="MONGODB_URI")
    MONGODB_DB: str = Field("bms", env="MONGODB_DB")

    # -------------------------------------------------
    # Auth (JWT)
    # -------------------------------------------------
    JWT_SECRET_KEY: Optional[str] = Field(None, env="JWT_SECRET_KEY")
    JWT_ALGORITHM: str = Field("HS256", env="JWT_ALGORITHM")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24, env="ACCESS_TOKEN_EXPIRE_MINUTES")

    # -------------------------------------------------
    # SMTP Email Notifications
    # -------------------------------------------------
    SMTP_HOST: Optional[str] = Field(None, env="SMTP_HOST")
    SMTP_PORT: Optional[int] = Field(None, env="SMTP_PORT")
    SMTP_USER: Optional[str] = Field(None, env="SMTP_USER")
    SMTP_PASS: Optional[str] = Field(None, env="SMTP_PASS")
    SMTP_TO: Optional[str] = Field(None, env="SMTP_TO")

    # -------------------------------------------------
    # Webhooks / job notifications
    # -------------------------------------------------
    NOTIFY_WEBHOOK_URL: Optional[str] = Field(None, env="NOTIFY_WEBHOOK_URL")

    # -------------------------------------------------
    # Chapa Payment Processing
    # -------------------------------------------------
    CHAPA_SECRET_KEY: Optional[str] = Field(None, env="CHAPA_SECRET_KEY")
    CHAPA_WEBHOOK_SECRET: Optional[str] = Field(None, env="CHAPA_WEBHOOK_SECRET")
    CHAPA_BASE_URL: str = Field("https://api.chapa.co/v1", env="CHAPA_BASE_URL")

    # -------------------------------------------------
    # Scheduler
    # -------------------------------------------------
    SCHEDULER_ENABLED: bool = Field(False, env="SCHEDULER_ENABLED")

    # -------------------------------------------------
    # Subscription defaults
    # -------------------------------------------------
    DEFAULT_CURRENCY: str = Field("ETB", env="DEFAULT_CURRENCY")
    RENEWAL_WINDOW_DAYS: int = Field(30, env="RENEWAL_WINDOW_DAYS", description="Days ahead counted as upcoming renewals (default: 30)")

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = []

if settings.FRONTEND_URL:
    domain = settings.FRONTEND_URL
    if not domain.startswith("http"):
        domain = f"https://{domain}"
    cors_origins.append(domain.rstrip("/"))

cors_origins.extend([d.rstrip("/") for d in settings.EXTRA_CORS_ORIGINS])

settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
