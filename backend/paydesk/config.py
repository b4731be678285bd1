"""
Application Configuration — Environment & Settings
Centralizes all config from .env with Pydantic Settings for validation.
"""
from pathlib import Path
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

from paydesk.utils.validators import validate_upi_vpa

# Resolve paths relative to backend/ directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # --- Core ---
    APP_NAME: str = "Paydesk Payments & Receipts API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # --- Database ---
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'data' / 'paydesk.db'}"

    # --- Payment Gateway (Razorpay) ---
    RAZORPAY_KEY_ID: str = "rzp_test_simulated"
    RAZORPAY_KEY_SECRET: str = ""          # Empty = simulated gateway
    RAZORPAY_API_URL: str = "https://api.razorpay.com/v1"
    SIMULATED_GATEWAY_SECRET: str = "paydesk-simulated-gateway-secret"
    GATEWAY_TIMEOUT_SECONDS: float = 15.0
    CURRENCY: str = "INR"

    # --- Merchant / Receipts ---
    MERCHANT_NAME: str = "Akrix.ai"
    MERCHANT_TAGLINE: str = "Algorithms with Ambition"
    MERCHANT_EMAIL: str = "payments@akrix.ai"
    RECEIPT_PREFIX: str = "AKRX"

    # --- UPI / QR ---
    UPI_VPA: str = "akrix@upi"
    UPI_PAYEE_NAME: str = "Akrix"
    MAX_SCREENSHOT_MB: int = 5
    UPLOAD_DIR: str = str(BASE_DIR / "data" / "uploads")

    # --- Email ---
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAILS_FROM_EMAIL: Optional[str] = None

    # --- Admin / Security ---
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "change-me-in-production"
    SECRET_KEY: str = "paydesk-secret-key-change-in-production"
    ADMIN_TOKEN_TTL_MINUTES: int = 480
    CORS_ORIGINS: list[str] = ["*"]

    # --- Logging ---
    LOG_DIR: str = str(BASE_DIR / "logs")

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    @field_validator("UPI_VPA")
    @classmethod
    def check_upi_vpa(cls, v: str) -> str:
        if not validate_upi_vpa(v):
            raise ValueError("UPI_VPA must look like user@provider")
        return v.strip()

    @property
    def gateway_simulated(self) -> bool:
        return not self.RAZORPAY_KEY_SECRET

    @property
    def gateway_secret(self) -> str:
        return self.RAZORPAY_KEY_SECRET or self.SIMULATED_GATEWAY_SECRET


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
