#!/usr/bin/env python3
"""
Configuration management for the cake ordering backend.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_DB_PATH = os.path.join(os.path.dirname(__file__), "..", "data", "cakeshop.db")


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Configuration class for the application."""

    # Database Configuration
    DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{os.path.abspath(DEFAULT_DB_PATH)}")

    # Redis Configuration (design-wizard sessions)
    USE_REDIS = _flag("USE_REDIS", "true")
    REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))
    REDIS_DB = int(os.getenv("REDIS_DB", 0))
    DESIGN_SESSION_TTL = int(os.getenv("DESIGN_SESSION_TTL", 86400))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Order policy
    ENFORCE_SERVER_PRICE = _flag("ENFORCE_SERVER_PRICE", "true")
    STRICT_STATUS_TRANSITIONS = _flag("STRICT_STATUS_TRANSITIONS", "false")
    BAKERY_TIMEZONE = os.getenv("BAKERY_TIMEZONE", "Africa/Lusaka")

    # Manual mobile-money payment
    BAKERY_NAME = os.getenv("BAKERY_NAME", "Destiny Bakes")
    PAYMENT_METHOD = os.getenv("PAYMENT_METHOD", "airtel_money")
    PAYMENT_PHONE_NUMBER = os.getenv("PAYMENT_PHONE_NUMBER", "0974147414")
    CURRENCY = os.getenv("CURRENCY", "ZMW")

    # Access
    ADMIN_EXTERNAL_ID = os.getenv("ADMIN_EXTERNAL_ID")
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    @classmethod
    def debug_print(cls):
        print(f"[CONFIG] DATABASE_URL={cls.DATABASE_URL}")
        print(f"[CONFIG] USE_REDIS={cls.USE_REDIS} host={cls.REDIS_HOST}:{cls.REDIS_PORT}/{cls.REDIS_DB}")
        print(f"[CONFIG] ENFORCE_SERVER_PRICE={cls.ENFORCE_SERVER_PRICE} STRICT_STATUS_TRANSITIONS={cls.STRICT_STATUS_TRANSITIONS}")
        print(f"[CONFIG] BAKERY_TIMEZONE={cls.BAKERY_TIMEZONE} CURRENCY={cls.CURRENCY}")

    @classmethod
    def validate(cls):
        """Validate that the configuration is usable."""
        problems = []

        if not cls.DATABASE_URL:
            problems.append("DATABASE_URL")
        if cls.DESIGN_SESSION_TTL <= 0:
            problems.append("DESIGN_SESSION_TTL must be positive")
        if cls.LOG_LEVEL not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            problems.append(f"LOG_LEVEL={cls.LOG_LEVEL}")
        if not cls.PAYMENT_PHONE_NUMBER:
            problems.append("PAYMENT_PHONE_NUMBER")

        if problems:
            raise ValueError(f"Invalid configuration: {', '.join(problems)}")

        return True

# Validate configuration on import
Config.validate()
