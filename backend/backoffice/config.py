# backend/backoffice/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/backoffice.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///backoffice.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # IANA zone used for "today" (daily sales reset); None = host local time
    STORE_TIMEZONE = os.environ.get("STORE_TIMEZONE") or None

    # Initial values for the settings document when none is persisted yet
    DEFAULT_TAX_RATE = os.environ.get("DEFAULT_TAX_RATE", "10")
    DEFAULT_UNIVERSAL_DISCOUNT = os.environ.get("DEFAULT_UNIVERSAL_DISCOUNT", "0")

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Create the store_documents table on startup (dev); use migrations otherwise
    AUTO_CREATE_SCHEMA = os.environ.get("AUTO_CREATE_SCHEMA", "true").lower() == "true"

    # Browser origins allowed to call the API (comma-separated)
    CORS_ORIGINS = tuple(
        origin.strip()
        for origin in os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        ).split(",")
        if origin.strip()
    )
