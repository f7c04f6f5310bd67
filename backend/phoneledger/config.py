# backend/phoneledger/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/phoneledger.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///phoneledger.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Product codes look like AOGZ-202405-0001
    PRODUCT_CODE_PREFIX = os.environ.get("PRODUCT_CODE_PREFIX", "AOGZ")

    # Password gate
    GATE_SESSION_HOURS = int(os.environ.get("GATE_SESSION_HOURS", "12"))
    GATE_MIN_PASSWORD_LENGTH = 4
    BCRYPT_ROUNDS = 12

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
