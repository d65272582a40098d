# backend/gadgetdesk/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/gadgetdesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location (e.g. postgresql+psycopg2://...)
        "sqlite:///gadgetdesk.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # "atomic": ledger row + inventory mutation commit together.
    # "best_effort": ledger row commits first, inventory step may fail and is
    # reported through SaleRecord.inventory_synced.
    SALE_INVENTORY_MODE = os.environ.get("SALE_INVENTORY_MODE", "atomic")

    # Profit is frozen at creation unless this is enabled.
    RECOMPUTE_PROFIT_ON_PRICE_EDIT = _env_flag("RECOMPUTE_PROFIT_ON_PRICE_EDIT")

    # Accessory decrement refuses to go below zero unless this is enabled.
    ALLOW_NEGATIVE_ACCESSORY_STOCK = _env_flag("ALLOW_NEGATIVE_ACCESSORY_STOCK")

    SESSION_TTL_HOURS = int(os.environ.get("SESSION_TTL_HOURS", "12"))

    CORS_ORIGINS = {
        origin.strip()
        for origin in os.environ.get(
            "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
        ).split(",")
        if origin.strip()
    }

    LIST_DEFAULT_PAGE_SIZE = 20
    LIST_MAX_PAGE_SIZE = 100
