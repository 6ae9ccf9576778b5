"""Runtime configuration defaults for storage, tables and printing."""

from __future__ import annotations

import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw not in {"0", "false", "no", "off"}


DB_PATH = os.environ.get("POS_ADMIN_DB_PATH", "data/pos-admin.db")
LOG_PATH = os.environ.get("POS_ADMIN_LOG_PATH", "/tmp/pos-admin.log")

# "local" keeps whole collections in SQLite, "remote" talks to the REST backend.
STORAGE_BACKEND = os.environ.get("POS_ADMIN_STORAGE", "local").strip().lower()
API_BASE_URL = os.environ.get("POS_ADMIN_API_URL", "http://localhost:8080/v1")
API_TIMEOUT_SECONDS = _env_int("POS_ADMIN_API_TIMEOUT", 10)

TABLE_COUNT = _env_int("POS_ADMIN_TABLES", 8)
TABLE_PREFIX = "table"

# "orphan" leaves products pointing at a deleted category, "restrict" refuses the delete.
CATEGORY_DELETE_POLICY = os.environ.get("POS_ADMIN_CATEGORY_DELETE", "orphan").strip().lower()

REFRESH_INTERVAL_SECONDS = 60
SEED_SAMPLE_DATA = _env_flag("POS_ADMIN_SEED", True)

SHOP_NAME = os.environ.get("POS_ADMIN_SHOP_NAME", "Aruvi Restaurant")
CURRENCY_SYMBOL = "₹"

PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 24
PRINTER_FONT_PATH = "/System/Library/Fonts/Menlo.ttc"
PRINTER_LEFT_INDENT_PX = 8
PRINTER_LINE_CHARS = 32
