"""Entry point for the POS admin Textual app."""

from __future__ import annotations

import logging
from pathlib import Path

from pos_admin.config import (
    API_BASE_URL,
    API_TIMEOUT_SECONDS,
    CATEGORY_DELETE_POLICY,
    DB_PATH,
    LOG_PATH,
    SEED_SAMPLE_DATA,
    STORAGE_BACKEND,
    TABLE_COUNT,
)
from pos_admin.data import sample_state
from pos_admin.manager import StateManager
from pos_admin.persistence import LocalStore, StoragePort

logger = logging.getLogger(__name__)


def configure_logging(log_path: str = LOG_PATH, level: int = logging.DEBUG) -> None:
    """Send log records to a file so they never draw over the terminal UI."""
    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root = logging.getLogger("pos_admin")
    root.setLevel(level)
    root.addHandler(handler)


def build_storage(backend: str = STORAGE_BACKEND) -> StoragePort:
    """Pick the storage implementation once, at startup."""
    if backend == "remote":
        from pos_admin.api_client import RemoteStore

        return RemoteStore(API_BASE_URL, timeout=API_TIMEOUT_SECONDS)
    if backend != "local":
        raise ValueError(f"Unknown storage backend: {backend!r} (expected 'local' or 'remote')")
    seed = (lambda: sample_state(TABLE_COUNT)) if SEED_SAMPLE_DATA else None
    return LocalStore(DB_PATH, seed=seed)


def build_manager(backend: str = STORAGE_BACKEND) -> StateManager:
    return StateManager(build_storage(backend), table_count=TABLE_COUNT, category_delete_policy=CATEGORY_DELETE_POLICY)


def main() -> None:
    configure_logging()
    manager = build_manager()
    logger.info("app_start backend=%s tables=%d", STORAGE_BACKEND, TABLE_COUNT)

    from pos_admin.console_app import PosAdminApp

    PosAdminApp(manager).run()


if __name__ == "__main__":
    main()
