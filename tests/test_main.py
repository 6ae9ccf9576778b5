import logging

import pytest

from pos_admin import main
from pos_admin.api_client import RemoteStore
from pos_admin.persistence import LocalStore


def test_local_backend_seeds_sample_data(monkeypatch, tmp_path):
    monkeypatch.setattr(main, "DB_PATH", str(tmp_path / "pos.db"))
    monkeypatch.setattr(main, "SEED_SAMPLE_DATA", True)

    manager = main.build_manager("local")
    state = manager.reload()

    assert state.products
    assert state.waiters


def test_backends_map_to_stores(tmp_path, monkeypatch):
    monkeypatch.setattr(main, "DB_PATH", str(tmp_path / "pos.db"))
    assert isinstance(main.build_storage("local"), LocalStore)
    assert isinstance(main.build_storage("remote"), RemoteStore)


def test_unknown_backend_is_rejected():
    with pytest.raises(ValueError):
        main.build_storage("mongo")


def test_configure_logging_writes_to_file(tmp_path):
    log_path = tmp_path / "logs" / "pos.log"
    main.configure_logging(str(log_path))
    logger = logging.getLogger("pos_admin")
    try:
        logging.getLogger("pos_admin.test").info("startup key=value")
        for handler in logger.handlers:
            handler.flush()
        assert "startup key=value" in log_path.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
