import logging
import os
import time

from timesheets.utils.logging_config import cleanup_old_logs, get_log_files_info, setup_logging


def test_setup_creates_log_files(tmp_path):
    logs_dir = setup_logging(str(tmp_path / "logs"), "DEBUG")
    logging.getLogger("timesheets.services.store").info("hello")

    info = get_log_files_info(str(logs_dir))
    assert {"app.log", "store.log", "errors.log"} <= set(info)


def test_missing_directory(tmp_path):
    assert get_log_files_info(str(tmp_path / "nowhere")) == {"status": "No logs directory found"}
    assert cleanup_old_logs(str(tmp_path / "nowhere")) == []


def test_cleanup_removes_only_old_files(tmp_path):
    old = tmp_path / "old.log.1"
    fresh = tmp_path / "fresh.log"
    old.write_text("x")
    fresh.write_text("y")
    stale = time.time() - 40 * 24 * 60 * 60
    os.utime(old, (stale, stale))

    assert cleanup_old_logs(str(tmp_path), days_to_keep=30) == ["old.log.1"]
    assert fresh.exists()
