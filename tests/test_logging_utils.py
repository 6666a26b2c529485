from __future__ import annotations

import logging

from fullnode_installer.logging_utils import LevelTagFormatter, configure_logging


def _record(level: int, msg: str) -> logging.LogRecord:
    return logging.LogRecord("x", level, __file__, 1, msg, None, None)


def test_level_tags():
    fmt = LevelTagFormatter()
    assert fmt.format(_record(logging.INFO, "Latest block height: 5")) == "[INFO] Latest block height: 5"
    assert fmt.format(_record(logging.WARNING, "careful")) == "[WARN] careful"
    assert fmt.format(_record(logging.ERROR, "--target-version is required")) == "[ERROR] --target-version is required"
    assert fmt.format(_record(logging.CRITICAL, "Failed")) == "[FATAL] Failed"


def test_configure_logging_writes_file_once(tmp_path):
    path = tmp_path / "logs" / "installer.log"
    assert configure_logging(log_path=str(path), also_console=False) == str(path)
    assert configure_logging(log_path=str(tmp_path / "other.log"), also_console=False) == str(path)

    logging.getLogger("fullnode_installer.test").info("CMD apt-get -y update")
    for h in logging.getLogger().handlers:
        h.flush()
    assert "CMD apt-get -y update" in path.read_text(encoding="utf-8")
