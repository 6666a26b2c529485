from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = "/var/log/fullnode-installer.log"

_CONFIGURED_ATTR = "_fullnode_configured"
_PATH_ATTR = "_fullnode_log_path"


class LevelTagFormatter(logging.Formatter):
    """Render records as `[INFO] message`; CRITICAL is shown as FATAL."""

    def format(self, record: logging.LogRecord) -> str:
        tag = "FATAL" if record.levelno >= logging.CRITICAL else record.levelname
        if tag == "WARNING":
            tag = "WARN"
        return f"[{tag}] {record.getMessage()}"


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging for the provisioning run.

    All commands and decisions are recorded to log_path. When that location is
    not writable (non-root runs cannot usually write /var/log) we fall back to
    ./fullnode-installer.log and keep reporting the requested path in state.

    Returns the actual file path being used.
    """

    root = logging.getLogger()
    root.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(root, _CONFIGURED_ATTR, False):
        return getattr(root, _PATH_ATTR, log_path)

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    handlers: list[logging.Handler] = []
    file_handler: Optional[logging.Handler]
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        chosen_path = log_path
    except OSError:
        chosen_path = str(Path.cwd() / "fullnode-installer.log")
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        root.addHandler(h)

    setattr(root, _CONFIGURED_ATTR, True)
    setattr(root, _PATH_ATTR, chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path


def configure_stderr_logging(level: int = logging.INFO) -> None:
    """Leveled `[LEVEL] message` lines on stderr, for the short-lived operator commands."""

    root = logging.getLogger()
    root.setLevel(level)
    if getattr(root, _CONFIGURED_ATTR, False):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(LevelTagFormatter())
    root.addHandler(handler)
    setattr(root, _CONFIGURED_ATTR, True)
