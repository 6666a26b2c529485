import logging
import os
import sys

import pytest


def pytest_configure():
    # Ensure the repo root is importable without an install.
    root = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    if root not in sys.path:
        sys.path.insert(0, root)


@pytest.fixture(autouse=True)
def _reset_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    yield
    for h in list(root.handlers):
        if h not in handlers and type(h) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(h)
            h.close()
    for attr in ("_fullnode_configured", "_fullnode_log_path"):
        if hasattr(root, attr):
            delattr(root, attr)
