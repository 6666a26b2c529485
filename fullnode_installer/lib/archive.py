from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd, run_pipe

logger = logging.getLogger(__name__)


def extract_tar_gz(
    archive: str | Path,
    *,
    dest: str | Path,
    sudo: bool = False,
    dry_run: bool = False,
) -> None:
    run_cmd(["tar", "-C", str(dest), "-xzf", str(archive)], sudo=sudo, dry_run=dry_run)


def extract_tar_lz4(archive: str | Path, *, dest: str | Path, dry_run: bool = False) -> None:
    """Stream-decompress an lz4 tarball into dest (`lz4 -dc archive | tar xf -`)."""

    run_pipe(["lz4", "-dc", str(archive)], ["tar", "xf", "-"], cwd=str(dest), dry_run=dry_run)
    logger.info("Extracted %s into %s", archive, dest)
