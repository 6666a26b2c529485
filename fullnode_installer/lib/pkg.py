from __future__ import annotations

import logging
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


def apt_update(*, dry_run: bool = False) -> None:
    run_cmd(["apt-get", "-y", "update"], sudo=True, dry_run=dry_run)


def apt_install(
    packages: Sequence[str],
    *,
    with_recommends: bool = True,
    dry_run: bool = False,
) -> None:
    if not packages:
        return
    argv = ["apt-get", "install", "-y"]
    if not with_recommends:
        argv.append("--no-install-recommends")
    run_cmd([*argv, *packages], sudo=True, dry_run=dry_run)


def dpkg_is_installed(package: str, *, dry_run: bool = False) -> bool:
    """Return True if dpkg reports the package as installed on the host."""
    if dry_run:
        return False
    r = run_cmd(["dpkg-query", "-W", "-f=${Status}", package], check=False)
    return r.returncode == 0 and "install ok installed" in r.stdout
