from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import httpx

from .archive import extract_tar_gz
from .http import download
from .release import go_tarball_name, go_tarball_url

logger = logging.getLogger(__name__)

GO_ROOT_PARENT = "/usr/local"


def go_binary(prefix: str = GO_ROOT_PARENT) -> str:
    return str(Path(prefix) / "go" / "bin" / "go")


def install_go(
    *,
    go_version: str,
    arch: str,
    workdir: str | Path,
    prefix: str = GO_ROOT_PARENT,
    client: Optional[httpx.Client] = None,
    dry_run: bool = False,
) -> str:
    """Install the Go toolchain under <prefix>/go and return the go binary path."""

    tarball = Path(workdir) / go_tarball_name(go_version, arch)
    download(go_tarball_url(go_version, arch), tarball, client=client, dry_run=dry_run)
    try:
        extract_tar_gz(tarball, dest=prefix, sudo=True, dry_run=dry_run)
    finally:
        if not dry_run:
            tarball.unlink(missing_ok=True)

    logger.info("Go %s installed under %s/go", go_version, prefix)
    return go_binary(prefix)
