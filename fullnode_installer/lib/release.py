from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import httpx

from ..errors import ReleaseError
from .archive import extract_tar_gz
from .http import download

logger = logging.getLogger(__name__)

RELEASES_BASE_URL = "https://github.com/dydxprotocol/v4-chain/releases/download"
GO_DOWNLOAD_BASE_URL = "https://golang.org/dl"
# Release artifacts are always published under this name, whatever the local daemon is called.
RELEASE_BINARY_NAME = "dydxprotocold"


def binary_filename(daemon_name: str, version: str, arch: str) -> str:
    return f"{daemon_name}-{version}-linux-{arch}"


def release_url(
    daemon_name: str,
    version: str,
    arch: str,
    *,
    base_url: str = RELEASES_BASE_URL,
) -> str:
    # Release tags are namespaced as "protocol/<version>", hence the encoded slash.
    fname = binary_filename(daemon_name, version, arch)
    return f"{base_url.rstrip('/')}/protocol%2F{version}/{fname}.tar.gz"


def go_tarball_name(go_version: str, arch: str) -> str:
    return f"go{go_version}.linux-{arch}.tar.gz"


def go_tarball_url(go_version: str, arch: str, *, base_url: str = GO_DOWNLOAD_BASE_URL) -> str:
    return f"{base_url.rstrip('/')}/{go_tarball_name(go_version, arch)}"


def download_release_binary(
    *,
    daemon_name: str,
    version: str,
    arch: str,
    workdir: str | Path,
    base_url: str = RELEASES_BASE_URL,
    client: Optional[httpx.Client] = None,
    dry_run: bool = False,
) -> Path:
    """Download the release tarball into workdir, extract it and return the binary path.

    The tarball is removed after extraction; the binary lives under
    workdir/build/<daemon>-<version>-linux-<arch>.
    """

    work = Path(workdir)
    fname = binary_filename(daemon_name, version, arch)
    url = release_url(daemon_name, version, arch, base_url=base_url)
    tarball = work / f"{fname}.tar.gz"

    logger.info("Downloading binary from: %s", url)
    download(url, tarball, client=client, dry_run=dry_run)

    logger.info("Extracting binary...")
    extract_tar_gz(tarball, dest=work, dry_run=dry_run)

    binary = work / "build" / fname
    if dry_run:
        return binary

    tarball.unlink(missing_ok=True)
    if not binary.is_file():
        raise ReleaseError("Binary not found after extraction")
    return binary
