from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import httpx

from ..errors import SnapshotError
from .archive import extract_tar_lz4
from .http import download, fetch_text

logger = logging.getLogger(__name__)

VALIDATOR_STATE = "priv_validator_state.json"


def snapshot_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(rf"{re.escape(prefix)}_\d+\.tar\.lz4")


def list_snapshots(index_html: str, prefix: str) -> List[str]:
    """Return every distinct snapshot file name found in a directory index, in page order."""

    seen: List[str] = []
    for m in snapshot_pattern(prefix).finditer(index_html):
        if m.group(0) not in seen:
            seen.append(m.group(0))
    return seen


def _version_key(name: str) -> Tuple[Tuple[int, object], ...]:
    # Same ordering as `sort -V`: digit runs compare numerically.
    parts = re.split(r"(\d+)", name)
    return tuple((0, int(p)) if p.isdigit() else (1, p) for p in parts if p)


def latest_snapshot(names: Sequence[str]) -> Optional[str]:
    if not names:
        return None
    return sorted(names, key=_version_key)[-1]


def snapshot_url(base_url: str, prefix: str, name: str) -> str:
    return f"{base_url.rstrip('/')}/{prefix}/{name}"


def resolve_latest_snapshot(
    base_url: str,
    prefix: str,
    *,
    client: Optional[httpx.Client] = None,
) -> Tuple[str, str]:
    """Return (file name, url) of the newest snapshot listed at base_url."""

    names = list_snapshots(fetch_text(base_url, client=client), prefix)
    name = latest_snapshot(names)
    if name is None:
        raise SnapshotError(f"No {prefix}_<height>.tar.lz4 snapshot listed at {base_url}")
    logger.info("Latest snapshot: %s (%d listed)", name, len(names))
    return name, snapshot_url(base_url, prefix, name)


def restore_snapshot(
    *,
    daemon_home: str | Path,
    base_url: str,
    prefix: str,
    client: Optional[httpx.Client] = None,
    dry_run: bool = False,
) -> str:
    """Replace daemon_home/data with the latest snapshot.

    The validator signing state is carried over from the old data directory;
    a node must never start from a snapshot's copy of it.
    """

    home = Path(daemon_home)
    data = home / "data"
    state_file = data / VALIDATOR_STATE
    backup = home / f"{VALIDATOR_STATE}.backup"

    if dry_run:
        logger.info("Would restore the latest %s snapshot from %s into %s", prefix, base_url, data)
        return ""

    name, url = resolve_latest_snapshot(base_url, prefix, client=client)

    if state_file.exists():
        shutil.copy2(state_file, backup)
    else:
        logger.warning("No %s in %s; nothing to preserve", VALIDATOR_STATE, data)
    shutil.rmtree(data, ignore_errors=True)

    archive = download(url, home / name, client=client)
    try:
        extract_tar_lz4(archive, dest=home)
    finally:
        archive.unlink(missing_ok=True)

    if backup.exists():
        data.mkdir(parents=True, exist_ok=True)
        shutil.move(str(backup), str(state_file))

    logger.info("Snapshot %s restored into %s", name, data)
    return name
