from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)

COSMOVISOR_PACKAGE = "cosmossdk.io/tools/cosmovisor/cmd/cosmovisor@latest"


def genesis_bin_dir(daemon_home: str | Path) -> Path:
    return Path(daemon_home) / "cosmovisor" / "genesis" / "bin"


def upgrades_dir(daemon_home: str | Path) -> Path:
    return Path(daemon_home) / "cosmovisor" / "upgrades"


def current_bin_dir(daemon_home: str | Path) -> Path:
    return Path(daemon_home) / "cosmovisor" / "current" / "bin"


def install_cosmovisor(*, go_binary: str = "go", dry_run: bool = False) -> None:
    run_cmd([go_binary, "install", COSMOVISOR_PACKAGE], dry_run=dry_run)


def prepare_layout(daemon_home: str | Path, *, dry_run: bool = False) -> None:
    for d in (genesis_bin_dir(daemon_home), upgrades_dir(daemon_home)):
        if dry_run:
            logger.info("Would create %s", d)
            continue
        d.mkdir(parents=True, exist_ok=True)


def add_upgrade(
    *,
    name: str,
    binary_path: str | Path,
    upgrade_height: int,
    daemon_home: str | Path,
    daemon_name: str,
    cosmovisor: str = "cosmovisor",
    dry_run: bool = False,
) -> None:
    """Register binary_path as upgrade `name`, applied at upgrade_height."""

    run_cmd(
        [
            cosmovisor,
            "add-upgrade",
            name,
            str(binary_path),
            "--upgrade-height",
            str(upgrade_height),
            "--force",
        ],
        env={"DAEMON_HOME": str(daemon_home), "DAEMON_NAME": daemon_name},
        dry_run=dry_run,
    )
