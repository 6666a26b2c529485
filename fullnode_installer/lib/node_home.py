from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

EMPTY_SEEDS = 'seeds = ""'


def init_node(
    *,
    binary: str | Path,
    chain_id: str,
    moniker: str,
    home: str | Path,
    dry_run: bool = False,
) -> None:
    run_cmd(
        [str(binary), "init", f"--chain-id={chain_id}", moniker, "--home", str(home)],
        dry_run=dry_run,
    )


def patch_seeds(config_toml: str | Path, seeds: Sequence[str], *, dry_run: bool = False) -> bool:
    """Fill the empty `seeds` entry of config.toml.

    Returns True if the file was changed. A seeds value that is already set
    is left alone.
    """

    p = Path(config_toml)
    joined = ",".join(s.strip() for s in seeds if s.strip())
    if dry_run:
        logger.info("Would set seeds in %s", p)
        return False

    text = p.read_text(encoding="utf-8")
    if EMPTY_SEEDS not in text:
        logger.info("seeds already configured in %s", p)
        return False

    p.write_text(text.replace(EMPTY_SEEDS, f'seeds = "{joined}"', 1), encoding="utf-8")
    logger.info("Configured %d seed nodes in %s", len(seeds), p)
    return True


def append_path_export(bashrc: str | Path, entry: str, *, dry_run: bool = False) -> bool:
    """Append `export PATH=$PATH:<entry>` to a shell rc file once."""

    p = Path(bashrc)
    line = f"export PATH=$PATH:{entry}"
    existing = p.read_text(encoding="utf-8") if p.exists() else ""
    if line in existing.splitlines():
        return False
    if dry_run:
        logger.info("Would append %r to %s", line, p)
        return False

    with p.open("a", encoding="utf-8") as fh:
        if existing and not existing.endswith("\n"):
            fh.write("\n")
        fh.write(line + "\n")
    logger.info("Added %s to PATH in %s", entry, p)
    return True
