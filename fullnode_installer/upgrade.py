"""Schedule a node binary upgrade through Cosmovisor.

Steps:
1. download the requested release of the node binary from GitHub
2. extract it into a temporary directory
3. move the binary into the daemon home directory
4. register it with `cosmovisor add-upgrade` at current_height + blocks_ahead

Requires cosmovisor on PATH and the node's RPC endpoint reachable
(default http://127.0.0.1:26657).
"""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import httpx

from .errors import CommandError, FullNodeError, HttpError, ReleaseError, RpcError
from .lib.arch import host_arch
from .lib.cosmovisor import add_upgrade
from .lib.release import RELEASE_BINARY_NAME, download_release_binary
from .lib.rpc import NodeRpcClient
from .logging_utils import configure_stderr_logging

logger = logging.getLogger(__name__)

DEFAULT_BLOCKS_AHEAD = 100
DEFAULT_DAEMON_HOME = "~/.dydxprotocol"
DEFAULT_DAEMON_NAME = "dydxprotocold"
DEFAULT_RPC_URL = "http://127.0.0.1:26657"

EPILOG = f"""\
Environment Variables:
    DAEMON_HOME                 Override daemon home directory (default: {DEFAULT_DAEMON_HOME})
    DAEMON_NAME                 Override daemon binary name (default: {DEFAULT_DAEMON_NAME})

Example:
    %(prog)s --target-version v7.0.1 --blocks-ahead 100
"""


@dataclass(frozen=True)
class UpgradePlan:
    target_version: str
    blocks_ahead: int
    daemon_home: Path
    daemon_name: str
    rpc_url: str = DEFAULT_RPC_URL


class _UsageParser(argparse.ArgumentParser):
    """argparse, but invalid input logs an error and exits 1 after printing usage."""

    def error(self, message: str) -> None:  # type: ignore[override]
        logger.error("%s", message)
        self.print_help(sys.stderr)
        raise SystemExit(1)


def build_parser() -> argparse.ArgumentParser:
    p = _UsageParser(
        prog="fullnode-schedule-upgrade",
        description="Schedules a node binary upgrade using Cosmovisor.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("--target-version", default="", help="Version to upgrade to (e.g., v7.0.1). Required.")
    p.add_argument(
        "--blocks-ahead",
        default=str(DEFAULT_BLOCKS_AHEAD),
        help=f"Number of blocks to wait before upgrade (default: {DEFAULT_BLOCKS_AHEAD})",
    )
    p.add_argument("--daemon-home", default=None, help=f"Daemon home directory (default: {DEFAULT_DAEMON_HOME})")
    p.add_argument("--daemon-name", default=None, help=f"Daemon binary name (default: {DEFAULT_DAEMON_NAME})")
    p.add_argument("--rpc-url", default=DEFAULT_RPC_URL, help=f"Node RPC endpoint (default: {DEFAULT_RPC_URL})")
    return p


def parse_args(argv: Optional[list[str]] = None, environ: Optional[Mapping[str, str]] = None) -> UpgradePlan:
    env = os.environ if environ is None else environ
    p = build_parser()
    args = p.parse_args(argv)

    if not args.target_version:
        p.error("--target-version is required")

    raw_blocks = str(args.blocks_ahead)
    if not (raw_blocks.isascii() and raw_blocks.isdigit()):
        p.error("--blocks-ahead must be a non-negative integer")

    daemon_home = args.daemon_home or env.get("DAEMON_HOME") or DEFAULT_DAEMON_HOME
    daemon_name = args.daemon_name or env.get("DAEMON_NAME") or DEFAULT_DAEMON_NAME

    return UpgradePlan(
        target_version=args.target_version,
        blocks_ahead=int(raw_blocks),
        daemon_home=Path(daemon_home).expanduser(),
        daemon_name=daemon_name,
        rpc_url=args.rpc_url,
    )


def compute_upgrade_height(latest_height: int, blocks_ahead: int) -> int:
    if latest_height < 0 or blocks_ahead < 0:
        raise ValueError("block heights must be non-negative")
    return latest_height + blocks_ahead


def upgrade_workdir(target_version: str, *, tmp_root: Optional[str] = None) -> Path:
    safe = target_version.replace("/", "_")
    return Path(tmp_root or tempfile.gettempdir()) / f"protocold-upgrade-{safe}"


def cleanup(workdir: Path) -> None:
    if workdir.is_dir():
        logger.info("Cleaning up temporary directory")
        shutil.rmtree(workdir, ignore_errors=True)


def schedule_upgrade(
    plan: UpgradePlan,
    *,
    arch: Optional[str] = None,
    tmp_root: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> int:
    """Stage the target binary and schedule it; returns the scheduled height.

    The temporary directory is removed whether or not scheduling succeeds.
    """

    workdir = upgrade_workdir(plan.target_version, tmp_root=tmp_root)
    try:
        workdir.mkdir(parents=True, exist_ok=True)
        logger.info("Starting upgrade process for version: %s", plan.target_version)

        try:
            binary = download_release_binary(
                daemon_name=RELEASE_BINARY_NAME,
                version=plan.target_version,
                arch=arch or host_arch(),
                workdir=workdir,
                client=client,
            )
        except (HttpError, CommandError) as e:
            raise ReleaseError(f"Failed to download binary: {e}") from e

        logger.info("Moving binary to %s", plan.daemon_home)
        staged = plan.daemon_home / binary.name
        shutil.move(str(binary), str(staged))

        with NodeRpcClient(rpc_url=plan.rpc_url, client=client) as rpc:
            try:
                latest = rpc.latest_block_height()
            except RpcError as e:
                raise RpcError(f"Failed to fetch latest block height: {e}") from e
        logger.info("Latest block height: %d", latest)

        height = compute_upgrade_height(latest, plan.blocks_ahead)
        logger.info("Scheduling upgrade at block height %d", height)
        try:
            add_upgrade(
                name=plan.target_version,
                binary_path=staged,
                upgrade_height=height,
                daemon_home=plan.daemon_home,
                daemon_name=plan.daemon_name,
            )
        except CommandError as e:
            raise FullNodeError(f"Failed to schedule upgrade: {e}") from e

        logger.info("Upgrade successfully scheduled")
        return height
    finally:
        cleanup(workdir)


def main(argv: Optional[list[str]] = None) -> int:
    configure_stderr_logging()
    plan = parse_args(argv)
    try:
        schedule_upgrade(plan)
    except (FullNodeError, OSError) as e:
        logger.critical("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
