from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime
from typing import Callable, List, Optional, Sequence, TextIO, Tuple

from .errors import RpcError
from .lib.rpc import NodeInfo, NodeRpcClient, NodeStatus
from .logging_utils import configure_stderr_logging

logger = logging.getLogger(__name__)

LABEL_WIDTH = 18
MISSING = "null"
_CLEAR = "\033[H\033[2J"


def _fmt(value: object) -> str:
    if value is None:
        return MISSING
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def probe_lines(info: Optional[NodeInfo], status: Optional[NodeStatus]) -> List[str]:
    rows: Sequence[Tuple[str, object]] = [
        ("Node moniker:", info.moniker if info else None),
        ("Node ID:", info.node_id if info else None),
        ("Protocol version:", info.app_version if info else None),
        ("Block height:", status.latest_block_height if status else None),
        ("Is catching up:", status.catching_up if status else None),
    ]
    return [f"{label:<{LABEL_WIDTH}} {_fmt(value)}" for label, value in rows]


def probe(rpc: NodeRpcClient) -> List[str]:
    """Query both endpoints once. An unreachable endpoint shows as null."""

    info: Optional[NodeInfo] = None
    status: Optional[NodeStatus] = None
    try:
        info = rpc.node_info()
    except RpcError as e:
        logger.debug("node_info unavailable: %s", e)
    try:
        status = rpc.status(strict=False)
    except RpcError as e:
        logger.debug("status unavailable: %s", e)
    return probe_lines(info, status)


def watch(
    rpc: NodeRpcClient,
    *,
    interval: float,
    once: bool = False,
    out: Optional[TextIO] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    if out is None:
        out = sys.stdout
    clear = (not once) and out.isatty()
    while True:
        lines = probe(rpc)
        if clear:
            out.write(_CLEAR)
            out.write(f"Every {interval:g}s: {rpc.rpc_url}    {datetime.now():%Y-%m-%d %H:%M:%S}\n\n")
        out.write("\n".join(lines) + "\n")
        out.flush()
        if once:
            return
        sleep(interval)


def main(argv: Optional[list[str]] = None) -> int:
    configure_stderr_logging()

    p = argparse.ArgumentParser(
        prog="fullnode-watch",
        description="Monitors the status of a node, displaying block height, version, and sync status",
        epilog="Example: %(prog)s 111.222.333.444",
    )
    p.add_argument("node_ip", nargs="?", help="Address of the node to watch")
    p.add_argument("--interval", type=float, default=2.0, help="Seconds between probes (default: 2)")
    p.add_argument("--once", action="store_true", help="Print a single probe and exit")
    args = p.parse_args(argv)

    if not args.node_ip:
        p.print_help(sys.stderr)
        return 1
    if args.interval < 0:
        p.print_help(sys.stderr)
        return 1

    with NodeRpcClient(args.node_ip) as rpc:
        try:
            watch(rpc, interval=args.interval, once=args.once)
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
