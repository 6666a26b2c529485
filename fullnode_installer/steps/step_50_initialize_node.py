from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.cosmovisor import genesis_bin_dir
from ..lib.node_home import init_node, patch_seeds
from ..node_config import random_node_name
from ._context import decisions, node_config

logger = logging.getLogger(__name__)


class InitializeNodeStep:
    step_id = "50_initialize_node"
    title = "Initializing node"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = node_config(state)
        d = decisions(state)

        # A resumed run keeps the moniker picked the first time.
        moniker = cfg.node_name or d.get("node_name") or random_node_name(cfg.node_name_prefix)
        d["node_name"] = moniker

        genesis = cfg.daemon_home / "config" / "genesis.json"
        if genesis.exists():
            # `init` refuses to overwrite an existing genesis file.
            logger.info("Node home %s already initialized; skipping init", cfg.daemon_home)
        else:
            logger.info("Initializing node as '%s' on %s", moniker, cfg.chain_id)
            init_node(
                binary=genesis_bin_dir(cfg.daemon_home) / cfg.daemon_name,
                chain_id=cfg.chain_id,
                moniker=moniker,
                home=cfg.daemon_home,
                dry_run=cfg.dry_run,
            )
        patch_seeds(cfg.daemon_home / "config" / "config.toml", cfg.seeds, dry_run=cfg.dry_run)
        return state
