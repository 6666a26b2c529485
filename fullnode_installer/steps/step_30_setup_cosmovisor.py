from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.cosmovisor import install_cosmovisor, prepare_layout
from ._context import decisions, node_config

logger = logging.getLogger(__name__)


class SetupCosmovisorStep:
    step_id = "30_setup_cosmovisor"
    title = "Installing Cosmovisor"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = node_config(state)
        d = decisions(state)

        install_cosmovisor(go_binary=str(d.get("go_binary") or "go"), dry_run=cfg.dry_run)
        prepare_layout(cfg.daemon_home, dry_run=cfg.dry_run)

        d["cosmovisor_path"] = str(cfg.home_dir / "go" / "bin" / "cosmovisor")
        return state
