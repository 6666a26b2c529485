from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.systemd import NodeUnit, install_unit
from ._context import decisions, node_config

logger = logging.getLogger(__name__)


class ConfigureSystemdStep:
    step_id = "70_configure_systemd"
    title = "Configuring systemd service"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = node_config(state)
        d = decisions(state)

        unit = NodeUnit(
            daemon_name=cfg.daemon_name,
            daemon_home=str(cfg.daemon_home),
            user=cfg.user,
            cosmovisor_path=str(d.get("cosmovisor_path") or cfg.home_dir / "go" / "bin" / "cosmovisor"),
        )
        install_unit(unit, dry_run=cfg.dry_run)

        d["service_unit"] = unit.unit_path
        return state
