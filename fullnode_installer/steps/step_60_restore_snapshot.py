from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.snapshot import restore_snapshot
from ._context import decisions, node_config

logger = logging.getLogger(__name__)


class RestoreSnapshotStep:
    step_id = "60_restore_snapshot"
    title = "Downloading and setting up snapshot"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = node_config(state)

        name = restore_snapshot(
            daemon_home=cfg.daemon_home,
            base_url=cfg.snapshot_base_url,
            prefix=cfg.snapshot_prefix,
            dry_run=cfg.dry_run,
        )
        decisions(state)["snapshot"] = name
        return state
