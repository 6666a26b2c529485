from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.pkg import apt_install, apt_update, dpkg_is_installed
from ._context import decisions, node_config

logger = logging.getLogger(__name__)


class InstallSystemToolsStep:
    step_id = "10_install_system_tools"
    title = "Installing system tools"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = node_config(state)
        dry_run = cfg.dry_run

        wanted = cfg.system_packages
        missing = [p for p in wanted if not dpkg_is_installed(p, dry_run=dry_run)]
        if not missing:
            logger.info("System tools already installed: %s", " ".join(wanted))
            return state

        apt_update(dry_run=dry_run)
        apt_install(missing, dry_run=dry_run)

        decisions(state)["installed_packages"] = missing
        return state
