from __future__ import annotations

import logging
import shutil
import tempfile
from typing import Any, Dict

from ..lib.arch import host_arch
from ..lib.cosmovisor import current_bin_dir, genesis_bin_dir
from ..lib.node_home import append_path_export
from ..lib.release import RELEASE_BINARY_NAME, download_release_binary
from ._context import decisions, node_config

logger = logging.getLogger(__name__)


class InstallBinaryStep:
    step_id = "40_install_binary"
    title = "Setting up node binary"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = node_config(state)
        dry_run = cfg.dry_run
        version = cfg.protocol_version

        target = genesis_bin_dir(cfg.daemon_home) / cfg.daemon_name

        with tempfile.TemporaryDirectory(prefix=f"{cfg.daemon_name}-{version}-") as work:
            binary = download_release_binary(
                daemon_name=RELEASE_BINARY_NAME,
                version=version,
                arch=host_arch(),
                workdir=work,
                dry_run=dry_run,
            )
            if dry_run:
                logger.info("Would install %s as %s", binary.name, target)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.move(str(binary), str(target))
                target.chmod(0o755)

        append_path_export(cfg.home_dir / ".bashrc", str(current_bin_dir(cfg.daemon_home)), dry_run=dry_run)

        d = decisions(state)
        d["genesis_binary"] = str(target)
        d["protocol_version"] = version
        logger.info("Installed %s %s as genesis binary", cfg.daemon_name, version)
        return state
