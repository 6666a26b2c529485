from __future__ import annotations

import logging
import os
from typing import Any, Dict

from ..lib.arch import host_arch
from ..lib.golang import GO_ROOT_PARENT, install_go
from ..lib.node_home import append_path_export
from ._context import decisions, node_config

logger = logging.getLogger(__name__)


class SetupGolangStep:
    step_id = "20_setup_golang"
    title = "Setting up Golang"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = node_config(state)
        dry_run = cfg.dry_run
        arch = host_arch()

        go = install_go(
            go_version=cfg.go_version,
            arch=arch,
            workdir=cfg.home_dir,
            dry_run=dry_run,
        )

        go_paths = [f"{GO_ROOT_PARENT}/go/bin", str(cfg.home_dir / "go" / "bin")]
        append_path_export(cfg.home_dir / ".bashrc", ":".join(go_paths), dry_run=dry_run)
        if not dry_run:
            # Later steps run `go install` in this same process.
            os.environ["PATH"] = os.pathsep.join([os.environ.get("PATH", ""), *go_paths])

        d = decisions(state)
        d["arch"] = arch
        d["go_binary"] = go
        d["go_version"] = cfg.go_version
        return state
