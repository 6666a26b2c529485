from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

from .command import run_cmd

logger = logging.getLogger(__name__)

UNIT_DIR = "/etc/systemd/system"


@dataclass(frozen=True)
class NodeUnit:
    daemon_name: str
    daemon_home: str
    user: str
    cosmovisor_path: str
    restart_sec: int = 5
    limit_nofile: int = 4096

    @property
    def unit_name(self) -> str:
        return f"{self.daemon_name}.service"

    @property
    def unit_path(self) -> str:
        return f"{UNIT_DIR}/{self.unit_name}"

    def environment(self) -> Dict[str, str]:
        # The binary is staged ahead of time; the supervisor never fetches one itself.
        return {
            "DAEMON_HOME": self.daemon_home,
            "DAEMON_NAME": self.daemon_name,
            "DAEMON_ALLOW_DOWNLOAD_BINARIES": "false",
            "DAEMON_RESTART_AFTER_UPGRADE": "true",
            "UNSAFE_SKIP_BACKUP": "true",
        }


def render_unit(unit: NodeUnit) -> str:
    lines = [
        "[Unit]",
        f"Description={unit.daemon_name.removesuffix('d')} node service",
        "After=network-online.target",
        "",
        "[Service]",
        f"User={unit.user}",
        f"ExecStart={unit.cosmovisor_path} run start --non-validating-full-node=true",
        f"WorkingDirectory={unit.daemon_home}",
        "Restart=always",
        f"RestartSec={unit.restart_sec}",
        f"LimitNOFILE={unit.limit_nofile}",
    ]
    lines += [f'Environment="{k}={v}"' for k, v in unit.environment().items()]
    lines += [
        "",
        "[Install]",
        "WantedBy=multi-user.target",
        "",
    ]
    return "\n".join(lines)


def install_unit(unit: NodeUnit, *, dry_run: bool = False) -> None:
    """Write the unit file as root, reload systemd and enable the service."""

    run_cmd(["tee", unit.unit_path], input_text=render_unit(unit), sudo=True, dry_run=dry_run)
    run_cmd(["systemctl", "daemon-reload"], sudo=True, dry_run=dry_run)
    run_cmd(["systemctl", "enable", unit.daemon_name], sudo=True, dry_run=dry_run)
    logger.info("Installed and enabled %s", unit.unit_path)
