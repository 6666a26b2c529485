from __future__ import annotations

import getpass
import os
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .errors import ConfigError

TESTNET_SEEDS = [
    "19d38bb5cea1378db3e16615e63594dc26119a1a@dydx-testnet4-seednode.allthatnode.com:26656",
    "87ee8de5f0f82af6ee6740a30f8844bbe6434413@seed.dydx-testnet.cros-nest.com:26656",
    "38e5a5ec34c578dc323cbdd9b98330abb448d586@tenderseed.ccvalidators.com:29104",
    "80a1a6cd086634c34008c6457d3f7441cfc05c47@seeds.kingnodes.com:27056",
    "182ab0015fb4b7d751b12a9c0162ac123445eac1@seed.dydx-testnet.stakingcabin.com:26656",
    "76b472b107ccf20c3d6c110c4a2a217306d2dedb@dydx-seed.staker.space:26656",
]

# Declarative network presets; a config file or CLI flag overrides any key.
NETWORKS: Dict[str, Dict[str, Any]] = {
    "testnet": {
        "chain_id": "dydx-testnet-4",
        "protocol_version": "v8.0.9",
        "snapshot_base_url": "https://snapshots.polkachu.com/testnet-snapshots/",
        "snapshot_prefix": "dydx",
        "seeds": TESTNET_SEEDS,
        "node_name_prefix": "my-full-node-testnet",
    },
}

DEFAULTS: Dict[str, Any] = {
    "network": "testnet",
    "daemon_name": "dydxprotocold",
    "daemon_home": "~/.dydxprotocol",
    "go_version": "1.22.2",
    "system_packages": ["curl", "jq", "lz4", "net-tools", "tree"],
    "dry_run": False,
}


def random_node_name(prefix: str) -> str:
    # Mirrors bash $RANDOM (0..32767).
    return f"{prefix}-{random.randint(0, 32767)}"


@dataclass(frozen=True)
class NodeConfig:
    raw: Dict[str, Any]

    @property
    def network(self) -> str:
        return str(self.raw.get("network") or DEFAULTS["network"])

    @property
    def chain_id(self) -> str:
        return str(self._required("chain_id"))

    @property
    def protocol_version(self) -> str:
        return str(self._required("protocol_version"))

    @property
    def daemon_name(self) -> str:
        return str(self.raw.get("daemon_name") or DEFAULTS["daemon_name"])

    @property
    def daemon_home(self) -> Path:
        return Path(str(self.raw.get("daemon_home") or DEFAULTS["daemon_home"])).expanduser()

    @property
    def go_version(self) -> str:
        return str(self.raw.get("go_version") or DEFAULTS["go_version"])

    @property
    def snapshot_base_url(self) -> str:
        return str(self._required("snapshot_base_url"))

    @property
    def snapshot_prefix(self) -> str:
        return str(self.raw.get("snapshot_prefix") or "dydx")

    @property
    def seeds(self) -> List[str]:
        seeds = self.raw.get("seeds") or []
        if not isinstance(seeds, list):
            raise ConfigError("config.seeds must be a list of strings")
        return [str(s) for s in seeds]

    @property
    def node_name(self) -> Optional[str]:
        v = self.raw.get("node_name")
        return str(v) if v else None

    @property
    def node_name_prefix(self) -> str:
        return str(self.raw.get("node_name_prefix") or "my-full-node")

    @property
    def system_packages(self) -> List[str]:
        return [str(p) for p in (self.raw.get("system_packages") or DEFAULTS["system_packages"])]

    @property
    def user(self) -> str:
        return str(self.raw.get("user") or os.environ.get("USER") or getpass.getuser())

    @property
    def home_dir(self) -> Path:
        return Path(str(self.raw.get("home_dir") or "~")).expanduser()

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))

    def _required(self, key: str) -> Any:
        v = self.raw.get(key)
        if v in (None, ""):
            raise ConfigError(f"config.{key} is required (network={self.network})")
        return v


def load_config_file(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("node config must be YAML")

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")
    return raw


def resolve_config(
    *,
    network: Optional[str] = None,
    config_path: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Layer defaults < network preset < config file < CLI overrides."""

    file_cfg = load_config_file(config_path) if config_path else {}
    cli = {k: v for k, v in (overrides or {}).items() if v is not None}

    net = str(cli.get("network") or file_cfg.get("network") or network or DEFAULTS["network"])
    if net not in NETWORKS:
        raise ConfigError(f"Unknown network {net!r} (known: {', '.join(sorted(NETWORKS))})")

    merged: Dict[str, Any] = {}
    merged.update(DEFAULTS)
    merged.update(NETWORKS[net])
    merged.update(file_cfg)
    merged.update(cli)
    merged["network"] = net
    return merged
