from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import FullNodeError
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .node_config import NETWORKS, NodeConfig, resolve_config
from .pipeline import run_pipeline
from .state_store import ensure_defaults, is_step_completed, load_state, record_decision, save_state
from .steps import (
    ConfigureSystemdStep,
    InitializeNodeStep,
    InstallBinaryStep,
    InstallSystemToolsStep,
    RestoreSnapshotStep,
    SetupCosmovisorStep,
    SetupGolangStep,
)

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = "~/.fullnode-installer/state.json"


def build_steps():
    return [
        InstallSystemToolsStep(),
        SetupGolangStep(),
        SetupCosmovisorStep(),
        InstallBinaryStep(),
        InitializeNodeStep(),
        RestoreSnapshotStep(),
        ConfigureSystemdStep(),
    ]


def completion_banner(cfg: NodeConfig) -> str:
    svc = cfg.daemon_name
    return "\n".join(
        [
            "Setup complete! The node is ready to start.",
            "",
            "=== To start your node, run: ===",
            f"sudo systemctl start {svc}",
            "",
            "=== Other handy commands: ===",
            f"# Stop the node:          sudo systemctl stop {svc}",
            f"# Check the node status:  sudo systemctl status {svc}",
            f"# See logs:               sudo journalctl -u {svc} -f",
            "# See open ports:         sudo netstat -tpln",
            "# See block height:       curl -s http://localhost:26657/status"
            " | jq -r '.result.sync_info.latest_block_height'",
            "# See app version:        curl -s http://localhost:1317/cosmos/base/tendermint/v1beta1/node_info"
            " | jq -r '.application_version.version'",
            "# See prometheus metrics: curl -s http://localhost:26660/metrics",
            "# Watch the node:         fullnode-watch localhost",
        ]
    )


def run(
    *,
    state_path: str = DEFAULT_STATE_PATH,
    log_path: str = DEFAULT_LOG_PATH,
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
) -> Dict[str, Any]:
    """Provision the full node, persisting state for resume."""

    actual_log_path = configure_logging(log_path=log_path)
    state_path = str(Path(state_path).expanduser())

    state = ensure_defaults(load_state(state_path))
    # Config is re-resolved every run; values picked at runtime live under execution.decisions.
    state["config"] = resolve_config(config_path=config_path, overrides=overrides)
    paths = state["execution"].setdefault("paths", {})
    paths["log_path_requested"] = log_path
    paths["log_path_actual"] = actual_log_path

    cfg = NodeConfig(raw=state["config"])
    data_dir = cfg.daemon_home / "data"
    fresh = not state["execution"]["completed_steps"]
    if fresh and data_dir.is_dir() and not force and start_at is None:
        logger.info("%s already exists. Skipping initialization.", data_dir)
        record_decision(state, "skipped_existing_data", str(data_dir))
        save_state(state_path, state)
        return state

    state["execution"]["decisions"].pop("skipped_existing_data", None)
    try:
        result = run_pipeline(
            state=state,
            steps=build_steps(),
            start_at=start_at,
            stop_after=stop_after,
            force=force,
            record=not cfg.dry_run,
        )
        state = result.state
        summary = state["execution"].setdefault("summary", {})
        summary["ran_steps"] = result.ran_steps
        summary["skipped_steps"] = result.skipped_steps
        return state
    except Exception as e:
        logger.exception("Provisioning failed")
        state["execution"].setdefault("errors", []).append(
            {
                "step": state["execution"].get("current_step"),
                "error": str(e),
            }
        )
        raise
    finally:
        save_state(state_path, state)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="fullnode-init", description="Provision a non-validating full node.")
    p.add_argument("--network", default=None, choices=sorted(NETWORKS), help="Network preset")
    p.add_argument("--config", default=None, help="YAML file overriding preset values")
    p.add_argument("--node-name", default=None, help="Node moniker (default: random)")
    p.add_argument("--version", dest="protocol_version", default=None, help="Node binary release, e.g. v8.0.9")
    p.add_argument("--daemon-home", default=None, help="Node home directory")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to installer state (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 50_initialize_node)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--force", action="store_true", help="Re-run steps even if marked completed")
    p.add_argument("--dry-run", action="store_true", help="Log commands without executing them")

    args = p.parse_args(argv)

    overrides = {
        "network": args.network,
        "node_name": args.node_name,
        "protocol_version": args.protocol_version,
        "daemon_home": args.daemon_home,
        "dry_run": True if args.dry_run else None,
    }

    try:
        state = run(
            state_path=args.state,
            log_path=args.log,
            config_path=args.config,
            overrides=overrides,
            start_at=args.start_at,
            stop_after=args.stop_after,
            force=args.force,
        )
    except (FullNodeError, OSError, ValueError) as e:
        logger.error("%s", e)
        return 1

    skipped = "skipped_existing_data" in state["execution"]["decisions"]
    if not skipped and is_step_completed(state, build_steps()[-1].step_id):
        print(completion_banner(NodeConfig(raw=state["config"])))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
