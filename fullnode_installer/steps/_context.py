from __future__ import annotations

from typing import Any, Dict

from ..node_config import NodeConfig


def node_config(state: Dict[str, Any]) -> NodeConfig:
    return NodeConfig(raw=state.get("config") or {})


def decisions(state: Dict[str, Any]) -> Dict[str, Any]:
    return state.setdefault("execution", {}).setdefault("decisions", {})
