from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..errors import HttpError, RpcError
from .http import fetch_json, new_client

logger = logging.getLogger(__name__)

DEFAULT_RPC_PORT = 26657
DEFAULT_API_PORT = 1317
NODE_INFO_PATH = "/cosmos/base/tendermint/v1beta1/node_info"


@dataclass(frozen=True)
class NodeStatus:
    # None only from a lenient parse, when the node left the field out.
    latest_block_height: Optional[int]
    catching_up: Optional[bool]


@dataclass(frozen=True)
class NodeInfo:
    moniker: Optional[str]
    node_id: Optional[str]
    app_version: Optional[str]


def _dig(payload: Any, *keys: str) -> Any:
    cur = payload
    for k in keys:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(k)
    return cur


def _height(raw: Any) -> Optional[int]:
    try:
        height = int(raw)
    except (TypeError, ValueError):
        return None
    return height if height >= 0 else None


def _flag(raw: Any) -> Optional[bool]:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.lower() in {"true", "false"}:
        return raw.lower() == "true"
    return None


def parse_status(payload: Any, *, strict: bool = True) -> NodeStatus:
    """Extract sync_info from a /status response.

    strict requires a valid latest_block_height and raises RpcError
    otherwise. The lenient form maps every missing or unreadable field to
    None independently.
    """

    sync = _dig(payload, "result", "sync_info")
    if not isinstance(sync, dict):
        if strict:
            raise RpcError("status response has no result.sync_info")
        sync = {}

    raw_height = sync.get("latest_block_height")
    height = _height(raw_height)
    if strict and height is None:
        raise RpcError(f"invalid latest_block_height: {raw_height!r}")

    return NodeStatus(latest_block_height=height, catching_up=_flag(sync.get("catching_up")))


def parse_node_info(payload: Any) -> NodeInfo:
    if not isinstance(payload, dict):
        raise RpcError("node_info response is not an object")

    def opt(*keys: str) -> Optional[str]:
        v = _dig(payload, *keys)
        return None if v is None else str(v)

    return NodeInfo(
        moniker=opt("default_node_info", "moniker"),
        node_id=opt("default_node_info", "default_node_id"),
        app_version=opt("application_version", "version"),
    )


class NodeRpcClient:
    """Reads a node's CometBFT status endpoint and its REST node_info endpoint."""

    def __init__(
        self,
        host: str = "127.0.0.1",
        *,
        rpc_port: int = DEFAULT_RPC_PORT,
        api_port: int = DEFAULT_API_PORT,
        rpc_url: Optional[str] = None,
        api_url: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.rpc_url = (rpc_url or f"http://{host}:{rpc_port}").rstrip("/")
        self.api_url = (api_url or f"http://{host}:{api_port}").rstrip("/")
        self._owns_client = client is None
        self._client = client or new_client()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "NodeRpcClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _get(self, url: str) -> Any:
        try:
            return fetch_json(url, client=self._client)
        except HttpError as exc:
            raise RpcError(str(exc)) from exc

    def status(self, *, strict: bool = True) -> NodeStatus:
        return parse_status(self._get(f"{self.rpc_url}/status"), strict=strict)

    def latest_block_height(self) -> int:
        height = self.status(strict=True).latest_block_height
        if height is None:
            raise RpcError("status response has no latest_block_height")
        logger.debug("Latest block height at %s: %d", self.rpc_url, height)
        return height

    def node_info(self) -> NodeInfo:
        return parse_node_info(self._get(f"{self.api_url}{NODE_INFO_PATH}"))
