"""HTTP transport used by Raft nodes to talk to their peers."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

logger = logging.getLogger(__name__)

_SNAPSHOT_TIMEOUT_SECS = 60.0
_SNAPSHOT_MAX_ATTEMPTS = 3
_SNAPSHOT_MAX_JITTER_MS = 100


class NetworkError(Exception):
    """Raised when a peer cannot be reached or its reply cannot be read."""


@dataclass
class NetworkConfig:
    """Peer addresses and the HTTP timeout used for Raft traffic.

    Instances are shared by reference: every network built from the same
    config sees nodes added to it later.
    """

    node_addresses: dict[int, str] = field(default_factory=dict)
    timeout_secs: int = 10

    def add_node(self, node_id: int, address: str) -> None:
        """Register or replace the address of a node."""
        self.node_addresses[node_id] = address

    def get_node_address(self, node_id: int) -> str | None:
        """Return the address of a node, or None when it is unknown."""
        return self.node_addresses.get(node_id)


@dataclass(frozen=True)
class ConnectionStats:
    """A snapshot of the connection state towards one peer."""

    target_node_id: int
    is_reachable: bool
    timeout_secs: int


def _build_url(address: str, path: str) -> str:
    base = address if "://" in address else f"http://{address}"
    return base.rstrip("/") + path


class ConfluxNetwork:
    """Sends Raft RPCs to a single target node over HTTP."""

    def __init__(
        self,
        config: NetworkConfig,
        target_node_id: int,
        *,
        snapshot_retry_delay: float = 0.5,
    ) -> None:
        self.config = config
        self.target_node_id = target_node_id
        self.snapshot_retry_delay = snapshot_retry_delay

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=float(self.config.timeout_secs))

    def _target_address(self, missing_message: str = "Address not found for node") -> str:
        address = self.config.get_node_address(self.target_node_id)
        if address is None:
            raise NetworkError(f"{missing_message} {self.target_node_id}")
        return address

    async def is_reachable(self) -> bool:
        """Return True when the target answers its health endpoint successfully."""
        try:
            address = self._target_address()
        except NetworkError:
            return False
        url = _build_url(address, "/health")
        try:
            async with self._client() as client:
                response = await client.get(url)
        except httpx.HTTPError:
            return False
        return response.is_success

    async def get_connection_stats(self) -> ConnectionStats:
        """Probe the target and report its reachability and the timeout in use."""
        return ConnectionStats(
            target_node_id=self.target_node_id,
            is_reachable=await self.is_reachable(),
            timeout_secs=self.config.timeout_secs,
        )

    async def _rpc(self, name: str, path: str, rpc: Mapping[str, Any]) -> Any:
        logger.debug("Sending %s to node %s", name, self.target_node_id)
        url = _build_url(self._target_address(), path)
        async with self._client() as client:
            try:
                response = await client.post(url, json=rpc)
            except httpx.HTTPError as exc:
                logger.error("Failed to send %s to node %s: %s", name, self.target_node_id, exc)
                raise NetworkError(
                    f"Failed to send {name} to node {self.target_node_id}: {exc}"
                ) from exc
        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("Failed to parse %s response: %s", name, exc)
            raise NetworkError(f"Failed to parse {name} response: {exc}") from exc
        logger.debug("%s response received from node %s", name, self.target_node_id)
        return payload

    async def append_entries(self, rpc: Mapping[str, Any]) -> Any:
        """Send an AppendEntries request and return the decoded reply."""
        return await self._rpc("AppendEntries", "/raft/append_entries", rpc)

    async def vote(self, rpc: Mapping[str, Any]) -> Any:
        """Send a Vote request and return the decoded reply."""
        return await self._rpc("Vote", "/raft/vote", rpc)

    async def install_snapshot(self, rpc: Mapping[str, Any]) -> Any:
        """Send one InstallSnapshot request and return the decoded reply."""
        return await self._rpc("InstallSnapshot", "/raft/install_snapshot", rpc)

    async def full_snapshot(
        self, vote: Any, meta: Mapping[str, Any], data: bytes
    ) -> dict[str, Any]:
        """Send a whole snapshot in a single request, retrying on failure.

        Returns a mapping holding the vote the target replied with.
        """
        logger.debug("Sending full snapshot to node %s", self.target_node_id)
        address = self._target_address("No address found for node")
        url = _build_url(address, "/raft/install_snapshot")
        request = {
            "vote": vote,
            "meta": dict(meta),
            "offset": 0,
            "data": list(data),
            "done": True,
        }
        try:
            reply = await self._send_snapshot_with_retry(url, request)
        except NetworkError as exc:
            logger.error("Failed to send snapshot to node %s: %s", self.target_node_id, exc)
            raise
        logger.debug("Successfully sent snapshot to node %s", self.target_node_id)
        return {"vote": reply["vote"]}

    async def _send_snapshot_with_retry(
        self, url: str, request: Mapping[str, Any]
    ) -> dict[str, Any]:
        delay = self.snapshot_retry_delay
        async with self._client() as client:
            for attempt in range(1, _SNAPSHOT_MAX_ATTEMPTS + 1):
                logger.debug("Sending snapshot (attempt %d/%d)", attempt, _SNAPSHOT_MAX_ATTEMPTS)
                error: NetworkError
                try:
                    response = await client.post(
                        url, json=request, timeout=_SNAPSHOT_TIMEOUT_SECS
                    )
                except httpx.HTTPError as exc:
                    error = NetworkError(f"Failed to send snapshot request: {exc}")
                else:
                    if response.is_success:
                        try:
                            payload = response.json()
                            if not isinstance(payload, dict) or "vote" not in payload:
                                raise ValueError("reply has no vote")
                            return payload
                        except ValueError as exc:
                            error = NetworkError(f"Failed to parse snapshot response: {exc}")
                    else:
                        error = NetworkError(f"HTTP error: {response.status_code}")
                logger.error(
                    "%s (attempt %d/%d)", error, attempt, _SNAPSHOT_MAX_ATTEMPTS
                )
                if attempt == _SNAPSHOT_MAX_ATTEMPTS:
                    raise error
                jitter = random.randint(0, _SNAPSHOT_MAX_JITTER_MS) / 1000
                await asyncio.sleep(delay + jitter)
                delay *= 2
        raise NetworkError("Snapshot transmission failed")


class ConfluxNetworkFactory:
    """Builds network clients that share one configuration."""

    def __init__(self, config: NetworkConfig) -> None:
        self.config = config

    def new_client(self, target: int, node: Any = None) -> ConfluxNetwork:
        """Return a network client aimed at the given node."""
        return ConfluxNetwork(self.config, target)