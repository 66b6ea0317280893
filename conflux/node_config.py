"""Configuration of a Raft node and the limits placed on client requests."""

from __future__ import annotations

from dataclasses import dataclass, field

from conflux.network import NetworkConfig


class ConfigError(ValueError):
    """Raised when a node configuration or its resource limits are unreasonable."""


@dataclass
class ResourceLimits:
    """Limits on the rate, size and concurrency of client requests."""

    max_requests_per_second: int = 100
    max_concurrent_requests: int = 50
    max_request_size: int = 1024 * 1024
    max_memory_usage: int = 50 * 1024 * 1024
    request_timeout_ms: int = 5000

    def validate(self) -> None:
        """Raise ConfigError if any limit is zero or memory cannot hold one request."""
        for name in (
            "max_requests_per_second",
            "max_concurrent_requests",
            "max_request_size",
            "max_memory_usage",
            "request_timeout_ms",
        ):
            if getattr(self, name) == 0:
                raise ConfigError(f"{name} must be greater than 0")
        if self.max_memory_usage < self.max_request_size:
            raise ConfigError("max_memory_usage must be at least max_request_size")


@dataclass
class NodeConfig:
    """Everything a Raft node needs to run: identity, timeouts, network and limits.

    Timeouts are in milliseconds.
    """

    node_id: int = 1
    address: str = "127.0.0.1:8080"
    network_config: NetworkConfig = field(default_factory=NetworkConfig)
    heartbeat_interval: int = 150
    election_timeout_min: int = 300
    election_timeout_max: int = 600
    resource_limits: ResourceLimits = field(default_factory=ResourceLimits)

    def set_timeouts(
        self,
        heartbeat_interval: int,
        election_timeout_min: int,
        election_timeout_max: int,
    ) -> None:
        """Replace the heartbeat interval and the election timeout range."""
        self.heartbeat_interval = heartbeat_interval
        self.election_timeout_min = election_timeout_min
        self.election_timeout_max = election_timeout_max

    def set_resource_limits(self, resource_limits: ResourceLimits) -> None:
        """Replace the resource limits."""
        self.resource_limits = resource_limits

    def validate(self) -> None:
        """Raise ConfigError if the configuration cannot work."""
        if self.node_id == 0:
            raise ConfigError("node_id must be greater than 0")
        if not self.address:
            raise ConfigError("address cannot be empty")
        for name in ("heartbeat_interval", "election_timeout_min", "election_timeout_max"):
            if getattr(self, name) == 0:
                raise ConfigError(f"{name} must be greater than 0")
        if self.election_timeout_min >= self.election_timeout_max:
            raise ConfigError("election_timeout_min must be less than election_timeout_max")
        if self.heartbeat_interval >= self.election_timeout_min:
            raise ConfigError("heartbeat_interval must be less than election_timeout_min")
        self.resource_limits.validate()