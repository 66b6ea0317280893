"""Ready-made node configurations and checks across node configurations."""

from __future__ import annotations

from conflux.network import NetworkConfig
from conflux.node_config import ConfigError, NodeConfig, ResourceLimits

_MAX_HEARTBEAT_DIFFERENCE_MS = 100
_MAX_PORT = 65535


def create_node_config(node_id: int, address: str) -> NodeConfig:
    """Return a node configuration with default timeouts, network and limits."""
    return NodeConfig(node_id=node_id, address=address)


def create_node_config_with_timeouts(
    node_id: int,
    address: str,
    heartbeat_interval: int,
    election_timeout_min: int,
    election_timeout_max: int,
) -> NodeConfig:
    """Return a node configuration with the given timeouts in milliseconds."""
    return NodeConfig(
        node_id=node_id,
        address=address,
        heartbeat_interval=heartbeat_interval,
        election_timeout_min=election_timeout_min,
        election_timeout_max=election_timeout_max,
    )


def create_node_config_with_limits(
    node_id: int, address: str, resource_limits: ResourceLimits
) -> NodeConfig:
    """Return a node configuration with the given resource limits."""
    return NodeConfig(node_id=node_id, address=address, resource_limits=resource_limits)


def create_custom_node_config(
    node_id: int,
    address: str,
    network_config: NetworkConfig,
    heartbeat_interval: int,
    election_timeout_min: int,
    election_timeout_max: int,
    resource_limits: ResourceLimits,
) -> NodeConfig:
    """Return a node configuration with every setting given explicitly."""
    return NodeConfig(
        node_id=node_id,
        address=address,
        network_config=network_config,
        heartbeat_interval=heartbeat_interval,
        election_timeout_min=election_timeout_min,
        election_timeout_max=election_timeout_max,
        resource_limits=resource_limits,
    )


def create_dev_node_config(node_id: int, address: str) -> NodeConfig:
    """Return a configuration for development: short timeouts, generous limits."""
    limits = ResourceLimits(max_requests_per_second=1000, max_concurrent_requests=200)
    return NodeConfig(
        node_id=node_id,
        address=address,
        heartbeat_interval=50,
        election_timeout_min=100,
        election_timeout_max=200,
        resource_limits=limits,
    )


def create_prod_node_config(node_id: int, address: str) -> NodeConfig:
    """Return a configuration for production: long timeouts, conservative limits."""
    limits = ResourceLimits(
        max_requests_per_second=50,
        max_concurrent_requests=25,
        max_request_size=512 * 1024,
        request_timeout_ms=10000,
    )
    return NodeConfig(
        node_id=node_id,
        address=address,
        heartbeat_interval=200,
        election_timeout_min=500,
        election_timeout_max=1000,
        resource_limits=limits,
    )


def _is_port(text: str) -> bool:
    digits = text[1:] if text.startswith("+") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        return False
    return int(digits) <= _MAX_PORT


def validate_node_connectivity(config: NodeConfig) -> None:
    """Check that the node address has the form host:port.

    Only the format is checked; no connection is attempted.
    """
    if ":" not in config.address:
        raise ConfigError("Address must contain port (format: host:port)")
    parts = config.address.split(":")
    if len(parts) != 2:
        raise ConfigError("Invalid address format (expected host:port)")
    host, port = parts
    if not _is_port(port):
        raise ConfigError("Invalid port number")
    if not host:
        raise ConfigError("Host cannot be empty")


def compare_node_configs(config1: NodeConfig, config2: NodeConfig) -> None:
    """Raise ConfigError unless the two nodes can work in the same cluster."""
    if config1.node_id == config2.node_id:
        raise ConfigError("Node IDs must be different")
    if config1.address == config2.address:
        raise ConfigError("Node addresses must be different")
    if abs(config1.heartbeat_interval - config2.heartbeat_interval) > _MAX_HEARTBEAT_DIFFERENCE_MS:
        raise ConfigError(
            "Heartbeat intervals are too different (may cause cluster instability)"
        )