import pytest

from conflux.network import NetworkConfig
from conflux.node_config import ConfigError, NodeConfig, ResourceLimits


def test_resource_limits_default():
    limits = ResourceLimits()
    assert limits.max_requests_per_second == 100
    assert limits.max_concurrent_requests == 50
    assert limits.max_request_size == 1024 * 1024
    assert limits.max_memory_usage == 50 * 1024 * 1024
    assert limits.request_timeout_ms == 5000


def test_resource_limits_validation():
    limits = ResourceLimits()
    limits.validate()

    limits.max_requests_per_second = 0
    with pytest.raises(ConfigError, match="max_requests_per_second"):
        limits.validate()

    limits = ResourceLimits()
    limits.max_memory_usage = 100
    with pytest.raises(ConfigError, match="at least max_request_size"):
        limits.validate()


@pytest.mark.parametrize(
    "name",
    [
        "max_concurrent_requests",
        "max_request_size",
        "max_memory_usage",
        "request_timeout_ms",
    ],
)
def test_resource_limits_zero_fields_rejected(name):
    limits = ResourceLimits()
    setattr(limits, name, 0)
    with pytest.raises(ConfigError, match=name):
        limits.validate()


def test_resource_limits_positional_construction():
    limits = ResourceLimits(200, 100, 2_000_000, 100_000_000, 10000)
    assert limits.max_requests_per_second == 200
    assert limits.max_concurrent_requests == 100
    assert limits.max_request_size == 2_000_000
    assert limits.max_memory_usage == 100_000_000
    assert limits.request_timeout_ms == 10000


def test_node_config_default():
    config = NodeConfig()
    assert config.node_id == 1
    assert config.address == "127.0.0.1:8080"
    assert config.heartbeat_interval == 150
    assert config.election_timeout_min == 300
    assert config.election_timeout_max == 600
    assert config.network_config.timeout_secs == 10
    assert config.resource_limits == ResourceLimits()


def test_node_config_validation():
    config = NodeConfig()
    config.validate()

    config.node_id = 0
    with pytest.raises(ConfigError):
        config.validate()

    config = NodeConfig()
    config.address = ""
    with pytest.raises(ConfigError):
        config.validate()

    config = NodeConfig()
    config.election_timeout_min = 600
    config.election_timeout_max = 300
    with pytest.raises(ConfigError):
        config.validate()


def test_node_config_heartbeat_must_be_below_election_min():
    config = NodeConfig()
    config.set_timeouts(300, 300, 600)
    with pytest.raises(ConfigError, match="heartbeat_interval must be less"):
        config.validate()


def test_node_config_zero_heartbeat_rejected():
    config = NodeConfig(heartbeat_interval=0)
    with pytest.raises(ConfigError, match="heartbeat_interval must be greater"):
        config.validate()


def test_node_config_validation_checks_resource_limits():
    config = NodeConfig()
    config.set_resource_limits(ResourceLimits(max_request_timeout_ms := 100, 1, 1, 1, 0))
    assert max_request_timeout_ms == 100
    with pytest.raises(ConfigError, match="request_timeout_ms"):
        config.validate()


def test_new_with_id_and_address_keeps_defaults():
    config = NodeConfig(2, "10.0.0.2:9000")
    assert config.node_id == 2
    assert config.address == "10.0.0.2:9000"
    assert config.heartbeat_interval == 150


def test_set_timeouts():
    config = NodeConfig()
    config.set_timeouts(100, 200, 400)
    assert (config.heartbeat_interval, config.election_timeout_min, config.election_timeout_max) == (
        100,
        200,
        400,
    )
    config.validate()


def test_set_resource_limits():
    config = NodeConfig()
    limits = ResourceLimits(200, 100, 2_000_000, 100_000_000, 10000)
    config.set_resource_limits(limits)
    assert config.resource_limits.max_requests_per_second == 200


def test_default_network_configs_are_independent():
    first = NodeConfig()
    second = NodeConfig()
    first.network_config.add_node(1, "127.0.0.1:8001")
    assert second.network_config.get_node_address(1) is None


def test_shared_network_config():
    network = NetworkConfig()
    config = NodeConfig(network_config=network)
    network.add_node(3, "127.0.0.1:8003")
    assert config.network_config.get_node_address(3) == "127.0.0.1:8003"