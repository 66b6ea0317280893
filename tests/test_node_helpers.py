import pytest

from conflux.network import NetworkConfig
from conflux.node_config import ConfigError, ResourceLimits
from conflux.node_helpers import (
    compare_node_configs,
    create_custom_node_config,
    create_dev_node_config,
    create_node_config,
    create_node_config_with_limits,
    create_node_config_with_timeouts,
    create_prod_node_config,
    validate_node_connectivity,
)


def test_create_node_config():
    config = create_node_config(1, "127.0.0.1:8080")
    assert config.node_id == 1
    assert config.address == "127.0.0.1:8080"
    assert config.heartbeat_interval == 150
    assert config.election_timeout_min == 300
    assert config.election_timeout_max == 600


def test_create_node_config_with_timeouts():
    config = create_node_config_with_timeouts(1, "127.0.0.1:8080", 100, 200, 400)
    assert config.heartbeat_interval == 100
    assert config.election_timeout_min == 200
    assert config.election_timeout_max == 400


def test_create_node_config_with_limits():
    limits = ResourceLimits(200, 100, 2_000_000, 100_000_000, 10000)
    config = create_node_config_with_limits(1, "127.0.0.1:8080", limits)
    assert config.resource_limits.max_requests_per_second == 200
    assert config.heartbeat_interval == 150


def test_create_custom_node_config():
    network = NetworkConfig({2: "127.0.0.1:8081"})
    config = create_custom_node_config(
        1, "127.0.0.1:8080", network, 100, 200, 400, ResourceLimits()
    )
    assert config.network_config.get_node_address(2) == "127.0.0.1:8081"
    assert (config.heartbeat_interval, config.election_timeout_min, config.election_timeout_max) == (
        100,
        200,
        400,
    )


def test_dev_config_values():
    config = create_dev_node_config(1, "127.0.0.1:8080")
    assert config.heartbeat_interval == 50
    assert config.election_timeout_min == 100
    assert config.election_timeout_max == 200
    assert config.resource_limits.max_requests_per_second == 1000
    assert config.resource_limits.max_concurrent_requests == 200


def test_prod_config_values():
    config = create_prod_node_config(1, "127.0.0.1:8080")
    assert config.heartbeat_interval == 200
    assert config.election_timeout_min == 500
    assert config.election_timeout_max == 1000
    assert config.resource_limits.max_requests_per_second == 50
    assert config.resource_limits.max_concurrent_requests == 25
    assert config.resource_limits.max_request_size == 512 * 1024
    assert config.resource_limits.request_timeout_ms == 10000


def test_dev_vs_prod_config():
    dev_config = create_dev_node_config(1, "127.0.0.1:8080")
    prod_config = create_prod_node_config(1, "127.0.0.1:8080")
    assert dev_config.heartbeat_interval < prod_config.heartbeat_interval
    assert dev_config.election_timeout_min < prod_config.election_timeout_min
    assert (
        dev_config.resource_limits.max_requests_per_second
        > prod_config.resource_limits.max_requests_per_second
    )


def test_validate_node_connectivity():
    validate_node_connectivity(create_node_config(1, "127.0.0.1:8080"))
    with pytest.raises(ConfigError, match="must contain port"):
        validate_node_connectivity(create_node_config(1, "invalid_address"))


@pytest.mark.parametrize(
    "address, message",
    [
        ("a:b:c", "Invalid address format"),
        ("host:port", "Invalid port number"),
        ("host:70000", "Invalid port number"),
        ("host:", "Invalid port number"),
        (":8080", "Host cannot be empty"),
    ],
)
def test_validate_node_connectivity_errors(address, message):
    with pytest.raises(ConfigError, match=message):
        validate_node_connectivity(create_node_config(1, address))


def test_validate_node_connectivity_max_port():
    config = create_node_config(1, "localhost:65535")
    validate_node_connectivity(config)
    assert config.address.endswith("65535")


def test_compare_node_configs():
    config1 = create_node_config(1, "127.0.0.1:8080")
    config2 = create_node_config(2, "127.0.0.1:8081")
    compare_node_configs(config1, config2)

    config3 = create_node_config(1, "127.0.0.1:8082")
    with pytest.raises(ConfigError, match="Node IDs must be different"):
        compare_node_configs(config1, config3)


def test_compare_node_configs_same_address():
    config1 = create_node_config(1, "127.0.0.1:8080")
    config2 = create_node_config(2, "127.0.0.1:8080")
    with pytest.raises(ConfigError, match="addresses must be different"):
        compare_node_configs(config1, config2)


def test_compare_node_configs_heartbeat_difference():
    base = create_node_config(1, "127.0.0.1:8080")
    near = create_node_config_with_timeouts(2, "127.0.0.1:8081", 250, 500, 1000)
    compare_node_configs(base, near)
    far = create_node_config_with_timeouts(3, "127.0.0.1:8082", 251, 500, 1000)
    with pytest.raises(ConfigError, match="too different"):
        compare_node_configs(base, far)