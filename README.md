# conflux

Building blocks for the Raft layer of a distributed configuration center.

## Modules

- `conflux.node_config` — `NodeConfig` and `ResourceLimits` dataclasses.
  Their `validate()` methods raise `ConfigError` (a `ValueError`) when a
  value is zero, when `election_timeout_min >= election_timeout_max`, when
  `heartbeat_interval >= election_timeout_min`, or when `max_memory_usage`
  is smaller than `max_request_size`. Timeouts are in milliseconds.
- `conflux.node_helpers` — ready-made configurations:
  `create_node_config`, `create_node_config_with_timeouts`,
  `create_node_config_with_limits`, `create_custom_node_config`,
  `create_dev_node_config` (50/100/200 ms timeouts, 1000 requests per
  second, 200 concurrent) and `create_prod_node_config` (200/500/1000 ms
  timeouts, 50 requests per second, 25 concurrent, 512 KiB requests).
  `validate_node_connectivity` checks that an address has the form
  `host:port` without connecting anywhere; `compare_node_configs` checks
  that two nodes have different ids and addresses and heartbeat intervals
  within 100 ms of each other. Both raise `ConfigError`.
- `conflux.network` — `NetworkConfig`, an address book of peers
  (`add_node`, `get_node_address`) with a `timeout_secs` setting;
  `ConfluxNetwork`, an asyncio HTTP client (built on httpx) aimed at one
  peer, with `append_entries`, `vote`, `install_snapshot` and
  `full_snapshot` (three attempts with exponential backoff and jitter),
  plus `is_reachable` and `get_connection_stats`, which probe the peer's
  `/health` endpoint. Failures raise `NetworkError`.
  `ConfluxNetworkFactory.new_client` builds clients sharing one config.
- `conflux.resource_limiter` — `ResourceLimiter`, whose async
  `check_request_allowed(request_size, client_id=None)` checks, in order,
  request size, memory held by pending requests, the per-client rate over
  a one-second window and the number of concurrent requests. It returns a
  `RequestPermit` (call `release()` or use it as a context manager) or
  raises `ResourceLimitExceeded`. `get_resource_stats()` returns a
  `ResourceStats` with `success_rate()`, `memory_usage_rate(max_memory)`
  and `concurrency_usage_rate()`. `update_limits` replaces the limits but
  does not change the number of concurrency slots.
- `conflux.metrics` — `RaftMetricsCollector`, which keeps `NodeMetrics`,
  `ClusterMetrics` and `PerformanceMetrics`, averages latencies with an
  exponential moving average, returns copies of everything through
  `get_metrics_report()`, and scores node health (`get_node_health()`,
  giving a `NodeHealth` with a `HealthStatus` and a score from 0 to 100).
  Its methods are plain synchronous calls.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
import asyncio
from datetime import timedelta

from conflux.metrics import RaftMetricsCollector
from conflux.node_helpers import create_node_config, validate_node_connectivity
from conflux.resource_limiter import ResourceLimiter, ResourceLimitExceeded


async def main():
    config = create_node_config(1, "127.0.0.1:8080")
    config.validate()
    validate_node_connectivity(config)

    limiter = ResourceLimiter(config.resource_limits)
    try:
        permit = await limiter.check_request_allowed(1024, "client-a")
    except ResourceLimitExceeded as exc:
        print("rejected:", exc)
    else:
        with permit:
            pass  # handle the request
    print(limiter.get_resource_stats().success_rate())

    metrics = RaftMetricsCollector(config.node_id)
    metrics.update_node_metrics(1, 10, 10, 1, True)
    metrics.record_request(timedelta(milliseconds=12), True)
    health = metrics.get_node_health()
    print(health.status, health.score)


asyncio.run(main())
```

## What this package does not do

It holds no Raft consensus engine, no log storage and no state machine: it
does not elect leaders or replicate entries by itself. `ConfluxNetwork`
only sends requests; there is no HTTP server here to answer the `/raft/*`
or `/health` endpoints. There is no command-line program.