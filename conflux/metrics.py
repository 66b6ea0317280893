"""Counters and health scoring for a Raft node and the cluster it belongs to."""

from __future__ import annotations

import copy
import enum
import logging
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable

logger = logging.getLogger(__name__)

_EMA_KEEP = 0.9
_EMA_NEW = 0.1
_HEARTBEAT_STALE_AFTER = timedelta(seconds=5)
_ONE_MS = timedelta(milliseconds=1)


class NodeStatus(enum.Enum):
    """State of a member as seen by the cluster."""

    ACTIVE = "active"
    SUSPECTED = "suspected"
    DOWN = "down"
    JOINING = "joining"
    LEAVING = "leaving"


class HealthStatus(enum.Enum):
    """Overall health level of a node."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class NodeMetrics:
    """Metrics about this node's own Raft state.

    Instants (last_heartbeat) are readings of the collector's monotonic clock.
    """

    node_id: int = 0
    current_term: int = 0
    last_log_index: int = 0
    last_applied: int = 0
    leader_id: int | None = None
    is_leader: bool = False
    leadership_changes: int = 0
    votes_received: int = 0
    votes_granted: int = 0
    last_heartbeat: float | None = None
    election_timeouts: int = 0
    uptime: timedelta = field(default_factory=timedelta)


@dataclass
class ClusterMetrics:
    """Metrics about the cluster as a whole."""

    cluster_size: int = 0
    healthy_nodes: int = 0
    membership: dict[int, NodeStatus] = field(default_factory=dict)
    total_leadership_changes: int = 0
    cluster_stability: timedelta = field(default_factory=timedelta)
    last_membership_change: float | None = None
    membership_changes: int = 0


@dataclass
class PerformanceMetrics:
    """Latency, throughput and storage figures; latencies are in milliseconds."""

    avg_request_latency: float = 0.0
    request_throughput: float = 0.0
    total_requests: int = 0
    failed_requests: int = 0
    avg_replication_latency: float = 0.0
    network_rtt: dict[int, timedelta] = field(default_factory=dict)
    memory_usage: int = 0
    log_storage_usage: int = 0
    snapshot_size: int = 0
    last_snapshot_time: float | None = None


@dataclass(frozen=True)
class MetricsReport:
    """A copy of all metrics taken at one moment."""

    node_metrics: NodeMetrics
    cluster_metrics: ClusterMetrics
    performance_metrics: PerformanceMetrics
    collection_time: float


@dataclass(frozen=True)
class NodeHealth:
    """Health verdict with a score between 0 and 100."""

    status: HealthStatus
    score: float
    last_check: float


def _whole_millis(duration: timedelta) -> float:
    return float(duration // _ONE_MS)


def _moving_average(current: float, sample: float) -> float:
    if current == 0.0:
        return sample
    return _EMA_KEEP * current + _EMA_NEW * sample


class RaftMetricsCollector:
    """Collects node, cluster and performance metrics for one Raft node."""

    def __init__(self, node_id: int, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._start_time = clock()
        self.node_metrics = NodeMetrics(node_id=node_id)
        self.cluster_metrics = ClusterMetrics()
        self.performance_metrics = PerformanceMetrics()

    def _elapsed(self, since: float) -> timedelta:
        return timedelta(seconds=self._clock() - since)

    def update_node_metrics(
        self,
        current_term: int,
        last_log_index: int,
        last_applied: int,
        leader_id: int | None,
        is_leader: bool,
    ) -> None:
        """Record the node's Raft state, counting each time it becomes leader."""
        metrics = self.node_metrics
        if is_leader and not metrics.is_leader:
            metrics.leadership_changes += 1
            logger.info(
                "Node %s became leader (total leadership changes: %d)",
                metrics.node_id,
                metrics.leadership_changes,
            )
        metrics.current_term = current_term
        metrics.last_log_index = last_log_index
        metrics.last_applied = last_applied
        metrics.leader_id = leader_id
        metrics.is_leader = is_leader
        metrics.uptime = self._elapsed(self._start_time)
        logger.debug("Updated node metrics for node %s", metrics.node_id)

    def record_election_timeout(self) -> None:
        """Count one election timeout."""
        self.node_metrics.election_timeouts += 1
        logger.warning(
            "Election timeout recorded for node %s (total: %d)",
            self.node_metrics.node_id,
            self.node_metrics.election_timeouts,
        )

    def record_vote_received(self) -> None:
        """Count one vote received by this node."""
        self.node_metrics.votes_received += 1

    def record_vote_granted(self) -> None:
        """Count one vote this node granted to another."""
        self.node_metrics.votes_granted += 1

    def record_heartbeat(self) -> None:
        """Note that a heartbeat arrived now."""
        self.node_metrics.last_heartbeat = self._clock()

    def update_cluster_metrics(
        self,
        cluster_size: int,
        healthy_nodes: int,
        membership: dict[int, NodeStatus],
    ) -> None:
        """Record cluster size and membership, counting membership changes."""
        metrics = self.cluster_metrics
        if metrics.membership != membership:
            metrics.membership_changes += 1
            metrics.last_membership_change = self._clock()
            logger.info(
                "Cluster membership changed (total changes: %d)", metrics.membership_changes
            )
        metrics.cluster_size = cluster_size
        metrics.healthy_nodes = healthy_nodes
        metrics.membership = dict(membership)

    def record_request(self, latency: timedelta, success: bool) -> None:
        """Count a request and fold its latency into the moving average."""
        metrics = self.performance_metrics
        metrics.total_requests += 1
        if not success:
            metrics.failed_requests += 1
        metrics.avg_request_latency = _moving_average(
            metrics.avg_request_latency, _whole_millis(latency)
        )

    def record_replication_latency(self, latency: timedelta) -> None:
        """Fold a replication latency into its moving average."""
        metrics = self.performance_metrics
        metrics.avg_replication_latency = _moving_average(
            metrics.avg_replication_latency, _whole_millis(latency)
        )

    def update_network_rtt(self, peer_id: int, rtt: timedelta) -> None:
        """Store the latest round-trip time to a peer."""
        self.performance_metrics.network_rtt[peer_id] = rtt

    def update_storage_metrics(
        self, log_storage_usage: int, snapshot_size: int, memory_usage: int
    ) -> None:
        """Store the current storage and memory usage in bytes."""
        metrics = self.performance_metrics
        metrics.log_storage_usage = log_storage_usage
        metrics.snapshot_size = snapshot_size
        metrics.memory_usage = memory_usage

    def record_snapshot_creation(self) -> None:
        """Note that a snapshot was created now."""
        self.performance_metrics.last_snapshot_time = self._clock()
        logger.info("Snapshot creation recorded")

    def get_metrics_report(self) -> MetricsReport:
        """Return an independent copy of all metrics."""
        return MetricsReport(
            node_metrics=copy.deepcopy(self.node_metrics),
            cluster_metrics=copy.deepcopy(self.cluster_metrics),
            performance_metrics=copy.deepcopy(self.performance_metrics),
            collection_time=self._clock(),
        )

    def calculate_throughput(self) -> float:
        """Requests per second since the collector was created."""
        uptime = self._clock() - self._start_time
        if uptime > 0.0:
            return self.performance_metrics.total_requests / uptime
        return 0.0

    def get_node_health(self) -> NodeHealth:
        """Score the node's health from failures, heartbeats and cluster state."""
        node = self.node_metrics
        cluster = self.cluster_metrics
        perf = self.performance_metrics
        score = 100.0

        if perf.total_requests > 0:
            score -= perf.failed_requests / perf.total_requests * 50.0

        if not node.is_leader:
            if node.last_heartbeat is None:
                score -= 40.0
            elif self._elapsed(node.last_heartbeat) > _HEARTBEAT_STALE_AFTER:
                score -= 30.0

        if cluster.cluster_size > 0 and cluster.healthy_nodes / cluster.cluster_size < 0.5:
            score -= 20.0

        if score >= 80.0:
            status = HealthStatus.HEALTHY
        elif score >= 50.0:
            status = HealthStatus.DEGRADED
        else:
            status = HealthStatus.UNHEALTHY

        return NodeHealth(status=status, score=min(max(score, 0.0), 100.0), last_check=self._clock())