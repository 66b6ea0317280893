"""Raft node configuration, HTTP peer networking, resource limiting and metrics."""

__version__ = "0.1.0"
__all__ = ["metrics", "network", "node_config", "node_helpers", "resource_limiter"]