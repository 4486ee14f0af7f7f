"""Prometheus counters for topology construction."""

from __future__ import annotations

from prometheus_client import Counter

resources_added_total = Counter(
    "sctopology_resources_added_total",
    "Resources registered in the application model",
    ["kind"],
)

companions_attached_total = Counter(
    "sctopology_companions_attached_total",
    "Companions attached to a ServiceControl resource",
    ["role"],
)

topology_builds_total = Counter(
    "sctopology_topology_builds_total",
    "Completed TopologyBuilder.build() calls",
)
