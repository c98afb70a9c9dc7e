"""Upgrade graph conversion and recent upgrade-edge evaluation.

The release controller publishes its upgrade graph as a list of payload nodes
and a list of ``[from_index, to_index]`` edges. Each edge records an upgrade
attempt (successful only, for the ``stable`` channel) from one payload version
to another. This module turns that document into a predecessor mapping and
checks, per release stream, whether a recent payload has been upgraded to from
the same minor version (patch level) and from the previous minor (minor level).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import DecodeError, ParseError
from .models import GraphNode, ReleaseReport, Report, UpgradeMatch
from .versions import PAYLOAD_TIMEZONE, in_minor_range, parse_payload_minor, parse_payload_timestamp

logger = logging.getLogger(__name__)

UpgradeGraph = Dict[str, List[str]]


def _decode_node(index: int, item: Any) -> GraphNode:
    if not isinstance(item, Mapping):
        raise DecodeError(f"upgrade graph node {index} is not an object: {item!r}")

    version = item.get("version")
    if not isinstance(version, str) or not version:
        raise DecodeError(f"upgrade graph node {index} is missing a version: {item!r}")

    return GraphNode(version=version, payload=str(item.get("payload") or ""))


def _decode_edge(item: Any, node_count: int) -> Tuple[int, int]:
    if not isinstance(item, Sequence) or isinstance(item, str) or len(item) != 2:
        raise DecodeError(f"upgrade graph edge must be a [from, to] pair: {item!r}")

    source, target = item
    if not isinstance(source, int) or not isinstance(target, int):
        raise DecodeError(f"upgrade graph edge indices must be integers: {item!r}")
    if not 0 <= source < node_count or not 0 <= target < node_count:
        raise DecodeError(f"upgrade graph edge references an unknown node: {item!r}")

    return source, target


def build_upgrade_graph(nodes: Sequence[Any], edges: Sequence[Any]) -> UpgradeGraph:
    """Convert a node/edge upgrade graph into a target-to-sources mapping.

    Args:
        nodes: Graph node objects, each carrying at least a ``version``.
        edges: ``[from_index, to_index]`` pairs referencing ``nodes``.

    Returns:
        Mapping of target payload version to the versions it was upgraded from,
        in edge order.

    Raises:
        DecodeError: If a node lacks a version or an edge is malformed or
            references a node index that does not exist.
    """
    graph_nodes = [_decode_node(index, item) for index, item in enumerate(nodes)]
    graph: UpgradeGraph = {}

    for item in edges:
        source, target = _decode_edge(item, len(graph_nodes))
        graph.setdefault(graph_nodes[target].version, []).append(graph_nodes[source].version)

    return graph


def _recent_payloads(
    payloads: Sequence[str],
    threshold: timedelta,
    now: datetime,
    tz: tzinfo = PAYLOAD_TIMEZONE,
) -> List[Tuple[str, timedelta]]:
    """Return ``(payload, age)`` for payloads younger than ``threshold``, newest first."""
    recent: List[Tuple[str, timedelta]] = []

    for payload in payloads:
        try:
            timestamp = parse_payload_timestamp(payload, tz)
        except ParseError as exc:
            logger.error("Unable to get payload timestamp: %s", exc)
            continue

        age = now - timestamp
        if age < threshold:
            recent.append((payload, age))

    recent.sort(key=lambda item: item[1])
    return recent


def find_upgrade_matches(
    graph: Mapping[str, List[str]],
    payloads: Sequence[str],
    threshold: timedelta,
    now: datetime,
    tz: tzinfo = PAYLOAD_TIMEZONE,
) -> Tuple[Optional[UpgradeMatch], Optional[UpgradeMatch]]:
    """Find the patch-level and minor-level upgrade matches for one stream.

    Recent payloads are scanned newest first and their predecessors in graph
    order. The first same-minor predecessor is the patch match and the first
    previous-minor predecessor is the minor match; later candidates never
    replace an earlier one. Scanning stops once both matches exist.

    Returns ``(patch_match, minor_match)``; either may be ``None``.
    """
    found_patch: Optional[UpgradeMatch] = None
    found_minor: Optional[UpgradeMatch] = None

    for payload, age in _recent_payloads(payloads, threshold, now, tz):
        to_version = parse_payload_minor(payload)
        if to_version is None:
            continue

        for source in graph.get(payload, []):
            from_version = parse_payload_minor(source)
            if from_version is None:
                logger.debug(
                    "Ignoring upgrade because the source minor version could not be determined",
                    extra={"payload": payload, "source": source},
                )
                continue

            logger.debug("Payload upgrades from source", extra={"payload": payload, "source": source})
            if from_version == to_version and found_patch is None:
                found_patch = UpgradeMatch(version=source, age=age)
            elif from_version == to_version - 1 and found_minor is None:
                found_minor = UpgradeMatch(version=source, age=age)

            if found_patch is not None and found_minor is not None:
                return found_patch, found_minor

    return found_patch, found_minor


def check_upgrades(
    graph: Mapping[str, List[str]],
    releases: Mapping[str, List[str]],
    threshold: timedelta,
    oldest_minor: int,
    newest_minor: int,
    now: Optional[datetime] = None,
    tz: tzinfo = PAYLOAD_TIMEZONE,
) -> Report:
    """Build the report skeleton with upgrade health for every in-range stream.

    Each in-range z-stream receives a ``ReleaseReport`` carrying one healthy or
    unhealthy message for patch-level upgrades and one for minor-level upgrades.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    report = Report(oldest_minor=oldest_minor, newest_minor=newest_minor)

    for release, payloads in releases.items():
        if in_minor_range(release, oldest_minor, newest_minor) is None:
            continue

        release_report = report.stream(release)
        found_patch, found_minor = find_upgrade_matches(graph, payloads, threshold, now, tz)
        _record_upgrade(release_report, "patch", found_patch)
        _record_upgrade(release_report, "minor", found_minor)

    return report


def _record_upgrade(release_report: ReleaseReport, level: str, match: Optional[UpgradeMatch]) -> None:
    if match is None:
        release_report.unhealthy_messages.append(f"Does not have a recent valid {level} level upgrade")
        return

    release_report.healthy_messages.append(
        f"Has a recent valid {level} level upgrade from {match.version} {match.days:.1f} days ago"
    )
