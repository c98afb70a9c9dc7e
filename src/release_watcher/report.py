"""Release stream health report generation.

This module combines the upgrade graph evaluation with three staleness passes:
- accepted payloads against the accepted staleness limit
- all payloads against the accepted staleness limit (recent build check)
- all payloads against the built staleness limit (very stale build check)
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional, Protocol, Tuple

from .config import resolve_release_api_url, validate_minor_range
from .life_cycle import LifeCycleClient
from .models import Report, to_days
from .release_client import ReleaseClient, ReleaseMap
from .staleness import find_empty_and_stale_streams
from .upgrades import UpgradeGraph, check_upgrades
from .versions import PAYLOAD_TIMEZONE

logger = logging.getLogger(__name__)

UPGRADE_GRAPH_CHANNEL = "stable"


class ReleaseSource(Protocol):
    def fetch_release_map(self, kind: str) -> ReleaseMap:
        ...

    def fetch_upgrade_graph(self, channel: str) -> UpgradeGraph:
        ...


class SupportedRangeSource(Protocol):
    def resolve_supported_minor_range(self) -> Tuple[int, int]:
        ...


def resolve_minor_range(
    oldest_minor: Optional[int],
    newest_minor: Optional[int],
    life_cycle: Optional[SupportedRangeSource] = None,
) -> Tuple[int, int]:
    """Fill in missing minor-version bounds from the supported product releases.

    The resolved newest bound is one past the newest supported minor so that
    the upcoming pre-release stream is included.

    Raises:
        ConfigurationError: If the bounds are negative or inverted, either as
            given or after resolution.
    """
    validate_minor_range(oldest_minor, newest_minor)
    if oldest_minor is not None and newest_minor is not None:
        return oldest_minor, newest_minor

    if life_cycle is None:
        life_cycle = LifeCycleClient()
    oldest_supported, newest_supported = life_cycle.resolve_supported_minor_range()

    if oldest_minor is None:
        oldest_minor = oldest_supported
    if newest_minor is None:
        newest_minor = newest_supported + 1

    validate_minor_range(oldest_minor, newest_minor)
    return oldest_minor, newest_minor


def generate_report(
    accepted_limit: timedelta,
    built_limit: timedelta,
    upgrade_limit: timedelta,
    oldest_minor: Optional[int],
    newest_minor: Optional[int],
    arch: str = "amd64",
    *,
    source: Optional[ReleaseSource] = None,
    life_cycle: Optional[SupportedRangeSource] = None,
    now: Optional[datetime] = None,
    payload_timezone: tzinfo = PAYLOAD_TIMEZONE,
) -> Report:
    """Generate the health report for every release stream of an architecture.

    Args:
        accepted_limit: Maximum age of the newest accepted payload.
        built_limit: Maximum age of the newest built payload.
        upgrade_limit: Maximum age of a payload counted for upgrade health.
        oldest_minor: Oldest minor version to analyze, or ``None`` to resolve it.
        newest_minor: Newest minor version to analyze, or ``None`` to resolve it.
        arch: Architecture selecting the release-controller instance.
        source: Release data source; defaults to a ``ReleaseClient`` for ``arch``.
        life_cycle: Supported-range source used when a bound is ``None``.
        now: Reference time shared by every evaluation pass.
        payload_timezone: Fixed offset the naive payload build timestamps are read in.

    Returns:
        The populated ``Report``.

    Raises:
        ConfigurationError: If the bounds or architecture are invalid; raised
            before anything is fetched when explicit bounds are inverted.
        FetchError: If a release-controller or life-cycle request fails.
        DecodeError: If a fetched document is malformed.
    """
    oldest_minor, newest_minor = resolve_minor_range(oldest_minor, newest_minor, life_cycle)
    release_api_url = resolve_release_api_url(arch)
    if source is None:
        source = ReleaseClient(release_api_url)
    if now is None:
        now = datetime.now(timezone.utc)

    accepted_releases = source.fetch_release_map("accepted")
    all_releases = source.fetch_release_map("all")
    # stable graph only includes successful edges; nightly and prerelease
    # channels include any attempted upgrade.
    stable_graph = source.fetch_upgrade_graph(UPGRADE_GRAPH_CHANNEL)

    report = check_upgrades(
        stable_graph, all_releases, upgrade_limit, oldest_minor, newest_minor, now=now, tz=payload_timezone
    )
    report.release_api_url = release_api_url

    logger.debug("Checking streams for accepted payloads")
    accepted_empty, accepted_stale = find_empty_and_stale_streams(
        accepted_releases, accepted_limit, oldest_minor, newest_minor, release_api_url, now=now, tz=payload_timezone
    )
    logger.debug("Checking streams for all payloads")
    all_empty, all_stale = find_empty_and_stale_streams(
        all_releases, accepted_limit, oldest_minor, newest_minor, release_api_url, now=now, tz=payload_timezone
    )

    for stream in sorted(accepted_empty):
        if stream not in all_releases:
            report.stream(stream).unhealthy_messages.append("Has no built payloads")
        elif stream in all_empty:
            # flagged with the built payload checks below
            continue
        elif stream not in all_stale:
            report.stream(stream).unhealthy_messages.append(
                "Has no accepted payloads, but the stream contains recently built payloads"
            )
        else:
            report.stream(stream).unhealthy_messages.append(
                "Has no accepted payloads, but the stream contains built payloads"
            )

    for stream, age in sorted(accepted_stale.items()):
        report.stream(stream).unhealthy_messages.append(
            f"Most recently accepted payload > {to_days(accepted_limit):.1f} days, "
            f"last accepted was {to_days(age):.1f} days ago"
        )

    for stream in sorted(all_empty):
        report.stream(stream).unhealthy_messages.append("Has no built payloads")

    logger.debug("Checking streams for very stale payloads")
    _, all_very_stale = find_empty_and_stale_streams(
        all_releases, built_limit, oldest_minor, newest_minor, release_api_url, now=now, tz=payload_timezone
    )
    for stream, age in sorted(all_very_stale.items()):
        report.stream(stream).unhealthy_messages.append(
            f"Most recently built payload was {to_days(age):.1f} days ago"
        )

    logger.info(
        "Generated payload stream report",
        extra={
            "streams": len(report.streams),
            "unhealthy_streams": report.unhealthy_count(),
            "oldest_minor": oldest_minor,
            "newest_minor": newest_minor,
        },
    )
    return report
