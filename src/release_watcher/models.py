"""Domain models for release stream health reporting.

These dataclasses intentionally model only the subset of release-controller
data that is required for health evaluation and report rendering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, List

from .versions import parse_payload_minor

UNHEALTHY_PREFIX = "*WARNING:* "


def to_days(age: timedelta) -> float:
    """Convert a duration to fractional days."""
    return age.total_seconds() / 86400


@dataclass(slots=True)
class GraphNode:
    """Represents one payload node of the release-controller upgrade graph."""

    version: str
    payload: str = ""


@dataclass(slots=True)
class UpgradeMatch:
    """Represents a recent payload with a recorded upgrade from ``version``."""

    version: str
    age: timedelta

    @property
    def days(self) -> float:
        """Return the payload age in fractional days."""
        return to_days(self.age)


@dataclass(slots=True)
class ReleaseReport:
    """Holds the health messages collected for a single release stream."""

    healthy_messages: List[str] = field(default_factory=list)
    unhealthy_messages: List[str] = field(default_factory=list)

    @property
    def is_healthy(self) -> bool:
        """Return ``True`` when no unhealthy message has been recorded."""
        return not self.unhealthy_messages


@dataclass(slots=True)
class Report:
    """Represents the health of every analyzed release stream."""

    streams: Dict[str, ReleaseReport] = field(default_factory=dict)
    oldest_minor: int = 0
    newest_minor: int = 0
    release_api_url: str = ""

    def stream(self, name: str) -> ReleaseReport:
        """Return the report for ``name``, creating an empty one on first use."""
        release_report = self.streams.get(name)
        if release_report is None:
            release_report = ReleaseReport()
            self.streams[name] = release_report
        return release_report

    def unhealthy_count(self) -> int:
        """Return the number of streams with at least one unhealthy message."""
        return sum(1 for release_report in self.streams.values() if not release_report.is_healthy)

    def summary(self, arch: str) -> str:
        """Return a one-line headline for the report."""
        return (
            f"Payload stream health report for `{arch}`, `v4.{self.oldest_minor}` to "
            f"`v4.{self.newest_minor}` ({self.unhealthy_count()} of {len(self.streams)} "
            "streams unhealthy)"
        )

    def sorted_streams(self) -> List[str]:
        """Return stream names ordered from the newest minor version to the oldest.

        Names are sorted lexically first so that streams sharing a minor version
        keep a stable, deterministic order.
        """
        streams = sorted(self.streams)
        streams.sort(key=_minor_or_default, reverse=True)
        return streams

    def render(self, include_healthy: bool = False) -> str:
        """Render the report as human-readable text.

        Args:
            include_healthy: When ``True``, healthy streams and healthy messages
                are included and unhealthy messages carry a warning marker.
                When ``False``, only streams with unhealthy messages are shown.

        Returns:
            Multi-line text report ending with the ignored minor-version bounds.
        """
        output = ""

        for name in self.sorted_streams():
            release_report = self.streams[name]
            if release_report.is_healthy and not include_healthy:
                continue

            output += f"{self.release_api_url}/#{name}\n"

            prefix = UNHEALTHY_PREFIX if include_healthy else ""
            for message in release_report.unhealthy_messages:
                output += f"  * {prefix}{message}\n"

            if include_healthy:
                for message in release_report.healthy_messages:
                    output += f"  * {message}\n"

            output += "\n"

        if not include_healthy and not output:
            output += "No unhealthy payload streams detected\n"

        output += (
            f"\nIgnored releases older than 4.{self.oldest_minor}.z "
            f"and newer than 4.{self.newest_minor}.z\n"
        )
        return output


def _minor_or_default(name: str) -> int:
    minor = parse_payload_minor(name)
    return -1 if minor is None else minor
