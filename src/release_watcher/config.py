"""Configuration parsing and validation for the release watcher."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta, timezone, tzinfo
from typing import Optional

from .errors import ConfigurationError
from .versions import PAYLOAD_TIMEZONE

RELEASE_API_URLS = {
    "amd64": "https://amd64.ocp.releases.ci.openshift.org",
    "arm64": "https://arm64.ocp.releases.ci.openshift.org",
    "multi": "https://multi.ocp.releases.ci.openshift.org",
    "ppc64le": "https://ppc64le.ocp.releases.ci.openshift.org",
    "s390x": "https://s390x.ocp.releases.ci.openshift.org",
}

DEFAULT_ARCH = "amd64"
DEFAULT_ACCEPTED_STALENESS_LIMIT = timedelta(hours=24)
DEFAULT_BUILT_STALENESS_LIMIT = timedelta(hours=72)
DEFAULT_UPGRADE_STALENESS_LIMIT = timedelta(hours=72)


@dataclass(frozen=True)
class Config:
    """Validated, immutable settings for one report generation run.

    ``oldest_minor`` and ``newest_minor`` are ``None`` when they should be
    resolved from the supported product life-cycle. ``payload_timezone`` is the
    fixed offset naive payload build timestamps are read in.
    """

    accepted_staleness_limit: timedelta = DEFAULT_ACCEPTED_STALENESS_LIMIT
    built_staleness_limit: timedelta = DEFAULT_BUILT_STALENESS_LIMIT
    upgrade_staleness_limit: timedelta = DEFAULT_UPGRADE_STALENESS_LIMIT
    oldest_minor: Optional[int] = None
    newest_minor: Optional[int] = None
    arch: str = DEFAULT_ARCH
    include_healthy: bool = False
    payload_timezone: tzinfo = PAYLOAD_TIMEZONE


def resolve_release_api_url(arch: str) -> str:
    """Return the release-controller base URL for ``arch``.

    Raises:
        ConfigurationError: If the architecture is not known.
    """
    try:
        return RELEASE_API_URLS[arch]
    except KeyError:
        known = ", ".join(sorted(RELEASE_API_URLS))
        raise ConfigurationError(f"Unknown architecture: {arch} (expected one of {known}).") from None


def validate_minor_range(oldest_minor: Optional[int], newest_minor: Optional[int]) -> None:
    """Check that the known minor-version bounds form a valid range.

    Raises:
        ConfigurationError: If a bound is negative or ``newest_minor < oldest_minor``.
    """
    for name, value in (("oldest_minor", oldest_minor), ("newest_minor", newest_minor)):
        if value is not None and value < 0:
            raise ConfigurationError(
                f"Invalid value for '{name}': release versions must be non-negative, got {value}."
            )

    if oldest_minor is not None and newest_minor is not None and newest_minor < oldest_minor:
        raise ConfigurationError(
            f"Invalid release range ({oldest_minor} -> {newest_minor}): "
            "newest must be greater than or equal to oldest."
        )


def load_config(
    accepted_staleness_limit: timedelta = DEFAULT_ACCEPTED_STALENESS_LIMIT,
    built_staleness_limit: timedelta = DEFAULT_BUILT_STALENESS_LIMIT,
    upgrade_staleness_limit: timedelta = DEFAULT_UPGRADE_STALENESS_LIMIT,
    oldest_minor: Optional[int] = None,
    newest_minor: Optional[int] = None,
    arch: str = DEFAULT_ARCH,
    include_healthy: bool = False,
    payload_utc_offset: timedelta = timedelta(0),
) -> Config:
    """Build and validate application configuration.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If a staleness limit is not positive, a minor bound
            is negative or inverted, the architecture is unknown, or the payload
            UTC offset is not strictly between -24h and 24h.
    """
    limits = (
        ("accepted_staleness_limit", accepted_staleness_limit),
        ("built_staleness_limit", built_staleness_limit),
        ("upgrade_staleness_limit", upgrade_staleness_limit),
    )
    for name, limit in limits:
        if limit <= timedelta(0):
            raise ConfigurationError(f"Invalid value for '{name}': expected a positive duration.")

    validate_minor_range(oldest_minor, newest_minor)
    resolve_release_api_url(arch)

    try:
        payload_timezone = timezone(payload_utc_offset)
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid value for 'payload_utc_offset': {payload_utc_offset} is not a valid UTC offset."
        ) from exc

    return Config(
        accepted_staleness_limit=accepted_staleness_limit,
        built_staleness_limit=built_staleness_limit,
        upgrade_staleness_limit=upgrade_staleness_limit,
        oldest_minor=oldest_minor,
        newest_minor=newest_minor,
        arch=arch,
        include_healthy=include_healthy,
        payload_timezone=payload_timezone,
    )
