"""Command-line argument parsing for the release watcher."""

from __future__ import annotations

import argparse
import re
from datetime import timedelta
from typing import Optional, Sequence

from .config import (
    DEFAULT_ACCEPTED_STALENESS_LIMIT,
    DEFAULT_ARCH,
    DEFAULT_BUILT_STALENESS_LIMIT,
    DEFAULT_UPGRADE_STALENESS_LIMIT,
    RELEASE_API_URLS,
)

_DURATION_PART = re.compile(r"([0-9]+(?:\.[0-9]+)?)(d|h|m|s)")
_DURATION = re.compile(r"(?:[0-9]+(?:\.[0-9]+)?(?:d|h|m|s))+")
_UNIT_SECONDS = {"d": 86400, "h": 3600, "m": 60, "s": 1}


def _duration(value: str) -> timedelta:
    """Parse a positive duration such as ``24h``, ``90m``, ``1h30m`` or ``3d``.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive duration.
    """
    text = value.strip()
    if not _DURATION.fullmatch(text):
        raise argparse.ArgumentTypeError(f"invalid duration {value!r} (examples: 24h, 90m, 1h30m, 3d)")

    seconds = sum(float(amount) * _UNIT_SECONDS[unit] for amount, unit in _DURATION_PART.findall(text))
    if seconds <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return timedelta(seconds=seconds)


def _non_negative_int(value: str) -> int:
    """Parse and validate a non-negative integer CLI value."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed < 0:
        raise argparse.ArgumentTypeError("must not be negative")

    return parsed


def _utc_offset(value: str) -> timedelta:
    """Parse a UTC offset in hours such as ``-5`` or ``5.5``."""
    try:
        hours = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a number of hours") from exc

    if not -24 < hours < 24:
        raise argparse.ArgumentTypeError("must be strictly between -24 and 24 hours")

    return timedelta(hours=hours)


def _format_hours(limit: timedelta) -> str:
    return f"{limit.total_seconds() / 3600:g}h"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for report generation.

    Returns:
        Parsed CLI arguments containing staleness limits, minor-version bounds,
        architecture, and output options.
    """
    parser = argparse.ArgumentParser(
        prog="release-watcher",
        description=(
            "Report which release streams do not have recently built payloads, "
            "recently accepted payloads, or recent successful upgrades."
        ),
    )

    parser.add_argument(
        "--oldest-minor",
        type=_non_negative_int,
        default=None,
        help=(
            "The oldest minor release to analyze (e.g. 9). Older release streams are ignored. "
            "Defaults to the oldest supported release."
        ),
    )
    parser.add_argument(
        "--newest-minor",
        type=_non_negative_int,
        default=None,
        help=(
            "The newest minor release to analyze (e.g. 12). Newer release streams are ignored. "
            "Defaults to one past the newest supported release."
        ),
    )
    parser.add_argument(
        "--accepted-staleness-limit",
        type=_duration,
        default=DEFAULT_ACCEPTED_STALENESS_LIMIT,
        help=(
            "How old an accepted payload can be before it is considered stale "
            f"(default: {_format_hours(DEFAULT_ACCEPTED_STALENESS_LIMIT)})."
        ),
    )
    parser.add_argument(
        "--built-staleness-limit",
        type=_duration,
        default=DEFAULT_BUILT_STALENESS_LIMIT,
        help=(
            "How old a built payload can be before it is considered stale "
            f"(default: {_format_hours(DEFAULT_BUILT_STALENESS_LIMIT)})."
        ),
    )
    parser.add_argument(
        "--upgrade-staleness-limit",
        type=_duration,
        default=DEFAULT_UPGRADE_STALENESS_LIMIT,
        help=(
            "How old a successful upgrade can be before it is considered stale "
            f"(default: {_format_hours(DEFAULT_UPGRADE_STALENESS_LIMIT)})."
        ),
    )
    parser.add_argument(
        "--include-healthy",
        action="store_true",
        help="Report about healthy release streams, not just failures.",
    )
    parser.add_argument(
        "--arch",
        choices=sorted(RELEASE_API_URLS),
        default=DEFAULT_ARCH,
        help=f"Which architecture to report on (default: {DEFAULT_ARCH}).",
    )
    parser.add_argument(
        "--payload-utc-offset",
        type=_utc_offset,
        default=timedelta(0),
        help=(
            "UTC offset in hours that payload build timestamps are recorded in "
            "(e.g. -5 for EST; default: 0)."
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v for info, -vv for debug).",
    )

    return parser.parse_args(argv)
