"""Version and timestamp extraction from release stream and payload names.

Release streams are named ``4.<minor>.0-0.ci`` or ``4.<minor>.0-0.nightly``
(optionally with an architecture suffix such as ``-arm64``). Payload names
embed a ``4.<minor>.<patch>`` version and end with a ``YYYY-MM-DD-HHMMSS``
build timestamp, for example ``4.12.0-0.nightly-2024-01-01-000000``.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone, tzinfo
from typing import Optional

from .errors import ParseError

logger = logging.getLogger(__name__)

# 4.NNN.0-0.ci / 4.NNN.0-0.nightly
Z_RELEASE_PATTERN = re.compile(r"4\.([0-9]+)\.0-0\.(ci|nightly)")
MINOR_PATTERN = re.compile(r"4\.([0-9]+)\.[0-9]+")
# YYYY-MM-DD-HHMMSS
TIMESTAMP_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}-[0-9]{6}$")
TIMESTAMP_FORMAT = "%Y-%m-%d-%H%M%S"

# Build timestamps carry no zone; they are read as a fixed offset.
PAYLOAD_TIMEZONE: tzinfo = timezone.utc


def parse_stream_minor(name: str) -> Optional[int]:
    """Return the minor version of a z-stream release name, or ``None`` if it is not one."""
    match = Z_RELEASE_PATTERN.search(name)
    if match is None:
        return None
    return int(match.group(1))


def parse_payload_minor(name: str) -> Optional[int]:
    """Return the minor version embedded in a payload or version name, or ``None``."""
    match = MINOR_PATTERN.search(name)
    if match is None:
        return None
    return int(match.group(1))


def parse_payload_timestamp(name: str, tz: tzinfo = PAYLOAD_TIMEZONE) -> datetime:
    """Extract the trailing build timestamp from a payload name.

    Args:
        name: Payload name such as ``4.12.0-0.ci-2024-01-01-000000``.
        tz: Fixed offset the naive build timestamp is interpreted in.

    Returns:
        A timezone-aware ``datetime``.

    Raises:
        ParseError: If the name has no trailing timestamp or it is not a valid date.
    """
    match = TIMESTAMP_PATTERN.search(name)
    if match is None:
        raise ParseError(f"could not extract date from payload {name}")

    try:
        parsed = datetime.strptime(match.group(0), TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise ParseError(f"failed to parse time string {match.group(0)}: {exc}") from exc

    return parsed.replace(tzinfo=tz)


def in_minor_range(stream: str, oldest_minor: int, newest_minor: int) -> Optional[int]:
    """Return the stream's minor version when it is a z-stream inside ``[oldest, newest]``."""
    minor = parse_stream_minor(stream)
    if minor is None:
        logger.debug("Ignoring non z-stream release", extra={"stream": stream})
        return None

    if minor < oldest_minor:
        logger.debug(
            "Ignoring release older than the oldest desired minor",
            extra={"stream": stream, "oldest_minor": oldest_minor},
        )
        return None

    if minor > newest_minor:
        logger.debug(
            "Ignoring release newer than the newest desired minor",
            extra={"stream": stream, "newest_minor": newest_minor},
        )
        return None

    return minor
