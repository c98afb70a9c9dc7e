"""Empty and stale release stream detection.

A stream is *empty* when it lists no payloads at all and *stale* when none of
its payloads is younger than the staleness threshold. Streams with at least
one fresh payload are reported in neither set.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Dict, List, Mapping, Optional, Set, Tuple

from .errors import ParseError
from .versions import PAYLOAD_TIMEZONE, in_minor_range, parse_payload_timestamp

logger = logging.getLogger(__name__)

ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)


def find_empty_and_stale_streams(
    releases: Mapping[str, List[str]],
    threshold: timedelta,
    oldest_minor: int,
    newest_minor: int,
    release_api_url: str = "",
    now: Optional[datetime] = None,
    tz: tzinfo = PAYLOAD_TIMEZONE,
) -> Tuple[Set[str], Dict[str, timedelta]]:
    """Classify in-range release streams as empty or stale.

    Business logic:
    - Streams that are not z-streams or fall outside ``[oldest_minor, newest_minor]``
      are ignored.
    - A stream with no payloads is empty.
    - A payload is fresh when ``now - timestamp < threshold``; payloads whose
      timestamp cannot be parsed are logged and skipped.
    - A non-empty stream without a fresh payload is stale, aged by its newest
      parsed payload (or the zero time when no payload timestamp parsed).

    Returns ``(empty_streams, stale_streams)`` where ``stale_streams`` maps the
    stream name to the age of its newest payload.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    empty_streams: Set[str] = set()
    stale_streams: Dict[str, timedelta] = {}

    for stream, payloads in releases.items():
        if in_minor_range(stream, oldest_minor, newest_minor) is None:
            continue

        if not payloads:
            logger.debug("Release stream has no payloads", extra={"stream": stream})
            empty_streams.add(stream)
            continue

        fresh_payload = False
        newest = ZERO_TIME
        for payload in payloads:
            try:
                timestamp = parse_payload_timestamp(payload, tz)
            except ParseError as exc:
                logger.error("Unable to get payload timestamp: %s", exc)
                continue

            age = now - timestamp
            if age < threshold:
                fresh_payload = True
            logger.debug(
                "Evaluated payload freshness",
                extra={
                    "stream": stream,
                    "payload": payload,
                    "age_hours": age.total_seconds() / 3600,
                    "threshold_hours": threshold.total_seconds() / 3600,
                    "fresh": age < threshold,
                },
            )
            if timestamp > newest:
                newest = timestamp

        if not fresh_payload:
            logger.debug(
                "Release stream does not have a recent payload: %s/#%s",
                release_api_url,
                stream,
            )
            stale_streams[stream] = now - newest

    return empty_streams, stale_streams
