"""Tests for report generation across the upgrade and staleness passes."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from release_watcher.errors import ConfigurationError, FetchError
from release_watcher.report import generate_report, resolve_minor_range

NOW = datetime(2024, 1, 10, 0, 0, 0, tzinfo=timezone.utc)
ACCEPTED = timedelta(hours=24)
BUILT = timedelta(hours=72)
UPGRADE = timedelta(hours=72)


def _payload(stream: str, age: timedelta) -> str:
    return f"{stream}-{(NOW - age).strftime('%Y-%m-%d-%H%M%S')}"


def _source(accepted: dict, all_releases: dict, graph: dict | None = None) -> Mock:
    source = Mock()
    source.fetch_release_map.side_effect = lambda kind: accepted if kind == "accepted" else all_releases
    source.fetch_upgrade_graph.return_value = graph or {}
    return source


def _generate(source: Mock, oldest: int = 10, newest: int = 14, life_cycle: Mock | None = None):
    return generate_report(
        ACCEPTED,
        BUILT,
        UPGRADE,
        oldest,
        newest,
        "amd64",
        source=source,
        life_cycle=life_cycle,
        now=NOW,
    )


def test_generate_report_inverted_bounds_raises_before_fetching():
    """Verify oldest > newest fails with ConfigurationError and no fetch is attempted."""
    source = _source({}, {})
    life_cycle = Mock()

    with pytest.raises(ConfigurationError):
        _generate(source, oldest=13, newest=12, life_cycle=life_cycle)

    source.fetch_release_map.assert_not_called()
    source.fetch_upgrade_graph.assert_not_called()
    life_cycle.resolve_supported_minor_range.assert_not_called()


def test_generate_report_unknown_arch_raises_configuration_error():
    """Verify an unknown architecture is rejected before fetching."""
    source = _source({}, {})

    with pytest.raises(ConfigurationError):
        generate_report(ACCEPTED, BUILT, UPGRADE, 10, 12, "sparc", source=source, now=NOW)

    source.fetch_release_map.assert_not_called()


def test_generate_report_fetches_both_release_maps_and_stable_graph():
    """Verify the data source is queried for accepted, all, and the stable graph."""
    source = _source({}, {})

    report = _generate(source)

    assert [call.args[0] for call in source.fetch_release_map.call_args_list] == ["accepted", "all"]
    source.fetch_upgrade_graph.assert_called_once_with("stable")
    assert report.release_api_url == "https://amd64.ocp.releases.ci.openshift.org"
    assert report.oldest_minor == 10
    assert report.newest_minor == 14


def test_generate_report_propagates_fetch_errors():
    """Verify fetch failures abort report generation unchanged."""
    source = Mock()
    source.fetch_release_map.side_effect = FetchError("boom")

    with pytest.raises(FetchError, match="boom"):
        _generate(source)


def test_no_accepted_payloads_with_recent_builds():
    """Verify an unaccepted stream with recent builds is flagged for recent builds."""
    stream = "4.14.0-0.nightly"
    recent = _payload(stream, timedelta(hours=2))
    source = _source({stream: []}, {stream: [recent]}, {recent: ["4.14.1", "4.13.9"]})

    report = _generate(source)

    assert report.streams[stream].unhealthy_messages == [
        "Has no accepted payloads, but the stream contains recently built payloads"
    ]


def test_no_accepted_payloads_with_only_old_builds():
    """Verify an unaccepted stream with only old builds is flagged for built payloads and staleness."""
    stream = "4.13.0-0.ci"
    old = _payload(stream, timedelta(days=4))
    source = _source({stream: []}, {stream: [old]})

    report = _generate(source)

    assert report.streams[stream].unhealthy_messages == [
        "Does not have a recent valid patch level upgrade",
        "Does not have a recent valid minor level upgrade",
        "Has no accepted payloads, but the stream contains built payloads",
        "Most recently built payload was 4.0 days ago",
    ]


def test_stream_without_any_payloads_is_flagged_once_as_unbuilt():
    """Verify a fully empty stream only gets the no-built-payloads message."""
    stream = "4.12.0-0.ci"
    source = _source({stream: []}, {stream: []})

    report = _generate(source)

    messages = report.streams[stream].unhealthy_messages
    assert "Has no built payloads" in messages
    assert not any(message.startswith("Has no accepted payloads") for message in messages)


def test_stale_accepted_payload_reports_limit_and_age():
    """Verify an old accepted payload is reported with the limit and its age in days."""
    stream = "4.12.0-0.ci"
    accepted = _payload(stream, timedelta(days=2))
    recent = _payload(stream, timedelta(hours=1))
    source = _source({stream: [accepted]}, {stream: [accepted, recent]}, {recent: ["4.12.1", "4.11.1"]})

    report = _generate(source)

    assert report.streams[stream].unhealthy_messages == [
        "Most recently accepted payload > 1.0 days, last accepted was 2.0 days ago"
    ]
    assert report.streams[stream].healthy_messages == [
        "Has a recent valid patch level upgrade from 4.12.1 0.0 days ago",
        "Has a recent valid minor level upgrade from 4.11.1 0.0 days ago",
    ]


def test_healthy_stream_has_no_unhealthy_messages_and_renders_all_clear():
    """Verify a stream with fresh accepted payloads and upgrades renders as healthy."""
    stream = "4.12.0-0.ci"
    recent = _payload(stream, timedelta(hours=3))
    source = _source({stream: [recent]}, {stream: [recent]}, {recent: ["4.12.1", "4.11.1"]})

    report = _generate(source)

    assert report.streams[stream].unhealthy_messages == []
    assert report.render().startswith("No unhealthy payload streams detected\n")


def test_accepted_only_stream_gets_report_entry():
    """Verify streams known only from accepted payloads still receive messages."""
    stream = "4.11.0-0.ci"
    source = _source({stream: [_payload(stream, timedelta(days=3))]}, {})

    report = _generate(source)

    assert report.streams[stream].unhealthy_messages == [
        "Most recently accepted payload > 1.0 days, last accepted was 3.0 days ago"
    ]


def test_accepted_only_empty_stream_is_flagged_as_unbuilt():
    """Verify an empty accepted stream missing from all payloads is not reported as recently built."""
    stream = "4.12.0-0.ci"
    source = _source({stream: []}, {})

    report = _generate(source)

    messages = report.streams[stream].unhealthy_messages
    assert messages == ["Has no built payloads"]
    assert not any("recently built" in message for message in messages)


def test_payload_timezone_shifts_every_evaluation_pass():
    """Verify build timestamps are read in the configured fixed offset."""
    stream = "4.12.0-0.ci"
    ahead = timezone(timedelta(hours=5))
    # 20h old when read as UTC, 25h old when read as UTC+5.
    payload = _payload(stream, timedelta(hours=20))
    source = _source({stream: [payload]}, {stream: [payload]}, {payload: ["4.12.1", "4.11.1"]})

    utc_report = generate_report(ACCEPTED, BUILT, UPGRADE, 10, 14, source=source, now=NOW)
    ahead_report = generate_report(
        ACCEPTED, BUILT, UPGRADE, 10, 14, source=source, now=NOW, payload_timezone=ahead
    )

    assert utc_report.streams[stream].unhealthy_messages == []
    assert ahead_report.streams[stream].unhealthy_messages == [
        "Most recently accepted payload > 1.0 days, last accepted was 1.0 days ago"
    ]
    assert ahead_report.streams[stream].healthy_messages == [
        "Has a recent valid patch level upgrade from 4.12.1 1.0 days ago",
        "Has a recent valid minor level upgrade from 4.11.1 1.0 days ago",
    ]


def test_resolve_minor_range_uses_life_cycle_and_adds_next_minor():
    """Verify missing bounds come from the supported range with newest incremented."""
    life_cycle = Mock()
    life_cycle.resolve_supported_minor_range.return_value = (12, 16)

    assert resolve_minor_range(None, None, life_cycle) == (12, 17)
    assert resolve_minor_range(14, None, life_cycle) == (14, 17)
    assert resolve_minor_range(None, 15, life_cycle) == (12, 15)


def test_resolve_minor_range_explicit_bounds_skip_life_cycle():
    """Verify explicit bounds are used as given without a life-cycle lookup."""
    life_cycle = Mock()

    assert resolve_minor_range(10, 12, life_cycle) == (10, 12)
    life_cycle.resolve_supported_minor_range.assert_not_called()


def test_resolve_minor_range_rejects_inverted_resolved_bounds():
    """Verify an explicit oldest above the resolved newest is a configuration error."""
    life_cycle = Mock()
    life_cycle.resolve_supported_minor_range.return_value = (12, 16)

    with pytest.raises(ConfigurationError):
        resolve_minor_range(20, None, life_cycle)
