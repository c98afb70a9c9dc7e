"""Tests for application orchestration in the main module."""

import sys
from datetime import timedelta, timezone
from pathlib import Path
from unittest.mock import Mock, patch

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from release_watcher.errors import ConfigurationError, DecodeError, FetchError
from release_watcher.main import orchestrate_report_generation


def test_orchestrate_report_generation_success(capsys):
    """Verify orchestration returns 0 and prints the rendered report."""
    report = Mock()
    report.render.return_value = "REPORT"
    report.summary.return_value = "SUMMARY"

    with patch("release_watcher.main.generate_report", return_value=report) as generate_mock:
        exit_code = orchestrate_report_generation(
            [
                "--oldest-minor",
                "10",
                "--newest-minor",
                "12",
                "--include-healthy",
                "--arch",
                "multi",
                "--payload-utc-offset",
                "-5",
            ]
        )

    assert exit_code == 0
    generate_mock.assert_called_once_with(
        timedelta(hours=24),
        timedelta(hours=72),
        timedelta(hours=72),
        10,
        12,
        "multi",
        payload_timezone=timezone(timedelta(hours=-5)),
    )
    report.render.assert_called_once_with(True)
    assert "REPORT" in capsys.readouterr().out


def test_orchestrate_report_generation_configuration_error_returns_2():
    """Verify invalid minor bounds map to the configuration exit code without generating."""
    with patch("release_watcher.main.generate_report") as generate_mock:
        exit_code = orchestrate_report_generation(["--oldest-minor", "13", "--newest-minor", "12"])

    assert exit_code == 2
    generate_mock.assert_not_called()


def test_orchestrate_report_generation_fetch_error_returns_4():
    """Verify fetch failures map to the fetch exit code."""
    with patch("release_watcher.main.generate_report", side_effect=FetchError("unreachable")):
        exit_code = orchestrate_report_generation(["--oldest-minor", "10", "--newest-minor", "12"])

    assert exit_code == 4


def test_orchestrate_report_generation_decode_error_returns_4(capsys):
    """Verify decode failures map to the fetch exit code and are reported on stderr."""
    with patch("release_watcher.main.generate_report", side_effect=DecodeError("bad graph")):
        exit_code = orchestrate_report_generation([])

    assert exit_code == 4
    assert "bad graph" in capsys.readouterr().err


def test_orchestrate_report_generation_resolution_error_returns_2():
    """Verify configuration errors raised during range resolution map to exit code 2."""
    with patch("release_watcher.main.generate_report", side_effect=ConfigurationError("inverted")):
        exit_code = orchestrate_report_generation([])

    assert exit_code == 2


def test_orchestrate_report_generation_unexpected_error_returns_generic_exit_code():
    """Verify unexpected exceptions are mapped to the generic non-zero exit code."""
    with patch("release_watcher.main.parse_args", side_effect=RuntimeError("boom")):
        exit_code = orchestrate_report_generation()

    assert exit_code == 1
