"""Entry point orchestration for the release watcher."""

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from .cli import parse_args
from .config import load_config
from .errors import ConfigurationError, DecodeError, FetchError
from .report import generate_report

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_UNEXPECTED_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2
EXIT_FETCH_ERROR = 4

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbosity: int) -> None:
    """Send log records to stderr at a level chosen by ``-v`` flags."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def orchestrate_report_generation(argv: Optional[Sequence[str]] = None) -> int:
    """Run the report workflow and return a process exit code.

    Exit codes:
        0: success
        1: unexpected error
        2: invalid configuration or minor-version range
        4: release data could not be fetched or decoded
    """
    try:
        args = parse_args(argv)
        configure_logging(args.verbose)

        config = load_config(
            accepted_staleness_limit=args.accepted_staleness_limit,
            built_staleness_limit=args.built_staleness_limit,
            upgrade_staleness_limit=args.upgrade_staleness_limit,
            oldest_minor=args.oldest_minor,
            newest_minor=args.newest_minor,
            arch=args.arch,
            include_healthy=args.include_healthy,
            payload_utc_offset=args.payload_utc_offset,
        )

        report = generate_report(
            config.accepted_staleness_limit,
            config.built_staleness_limit,
            config.upgrade_staleness_limit,
            config.oldest_minor,
            config.newest_minor,
            config.arch,
            payload_timezone=config.payload_timezone,
        )
        logger.info(report.summary(config.arch))

        print(report.render(config.include_healthy))
        return EXIT_SUCCESS
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CONFIGURATION_ERROR
    except (FetchError, DecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_FETCH_ERROR
    except Exception as exc:
        logger.exception("Unexpected error while generating the report")
        print(f"error: unexpected failure: {exc}", file=sys.stderr)
        return EXIT_UNEXPECTED_ERROR


def main() -> None:
    """Console script entry point."""
    sys.exit(orchestrate_report_generation())


if __name__ == "__main__":
    main()
