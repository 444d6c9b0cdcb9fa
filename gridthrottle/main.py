"""gridthrottle - CLI entry point.

Parses arguments, sets up logging and configuration, and runs a single
pass in ``scale`` or ``report`` mode.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from gridthrottle.config import load_config
from gridthrottle.engine import ThrottleEngine
from gridthrottle.market.ote_client import OteClient
from gridthrottle.scaling.cpufreq import CpuFreqStore
from gridthrottle.timewindow import TimeZoneError

logger = logging.getLogger("gridthrottle")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class _BelowError(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.ERROR


def configure_logging(level: str = "INFO") -> None:
    """Send records below ERROR to stdout and the rest to stderr."""
    formatter = logging.Formatter(LOG_FORMAT)

    out = logging.StreamHandler(sys.stdout)
    out.addFilter(_BelowError())
    out.setFormatter(formatter)

    err = logging.StreamHandler(sys.stderr)
    err.setLevel(logging.ERROR)
    err.setFormatter(formatter)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.addHandler(out)
    root.addHandler(err)
    root.setLevel(level.upper())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Throttle CPU frequency by the electricity price trend",
    )
    parser.add_argument(
        "--mode",
        choices=["scale", "report"],
        default="scale",
        help="scale CPUs from intraday prices, or only log day-ahead data (default: scale)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Decide the frequency but do not write it",
    )
    parser.add_argument("--env-file", help="Path to a .env file")
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    """Parse CLI arguments and run one pass.  Returns the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.env_file)
    except ValueError as exc:
        parser.error(str(exc))
    configure_logging(config.log_level)

    engine = ThrottleEngine(
        config=config,
        client=OteClient(config),
        store=CpuFreqStore(config.cpufreq_root),
        dry_run=args.dry_run,
    )

    try:
        if args.mode == "report":
            engine.report()
        else:
            engine.run()
    except TimeZoneError as exc:
        logger.critical("%s", exc)
        return 1
    return 0


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
