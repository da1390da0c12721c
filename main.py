#!/usr/bin/env python3
"""
EKS log collector - gathers OS, Docker and EKS agent logs into a support bundle.

Must run as root on the node being diagnosed.
"""

import argparse
import logging
import sys
from typing import List, NoReturn, Optional

from ekslogs.core.config import load_collector_config

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", stream=sys.stderr
)

MODES_HELP = """
MODES:
  brief       Gathers basic operating system, Docker daemon, and Amazon EKS related
              config files and logs. This is the default mode.
  debug       Collects 'brief' logs and also enables debug mode for the Docker daemon.
  debug-only  Enables debug mode for the Docker daemon.
"""


class _CollectorArgumentParser(argparse.ArgumentParser):
    """Bad input is a plain failure (exit 1), not argparse's usage error (exit 2)."""

    def error(self, message: str) -> NoReturn:
        self.print_help(sys.stderr)
        self.exit(1, f"\n{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _CollectorArgumentParser(
        prog="eks-log-collector",
        description="Collect Docker daemon and Amazon EKS node logs into an archive for support analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=MODES_HELP,
        allow_abbrev=False,
    )
    parser.add_argument(
        "--mode",
        default="brief",
        choices=["brief", "debug", "debug-only"],
        help="Sets the desired mode of the script (default: brief). See MODES below.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    config = load_collector_config()
    logging.getLogger().setLevel(getattr(logging, config.log_level, logging.INFO))

    from ekslogs.pipeline.pipeline import run_collection
    from ekslogs.report import render_report

    report = run_collection(args.mode, config=config)

    print(render_report(report))
    if report.exit_code:
        print(f"ERROR: {report.fatal_reason}.. exiting...", file=sys.stderr)
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
