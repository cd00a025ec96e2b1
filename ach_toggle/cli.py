"""
Command line entry point: ach-toggle PATH
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .models import ToggleReport, ToggleStatus
from .rules import atomic_default, log_level_default
from .toggle import toggle_file

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="ach-toggle",
        description="Toggle an ACH file between one record per line and a single unbroken line. "
        "The file is overwritten in place.",
    )
    ap.add_argument("path", nargs="?", help="ACH file to toggle")
    ap.add_argument(
        "--atomic",
        action="store_true",
        default=atomic_default(),
        help="write to a sibling temp file and rename it over the target",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="log progress to stderr")
    return ap


def exit_code_for(report: ToggleReport) -> int:
    if report.status is not ToggleStatus.FAILED:
        return 0
    code = report.error_code or 1
    # process exit statuses are 8 bit; never let a real failure wrap to 0
    code = code & 0xFF
    return code or 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else log_level_default(),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.path:
        logger.debug("no path given, nothing to do")
        report = ToggleReport(status=ToggleStatus.NO_ARGUMENT)
    else:
        report = toggle_file(args.path, atomic=args.atomic)

    if report.status is ToggleStatus.FAILED:
        print(report.message, file=sys.stderr)
    elif report.status in (ToggleStatus.TOO_SHORT, ToggleStatus.UNDETERMINED):
        print(report.message)

    return exit_code_for(report)


if __name__ == "__main__":
    raise SystemExit(main())
