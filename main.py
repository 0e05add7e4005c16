#!/usr/bin/env python3
"""
HeaderGrade - HTTP security header grader.

Usage:
  python main.py https://example.com
  python main.py example.com example.org -o report.json --html report.html
  python main.py https://example.com --verbose
  python main.py https://example.com --config myconfig.yaml --fail-under 70
"""

import argparse
import logging
import sys
from pathlib import Path

# Allow running from project root
sys.path.insert(0, str(Path(__file__).resolve().parent))

from headergrade.config import ConfigError, load_config
from headergrade.engine import scan_many
from headergrade.report import print_console, write_html, write_json


logger = logging.getLogger("headergrade")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="HeaderGrade - grade a site's HTTP security headers from 0 to 100.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("urls", nargs="+", metavar="URL", help="Target URL(s) (e.g. https://example.com)")
    parser.add_argument(
        "-o", "--output",
        metavar="FILE",
        help="Write JSON report to FILE",
    )
    parser.add_argument(
        "--html",
        metavar="FILE",
        help="Write HTML report to FILE",
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        metavar="FILE",
        help="Path to config YAML (default: config.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging and a per-category score breakdown",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only print summary; no finding details",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="HTTP timeout. Overrides config.",
    )
    parser.add_argument(
        "--fail-under",
        type=int,
        metavar="SCORE",
        help="Exit with status 1 if any score is below SCORE",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config_path = Path(args.config)
    if not config_path.is_file():
        config_path = Path(__file__).parent / "config.yaml"

    try:
        config = load_config(str(config_path))
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 2
    if args.timeout is not None:
        config["http"]["timeout"] = args.timeout

    logger.info("Scanning %d target(s)", len(args.urls))
    results = scan_many(args.urls, config=config)

    for result in results:
        print_console(result, verbose=args.verbose, quiet=args.quiet)
    if args.output:
        write_json(results[0] if len(results) == 1 else results, args.output)
        print(f"\nJSON report written to {args.output}")
    if args.html:
        write_html(results, args.html)
        print(f"HTML report written to {args.html}")

    if any(not r.ok for r in results):
        return 1
    if args.fail_under is not None and any(r.score < args.fail_under for r in results):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
