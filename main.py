#!/usr/bin/env python3
"""Threat Analyzer - Entry point"""

import argparse
import json
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from threat_analyzer import (
    VERSION, DEFAULT_GEO_LOCATIONS, SAMPLE_LOGS, DetectionConfig, GeoTableError, LogAnalyzer,
    load_geo_table, print_report,
)
from threat_analyzer.patterns import LOG_FORMATS

console = Console()
logger = logging.getLogger("threat_analyzer")


def build_parser() -> argparse.ArgumentParser:
    defaults = DetectionConfig()
    parser = argparse.ArgumentParser(
        description="Threat Analyzer - Security log threat analysis tool",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument("logfile", nargs="?", help="Log file to analyze")
    parser.add_argument("--demo", action="store_true", help="Analyze the bundled sample logs")
    parser.add_argument("-f", "--format", choices=LOG_FORMATS, default='auto', help="Log format")
    parser.add_argument("-g", "--geo", help="JSON file mapping country to {lat, lng}")
    parser.add_argument("--brute-force-threshold", type=int, default=defaults.brute_force_threshold,
                        help="Failed logins from one IP before alerting")
    parser.add_argument("--ddos-min", type=int, default=defaults.ddos_min_requests,
                        help="Minimum per-IP request count to exceed for a DDoS alert")
    parser.add_argument("--ddos-percent", type=int, default=defaults.ddos_share_percent,
                        help="Share of the batch (percent) one IP must exceed for a DDoS alert")
    parser.add_argument("--top", type=int, default=defaults.top_ips_limit, help="Number of top IPs")
    parser.add_argument("-o", "--output", help="Output file (JSON)")
    parser.add_argument("-j", "--json", action="store_true", help="JSON output only")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"ThreatAnalyzer v{VERSION}")
    return parser


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.logfile and not args.demo:
        parser.error("a log file is required unless --demo is given")

    setup_logging(args.verbose)

    config = DetectionConfig(
        brute_force_threshold=args.brute_force_threshold,
        ddos_min_requests=args.ddos_min,
        ddos_share_percent=args.ddos_percent,
        top_ips_limit=args.top,
    )
    analyzer = LogAnalyzer(config=config, log_format=args.format)

    try:
        geo_table = load_geo_table(args.geo) if args.geo else DEFAULT_GEO_LOCATIONS

        if args.demo:
            report = analyzer.analyze_lines(SAMPLE_LOGS, geo_table)
        else:
            report = analyzer.analyze_file(args.logfile, geo_table)

        if args.json:
            print(json.dumps(report, indent=2))
        else:
            print_report(report, console)

        if args.output:
            with open(args.output, 'w') as f:
                json.dump(report, f, indent=2)
            if not args.json:
                console.print(f"\n[green]Report saved to:[/] {escape(args.output)}")

    except (FileNotFoundError, GeoTableError) as e:
        logger.debug("Analysis aborted", exc_info=True)
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
