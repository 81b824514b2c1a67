from __future__ import annotations

import argparse
import logging
import os
from typing import Optional

from .models import DEFAULT_PORTS, ScanRequest
from .output import FORMATS, print_report, save_report
from .ports import parse_ports
from .scanner import DEFAULT_TIMEOUT_S, DEFAULT_WORKERS, ScanAborted, run_scan


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="skanner", description="Concurrent TCP connect scanner")
    p.add_argument("-i", "--ip", required=True, help="IPv4 address; zero octets expand as wildcards (192.168.1.0)")
    p.add_argument(
        "-p", "--ports",
        help=f"Port spec: 22,80,443 or 8000-8010 or mixed (default: {','.join(map(str, DEFAULT_PORTS))})",
    )
    p.add_argument("-o", "--output", help="Save the report to this file")
    p.add_argument("--format", choices=FORMATS, help="Report file format (default: from --output suffix, else txt)")
    p.add_argument("--workers", type=int, default=DEFAULT_WORKERS, help=f"Concurrent hosts (default: {DEFAULT_WORKERS})")
    p.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT_S, help=f"Connect timeout seconds (default: {DEFAULT_TIMEOUT_S})")
    p.add_argument("--progress-every", type=int, default=256, help="Progress update interval in hosts, 0 disables (default: 256)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log every host as it is probed")
    return p


def output_format(path: str, fmt: Optional[str] = None) -> str:
    if fmt:
        return fmt
    suffix = os.path.splitext(path)[1].lstrip(".").lower()
    return suffix if suffix in FORMATS else "txt"


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.workers < 1:
        raise SystemExit("--workers must be >= 1")
    if args.timeout <= 0:
        raise SystemExit("--timeout must be > 0")

    try:
        ports = parse_ports(args.ports) if args.ports else None
        request = ScanRequest.create(args.ip, ports)
    except ValueError as e:
        raise SystemExit(str(e))

    try:
        report = run_scan(
            request,
            workers=args.workers,
            timeout_s=args.timeout,
            progress_every=args.progress_every,
        )
    except ScanAborted as e:
        logging.error("Scan aborted: %s", e)
        return 1

    print_report(report)

    if args.output:
        path = save_report(report, fmt=output_format(args.output, args.format), path=args.output)
        print(f"Saved results to {path}")

    return 0
