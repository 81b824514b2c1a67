from __future__ import annotations

import csv
import json
import os
from datetime import datetime
from typing import Any, Dict, Optional

from .models import HostResult, ScanReport

FORMATS = ("txt", "csv", "json")


def format_host(r: HostResult) -> str:
    if not r.open_ports:
        return ""
    ports = ", ".join(str(p) for p in r.open_ports)
    return f"{r.address}: {ports:>15}"


def format_report(report: ScanReport) -> str:
    lines = [
        f"Scanner for {report.address}",
        f"Ports: {list(report.ports)}",
        "=========================",
    ]
    for r in report.hosts_with_open_ports():
        lines.append(format_host(r))
    return "\n".join(lines) + "\n"


def print_report(report: ScanReport) -> None:
    print()
    print(format_report(report), end="")
    print(f"Found {report.open_count} open ports on {len(report.hosts_with_open_ports())} hosts")


def report_to_dict(report: ScanReport) -> Dict[str, Any]:
    return {
        "ip": str(report.address),
        "ports": list(report.ports),
        "results": [
            {"ip": str(r.address), "openPorts": list(r.open_ports)}
            for r in report.results
        ],
    }


def save_report(
    report: ScanReport,
    fmt: str,
    path: Optional[str] = None,
    out_dir: str = "SCANS",
) -> str:
    """
    Write the report to disk and return the file path.
    Without an explicit path a timestamped file is created in out_dir.
    """
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported format: {fmt}")

    if path is None:
        os.makedirs(out_dir, exist_ok=True)
        ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        path = os.path.join(out_dir, f"{ts}_skanner.{fmt}")
    else:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)

    if fmt == "txt":
        with open(path, "w", encoding="utf-8") as f:
            f.write(format_report(report))

    elif fmt == "csv":
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["ip", "open_ports"])
            for r in report.results:
                w.writerow([str(r.address), " ".join(str(p) for p in r.open_ports)])

    else:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(report_to_dict(report), f, indent=2)

    return path
