from __future__ import annotations

from typing import List

from .models import MAX_PORT, MIN_PORT


def parse_ports(spec: str) -> List[int]:
    """
    Parses a port specification string into a list of ports.
    Supports:
    - Single ports: "80"
    - Ranges: "8000-8005"
    - Comma-separated: "22,80,443"
    - Mixed: "80,22,8000-8005"

    Order is kept as written, duplicates are not removed.
    """
    spec = spec.strip()
    if not spec:
        raise ValueError("Empty port spec")

    ports: List[int] = []
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_s, end_s = part.split("-", 1)
            try:
                start = int(start_s)
                end = int(end_s)
            except ValueError:
                raise ValueError(f"Invalid port range: {part}") from None
            if start < MIN_PORT or end > MAX_PORT or start > end:
                raise ValueError(f"Invalid port range: {part}")
            ports.extend(range(start, end + 1))
        else:
            try:
                p = int(part)
            except ValueError:
                raise ValueError(f"Invalid port: {part}") from None
            if p < MIN_PORT or p > MAX_PORT:
                raise ValueError(f"Invalid port: {p}")
            ports.append(p)

    if not ports:
        raise ValueError(f"No ports in spec: {spec!r}")
    return ports
