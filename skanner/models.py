from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

Address = ipaddress.IPv4Address

DEFAULT_PORTS: Tuple[int, ...] = (80, 22, 443, 8080)

MIN_PORT = 0
MAX_PORT = 65535


class AddressParseError(ValueError):
    """Raised when a target is not a dotted-quad IPv4 address."""


def parse_address(text: str) -> Address:
    """
    Supports only a literal IPv4 address: "192.168.1.0".
    Zero octets are kept as-is; they mark wildcard positions for expand().
    """
    if not isinstance(text, str):
        raise AddressParseError(f"Invalid IPv4 address: {text!r}")
    text = text.strip()
    if not text:
        raise AddressParseError("Empty address")

    try:
        return ipaddress.IPv4Address(text)
    except ValueError as e:
        raise AddressParseError(f"Invalid IPv4 address '{text}': {e}") from e


@dataclass(frozen=True)
class ScanRequest:
    address: Address
    ports: Tuple[int, ...] = DEFAULT_PORTS

    @classmethod
    def create(cls, ip: str, ports: Optional[Iterable[int]] = None) -> "ScanRequest":
        """
        Build a request from caller input.
        Falls back to DEFAULT_PORTS when no ports are given.
        """
        address = parse_address(ip)

        ports = tuple(ports or ())
        if not ports:
            return cls(address=address, ports=DEFAULT_PORTS)

        for p in ports:
            if not isinstance(p, int) or isinstance(p, bool) or not MIN_PORT <= p <= MAX_PORT:
                raise ValueError(f"Invalid port: {p!r}")
        return cls(address=address, ports=ports)


@dataclass(frozen=True)
class HostResult:
    address: Address
    open_ports: Tuple[int, ...] = ()

    @property
    def is_up(self) -> bool:
        return bool(self.open_ports)


@dataclass(frozen=True)
class ScanReport:
    request: ScanRequest
    results: Tuple[HostResult, ...] = ()

    @property
    def address(self) -> Address:
        return self.request.address

    @property
    def ports(self) -> Tuple[int, ...]:
        return self.request.ports

    @property
    def open_count(self) -> int:
        return sum(len(r.open_ports) for r in self.results)

    def hosts_with_open_ports(self) -> Tuple[HostResult, ...]:
        return tuple(r for r in self.results if r.is_up)
