from __future__ import annotations

from typing import Iterator, List

from .models import Address


def _space_size(base: Address) -> int:
    zeros = base.packed.count(0)
    if zeros == 0:
        return 0
    size = 256 ** zeros
    # single wildcard octet: drop the broadcast value
    if size == 256:
        size -= 1
    return size


def address_count(base: Address) -> int:
    """Number of addresses expand(base) yields, without building them."""
    size = _space_size(base)
    if size == 0:
        return 1
    return size - 1


def _digits(i: int):
    # lowest digit is base 255, the rest base 256 over repeated /255
    return (
        i % 255,
        i // 255 % 256,
        i // 255 // 255 % 256,
        i // 255 // 255 // 255 % 256,
    )


def iter_addresses(base: Address) -> Iterator[Address]:
    """
    Lazily enumerate the addresses a base address stands for.

    A base without zero octets is a single host. Otherwise each zero octet is
    a wildcard: index i runs from 1 to size-1 and its digits are written into
    the zero positions scanning from the rightmost octet leftwards, the first
    wildcard found taking the lowest digit.

    With two or more wildcards the digit decomposition wraps, so some
    addresses repeat and others never appear; no broadcast is excluded there.
    """
    octets = base.packed
    wildcards = [pos for pos in (3, 2, 1, 0) if octets[pos] == 0]
    if not wildcards:
        yield base
        return

    size = _space_size(base)
    for i in range(1, size):
        digits = _digits(i)
        ip = bytearray(octets)
        for k, pos in enumerate(wildcards):
            ip[pos] = digits[k]
        yield Address(bytes(ip))


def expand(base: Address) -> List[Address]:
    """
    Materialised form of iter_addresses().
    Use iter_addresses() for bases with three or more zero octets.
    """
    return list(iter_addresses(base))
