from __future__ import annotations

import logging
import socket
import time
from collections.abc import Sized
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .models import Address, HostResult, ScanReport, ScanRequest
from .targets import address_count, iter_addresses

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 1.0
DEFAULT_WORKERS = 256

Probe = Callable[[Address, int, float], bool]


class ScanAborted(RuntimeError):
    """A probe task could not be completed; the scan has no partial result."""


def probe_port(address: Address, port: int, timeout_s: float = DEFAULT_TIMEOUT_S) -> bool:
    """
    One TCP connect attempt. Open means the handshake completed.
    Refused, timed out and unreachable are all just closed.
    """
    sock: Optional[socket.socket] = None
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(timeout_s)
        sock.connect((str(address), port))
        return True
    except (socket.timeout, ConnectionRefusedError, OSError):
        return False
    finally:
        if sock:
            sock.close()


def scan_host(
    address: Address,
    ports: Sequence[int],
    timeout_s: float = DEFAULT_TIMEOUT_S,
    probe: Probe = probe_port,
) -> HostResult:
    ports = list(ports)
    logger.debug("Scanning %s ...", address)

    open_ports = [p for p in ports if probe(address, p, timeout_s)]
    return HostResult(address=address, open_ports=tuple(open_ports))


def scan(
    addresses: Iterable[Address],
    ports: Sequence[int],
    workers: int = DEFAULT_WORKERS,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    probe: Probe = probe_port,
    progress_every: int = 0,
    total: Optional[int] = None,
) -> List[HostResult]:
    """
    One probe task per address, ports probed sequentially inside each task.

    Bounded-futures pool: at most max(workers * 4, 100) tasks are pending at
    once, so large ranges do not create millions of futures. Results land in
    the slot of their input index, so the output follows input order whatever
    order the tasks finish in.
    """
    if workers < 1:
        raise ValueError("workers must be >= 1")

    ports = tuple(ports)
    jobs: Iterator[Tuple[int, Address]] = enumerate(addresses)
    slots: List[Optional[HostResult]] = []
    if total is None and isinstance(addresses, Sized):
        total = len(addresses)

    done_count = 0
    up_count = 0
    start_all = time.perf_counter()

    max_pending = max(workers * 4, 100)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="probe") as pool:
        pending: Dict[Future, int] = {}

        def submit_next() -> bool:
            try:
                idx, address = next(jobs)
            except StopIteration:
                return False
            slots.append(None)
            fut = pool.submit(scan_host, address, list(ports), timeout_s, probe)
            pending[fut] = idx
            return True

        while len(pending) < max_pending and submit_next():
            pass

        while pending:
            done, _ = wait(pending, return_when=FIRST_COMPLETED)
            for fut in done:
                idx = pending.pop(fut)
                try:
                    r = fut.result()
                except Exception as e:
                    # queued tasks never start; running ones finish on pool exit
                    for f in pending:
                        f.cancel()
                    raise ScanAborted(f"probe task #{idx} failed: {e}") from e
                slots[idx] = r

                done_count += 1
                if r.is_up:
                    up_count += 1

                if progress_every > 0 and (done_count % progress_every == 0 or done_count == total):
                    elapsed = time.perf_counter() - start_all
                    rate = done_count / elapsed if elapsed > 0 else 0.0
                    logger.info(
                        "Scanned %d/%s hosts | up=%d | %.0f hosts/s",
                        done_count, total if total is not None else "?", up_count, rate,
                    )

            while len(pending) < max_pending and submit_next():
                pass

    return [r for r in slots if r is not None]


def run_scan(
    request: ScanRequest,
    workers: int = DEFAULT_WORKERS,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    probe: Probe = probe_port,
    progress_every: int = 0,
) -> ScanReport:
    """Expand the request's address, probe every host, build the report."""
    count = address_count(request.address)
    logger.info("Scanning %d IPs for %d ports", count, len(request.ports))

    results = scan(
        iter_addresses(request.address),
        request.ports,
        workers=workers,
        timeout_s=timeout_s,
        probe=probe,
        progress_every=progress_every,
        total=count,
    )
    return ScanReport(request=request, results=tuple(results))
