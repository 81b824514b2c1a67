import random
import threading
import time

import pytest

from skanner.models import HostResult, ScanRequest, parse_address
from skanner.scanner import ScanAborted, probe_port, run_scan, scan, scan_host
from skanner.targets import expand

# no zero octets, so it is a single host rather than a wildcard range
LOCALHOST = parse_address("127.1.1.1")


def test_probe_port_open(listener):
    assert probe_port(LOCALHOST, listener, 1.0) is True


def test_probe_port_closed(closed_port):
    assert probe_port(LOCALHOST, closed_port, 1.0) is False


def test_scan_host_open_ports_in_request_order(listener, closed_port):
    r = scan_host(LOCALHOST, [closed_port, listener, closed_port, listener], 1.0)

    assert r == HostResult(LOCALHOST, (listener, listener))


def test_scan_host_probes_sequentially_and_does_not_mutate_ports():
    ports = [22, 80, 443]
    active = []
    lock = threading.Lock()
    overlap = []

    def probe(address, port, timeout_s):
        with lock:
            active.append(port)
            overlap.append(len(active))
        time.sleep(0.01)
        with lock:
            active.remove(port)
        return port == 80

    r = scan_host(LOCALHOST, ports, 1.0, probe)

    assert r.open_ports == (80,)
    assert max(overlap) == 1
    assert ports == [22, 80, 443]


def test_end_to_end_single_host_fake_network():
    req = ScanRequest.create("10.1.1.1", [22, 80])
    seen = []

    def probe(address, port, timeout_s):
        seen.append((str(address), port, timeout_s))
        return port == 80

    report = run_scan(req, probe=probe)

    assert report.request is req
    assert report.results == (HostResult(parse_address("10.1.1.1"), (80,)),)
    assert seen == [("10.1.1.1", 22, 1.0), ("10.1.1.1", 80, 1.0)]


def test_end_to_end_against_loopback(listener, closed_port):
    req = ScanRequest.create("127.1.1.1", [closed_port, listener])

    report = run_scan(req, timeout_s=1.0)

    assert [r.address for r in report.results] == [LOCALHOST]
    assert report.results[0].open_ports == (listener,)


def test_results_follow_input_order_not_completion_order():
    addresses = expand(parse_address("192.168.7.0"))
    rng = random.Random(7)
    delays = {a: rng.random() * 0.02 for a in addresses}

    def probe(address, port, timeout_s):
        time.sleep(delays[address])
        return address.packed[3] % 2 == 0

    results = scan(addresses, [22, 80], workers=32, probe=probe)

    assert len(results) == len(addresses)
    assert [r.address for r in results] == addresses
    for r in results:
        expected = (22, 80) if r.address.packed[3] % 2 == 0 else ()
        assert r.open_ports == expected


def test_scan_accepts_lazy_addresses_beyond_pending_bound():
    # more hosts than max pending futures with workers=1
    addresses = [parse_address(f"10.0.{i // 250 + 1}.{i % 250 + 1}") for i in range(300)]

    results = scan(iter(addresses), [1], workers=1, probe=lambda a, p, t: True)

    assert [r.address for r in results] == addresses
    assert all(r.open_ports == (1,) for r in results)


def test_each_task_gets_its_own_port_list(monkeypatch):
    from skanner import scanner as scanner_mod

    lists = []
    original = scanner_mod.scan_host

    def recording_scan_host(address, ports, timeout_s, probe):
        lists.append(ports)
        return original(address, ports, timeout_s, probe)

    monkeypatch.setattr(scanner_mod, "scan_host", recording_scan_host)

    ports = [22, 80]
    scan(expand(parse_address("10.9.9.0"))[:5], ports, workers=4, probe=lambda a, p, t: False)

    assert len(lists) == 5
    assert len({id(p) for p in lists}) == 5
    assert all(p == ports and p is not ports for p in lists)


def test_empty_address_list():
    assert scan([], [80], probe=lambda a, p, t: True) == []


def test_workers_must_be_positive():
    with pytest.raises(ValueError):
        scan([LOCALHOST], [80], workers=0)


def test_task_failure_aborts_scan():
    def probe(address, port, timeout_s):
        if address.packed[3] == 3:
            raise RuntimeError("boom")
        return False

    with pytest.raises(ScanAborted) as exc:
        scan(expand(parse_address("10.1.1.0"))[:5], [80], workers=2, probe=probe)

    assert isinstance(exc.value.__cause__, RuntimeError)


def test_task_failure_cancels_queued_hosts():
    calls = []
    stall = threading.Event()

    def probe(address, port, timeout_s):
        calls.append(address)
        if address.packed[3] == 1:
            raise RuntimeError("boom")
        # keeps the single worker busy while the scan aborts
        stall.wait(0.5)
        return False

    with pytest.raises(ScanAborted):
        scan(expand(parse_address("10.3.3.0")), [80], workers=1, probe=probe)

    assert calls[0] == parse_address("10.3.3.1")
    assert len(calls) - 1 <= 2


def test_progress_is_logged(caplog):
    caplog.set_level("INFO", logger="skanner.scanner")

    scan(expand(parse_address("10.2.2.0"))[:10], [80], workers=2, probe=lambda a, p, t: False, progress_every=5)

    msgs = [r.getMessage() for r in caplog.records if "Scanned" in r.getMessage()]
    assert msgs[0].startswith("Scanned 5/10 hosts")
    assert msgs[-1].startswith("Scanned 10/10 hosts")
