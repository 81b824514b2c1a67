from .models import DEFAULT_PORTS, Address, AddressParseError, HostResult, ScanReport, ScanRequest, parse_address
from .scanner import ScanAborted, probe_port, run_scan, scan, scan_host
from .targets import address_count, expand, iter_addresses

__version__ = "0.1.0"
