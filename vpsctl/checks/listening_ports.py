from typing import TYPE_CHECKING

from .. import console
from ..models import ProbeStatus
from ..parsers import parse_listening_ports, find_exposed_ports

if TYPE_CHECKING:
    from ..audit import Auditor

NAME = "Listening services"
ERROR_STATUS = ProbeStatus.WARN
ERROR_MESSAGE = "Could not retrieve listening services"

SOCKETS_CMD = 'sudo ss -tlnpen 2>/dev/null || echo ""'

def run(auditor: "Auditor"):
    listing = auditor.session.run(SOCKETS_CMD).stdout
    if not listing.strip():
        auditor.warned(ERROR_MESSAGE)
        return

    records = parse_listening_ports(listing)
    exposed = find_exposed_ports(records)

    console.info("Open ports:")
    if records:
        for r in sorted(records, key=lambda r: r.port):
            proc = f" ({r.process_name})" if r.process_name else ""
            console.raw(f"  {r.protocol.value}:{r.port}{proc} [bind:{r.bind_address}]")
    else:
        console.raw("  (none found)")
    console.blank()

    if not exposed:
        auditor.passed("Only SSH and essential system services (DNS, NTP) are exposed to all interfaces")
        return

    listed = "\n".join(f"    - {p.label}" for p in exposed)
    auditor.warned(f"{len(exposed)} internet-accessible service(s) listening on ports:\n{listed}")
