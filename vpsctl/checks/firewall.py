from typing import TYPE_CHECKING

from .. import console
from ..models import ProbeStatus
from ..parsers import ufw_is_active, ufw_allows_openssh
from ..ssh import filter_motd_from_output

if TYPE_CHECKING:
    from ..audit import Auditor

NAME = "Firewall (ufw)"
ERROR_STATUS = ProbeStatus.FAIL
ERROR_MESSAGE = "Could not check firewall status"

STATUS_CMD = 'sudo ufw status verbose 2>/dev/null || echo ""'
SERVICE_ACTIVE_CMD = 'systemctl is-active ufw 2>/dev/null || echo "inactive"'
SERVICE_ENABLED_CMD = 'systemctl is-enabled ufw 2>/dev/null || echo "disabled"'

def run(auditor: "Auditor"):
    session = auditor.session
    raw_output = session.run(STATUS_CMD).stdout
    status = filter_motd_from_output(raw_output, "Status:")

    if status.strip():
        console.raw(status)
    else:
        console.warn("UFW command returned no output")

    # Diagnostics only, not counted
    service_active = filter_motd_from_output(session.run(SERVICE_ACTIVE_CMD).stdout)
    service_enabled = filter_motd_from_output(session.run(SERVICE_ENABLED_CMD).stdout)
    console.raw(f"UFW service status: {service_active}")
    console.raw(f"UFW enabled on boot: {service_enabled}")

    if ufw_is_active(status):
        auditor.passed("UFW firewall is active")
        if ufw_allows_openssh(status):
            auditor.passed("OpenSSH allowed in firewall")
        else:
            auditor.failed("OpenSSH not explicitly allowed in firewall")
    else:
        auditor.failed("UFW firewall is NOT active")
        console.info("To enable UFW, run on the VPS: sudo ufw enable")
        console.info("Make sure to allow SSH first: sudo ufw allow OpenSSH")
