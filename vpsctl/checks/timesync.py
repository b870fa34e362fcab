from typing import TYPE_CHECKING

from ..models import ProbeStatus
from ..parsers import parse_timesync

if TYPE_CHECKING:
    from ..audit import Auditor

NAME = "Timezone & NTP"
ERROR_STATUS = ProbeStatus.WARN
ERROR_MESSAGE = "Could not check timezone and NTP status"

# Provisioning installs ntp, which newer Ubuntu releases ship as ntpsec
SCRIPT = """
timedatectl show --property=Timezone --value 2>/dev/null || echo "unknown"
if systemctl is-active --quiet ntp 2>/dev/null || systemctl is-active --quiet ntpsec 2>/dev/null; then
  echo "NTP_ACTIVE"
else
  echo "NTP_INACTIVE"
fi
"""

def run(auditor: "Auditor"):
    status = parse_timesync(auditor.session.run(SCRIPT).stdout)

    if status.timezone:
        auditor.passed(f"Timezone configured: {status.timezone}")
    else:
        auditor.warned("Timezone not configured")

    if status.ntp_active:
        auditor.passed("NTP service active")
    else:
        auditor.warned("NTP service not active")
