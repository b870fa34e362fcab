from typing import TYPE_CHECKING

from ..models import ProbeStatus
from ..parsers import parse_unattended_upgrades

if TYPE_CHECKING:
    from ..audit import Auditor

NAME = "Unattended upgrades"
ERROR_STATUS = ProbeStatus.FAIL
ERROR_MESSAGE = "Could not check unattended upgrades status"

SCRIPT = """
if systemctl is-enabled --quiet unattended-upgrades 2>/dev/null; then
  echo "ENABLED"
  if systemctl is-active --quiet unattended-upgrades 2>/dev/null; then
    echo "ACTIVE"
  fi
else
  echo "DISABLED"
fi
"""

def run(auditor: "Auditor"):
    enabled, active = parse_unattended_upgrades(auditor.session.run(SCRIPT).stdout)

    if not enabled:
        auditor.failed("Unattended upgrades NOT enabled")
        return

    auditor.passed("Unattended upgrades enabled")
    if active:
        auditor.passed("Unattended upgrades service active")
    else:
        auditor.warned("Unattended upgrades enabled but service not active")
