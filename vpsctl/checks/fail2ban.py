from typing import TYPE_CHECKING

from .. import console
from ..models import ProbeStatus
from ..parsers import parse_fail2ban, FAIL2BAN_START, FAIL2BAN_END

if TYPE_CHECKING:
    from ..audit import Auditor

NAME = "Fail2Ban"
ERROR_STATUS = ProbeStatus.FAIL
ERROR_MESSAGE = "Could not check Fail2Ban status"

SCRIPT = f"""
if systemctl is-active --quiet fail2ban 2>/dev/null; then
  echo "ACTIVE"
  echo "{FAIL2BAN_START}"
  sudo fail2ban-client status sshd 2>/dev/null || echo "NO_JAIL"
  echo "{FAIL2BAN_END}"
else
  echo "INACTIVE"
fi
"""

def run(auditor: "Auditor"):
    status = parse_fail2ban(auditor.session.run(SCRIPT).stdout)

    if not status.active:
        auditor.failed("Fail2Ban is NOT running")
        return

    auditor.passed("Fail2Ban is running")
    if status.jail_output:
        console.raw(status.jail_output)
    if not status.jail_configured:
        auditor.warned("Fail2Ban active but sshd jail not configured")
