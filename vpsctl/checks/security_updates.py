from typing import TYPE_CHECKING

from ..models import ProbeStatus
from ..parsers import parse_count

if TYPE_CHECKING:
    from ..audit import Auditor

NAME = "Security updates"
ERROR_STATUS = ProbeStatus.WARN
ERROR_MESSAGE = "Could not check for security updates"

COUNT_CMD = 'apt list --upgradable 2>/dev/null | grep -c "security" || echo "0"'

def run(auditor: "Auditor"):
    result = auditor.session.run(COUNT_CMD)
    count = parse_count(result.stdout)
    if count is None:
        auditor.warned(ERROR_MESSAGE)
        return

    if count == 0:
        auditor.passed("No pending security updates")
    else:
        auditor.warned(f"{count} security update(s) available")
