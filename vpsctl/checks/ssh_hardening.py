from typing import TYPE_CHECKING

from .. import console
from ..models import ProbeStatus
from ..parsers import parse_ssh_config

if TYPE_CHECKING:
    from ..audit import Auditor

NAME = "SSH hardening"
ERROR_STATUS = ProbeStatus.FAIL
ERROR_MESSAGE = "Could not retrieve SSH configuration"

SCRIPT = """
set -e
SSHD_CONF=$(sudo sshd -T 2>/dev/null || echo "")

if [ -z "$SSHD_CONF" ]; then
  echo "ERROR: Could not get SSH config"
  exit 1
fi

PERMIT_ROOT=$(echo "$SSHD_CONF" | grep -i "^permitrootlogin" | awk '{print $2}' || echo "unknown")
PASSWORD_AUTH=$(echo "$SSHD_CONF" | grep -i "^passwordauthentication" | awk '{print $2}' || echo "unknown")
CHALLENGE_RESP=$(echo "$SSHD_CONF" | grep -i "^challengeresponseauthentication" | awk '{print $2}' || echo "unknown")
ALLOW_USERS=$(echo "$SSHD_CONF" | grep -i "^allowusers" | awk '{print $2}' || echo "not set")
USE_DNS=$(echo "$SSHD_CONF" | grep -i "^usedns" | awk '{print $2}' || echo "unknown")

echo "PERMIT_ROOT=$PERMIT_ROOT"
echo "PASSWORD_AUTH=$PASSWORD_AUTH"
echo "CHALLENGE_RESP=$CHALLENGE_RESP"
echo "ALLOW_USERS=$ALLOW_USERS"
echo "USE_DNS=$USE_DNS"
"""

def run(auditor: "Auditor"):
    result = auditor.session.run(SCRIPT)
    if not result.success:
        auditor.failed(ERROR_MESSAGE)
        return

    snap = parse_ssh_config(result.stdout)
    user = auditor.session.user

    console.raw(f"PermitRootLogin: {snap.permit_root_login}")
    if snap.permit_root_login.lower() == "no":
        auditor.passed("Root login disabled")
    else:
        auditor.failed("Root login is enabled (should be 'no')")

    console.raw(f"PasswordAuthentication: {snap.password_authentication}")
    if snap.password_authentication.lower() == "no":
        auditor.passed("Password authentication disabled")
    else:
        auditor.failed("Password authentication enabled (should be 'no')")

    challenge = snap.challenge_response_authentication
    console.raw(f"ChallengeResponseAuthentication: {challenge or '(empty/disabled)'}")
    if challenge.lower() in ("no", ""):
        auditor.passed("Challenge-response authentication disabled")
    else:
        auditor.warned("Challenge-response authentication enabled (should be 'no')")

    console.raw(f"AllowUsers: {snap.allow_users}")
    if snap.allow_users == user:
        auditor.passed(f"AllowUsers restricts access to {user}")
    elif snap.allow_users == "not set":
        auditor.warned("AllowUsers not configured")
    else:
        auditor.warned(f"AllowUsers set to: {snap.allow_users}")

    console.raw(f"UseDNS: {snap.use_dns}")
    if snap.use_dns.lower() == "no":
        auditor.passed("UseDNS disabled (faster connections)")
    else:
        auditor.warned("UseDNS enabled (may slow connections)")
