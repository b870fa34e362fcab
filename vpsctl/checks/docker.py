from typing import TYPE_CHECKING

from .. import console
from ..models import ProbeStatus
from ..parsers import parse_docker_probe, daemon_json_has, in_group

if TYPE_CHECKING:
    from ..audit import Auditor

NAME = "Docker security"
# Docker is optional on a VPS, so a broken probe only warns
ERROR_STATUS = ProbeStatus.WARN
ERROR_MESSAGE = "Could not check Docker status"

SCRIPT = """
if command -v docker >/dev/null 2>&1; then
  echo "INSTALLED"
  docker version --format '{{.Server.Version}}' 2>/dev/null | head -1 || echo "ERROR"

  if [ -f /etc/docker/daemon.json ]; then
    echo "DAEMON_JSON_EXISTS"
    cat /etc/docker/daemon.json
    echo
  else
    echo "NO_DAEMON_JSON"
  fi

  if docker info 2>/dev/null | grep -q "userns"; then
    echo "USERNS_ENABLED"
  else
    echo "USERNS_DISABLED"
  fi
else
  echo "NOT_INSTALLED"
fi
"""

def run(auditor: "Auditor"):
    session = auditor.session
    status = parse_docker_probe(session.run(SCRIPT).stdout)

    if not status.installed:
        auditor.warned("Docker not installed")
        return

    if status.version:
        auditor.passed(f"Docker installed (version: {status.version})")
    else:
        auditor.passed("Docker installed")

    if status.has_daemon_json:
        auditor.passed("Docker daemon.json exists")
        preview = "\n".join(status.daemon_json.splitlines()[:5]).strip()
        if preview:
            console.raw(preview)

        if daemon_json_has(status.daemon_json, "userns-remap"):
            auditor.passed("Docker user namespace remap configured")
        else:
            auditor.warned("Docker user namespace remap not configured in daemon.json")

        if daemon_json_has(status.daemon_json, "log-driver"):
            auditor.passed("Docker log driver configured")
        else:
            auditor.warned("Docker log driver not configured")
    else:
        auditor.warned("Docker daemon.json not found")

    if status.userns_active:
        auditor.passed("Docker user namespace remap active")
    else:
        auditor.warned("Docker user namespace remap not active")

    groups = session.run("groups", quiet=True)
    if in_group(groups.stdout, "docker"):
        auditor.passed(f"User {session.user} is in docker group")
    else:
        auditor.warned(f"User {session.user} is NOT in docker group")
