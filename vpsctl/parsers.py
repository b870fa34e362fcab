"""
Parsers for remote tool output.

Each function takes raw text captured over SSH and returns a typed record, so
the parsing strategy for a tool can change without touching the audit rules.
"""
import re
from typing import Dict, List, Optional, Set, Tuple

from .models import (
    SSHHardeningSnapshot, ListeningPortRecord, ExposedPortRecord, Protocol,
    Fail2banStatus, DockerStatus, TimeSyncStatus,
)
from .ssh import filter_motd_from_output

FAIL2BAN_START = "===FAIL2BAN_OUTPUT_START==="
FAIL2BAN_END = "===FAIL2BAN_OUTPUT_END==="

_ADDR_PORT_RE = re.compile(
    r"(?:^|\s)("
    r"[0-9]+\.[0-9]+\.[0-9]+\.[0-9]+:[0-9]+"
    r"|\[::\]:[0-9]+"
    r"|:::[0-9]+"
    r"|\[::1\]:[0-9]+"
    r"|::1:[0-9]+"
    r"|\*:[0-9]+"
    r")"
)
_IPV4_RE = re.compile(r"^([0-9]+\.[0-9]+\.[0-9]+\.[0-9]+):([0-9]+)$")
_BIND_FORMS = (
    (re.compile(r"^\[::\]:([0-9]+)$"), "::"),
    (re.compile(r"^:::([0-9]+)$"), "::"),
    (re.compile(r"^\[::1\]:([0-9]+)$"), "::1"),
    (re.compile(r"^::1:([0-9]+)$"), "::1"),
    (re.compile(r"^\*:([0-9]+)$"), "*"),
)
_PROCESS_RE = re.compile(r'users:\(\("([^"]+)"')
_UFW_ACTIVE_RE = re.compile(r"status:\s*active\b", re.IGNORECASE)
_VERSION_RE = re.compile(r"^(\d+\.\d+\.\d+)", re.MULTILINE)
_TIMEZONE_RE = re.compile(r"^([A-Za-z]+(?:/[A-Za-z0-9_+\-]+)+)$", re.MULTILINE)
_COUNT_RE = re.compile(r"^\d+")

def _tokens(output: str) -> Set[str]:
    """Whole trimmed lines, so INACTIVE never reads as ACTIVE."""
    return {line.strip() for line in output.splitlines() if line.strip()}

# --- SSH daemon -----------------------------------------------------------

_SSH_KEYS = {
    "PERMIT_ROOT": "permit_root_login",
    "PASSWORD_AUTH": "password_authentication",
    "CHALLENGE_RESP": "challenge_response_authentication",
    "ALLOW_USERS": "allow_users",
    "USE_DNS": "use_dns",
}

def parse_ssh_config(output: str) -> SSHHardeningSnapshot:
    """Parse the KEY=value blob emitted by the sshd -T probe script."""
    snapshot = SSHHardeningSnapshot()
    for line in output.splitlines():
        key, sep, value = line.strip().partition("=")
        if not sep or key not in _SSH_KEYS:
            continue
        attr = _SSH_KEYS[key]
        if attr == "allow_users":
            # AllowUsers may carry '=' in patterns, keep the whole remainder
            value = value.strip()
        else:
            value = value.split("=")[0].strip()
        if value:
            setattr(snapshot, attr, value)
    return snapshot

# --- Firewall -------------------------------------------------------------

def ufw_is_active(status_output: str) -> bool:
    return bool(_UFW_ACTIVE_RE.search(status_output))

def ufw_allows_openssh(status_output: str) -> bool:
    return "openssh" in status_output.lower()

# --- Fail2ban -------------------------------------------------------------

def parse_fail2ban(output: str) -> Fail2banStatus:
    tokens = _tokens(output)
    status = Fail2banStatus(active="ACTIVE" in tokens)
    if not status.active:
        return status

    start = output.find(FAIL2BAN_START)
    end = output.find(FAIL2BAN_END)
    if start != -1 and end != -1:
        body = output[start + len(FAIL2BAN_START):end]
        status.jail_output = "\n".join(
            l for l in body.splitlines() if l.strip() and "===" not in l
        )
    status.jail_configured = "NO_JAIL" not in tokens
    return status

# --- Unattended upgrades --------------------------------------------------

def parse_unattended_upgrades(output: str) -> Tuple[bool, bool]:
    """Returns (enabled_at_boot, active_now)."""
    tokens = _tokens(output)
    enabled = "ENABLED" in tokens
    return enabled, enabled and "ACTIVE" in tokens

# --- Pending updates ------------------------------------------------------

def parse_count(output: str) -> Optional[int]:
    """Leading integer of the last output line, None when there is none."""
    match = _COUNT_RE.match(filter_motd_from_output(output))
    return int(match.group(0)) if match else None

# --- Docker ---------------------------------------------------------------

_DOCKER_MARKERS = ("DAEMON_JSON_EXISTS", "NO_DAEMON_JSON", "USERNS_ENABLED", "USERNS_DISABLED")

def parse_docker_probe(output: str) -> DockerStatus:
    tokens = _tokens(output)
    if "INSTALLED" not in tokens:
        return DockerStatus(installed=False)

    status = DockerStatus(installed=True)
    version = _VERSION_RE.search(output)
    if version:
        status.version = version.group(1)

    if "DAEMON_JSON_EXISTS" in tokens:
        lines = output.splitlines()
        start = next(i for i, l in enumerate(lines) if l.strip() == "DAEMON_JSON_EXISTS")
        body = []
        for line in lines[start + 1:]:
            if line.strip() in _DOCKER_MARKERS:
                break
            body.append(line)
        status.daemon_json = "\n".join(body).strip()

    if "USERNS_ENABLED" in tokens:
        status.userns_active = True
    elif "USERNS_DISABLED" in tokens:
        status.userns_active = False
    return status

def daemon_json_has(daemon_json: Optional[str], key: str) -> bool:
    return bool(daemon_json) and key in daemon_json

def in_group(groups_output: str, group: str) -> bool:
    return group in filter_motd_from_output(groups_output).split()

# --- Timezone & NTP -------------------------------------------------------

def parse_timesync(output: str) -> TimeSyncStatus:
    match = _TIMEZONE_RE.search(output)
    tokens = _tokens(output)
    return TimeSyncStatus(
        timezone=match.group(1) if match else None,
        ntp_active="NTP_ACTIVE" in tokens,
    )

# --- Listening sockets ----------------------------------------------------

def parse_listening_line(line: str) -> Optional[ListeningPortRecord]:
    if "LISTEN" not in line:
        return None

    parts = line.split()
    protocol = Protocol.TCP
    if parts and parts[0].lower().startswith("udp"):
        protocol = Protocol.UDP

    match = _ADDR_PORT_RE.search(line)
    if not match:
        return None
    addr_port = match.group(1)

    bind, port = "", ""
    ipv4 = _IPV4_RE.match(addr_port)
    if ipv4:
        bind, port = ipv4.group(1), ipv4.group(2)
    else:
        for pattern, normalized in _BIND_FORMS:
            m = pattern.match(addr_port)
            if m:
                bind, port = normalized, m.group(1)
                break
    if not port:
        return None

    proc = _PROCESS_RE.search(line)
    return ListeningPortRecord(
        protocol=protocol,
        port=int(port),
        bind_address=bind,
        process_name=proc.group(1) if proc else None,
    )

def parse_listening_ports(ss_output: str) -> List[ListeningPortRecord]:
    records = []
    for line in ss_output.splitlines():
        record = parse_listening_line(line)
        if record:
            records.append(record)
    return records

def find_exposed_ports(records: List[ListeningPortRecord]) -> List[ExposedPortRecord]:
    """Exposed records, first occurrence wins per (protocol, port)."""
    exposed: Dict[Tuple[Protocol, int], ExposedPortRecord] = {}
    for r in records:
        if not r.is_exposed:
            continue
        key = (r.protocol, r.port)
        if key not in exposed:
            exposed[key] = ExposedPortRecord(
                protocol=r.protocol,
                port=r.port,
                bind_address=r.bind_address,
                process_name=r.process_name,
            )
    return list(exposed.values())
