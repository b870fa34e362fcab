from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List
from enum import Enum

# Ports that are expected to listen on all interfaces (SSH, DNS, NTP)
EXPECTED_PORTS = (22, 53, 123)
WILDCARD_ADDRESSES = ("0.0.0.0", "::", "*")
LOOPBACK_ADDRESSES = ("127.0.0.1", "::1")

class ProbeStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"

class Protocol(str, Enum):
    TCP = "TCP"
    UDP = "UDP"

class ServiceType(str, Enum):
    BUN = "bun"
    MYSQL = "mysql"

@dataclass(frozen=True)
class RemoteExecResult:
    """Outcome of a single remote invocation."""
    stdout: str
    stderr: str
    exit_code: int
    success: bool

@dataclass
class AuditOutcome:
    """
    Accumulates probe classifications for one audit run.
    Counters are derived from the message lists so they can never drift apart.
    """
    passed_messages: List[str] = field(default_factory=list)
    failed_messages: List[str] = field(default_factory=list)
    warned_messages: List[str] = field(default_factory=list)

    @property
    def passed_count(self) -> int:
        return len(self.passed_messages)

    @property
    def failed_count(self) -> int:
        return len(self.failed_messages)

    @property
    def warned_count(self) -> int:
        return len(self.warned_messages)

    def record(self, status: ProbeStatus, message: str):
        if status == ProbeStatus.PASS:
            self.passed_messages.append(message)
        elif status == ProbeStatus.FAIL:
            self.failed_messages.append(message)
        elif status == ProbeStatus.WARN:
            self.warned_messages.append(message)
        else:
            raise ValueError(f"Unknown probe status: {status}")

    @property
    def verdict(self) -> ProbeStatus:
        if self.failed_count > 0:
            return ProbeStatus.FAIL
        if self.warned_count > 0:
            return ProbeStatus.WARN
        return ProbeStatus.PASS

    @property
    def exit_code(self) -> int:
        return 1 if self.failed_count > 0 else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "passed": self.passed_count,
                "failed": self.failed_count,
                "warnings": self.warned_count,
                "verdict": self.verdict.value,
            },
            "passed": list(self.passed_messages),
            "failed": list(self.failed_messages),
            "warnings": list(self.warned_messages),
        }

@dataclass
class SSHHardeningSnapshot:
    # challenge-response defaults to "no": sshd -T omits it on newer OpenSSH
    permit_root_login: str = "unknown"
    password_authentication: str = "unknown"
    challenge_response_authentication: str = "no"
    allow_users: str = "not set"
    use_dns: str = "unknown"

@dataclass
class ListeningPortRecord:
    protocol: Protocol
    port: int
    bind_address: str
    process_name: Optional[str] = None

    @property
    def is_loopback(self) -> bool:
        return self.bind_address in LOOPBACK_ADDRESSES

    @property
    def is_exposed(self) -> bool:
        return (
            self.bind_address in WILDCARD_ADDRESSES
            and not self.is_loopback
            and self.port not in EXPECTED_PORTS
        )

@dataclass(frozen=True)
class ExposedPortRecord:
    protocol: Protocol
    port: int
    bind_address: str
    process_name: Optional[str] = None

    @property
    def label(self) -> str:
        proc = f" ({self.process_name})" if self.process_name else ""
        return f"{self.protocol.value}:{self.port}{proc}"

@dataclass
class Fail2banStatus:
    active: bool = False
    jail_configured: bool = False
    jail_output: str = ""

@dataclass
class DockerStatus:
    installed: bool = False
    version: Optional[str] = None
    daemon_json: Optional[str] = None  # None when /etc/docker/daemon.json is absent
    userns_active: Optional[bool] = None

    @property
    def has_daemon_json(self) -> bool:
        return self.daemon_json is not None

@dataclass
class TimeSyncStatus:
    timezone: Optional[str] = None
    ntp_active: bool = False
