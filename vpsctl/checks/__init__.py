from . import (
    ssh_hardening,
    firewall,
    fail2ban,
    unattended_upgrades,
    security_updates,
    docker,
    timesync,
    listening_ports,
)

# Execution order of the audit
PROBES = [
    ssh_hardening,
    firewall,
    fail2ban,
    unattended_upgrades,
    security_updates,
    docker,
    timesync,
    listening_ports,
]
