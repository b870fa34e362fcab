import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from vpsctl.models import Protocol
from vpsctl.parsers import (
    parse_ssh_config, ufw_is_active, ufw_allows_openssh, parse_fail2ban,
    parse_unattended_upgrades, parse_count, parse_docker_probe, daemon_json_has,
    in_group, parse_timesync, parse_listening_line, parse_listening_ports,
    find_exposed_ports, FAIL2BAN_START, FAIL2BAN_END,
)

SS_OUTPUT = """State  Recv-Q Send-Q Local Address:Port  Peer Address:Port Process
LISTEN 0      4096   0.0.0.0:22          0.0.0.0:*    users:(("sshd",pid=812,fd=3)) ino:2211 sk:1
LISTEN 0      4096   [::]:22             [::]:*       users:(("sshd",pid=812,fd=4)) ino:2213 sk:2 v6only:1
LISTEN 0      511    0.0.0.0:8080        0.0.0.0:*    users:(("node",pid=1234,fd=19)) uid:1000 ino:5 sk:3
LISTEN 0      244    127.0.0.1:5432      0.0.0.0:*    users:(("postgres",pid=77,fd=5)) uid:113 ino:6 sk:4
LISTEN 0      4096   127.0.0.53%lo:53    0.0.0.0:*    users:(("systemd-resolve",pid=600,fd=14)) uid:101
LISTEN 0      511    [::1]:6379          [::]:*       users:(("redis-server",pid=90,fd=7))
"""

class TestSSHConfigParser(unittest.TestCase):
    def test_full_output(self):
        snap = parse_ssh_config(
            "PERMIT_ROOT=no\nPASSWORD_AUTH=no\nCHALLENGE_RESP=no\nALLOW_USERS=deploy\nUSE_DNS=no\n"
        )
        self.assertEqual(snap.permit_root_login, "no")
        self.assertEqual(snap.password_authentication, "no")
        self.assertEqual(snap.allow_users, "deploy")
        self.assertEqual(snap.use_dns, "no")

    def test_empty_output_defaults(self):
        snap = parse_ssh_config("")
        self.assertEqual(snap.permit_root_login, "unknown")
        self.assertEqual(snap.password_authentication, "unknown")
        # Omitted by newer OpenSSH, so it defaults to disabled rather than unknown
        self.assertEqual(snap.challenge_response_authentication, "no")
        self.assertEqual(snap.allow_users, "not set")
        self.assertEqual(snap.use_dns, "unknown")

    def test_empty_values_keep_defaults(self):
        snap = parse_ssh_config("CHALLENGE_RESP=\nALLOW_USERS=\nPERMIT_ROOT=yes")
        self.assertEqual(snap.challenge_response_authentication, "no")
        self.assertEqual(snap.allow_users, "not set")
        self.assertEqual(snap.permit_root_login, "yes")

class TestFirewallParser(unittest.TestCase):
    def test_active(self):
        status = "Status: active\nLogging: on (low)\n\nTo    Action   From\n22/tcp (OpenSSH)  ALLOW IN  Anywhere"
        self.assertTrue(ufw_is_active(status))
        self.assertTrue(ufw_allows_openssh(status))

    def test_inactive_is_not_active(self):
        self.assertFalse(ufw_is_active("Status: inactive"))
        self.assertFalse(ufw_is_active(""))

class TestServiceTokenParsers(unittest.TestCase):
    def test_fail2ban_inactive(self):
        status = parse_fail2ban("INACTIVE")
        self.assertFalse(status.active)

    def test_fail2ban_with_jail(self):
        output = f"ACTIVE\n{FAIL2BAN_START}\nStatus for the jail: sshd\n|- Filter\n{FAIL2BAN_END}\n"
        status = parse_fail2ban(output)
        self.assertTrue(status.active)
        self.assertTrue(status.jail_configured)
        self.assertIn("Status for the jail: sshd", status.jail_output)
        self.assertNotIn("===", status.jail_output)

    def test_fail2ban_without_jail(self):
        status = parse_fail2ban(f"ACTIVE\n{FAIL2BAN_START}\nNO_JAIL\n{FAIL2BAN_END}")
        self.assertTrue(status.active)
        self.assertFalse(status.jail_configured)

    def test_unattended_upgrades(self):
        self.assertEqual(parse_unattended_upgrades("ENABLED\nACTIVE"), (True, True))
        self.assertEqual(parse_unattended_upgrades("ENABLED"), (True, False))
        self.assertEqual(parse_unattended_upgrades("DISABLED"), (False, False))

    def test_count(self):
        self.assertEqual(parse_count("3"), 3)
        self.assertEqual(parse_count("Welcome\n0\n"), 0)
        self.assertIsNone(parse_count(""))
        self.assertIsNone(parse_count("E: apt is broken"))

class TestDockerParser(unittest.TestCase):
    def test_not_installed(self):
        status = parse_docker_probe("NOT_INSTALLED")
        self.assertFalse(status.installed)
        self.assertFalse(status.has_daemon_json)

    def test_installed_with_daemon_json(self):
        output = (
            "INSTALLED\n24.0.7\nDAEMON_JSON_EXISTS\n{\n"
            '  "log-driver": "json-file",\n  "userns-remap": "default"\n}\n\nUSERNS_ENABLED\n'
        )
        status = parse_docker_probe(output)
        self.assertTrue(status.installed)
        self.assertEqual(status.version, "24.0.7")
        self.assertTrue(daemon_json_has(status.daemon_json, "userns-remap"))
        self.assertTrue(daemon_json_has(status.daemon_json, "log-driver"))
        self.assertNotIn("USERNS_ENABLED", status.daemon_json)
        self.assertTrue(status.userns_active)

    def test_installed_without_daemon_json(self):
        status = parse_docker_probe("INSTALLED\nERROR\nNO_DAEMON_JSON\nUSERNS_DISABLED")
        self.assertIsNone(status.version)
        self.assertFalse(status.has_daemon_json)
        self.assertFalse(daemon_json_has(status.daemon_json, "log-driver"))
        self.assertFalse(status.userns_active)

    def test_group_membership_is_whole_word(self):
        self.assertTrue(in_group("deploy sudo docker", "docker"))
        self.assertFalse(in_group("deploy sudo dockerusers", "docker"))

class TestTimesyncParser(unittest.TestCase):
    def test_configured(self):
        status = parse_timesync("America/Argentina/Buenos_Aires\nNTP_ACTIVE")
        self.assertEqual(status.timezone, "America/Argentina/Buenos_Aires")
        self.assertTrue(status.ntp_active)

    def test_unknown(self):
        status = parse_timesync("unknown\nNTP_INACTIVE")
        self.assertIsNone(status.timezone)
        self.assertFalse(status.ntp_active)

class TestListeningPorts(unittest.TestCase):
    def test_wildcard_node_listener(self):
        record = parse_listening_line(
            'tcp LISTEN 0 128 0.0.0.0:8080 0.0.0.0:* users:(("node",pid=1,fd=3))'
        )
        self.assertEqual(record.protocol, Protocol.TCP)
        self.assertEqual(record.port, 8080)
        self.assertEqual(record.bind_address, "0.0.0.0")
        self.assertEqual(record.process_name, "node")

        exposed = find_exposed_ports([record])
        self.assertEqual([p.label for p in exposed], ["TCP:8080 (node)"])

    def test_ipv6_forms_are_normalized(self):
        self.assertEqual(parse_listening_line("LISTEN 0 4096 [::]:443 [::]:*").bind_address, "::")
        self.assertEqual(parse_listening_line("LISTEN 0 4096 :::443 :::*").bind_address, "::")
        self.assertEqual(parse_listening_line("LISTEN 0 4096 [::1]:631 [::]:*").bind_address, "::1")
        self.assertEqual(parse_listening_line("LISTEN 0 4096 *:3000 *:*").bind_address, "*")

    def test_non_listen_lines_ignored(self):
        self.assertIsNone(parse_listening_line("State Recv-Q Send-Q Local Address:Port"))
        self.assertIsNone(parse_listening_line("ESTAB 0 0 10.0.0.5:22 10.0.0.9:51234"))

    def test_loopback_and_expected_ports_not_exposed(self):
        records = parse_listening_ports(SS_OUTPUT)
        self.assertEqual(len(records), 5)

        exposed = find_exposed_ports(records)
        self.assertEqual([(p.port, p.process_name) for p in exposed], [(8080, "node")])

        postgres = next(r for r in records if r.port == 5432)
        self.assertTrue(postgres.is_loopback)
        self.assertFalse(postgres.is_exposed)

    def test_duplicate_ports_collapse_to_first(self):
        records = parse_listening_ports(
            'LISTEN 0 511 0.0.0.0:80 0.0.0.0:* users:(("nginx",pid=1,fd=6))\n'
            'LISTEN 0 511 0.0.0.0:80 0.0.0.0:* users:(("nginx-worker",pid=2,fd=6))\n'
        )
        exposed = find_exposed_ports(records)
        self.assertEqual(len(exposed), 1)
        self.assertEqual(exposed[0].label, "TCP:80 (nginx)")

if __name__ == '__main__':
    unittest.main()
