import os
import sys
from collections import namedtuple

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from vpsctl.config import VPSConfig
from vpsctl.models import RemoteExecResult

Call = namedtuple("Call", ["command", "options", "stdin"])

HOME = "/home/deploy"

def make_config(host="203.0.113.10", user="deploy") -> VPSConfig:
    return VPSConfig(vps_host=host, vps_user=user)

class FakeRunner:
    """
    Stands in for ssh.ssh_exec. Replies are chosen by the first registered
    fragment found in the command; anything unmatched succeeds with no output.
    """

    def __init__(self):
        self.rules = []
        self.calls = []
        self.on("echo $HOME", HOME)

    def on(self, fragment, stdout="", stderr="", exit_code=0):
        result = RemoteExecResult(stdout=stdout, stderr=stderr, exit_code=exit_code, success=exit_code == 0)
        self.rules.append((fragment, result))
        return self

    def first(self, fragment, stdout="", stderr="", exit_code=0):
        """Like on(), but takes precedence over every earlier rule."""
        self.on(fragment, stdout, stderr, exit_code)
        self.rules.insert(0, self.rules.pop())
        return self

    def __call__(self, command, options, stdin_content=None):
        command = "\n".join(command) if isinstance(command, list) else command
        self.calls.append(Call(command, options, stdin_content))
        for fragment, result in self.rules:
            if fragment in command:
                return result
        return RemoteExecResult(stdout="", stderr="", exit_code=0, success=True)

    @property
    def commands(self):
        return [c.command for c in self.calls]

    def ran(self, fragment) -> bool:
        return any(fragment in c for c in self.commands)

    def index_of(self, fragment) -> int:
        for i, c in enumerate(self.commands):
            if fragment in c:
                return i
        return -1

    def call_for(self, fragment) -> Call:
        for call in self.calls:
            if fragment in call.command:
                return call
        raise AssertionError(f"No remote call matching {fragment!r}: {self.commands}")
