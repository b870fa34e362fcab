import shlex
import logging
from typing import Callable, Optional

from .config import VPSConfig
from .models import RemoteExecResult
from .ssh import (
    SSHOptions, Command, ssh_exec, ssh_exec_quiet, ssh_exec_stdout, check_connection,
    filter_motd_from_output,
)

logger = logging.getLogger("vpsctl.session")

COMPOSE_FILENAME = "docker-compose.yml"

Runner = Callable[..., RemoteExecResult]

class RemoteSession:
    """
    Per-command context for one target host.
    Owns the lazily resolved remote home directory and the SSH defaults
    every call in the command shares.
    """

    def __init__(self, config: VPSConfig, agent_forward: bool = False, runner: Optional[Runner] = None):
        self.config = config
        self.agent_forward = agent_forward
        self._runner = runner or ssh_exec
        self._home: Optional[str] = None

    @property
    def host(self) -> str:
        return self.config.vps_host

    @property
    def user(self) -> str:
        return self.config.vps_user

    @property
    def target(self) -> str:
        return f"{self.user}@{self.host}"

    def options(self, **overrides) -> SSHOptions:
        opts = {"agent_forward": self.agent_forward}
        opts.update(overrides)
        return SSHOptions(host=self.host, user=self.user, **opts)

    def run(self, command: Command, stdin_content: Optional[str] = None, **overrides) -> RemoteExecResult:
        return self._runner(command, self.options(**overrides), stdin_content=stdin_content)

    def run_stdout(self, command: Command, **overrides) -> str:
        return ssh_exec_stdout(command, self.options(**overrides), runner=self._runner)

    def check_connection(self) -> bool:
        return check_connection(self.options(), runner=self._runner)

    def test(self, expression: str) -> bool:
        """Evaluate a remote ``[ ... ]`` test quietly."""
        return ssh_exec_quiet(f"[ {expression} ]", self.options(), runner=self._runner).success

    def dir_exists(self, path: str) -> bool:
        return self.test(f"-d {shlex.quote(path)}")

    def file_exists(self, path: str) -> bool:
        return self.test(f"-f {shlex.quote(path)}")

    @property
    def home(self) -> str:
        if self._home is None:
            output = self.run_stdout("echo $HOME")
            self._home = filter_motd_from_output(output)
            logger.debug("Resolved remote home for %s: %s", self.target, self._home)
        return self._home

    def project_dir(self, project: str) -> str:
        return f"{self.home}/{project}"

    def compose_file(self, project: str) -> str:
        return f"{self.project_dir(project)}/{COMPOSE_FILENAME}"

    def app_dir(self, project: str, alias: str) -> str:
        return f"{self.project_dir(project)}/apps/{alias}"
