import logging
import subprocess
from dataclasses import dataclass, field, replace
from typing import List, Optional, Union

from .errors import RemoteCommandError
from .models import RemoteExecResult

logger = logging.getLogger("vpsctl.ssh")

Command = Union[str, List[str]]

@dataclass
class SSHOptions:
    host: str
    user: str
    agent_forward: bool = False
    quiet: bool = False
    batch_mode: bool = False
    connect_timeout: Optional[int] = None
    additional_opts: List[str] = field(default_factory=list)

    @property
    def target(self) -> str:
        return f"{self.user}@{self.host}"

def build_ssh_args(options: SSHOptions) -> List[str]:
    """Translate SSHOptions into ssh(1) arguments, ending with user@host."""
    args = [
        "-o", "LogLevel=ERROR",
        "-o", "StrictHostKeyChecking=no",
        "-o", "UserKnownHostsFile=/dev/null",
        # No pty and quiet mode keep MOTD and prompts out of captured output
        "-T",
        "-q",
    ]

    if options.agent_forward:
        args.append("-A")
    if options.batch_mode:
        args.extend(["-o", "BatchMode=yes"])
    if options.connect_timeout:
        args.extend(["-o", f"ConnectTimeout={options.connect_timeout}"])
    if options.additional_opts:
        args.extend(options.additional_opts)

    args.append(options.target)
    return args

def ssh_exec(command: Command, options: SSHOptions, stdin_content: Optional[str] = None) -> RemoteExecResult:
    """
    Run a command (or multi-line script given as a list of lines) on the remote host.

    A non-zero remote exit code is reported through ``success=False``. A local
    spawn failure is reported the same way with the error text in ``stderr``,
    so callers never need to catch anything here.
    """
    command_str = "\n".join(command) if isinstance(command, list) else command
    argv = ["ssh", *build_ssh_args(options), command_str]
    logger.debug("ssh %s: %s", options.target, command_str.strip())

    try:
        # stdin is always piped and closed so remote reads never block
        proc = subprocess.run(
            argv,
            input=stdin_content if stdin_content is not None else "",
            capture_output=True,
            text=True,
        )
    except OSError as e:
        logger.debug("ssh spawn failed: %s", e)
        return RemoteExecResult(stdout="", stderr=str(e), exit_code=1, success=False)

    logger.debug("ssh %s exited with %d", options.target, proc.returncode)
    return RemoteExecResult(
        stdout=proc.stdout.strip(),
        stderr=proc.stderr.strip(),
        exit_code=proc.returncode,
        success=proc.returncode == 0,
    )

def ssh_exec_quiet(command: Command, options: SSHOptions, runner=ssh_exec) -> RemoteExecResult:
    """Existence-style checks where only the exit code matters."""
    return runner(command, replace(options, quiet=True))

def ssh_exec_stdout(command: Command, options: SSHOptions, runner=ssh_exec) -> str:
    """Fail-fast variant: return stdout or raise with the remote stderr."""
    result = runner(command, options)
    if not result.success:
        raise RemoteCommandError(f"SSH command failed: {result.stderr}", result=result)
    return result.stdout

def check_connection(options: SSHOptions, runner=ssh_exec) -> bool:
    check_opts = replace(options, batch_mode=True, connect_timeout=5, quiet=True)
    result = runner("echo OK", check_opts)
    if not result.success:
        logger.debug("Connection check against %s failed: %s", options.target, result.stderr)
    return result.success and filter_motd_from_output(result.stdout) == "OK"

def filter_motd_from_output(output: str, marker: Optional[str] = None) -> str:
    """
    Strip login banners from captured output.

    With a marker, everything from its first occurrence onward is returned.
    Otherwise, or when the marker never shows up, the last non-empty line is
    taken as the real output of a one-line command.
    """
    if marker is not None:
        idx = output.find(marker)
        if idx != -1:
            return output[idx:]

    lines = [l.strip() for l in output.split("\n") if l.strip()]
    if lines:
        return lines[-1]
    return ""
