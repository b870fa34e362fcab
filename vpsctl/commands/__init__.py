"""
Subcommand front ends. Each module exposes ``main(argv, runner=None) -> int``;
``runner`` replaces ``ssh.ssh_exec`` so commands can run against a fake host.
"""
from .. import console
from ..errors import VpsError

def report_error(err: VpsError) -> int:
    console.error(str(err))
    if err.hint:
        console.info(err.hint)
    return 1

def usage_error(message: str, usage: str) -> int:
    console.error(message)
    console.raw(usage)
    return 1
