import logging
from shlex import quote
from typing import List, Optional

from . import report_error, usage_error
from .. import console
from ..config import load_and_validate_config
from ..errors import PreconditionError, RemoteCommandError, VpsError
from ..models import RemoteExecResult
from ..session import RemoteSession

logger = logging.getLogger("vpsctl.git")

USAGE = """Usage: vps git <command> [arguments]

Environment Variables:
  VPS_HOST          VPS hostname or IP (required)
  VPS_USER          VPS username (required)

Commands:
  clone <project> <alias> <url>     Clone a Git repository into ~/<project>/apps/<alias>
  pull <project> <alias>            Pull latest changes
  branch <project> <alias>          List branches and show the current one
  checkout <project> <alias> <ref>  Fetch, then check out a branch or commit

Examples:
  vps git clone myapp app https://github.com/user/repo.git
  vps git pull myapp app
  vps git checkout myapp app main"""

def echo_output(result: RemoteExecResult):
    if result.stdout:
        console.raw(result.stdout)
    if result.stderr:
        console.raw(result.stderr)

def require_checkout(session: RemoteSession, app_dir: str):
    if not session.dir_exists(f"{app_dir}/.git"):
        raise PreconditionError(
            f"Not a git repository: {app_dir}",
            hint="Clone it first with: vps git clone <project> <alias> <url>",
        )

def clone_repo(session: RemoteSession, project: str, alias: str, url: str) -> int:
    app_dir = session.app_dir(project, alias)

    if session.dir_exists(f"{app_dir}/.git"):
        raise PreconditionError(
            f"Git repository already exists on VPS: {app_dir}",
            hint="If you want to re-clone, remove the directory first",
        )

    if session.dir_exists(app_dir):
        console.info(f"Removing existing non-git directory: {app_dir}")
        removed = session.run(f"rm -rf {quote(app_dir)}")
        if not removed.success:
            raise RemoteCommandError(f"Failed to remove existing directory: {app_dir}", result=removed)

    console.info(f"Cloning repository into {app_dir} on VPS")

    if "github.com" in url:
        session.run("ssh-keyscan -H github.com >> ~/.ssh/known_hosts 2>/dev/null || true")

    session.run(f'mkdir -p "$(dirname {quote(app_dir)})"')
    result = session.run(f"git clone {quote(url)} {quote(app_dir)}")
    echo_output(result)
    if not result.success:
        raise RemoteCommandError(f"Failed to clone {url}", result=result)

    console.ok(f"Repository cloned successfully to: {app_dir}")
    return 0

def pull_repo(session: RemoteSession, project: str, alias: str) -> int:
    app_dir = session.app_dir(project, alias)
    require_checkout(session, app_dir)

    console.info(f"Pulling latest changes from {app_dir} on VPS")
    result = session.run(f"cd {quote(app_dir)} && git pull")
    echo_output(result)
    if not result.success:
        raise RemoteCommandError("Failed to pull from repository", result=result)

    console.ok("Repository pulled successfully")
    return 0

def branch_repo(session: RemoteSession, project: str, alias: str) -> int:
    app_dir = session.app_dir(project, alias)
    require_checkout(session, app_dir)

    console.info(f"Getting branch information from {app_dir} on VPS")
    result = session.run(f"cd {quote(app_dir)} && git branch -a")
    echo_output(result)
    if not result.success:
        raise RemoteCommandError("Failed to get branch information", result=result)

    current = session.run_stdout(f"cd {quote(app_dir)} && git branch --show-current").strip()
    if current:
        console.info(f"Current branch: {current}")
    else:
        # Detached HEAD prints nothing
        console.warn("Could not determine current branch")
    return 0

def checkout_repo(session: RemoteSession, project: str, alias: str, ref: str) -> int:
    app_dir = session.app_dir(project, alias)
    require_checkout(session, app_dir)

    console.info(f"Checking out {ref} in {app_dir} on VPS")
    fetch = session.run(f"cd {quote(app_dir)} && git fetch")
    if not fetch.success:
        logger.debug("git fetch failed: %s", fetch.stderr)
        console.warn("git fetch failed, checking out from local refs")

    result = session.run(f"cd {quote(app_dir)} && git checkout {quote(ref)}")
    echo_output(result)
    if not result.success:
        raise RemoteCommandError(f"Failed to checkout {ref}", result=result)

    console.ok(f"Checked out {ref} successfully")
    return 0

# command -> (handler, positional count, message when missing)
COMMANDS = {
    "clone": (clone_repo, 3, "Project name, container alias, and clone URL required"),
    "pull": (pull_repo, 2, "Project name and container alias required"),
    "branch": (branch_repo, 2, "Project name and container alias required"),
    "checkout": (checkout_repo, 3, "Project name, container alias, and branch/commit required"),
}

def main(argv: Optional[List[str]] = None, runner=None) -> int:
    argv = list(argv or [])
    if not argv:
        console.raw(USAGE)
        return 1

    command, rest = argv[0], argv[1:]
    if command not in COMMANDS:
        return usage_error(f"Unknown command: {command}", USAGE)

    handler, count, missing_message = COMMANDS[command]
    if len(rest) < count:
        return usage_error(missing_message, USAGE)

    try:
        config = load_and_validate_config()
        session = RemoteSession(config, agent_forward=True, runner=runner)
        return handler(session, *rest[:count])
    except VpsError as e:
        return report_error(e)
