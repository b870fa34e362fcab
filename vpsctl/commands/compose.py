import logging
from shlex import quote
from typing import List, Optional

from . import report_error, usage_error
from .git import clone_repo, echo_output
from .. import console
from ..compose_file import add_service_to_document, backup_path, initial_document, parse_service_type
from ..config import load_and_validate_config
from ..errors import PreconditionError, RemoteCommandError, VpsError
from ..models import ServiceType
from ..session import RemoteSession

logger = logging.getLogger("vpsctl.compose")

USAGE = """Usage: vps compose <command> [arguments]

Environment Variables:
  VPS_HOST          VPS hostname or IP (required)
  VPS_USER          VPS username (required)

Commands:
  init <project>                      Initialize a new docker-compose project
  add <project> <type> <alias>        Add a container to a project
                                      Types: bun, mysql
  clone <project> <alias> <url>       Clone a Git repository into ~/<project>/apps/<alias>
  up <project>                        Start a docker-compose project
  down <project>                      Stop and remove a docker-compose project
  restart <project>                   Restart a docker-compose project
  ps <project>                        List the project's containers
  logs <project> [service]            Show recent logs
  exec <project> <service> <cmd...>   Run a command inside a running service

Examples:
  vps compose init myapp
  vps compose add myapp bun app
  vps compose add myapp mysql db
  vps compose clone myapp app https://github.com/user/repo.git
  vps compose up myapp"""

LOG_TAIL = 100

# action -> (docker compose arguments, progress verb, success verb)
LIFECYCLE = {
    "up": ("up -d", "Starting", "started"),
    "down": ("down", "Stopping", "stopped"),
    "restart": ("restart", "Restarting", "restarted"),
}

def require_project(session: RemoteSession, project: str) -> str:
    """Returns the compose file path once the project dir and file are confirmed."""
    project_dir = session.project_dir(project)
    if not session.dir_exists(project_dir):
        raise PreconditionError(
            f"Project directory does not exist on VPS: {project_dir}",
            hint=f"Initialize it first with: vps compose init {project}",
        )

    compose_file = session.compose_file(project)
    if not session.file_exists(compose_file):
        raise PreconditionError(f"docker-compose.yml not found on VPS: {compose_file}")
    return compose_file

def init_project(session: RemoteSession, project: str) -> int:
    project_dir = session.project_dir(project)
    if session.dir_exists(project_dir):
        raise PreconditionError(f"Project directory already exists on VPS: {project_dir}")

    console.info(f"Initializing docker-compose project on VPS: {project}")
    mkdir = session.run(f"mkdir -p {quote(project_dir)}")
    if not mkdir.success:
        raise RemoteCommandError(f"Failed to create {project_dir}: {mkdir.stderr}", result=mkdir)

    upload = session.run(f"cat > {quote(session.compose_file(project))}", stdin_content=initial_document(project))
    if not upload.success:
        raise RemoteCommandError(f"Failed to write docker-compose.yml: {upload.stderr}", result=upload)

    console.ok(f"Project initialized on VPS at: {project_dir}")
    console.info(f"You can now add services using: vps compose add {project} <type> <alias>")
    return 0

def add_service(session: RemoteSession, project: str, type_name: str, alias: str) -> int:
    service_type = parse_service_type(type_name)
    compose_file = require_project(session, project)

    current = session.run_stdout(f"cat {quote(compose_file)}")
    app_dir = session.app_dir(project, alias)
    # Raises on a duplicate alias or malformed document, before anything is written
    updated = add_service_to_document(current, service_type, alias, app_dir)

    console.info(f"Adding {service_type.value} service '{alias}' to project '{project}' on VPS")

    if service_type == ServiceType.BUN:
        mkdir = session.run(f"mkdir -p {quote(app_dir)}")
        if not mkdir.success:
            raise RemoteCommandError(f"Failed to create {app_dir}: {mkdir.stderr}", result=mkdir)
        console.info(f"Created app directory on VPS: {app_dir}")

    backup = backup_path()
    copy = session.run(f"cp {quote(compose_file)} {quote(backup)}")
    if not copy.success:
        raise RemoteCommandError(f"Failed to back up docker-compose.yml: {copy.stderr}", result=copy)
    console.info(f"Backup created on VPS at: {backup}")

    upload = session.run(f"cat > {quote(compose_file)}", stdin_content=updated)
    if not upload.success:
        raise RemoteCommandError(
            f"Failed to write docker-compose.yml: {upload.stderr}",
            result=upload,
            hint=f"The previous version is at {backup}",
        )

    console.ok(f"Service '{alias}' added successfully on VPS")
    console.info(f"Review and customize on VPS: {compose_file}")
    if service_type == ServiceType.MYSQL:
        console.warn("Remember to change MySQL passwords in docker-compose.yml on VPS")
    return 0

def run_compose(session: RemoteSession, project: str, compose_args: str):
    project_dir = session.project_dir(project)
    logger.debug("docker compose %s in %s", compose_args, project_dir)
    result = session.run(f"cd {quote(project_dir)} && docker compose {compose_args}")
    echo_output(result)
    return result

def lifecycle(session: RemoteSession, project: str, action: str) -> int:
    compose_args, progress, done = LIFECYCLE[action]
    require_project(session, project)

    console.info(f"{progress} docker-compose project '{project}' on VPS")
    if action == "down":
        console.info('Note: Volumes will persist and can be reused on next "up"')

    result = run_compose(session, project, compose_args)
    if not result.success:
        raise RemoteCommandError(f"Failed to {action} project '{project}'", result=result)

    console.ok(f"Project '{project}' {done} successfully")
    return 0

def ps_project(session: RemoteSession, project: str) -> int:
    require_project(session, project)
    result = run_compose(session, project, "ps")
    if not result.success:
        raise RemoteCommandError(f"Failed to list containers for '{project}'", result=result)
    return 0

def logs_project(session: RemoteSession, project: str, service: Optional[str] = None) -> int:
    require_project(session, project)
    compose_args = f"logs --no-color --tail {LOG_TAIL}"
    if service:
        compose_args += f" {quote(service)}"

    result = run_compose(session, project, compose_args)
    if not result.success:
        raise RemoteCommandError(f"Failed to read logs for '{project}'", result=result)
    return 0

def exec_in_service(session: RemoteSession, project: str, service: str, command: List[str]) -> int:
    require_project(session, project)
    console.info(f"Running in '{service}': {' '.join(command)}")

    joined = " ".join(quote(part) for part in command)
    result = run_compose(session, project, f"exec -T {quote(service)} {joined}")
    if not result.success:
        raise RemoteCommandError(f"Command failed in service '{service}' (exit code {result.exit_code})", result=result)
    return 0

def main(argv: Optional[List[str]] = None, runner=None) -> int:
    argv = list(argv or [])
    if not argv:
        console.raw(USAGE)
        return 1

    command, rest = argv[0], argv[1:]

    if command == "init":
        required, message = 1, "Project name required"
    elif command == "add":
        required, message = 3, "Project name, service type, and alias required"
    elif command == "clone":
        required, message = 3, "Project name, container alias, and clone URL required"
    elif command in LIFECYCLE or command in ("ps", "logs"):
        required, message = 1, "Project name required"
    elif command == "exec":
        required, message = 3, "Project name, service, and command required"
    else:
        return usage_error(f"Unknown command: {command}", USAGE)

    if len(rest) < required:
        return usage_error(message, USAGE)

    if command == "add":
        # Reject unknown service types before connecting
        try:
            parse_service_type(rest[1])
        except VpsError as e:
            return report_error(e)

    try:
        config = load_and_validate_config()
        session = RemoteSession(config, agent_forward=True, runner=runner)

        if command == "init":
            return init_project(session, rest[0])
        if command == "add":
            return add_service(session, rest[0], rest[1], rest[2])
        if command == "clone":
            return clone_repo(session, rest[0], rest[1], rest[2])
        if command in LIFECYCLE:
            return lifecycle(session, rest[0], command)
        if command == "ps":
            return ps_project(session, rest[0])
        if command == "logs":
            return logs_project(session, rest[0], rest[1] if len(rest) > 1 else None)
        return exec_in_service(session, rest[0], rest[1], rest[2:])
    except VpsError as e:
        return report_error(e)
