import os
import sys
import shlex
import logging
import tempfile
import subprocess
from typing import List, Optional
import requests

from . import report_error
from .. import console
from ..config import ProvisionConfig, load_provision_config
from ..errors import ConfigError, PreconditionError, RemoteCommandError, VpsError

logger = logging.getLogger("vpsctl.provision")

SCRIPT_NAME = "provision-remote.sh"
KEY_DOWNLOAD_TIMEOUT = 10

def get_script_path() -> str:
    """Resolves the bundled provisioning script, including from a frozen build."""
    if getattr(sys, 'frozen', False):
        return os.path.join(sys._MEIPASS, 'vpsctl', 'data', SCRIPT_NAME)
    return os.path.join(os.path.dirname(os.path.dirname(__file__)), 'data', SCRIPT_NAME)

def read_script() -> str:
    path = get_script_path()
    if not os.path.exists(path):
        raise PreconditionError(f"Provisioning script not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return f.read()

def download_pubkey(url: str) -> str:
    """Fetches e.g. https://github.com/<user>.keys into a temp file and returns its path."""
    try:
        resp = requests.get(url, timeout=KEY_DOWNLOAD_TIMEOUT)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise ConfigError(f"Could not download SSH public key from {url}: {e}")

    keys = resp.text.strip()
    if not keys:
        raise ConfigError(f"No SSH public keys found at {url}")

    fd, path = tempfile.mkstemp(prefix="vpsctl-key-", suffix=".pub")
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(keys + "\n")
    logger.debug("Downloaded %d key line(s) from %s to %s", len(keys.splitlines()), url, path)
    return path

def is_key_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))

def resolve_pubkey(value: str) -> str:
    if is_key_url(value):
        return download_pubkey(value)

    path = os.path.expanduser(value)
    if not os.path.exists(path):
        raise PreconditionError(
            f"SSH public key file not found: {path}",
            hint=f"Original path from config: {value}",
        )
    return path

def remote_command(config: ProvisionConfig) -> str:
    return (
        f"VPS_USER={shlex.quote(config.username)} VPS_HOSTNAME={shlex.quote(config.hostname)} "
        f"VPS_TIMEZONE={shlex.quote(config.timezone)} bash -s"
    )

def provision(config: ProvisionConfig) -> int:
    script = read_script()
    key_path = resolve_pubkey(config.ssh_pubkey)
    root_target = f"root@{config.vps_host}"

    console.info(f"Connecting to VPS: {config.vps_host}")
    console.info("Copying SSH key to root...")
    try:
        copy_id = subprocess.run(["ssh-copy-id", "-i", key_path, root_target])
    except OSError as e:
        raise RemoteCommandError(f"Could not run ssh-copy-id: {e}")
    finally:
        if is_key_url(config.ssh_pubkey):
            os.remove(key_path)
    if copy_id.returncode != 0:
        raise RemoteCommandError("Failed to copy SSH key to root")

    console.info("Executing provisioning script on remote server...")
    try:
        result = subprocess.run(["ssh", root_target, remote_command(config)], input=script, text=True)
    except OSError as e:
        raise RemoteCommandError(f"Could not run ssh: {e}")

    if result.returncode != 0:
        raise RemoteCommandError(f"Provisioning failed (exit code {result.returncode})")

    console.ok(f"Provisioning of {config.vps_host} complete")
    return 0

def main(argv: Optional[List[str]] = None, runner=None) -> int:
    if argv:
        console.raw("Usage: vps provision\n\nReads VPS_HOST, VPS_USER, VPS_HOSTNAME, VPS_TIMEZONE and VPS_SSH_PUBKEY from .env")
        return 1

    try:
        return provision(load_provision_config())
    except VpsError as e:
        return report_error(e)
