import os
import re
import sys
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence

from .errors import ConfigError

logger = logging.getLogger("vpsctl.config")

ENV_FILE_VAR = "VPS_ENV_FILE"

# dataclass field -> environment variable
ENV_NAMES = {
    "vps_host": "VPS_HOST",
    "vps_user": "VPS_USER",
    "vps_hostname": "VPS_HOSTNAME",
    "vps_timezone": "VPS_TIMEZONE",
    "vps_ssh_pubkey": "VPS_SSH_PUBKEY",
}

DEFAULT_REQUIRED = ("vps_host", "vps_user")

_LINE_RE = re.compile(r"^([^=]+)=(.*)$")

@dataclass
class VPSConfig:
    vps_host: str = ""
    vps_user: str = ""
    vps_hostname: Optional[str] = None
    vps_timezone: Optional[str] = None
    vps_ssh_pubkey: Optional[str] = None

@dataclass
class ProvisionConfig:
    vps_host: str
    username: str
    hostname: str
    timezone: str
    ssh_pubkey: str

def get_app_data_dir() -> str:
    """Returns the platform-specific config directory (not created)."""
    if sys.platform == 'win32':
        base = os.environ.get('LOCALAPPDATA', os.path.expanduser('~\\AppData\\Local'))
        return os.path.join(base, 'vpsctl')
    return os.path.expanduser('~/.config/vpsctl')

def find_env_file() -> Optional[str]:
    """First existing env file: $VPS_ENV_FILE, ./.env, then the app data dir."""
    explicit = os.environ.get(ENV_FILE_VAR)
    if explicit:
        return explicit

    for candidate in (os.path.join(os.getcwd(), ".env"), os.path.join(get_app_data_dir(), ".env")):
        if os.path.exists(candidate):
            return candidate
    return None

def parse_env_text(content: str) -> Dict[str, str]:
    env: Dict[str, str] = {}
    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue

        match = _LINE_RE.match(trimmed)
        if not match:
            continue
        key = match.group(1).strip()
        value = match.group(2).strip()
        if not key or not value:
            continue

        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        env[key] = value
    return env

def load_env_file(path: Optional[str]) -> Dict[str, str]:
    if not path or not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return parse_env_text(f.read())
    except OSError as e:
        logger.warning("Could not read env file %s: %s", path, e)
        return {}

def load_config(env_file: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> VPSConfig:
    """Merge the env file with the process environment; the environment wins."""
    path = env_file if env_file is not None else find_env_file()
    merged = {**load_env_file(path), **(environ if environ is not None else os.environ)}
    logger.debug("Loaded configuration (env file: %s)", path or "none")

    return VPSConfig(
        vps_host=merged.get("VPS_HOST", ""),
        vps_user=merged.get("VPS_USER", ""),
        vps_hostname=merged.get("VPS_HOSTNAME") or None,
        vps_timezone=merged.get("VPS_TIMEZONE") or None,
        vps_ssh_pubkey=merged.get("VPS_SSH_PUBKEY") or None,
    )

def validate_config(config: VPSConfig, required: Sequence[str] = DEFAULT_REQUIRED) -> List[str]:
    """Returns the environment variable names of missing required fields."""
    missing = []
    for name in required:
        value = getattr(config, name)
        if not value or not str(value).strip():
            missing.append(ENV_NAMES[name])
    return missing

def load_and_validate_config(required: Sequence[str] = DEFAULT_REQUIRED, **kwargs) -> VPSConfig:
    config = load_config(**kwargs)
    missing = validate_config(config, required)
    if missing:
        raise ConfigError(
            f"Missing required configuration: {', '.join(missing)}. "
            f"Set them in a .env file or as environment variables."
        )
    return config

def load_provision_config(**kwargs) -> ProvisionConfig:
    config = load_and_validate_config(
        ("vps_host", "vps_user", "vps_hostname", "vps_timezone", "vps_ssh_pubkey"), **kwargs
    )
    return ProvisionConfig(
        vps_host=config.vps_host,
        username=config.vps_user,
        hostname=config.vps_hostname,
        timezone=config.vps_timezone,
        ssh_pubkey=config.vps_ssh_pubkey,
    )

def with_overrides(config: VPSConfig, host: Optional[str] = None, user: Optional[str] = None) -> VPSConfig:
    return replace(
        config,
        vps_host=host or config.vps_host,
        vps_user=user or config.vps_user,
    )
