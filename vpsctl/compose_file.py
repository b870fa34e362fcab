"""
Structured editing of docker-compose.yml documents.

The document is parsed with PyYAML using YAML 1.2 scalar rules, mutated as
plain dicts and lists, then serialized again. Comments and YAML anchors in the
source are not preserved.
"""
import re
import datetime
from typing import Any, Dict, Optional
import yaml

from .errors import ComposeDocumentError, DuplicateServiceError
from .models import ServiceType

BACKUP_DIR = "/tmp"
MYSQL_ROOT_PASSWORD = "root_password_change_me"
MYSQL_USER_PASSWORD = "user_password_change_me"

_SERVICE_KEY_RE = re.compile(r"^  [^\s#-]")

_BOOL_TAG = "tag:yaml.org,2002:bool"
_INT_TAG = "tag:yaml.org,2002:int"
_FLOAT_TAG = "tag:yaml.org,2002:float"
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"

# YAML 1.2 core schema scalars, which is what docker compose reads. Under the
# 1.1 rules PyYAML defaults to, `2222:22` is a base-60 int and `no` is false.
_CORE_RESOLVERS = (
    (_BOOL_TAG, re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"), list("tTfF")),
    (_INT_TAG, re.compile(r"^(?:[-+]?[0-9]+|0x[0-9a-fA-F]+)$"), list("-+0123456789")),
    (_FLOAT_TAG, re.compile(
        r"^(?:[-+]?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?)(?:[eE][-+]?[0-9]+)?"
        r"|[-+]?\.(?:inf|Inf|INF)|\.(?:nan|NaN|NAN))$"
    ), list("-+0123456789.")),
)

class ComposeLoader(yaml.SafeLoader):
    """SafeLoader that resolves plain scalars the way docker compose does."""

ComposeLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers
            if tag not in (_BOOL_TAG, _INT_TAG, _FLOAT_TAG, _TIMESTAMP_TAG)]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

class FlowList(list):
    """A list rendered inline, e.g. ["CMD", "mysqladmin", "ping"]."""

class ComposeDumper(yaml.SafeDumper):
    # Indent block sequences under their key, as compose files usually are
    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)

# The dumper keeps the 1.1 rules and learns the 1.2 ones, so any string either
# reader would take for something else gets quoted.
for _tag, _regexp, _first in _CORE_RESOLVERS:
    ComposeLoader.add_implicit_resolver(_tag, _regexp, _first)
    ComposeDumper.add_implicit_resolver(_tag, _regexp, _first)

def _represent_flow_list(dumper, data):
    node = dumper.represent_sequence("tag:yaml.org,2002:seq", data, flow_style=True)
    for item in node.value:
        if item.tag == "tag:yaml.org,2002:str":
            item.style = '"'
    return node

ComposeDumper.add_representer(FlowList, _represent_flow_list)

def _space_sections(text: str) -> str:
    """Blank line between top-level keys and between sibling services."""
    out = []
    section = None
    seen_service = False
    for line in text.splitlines():
        if line and not line[0].isspace():
            if out:
                out.append("")
            section = line.split(":", 1)[0]
            seen_service = False
        elif section == "services" and _SERVICE_KEY_RE.match(line):
            if seen_service:
                out.append("")
            seen_service = True
        out.append(line)
    return "\n".join(out) + "\n"

class ComposeDocument:
    def __init__(self, data: Dict[str, Any]):
        self.data = data

    @classmethod
    def parse(cls, text: str) -> "ComposeDocument":
        try:
            data = yaml.load(text, Loader=ComposeLoader)
        except yaml.YAMLError as e:
            raise ComposeDocumentError(f"docker-compose.yml is not valid YAML: {e}")

        if not isinstance(data, dict):
            raise ComposeDocumentError("docker-compose.yml must be a mapping at the top level")
        if "services" not in data:
            raise ComposeDocumentError("docker-compose.yml has no 'services' section")

        services = data["services"]
        if services is None:
            # `services:` with only comments under it, as written by `compose init`
            data["services"] = {}
        elif not isinstance(services, dict):
            raise ComposeDocumentError("'services' in docker-compose.yml must be a mapping")
        return cls(data)

    @property
    def services(self) -> Dict[str, Any]:
        return self.data["services"]

    @property
    def volumes(self) -> Optional[Dict[str, Any]]:
        return self.data.get("volumes")

    def has_service(self, alias: str) -> bool:
        return alias in self.services

    def add_service(self, alias: str, descriptor: Dict[str, Any]):
        if self.has_service(alias):
            raise DuplicateServiceError(f"Service '{alias}' already exists in docker-compose.yml")
        self.services[alias] = descriptor

    def ensure_volumes(self):
        """Make sure a volumes mapping exists and no entry in it is null."""
        volumes = self.data.get("volumes")
        if volumes is None:
            self._insert_before("volumes", {}, "networks")
        elif not isinstance(volumes, dict):
            raise ComposeDocumentError("'volumes' in docker-compose.yml must be a mapping")

        for name, value in self.data["volumes"].items():
            if value is None:
                self.data["volumes"][name] = {}

    def add_volume(self, name: str):
        self.ensure_volumes()
        if name not in self.data["volumes"]:
            self.data["volumes"][name] = {}

    def _insert_before(self, key: str, value: Any, anchor: str):
        if anchor not in self.data:
            self.data[key] = value
            return
        rebuilt = {}
        for k, v in self.data.items():
            if k == anchor:
                rebuilt[key] = value
            rebuilt[k] = v
        self.data = rebuilt

    def dump(self) -> str:
        for service in self.services.values():
            if not isinstance(service, dict):
                continue
            if isinstance(service.get("command"), list):
                service["command"] = FlowList(service["command"])
            health = service.get("healthcheck")
            if isinstance(health, dict) and isinstance(health.get("test"), list):
                health["test"] = FlowList(health["test"])

        text = yaml.dump(
            self.data,
            Dumper=ComposeDumper,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
            width=4096,
        )
        return _space_sections(text)

# --- Service catalog ------------------------------------------------------

def bun_service(alias: str, app_dir: str) -> Dict[str, Any]:
    return {
        "image": "oven/bun:latest",
        "container_name": alias,
        "working_dir": "/app",
        "volumes": [f"{app_dir}:/app"],
        "command": ["bun", "run", "--watch", "src/index.ts"],
        "networks": ["default"],
        "restart": "unless-stopped",
        "environment": ["NODE_ENV=development"],
    }

def mysql_service(alias: str) -> Dict[str, Any]:
    return {
        "image": "mysql:8.0",
        "container_name": alias,
        "environment": {
            "MYSQL_ROOT_PASSWORD": MYSQL_ROOT_PASSWORD,
            "MYSQL_DATABASE": f"{alias}_db",
            "MYSQL_USER": f"{alias}_user",
            "MYSQL_PASSWORD": MYSQL_USER_PASSWORD,
        },
        "volumes": [f"{volume_name(alias)}:/var/lib/mysql"],
        "networks": ["default"],
        "restart": "unless-stopped",
        "ports": ["127.0.0.1:3306:3306"],
        "healthcheck": {
            "test": ["CMD", "mysqladmin", "ping", "-h", "localhost"],
            "interval": "10s",
            "timeout": "5s",
            "retries": 5,
        },
    }

def volume_name(alias: str) -> str:
    return f"{alias}_data"

def parse_service_type(value: str) -> ServiceType:
    try:
        return ServiceType(value.lower())
    except ValueError:
        supported = ", ".join(t.value for t in ServiceType)
        raise ComposeDocumentError(f"Unknown service type: {value}", hint=f"Supported types: {supported}")

def build_service(service_type: ServiceType, alias: str, app_dir: str) -> Dict[str, Any]:
    if service_type == ServiceType.BUN:
        return bun_service(alias, app_dir)
    return mysql_service(alias)

def add_service_to_document(text: str, service_type: ServiceType, alias: str, app_dir: str) -> str:
    """Parse, add one service (plus its volume for databases) and re-serialize."""
    doc = ComposeDocument.parse(text)
    doc.add_service(alias, build_service(service_type, alias, app_dir))
    doc.ensure_volumes()
    if service_type == ServiceType.MYSQL:
        doc.add_volume(volume_name(alias))
    return doc.dump()

def initial_document(project: str) -> str:
    return (
        "services:\n"
        f"  # Add your services here using: vps compose add {project} <type> <alias>\n"
        "\n"
        "networks:\n"
        "  default:\n"
        f"    name: {project}_network\n"
    )

def backup_path(now: Optional[datetime.datetime] = None) -> str:
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return f"{BACKUP_DIR}/docker-compose.backup.{now.strftime('%Y-%m-%dT%H-%M-%S')}.yml"
