import argparse
from typing import List, Optional

from . import report_error
from ..audit import Auditor
from ..config import load_config, validate_config, with_overrides
from ..errors import ConfigError, VpsError
from ..session import RemoteSession

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vps audit",
        description="Read-only security audit of a provisioned VPS",
        epilog="VPS_USER and VPS_HOST are read from .env when not given.",
    )
    parser.add_argument("user", nargs="?", help="SSH user (overrides VPS_USER)")
    parser.add_argument("host", nargs="?", help="VPS hostname or IP (overrides VPS_HOST)")
    parser.add_argument("--json-report", help="Also write the results as JSON to this path")
    return parser

def main(argv: Optional[List[str]] = None, runner=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = with_overrides(load_config(), host=args.host, user=args.user)
        missing = validate_config(config)
        if missing:
            raise ConfigError(
                f"Missing required configuration: {', '.join(missing)}",
                hint="Usage: vps audit [user] [host], or set them in .env",
            )

        auditor = Auditor(RemoteSession(config, runner=runner))
        code = auditor.run()
        if args.json_report:
            auditor.write_json_report(args.json_report)
        return code
    except VpsError as e:
        return report_error(e)
