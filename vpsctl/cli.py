import sys
import signal
import logging
import argparse
from colorama import init

from . import __version__
from .commands import audit, compose, git, provision

COMMANDS = {
    "audit": audit,
    "compose": compose,
    "git": git,
    "provision": provision,
}

def signal_handler(sig, frame):
    print("\n[!] Interrupted (Ctrl+C)")
    sys.exit(130)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vps",
        description="Provision, audit and manage Docker Compose projects on a VPS",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog=(
            "commands:\n"
            "  audit [user] [host]   Read-only security audit\n"
            "  compose <command>     Manage docker-compose projects\n"
            "  git <command>         Manage git checkouts inside projects\n"
            "  provision             Provision a fresh Ubuntu host\n"
        ),
    )
    parser.add_argument("-v", "--version", action="version", version=f"vpsctl v{__version__}")
    parser.add_argument("--verbose", action="store_true", help="Debug logging to stderr")
    parser.add_argument("command", choices=sorted(COMMANDS), metavar="command")
    parser.add_argument("args", nargs=argparse.REMAINDER)
    return parser

def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

def main(argv=None):
    init()
    signal.signal(signal.SIGINT, signal_handler)

    parser = build_parser()
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        parser.print_help()
        sys.exit(1)

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    code = COMMANDS[args.command].main(args.args)
    sys.exit(code)

if __name__ == "__main__":
    main()
