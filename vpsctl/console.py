"""
Tagged, colored status lines for operator-facing output.
Errors, failures and alerts go to stderr so stdout stays pipeable.
"""
import sys
from colorama import Fore, Style

def _emit(tag: str, message: str, err: bool = False):
    print(f"{tag}{Style.RESET_ALL} {message}", file=sys.stderr if err else sys.stdout)

def info(message: str):
    _emit(f"{Fore.CYAN}[INFO]", message)

def error(message: str):
    _emit(f"{Fore.RED}[ERROR]", message, err=True)

def warn(message: str):
    _emit(f"{Fore.YELLOW}[WARN]", message)

def ok(message: str):
    _emit(f"{Fore.GREEN}[OK]", message)

def fail(message: str):
    _emit(f"{Fore.RED}[FAIL]", message, err=True)

def alert(message: str):
    _emit(f"{Fore.RED}{Style.BRIGHT}[ALERT]", message, err=True)

def summary(message: str):
    _emit(f"{Style.BRIGHT}[SUMMARY]", message)

def success(message: str):
    _emit(f"{Fore.GREEN}{Style.BRIGHT}[SUCCESS]", message)

def section(title: str, color: str = ""):
    print(f"{color}[{title}]{Style.RESET_ALL}")

def checkmark(message: str):
    print(f"   {Fore.GREEN}✔{Style.RESET_ALL} {message}")

def cross(message: str):
    print(f"   {Fore.RED}✗{Style.RESET_ALL} {message}")

def warning_mark(message: str):
    print(f"   {Fore.YELLOW}⚠{Style.RESET_ALL} {message}")

def separator(char: str = "="):
    print(char * 42)

def blank():
    print()

def raw(message: str):
    print(message)
