from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import RemoteExecResult

class VpsError(Exception):
    """Base class for every error the CLI reports as [ERROR] and exit code 1."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint

class ConfigError(VpsError):
    pass

class RemoteCommandError(VpsError):
    def __init__(self, message: str, result: Optional["RemoteExecResult"] = None, hint: Optional[str] = None):
        super().__init__(message, hint=hint)
        self.result = result

class PreconditionError(VpsError):
    pass

class ComposeDocumentError(VpsError):
    pass

class DuplicateServiceError(ComposeDocumentError):
    pass
