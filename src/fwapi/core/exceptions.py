"""Custom exceptions for the firewall API.

All exceptions provide:
- Clear error messages
- Optional hints for resolution
- Optional details for debugging
- Exit codes for the CLI and status codes for the HTTP API
"""

from typing import Optional


class FwapiError(Exception):
    """Base exception for all fwapi errors.

    Attributes:
        message: Human-readable error description
        hint: Suggested action to resolve the error
        details: Additional context for debugging
        exit_code: Shell exit code (1-127)
        status_code: HTTP status code of the error response
        kind: Failure kind reported in the error response body
    """

    exit_code: int = 1
    status_code: int = 500
    kind: str = "Error"

    def __init__(
        self,
        message: str,
        *,
        hint: Optional[str] = None,
        details: Optional[list[str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or []

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        """Render the error as the body of an error response."""
        return {
            "kind": self.kind,
            "message": self.message,
            "hint": self.hint,
            "details": self.details,
        }


class ConfigurationError(FwapiError):
    """Configuration file or settings errors.

    Raised when:
    - Config file unreadable
    - Invalid YAML syntax
    - Invalid configuration values
    """
    exit_code = 2
    kind = "ConfigurationError"


class BadRequestError(FwapiError):
    """Malformed client input.

    Raised when:
    - Request body is not valid JSON or misses fields
    - Rule text cannot be split into arguments
    - Chain name is empty
    """
    exit_code = 3
    status_code = 400
    kind = "BadRequest"


class NotFoundError(FwapiError):
    """A table, chain or interface does not exist."""
    exit_code = 4
    status_code = 404
    kind = "NotFound"


class OutOfRangeError(FwapiError):
    """A rule position is beyond the current rule count of a chain."""
    exit_code = 4
    status_code = 404
    kind = "OutOfRange"

    def __init__(
        self,
        message: str,
        *,
        position: Optional[int] = None,
        size: Optional[int] = None,
        hint: Optional[str] = None,
        details: Optional[list[str]] = None,
    ) -> None:
        if not hint and size is not None:
            hint = "Chain is empty" if size == 0 else f"Valid positions are 0 to {size - 1}"
        super().__init__(message, hint=hint, details=details)
        self.position = position
        self.size = size


class SubsystemError(FwapiError):
    """The packet-filter subsystem rejected or failed a command.

    Raised when:
    - iptables returns a non-zero exit code (bad syntax, duplicate
      chain, chain not empty, permission denied)
    - iptables binary is missing
    - iptables does not answer in time
    """
    exit_code = 5
    status_code = 500
    kind = "SubsystemFailure"

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        return_code: Optional[int] = None,
        stderr: Optional[str] = None,
        hint: Optional[str] = None,
        details: Optional[list[str]] = None,
    ) -> None:
        if not details:
            details = []
        if return_code is not None:
            details.append(f"Exit code: {return_code}")
        if stderr:
            details.append(f"Error output: {stderr.strip()}")
        super().__init__(message, hint=hint, details=details)
        self.command = command
        self.return_code = return_code
        self.stderr = stderr
