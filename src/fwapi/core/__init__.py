"""Core framework components for fwapi."""

from fwapi.core.exceptions import (
    FwapiError,
    ConfigurationError,
    BadRequestError,
    NotFoundError,
    OutOfRangeError,
    SubsystemError,
)

from fwapi.core.context import ExecutionContext, create_context
from fwapi.core.output import console, Console, Verbosity
from fwapi.core.config import AppConfig, FwapiConfig
from fwapi.core.executor import CommandExecutor, CommandResult

__all__ = [
    # Exceptions
    "FwapiError",
    "ConfigurationError",
    "BadRequestError",
    "NotFoundError",
    "OutOfRangeError",
    "SubsystemError",
    # Context
    "ExecutionContext",
    "create_context",
    # Output
    "console",
    "Console",
    "Verbosity",
    # Config
    "AppConfig",
    "FwapiConfig",
    # Executor
    "CommandExecutor",
    "CommandResult",
]
