"""Custom exceptions for the Spotify bridge with HTTP status codes."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    # Generic errors
    BRIDGE_ERROR = "BRIDGE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RATE_LIMITED = "RATE_LIMITED"

    # Script command errors
    COMMAND_ERROR = "COMMAND_ERROR"
    COMMAND_TIMEOUT = "COMMAND_TIMEOUT"
    COMMAND_NON_ZERO_EXIT = "COMMAND_NON_ZERO_EXIT"
    COMMAND_EXECUTION_ERROR = "COMMAND_EXECUTION_ERROR"
    INTERPRETER_ERROR = "INTERPRETER_ERROR"
    PARSE_ERROR = "PARSE_ERROR"

    # Configuration errors
    CONFIG_ERROR = "CONFIG_ERROR"
    CONFIG_INVALID = "CONFIG_INVALID"


class BridgeException(Exception):
    """Base exception for bridge errors with HTTP status code support.

    All custom exceptions should inherit from this class to ensure
    consistent error handling across the application.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.BRIDGE_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize bridge exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class CommandError(BridgeException):
    """A scripted command against the target application failed."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.COMMAND_ERROR,
        status_code: int = 502,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)


class CommandTimeoutError(CommandError):
    """The interpreter did not finish within its time budget."""

    def __init__(self, message: str = "Script execution timed out", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.COMMAND_TIMEOUT,
            status_code=504,
            details=details,
        )


class CommandExecutionError(CommandError):
    """The interpreter reported an execution error for the script."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.COMMAND_EXECUTION_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, status_code=502, details=details)


class CommandNonZeroExitError(CommandExecutionError):
    """The interpreter exited non-zero without producing output."""

    def __init__(self, exit_code: int, stderr: str = "", details: dict[str, Any] | None = None):
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(
            f"Interpreter exited with code {exit_code}",
            code=ErrorCode.COMMAND_NON_ZERO_EXIT,
            details={"exit_code": exit_code, "stderr": stderr, **(details or {})},
        )


class InterpreterError(CommandError):
    """The script interpreter could not be started."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code=ErrorCode.INTERPRETER_ERROR,
            status_code=503,
            details=details,
        )


class ScriptOutputParseError(CommandError):
    """Script output could not be interpreted."""

    def __init__(self, message: str, output: str = "", details: dict[str, Any] | None = None):
        self.output = output
        super().__init__(
            message,
            code=ErrorCode.PARSE_ERROR,
            status_code=502,
            details={"output": output, **(details or {})},
        )


class ConfigurationException(BridgeException):
    """Configuration errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)
