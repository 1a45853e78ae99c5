"""Centralized exception hierarchy for gitscribe.

Every error raised by the library derives from GitScribeError, so callers can
catch the whole family at once or pick out a specific failure kind.

Retry policy belongs to the caller. Errors that may be transient (a command
that failed on a held lock file, a command that timed out) set ``retryable``
to True; the library itself never re-runs a command.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence

if TYPE_CHECKING:
    from gitscribe.git.command import CommandResult


class GitScribeError(Exception):
    """Base exception for all gitscribe errors.

    Attributes:
        message: Human-readable error message.
        code: Optional error code for programmatic handling.
        details: Optional dictionary with additional error context.
    """

    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "retryable": self.retryable,
        }


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(GitScribeError):
    """Raised when there's a configuration problem."""
    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, field: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid configuration for '{field}': {reason}",
            code="INVALID_CONFIG",
            details={"field": field, "value": str(value)[:100], "reason": reason},
        )


# =============================================================================
# Input and Output Errors
# =============================================================================

class InvalidArgumentError(GitScribeError):
    """Raised when an argument is unsafe or malformed.

    Always raised before a process is spawned.
    """

    def __init__(self, argument: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid {argument}: '{value}' ({reason})",
            code="INVALID_ARGUMENT",
            details={"argument": argument, "value": str(value), "reason": reason},
        )
        self.argument = argument
        self.value = value


class MalformedOutputError(GitScribeError):
    """Raised when git output does not match the expected grammar."""

    def __init__(
        self,
        source: str,
        line: str,
        expected: str,
        index: Optional[int] = None,
    ):
        location = f" at index {index}" if index is not None else ""
        super().__init__(
            message=(
                f"Unexpected output from `{source}`{location}: {line!r} "
                f"(expected {expected})"
            ),
            code="MALFORMED_OUTPUT",
            details={
                "source": source,
                "line": line,
                "expected": expected,
                "index": index,
            },
        )
        self.source = source
        self.line = line
        self.expected = expected
        self.index = index


# =============================================================================
# Git Errors
# =============================================================================

class GitError(GitScribeError):
    """Base exception for failures while running the git binary."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        details = details or {}
        if command:
            details["command"] = list(command)
        super().__init__(message, code, details)
        self.command = list(command) if command else []


class EngineUnavailableError(GitError):
    """Raised when the git process could not be started at all."""

    def __init__(self, binary: str, reason: str, command: Optional[Sequence[str]] = None):
        super().__init__(
            message=f"Unable to run '{binary}': {reason}",
            command=command,
            code="ENGINE_UNAVAILABLE",
            details={"binary": binary, "reason": reason},
        )
        self.binary = binary


class CommandFailedError(GitError):
    """Raised when git ran but exited with a non-zero status.

    The failure may come from lock contention with another git process
    working in the same repository, so it is marked retryable.
    """

    retryable = True

    def __init__(self, result: CommandResult):
        stderr = result.stderr
        summary = stderr.strip() or f"exit code {result.returncode}"
        super().__init__(
            message=f"git {result.subcommand} failed: {summary}",
            command=result.command,
            code="COMMAND_FAILED",
            details={
                "subcommand": result.subcommand,
                "args": list(result.args),
                "returncode": result.returncode,
                "stderr": stderr,
            },
        )
        self.result = result
        self.subcommand = result.subcommand
        self.args_vector = list(result.args)
        self.returncode = result.returncode
        self.stderr = stderr


class CommandTimeoutError(GitError):
    """Raised when git did not exit within the allotted time.

    The process is killed before this is raised; it may have left lock files
    behind that the caller has to clean up.
    """

    retryable = True

    def __init__(
        self,
        subcommand: str,
        timeout: float,
        command: Optional[Sequence[str]] = None,
        stderr: str = "",
    ):
        super().__init__(
            message=f"git {subcommand} timed out after {timeout}s",
            command=command,
            code="COMMAND_TIMEOUT",
            details={"subcommand": subcommand, "timeout_seconds": timeout},
        )
        self.subcommand = subcommand
        self.timeout = timeout
        self.stderr = stderr


class NotARepositoryError(GitError):
    """Raised when path is not a git repository."""

    def __init__(self, path: str):
        super().__init__(
            message=f"Not a git repository: {path}",
        )
        self.details["path"] = path
        self.code = "NOT_A_REPOSITORY"
