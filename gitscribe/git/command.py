"""Running the git binary."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Protocol, Sequence

from gitscribe.errors import (
    CommandFailedError,
    CommandTimeoutError,
    EngineUnavailableError,
    InvalidArgumentError,
)

logger = logging.getLogger(__name__)

# Prepended to every invocation so output is uncoloured and paths are quoted
# the same way regardless of the user's git config.
GLOBAL_OPTIONS: tuple[str, ...] = (
    "-c", "core.quotePath=true",
    "-c", "color.ui=false",
)

DEFAULT_ENV_OVERRIDES: dict[str, str] = {
    "GIT_TERMINAL_PROMPT": "0",
    "LC_ALL": "C",
}


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one git invocation."""

    subcommand: str
    args: tuple[str, ...]
    command: tuple[str, ...]
    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class GitExecutor(Protocol):
    """Anything able to run a git subcommand and return its captured result."""

    def execute(
        self,
        subcommand: str,
        args: Sequence[str] = (),
        operands: Sequence[str] = (),
        paths: Sequence[str] = (),
        cwd: Path | str | None = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        ...


def assert_not_option(name: str, *values: Optional[str]) -> None:
    """Reject values that git could mistake for a command-line option.

    Args:
        name: Name of the argument, used in the error message.
        *values: Values to check. None is ignored.

    Raises:
        InvalidArgumentError: If any value starts with a hyphen.
    """
    for value in values:
        if value is not None and str(value).startswith("-"):
            raise InvalidArgumentError(name, value, "must not start with '-'")


class CommandLine:
    """Spawns git with a fixed binary, environment and global options.

    Every call blocks until the child exits. Nothing is retried: a command
    that failed because another process held the repository's lock file
    surfaces as CommandFailedError and the caller decides what to do.
    """

    def __init__(
        self,
        binary: str = "git",
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        global_options: Sequence[str] = GLOBAL_OPTIONS,
    ):
        """Initialize a CommandLine.

        Args:
            binary: Name or path of the git executable.
            env: Environment overrides merged over the inherited environment.
            timeout: Default timeout in seconds. None or 0 disables it.
            global_options: Options placed before the subcommand.
        """
        self.binary = binary
        self.env_overrides = dict(DEFAULT_ENV_OVERRIDES if env is None else env)
        self.timeout = timeout
        self.global_options = tuple(global_options)

    def build_command(
        self,
        subcommand: str,
        args: Sequence[str] = (),
        operands: Sequence[str] = (),
        paths: Sequence[str] = (),
    ) -> list[str]:
        """Build the full argument vector for a git call.

        Raises:
            InvalidArgumentError: If an operand looks like an option.
        """
        if not subcommand or subcommand.startswith("-"):
            raise InvalidArgumentError("subcommand", subcommand, "must be a git subcommand name")
        assert_not_option(f"operand for git {subcommand}", *operands)
        cmd = [self.binary, *self.global_options, subcommand, *args, *operands]
        if paths:
            cmd += ["--", *paths]
        return cmd

    def _environment(self) -> dict[str, str]:
        env = os.environ.copy()
        env.update(self.env_overrides)
        return env

    def execute(
        self,
        subcommand: str,
        args: Sequence[str] = (),
        operands: Sequence[str] = (),
        paths: Sequence[str] = (),
        cwd: Path | str | None = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """Run a git subcommand and classify the result.

        Args:
            subcommand: Git subcommand, e.g. 'branch'.
            args: Options and option values, passed through untouched.
            operands: Refs and names. Each one is rejected if it
                starts with '-'.
            paths: Path limiters, placed after a "--" separator.
            cwd: Working directory for the command.
            timeout: Seconds to wait before killing the process. Falls back
                to the default given at construction; 0 disables it.

        Returns:
            CommandResult for a zero exit status.

        Raises:
            InvalidArgumentError: If an operand looks like an option.
            EngineUnavailableError: If git could not be started.
            CommandFailedError: If git exited with a non-zero status.
            CommandTimeoutError: If git ran longer than the timeout.
        """
        cmd = self.build_command(subcommand, args, operands, paths)
        full_args = tuple(cmd[len(self.global_options) + 2:])
        limit = self.timeout if timeout is None else timeout
        if not limit:
            limit = None

        logger.debug(f"Running git command: {' '.join(cmd)}")

        try:
            proc = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                env=self._environment(),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=limit,
            )
        except subprocess.TimeoutExpired as e:
            logger.debug(f"git {subcommand} timed out after {limit}s")
            stderr = e.stderr or ""
            if isinstance(stderr, bytes):
                stderr = stderr.decode("utf-8", errors="replace")
            raise CommandTimeoutError(subcommand, limit, command=cmd, stderr=stderr) from e
        except OSError as e:
            raise EngineUnavailableError(self.binary, str(e), command=cmd) from e

        result = CommandResult(
            subcommand=subcommand,
            args=full_args,
            command=tuple(cmd),
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            returncode=proc.returncode,
        )

        if result.returncode != 0:
            logger.debug(f"git {subcommand} exited with {result.returncode}: {result.stderr.strip()}")
            raise CommandFailedError(result)

        return result
