"""Pytest configuration and fixtures for gitscribe tests."""

import os
import tempfile
from pathlib import Path
from typing import Generator, Optional, Sequence

import pytest

from gitscribe.config import Settings, reset_settings
from gitscribe.errors import CommandFailedError
from gitscribe.git.command import CommandResult, assert_not_option
from gitscribe.git.repository import GitRepository


class SpyExecutor:
    """Executor that records calls and answers from canned output.

    Responses are keyed by subcommand. A response is either a stdout string
    or a CommandResult, which is raised as CommandFailedError when its
    return code is non-zero.
    """

    def __init__(self, responses: Optional[dict] = None):
        self.responses = dict(responses or {})
        self.calls: list[dict] = []

    def execute(
        self,
        subcommand: str,
        args: Sequence[str] = (),
        operands: Sequence[str] = (),
        paths: Sequence[str] = (),
        cwd=None,
        timeout=None,
    ) -> CommandResult:
        assert_not_option(f"operand for git {subcommand}", *operands)
        self.calls.append({
            "subcommand": subcommand,
            "args": list(args),
            "operands": list(operands),
            "paths": list(paths),
            "cwd": cwd,
        })

        response = self.responses.get(subcommand, "")
        if isinstance(response, CommandResult):
            if response.returncode != 0:
                raise CommandFailedError(response)
            return response

        argv = (*args, *operands)
        return CommandResult(
            subcommand=subcommand,
            args=argv,
            command=("git", subcommand, *argv),
            stdout=response,
            stderr="",
            returncode=0,
        )

    def calls_for(self, subcommand: str) -> list[dict]:
        return [c for c in self.calls if c["subcommand"] == subcommand]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def repo_dir(temp_dir: Path) -> Path:
    """A directory that looks like a git working tree."""
    (temp_dir / ".git").mkdir()
    return temp_dir


@pytest.fixture
def test_settings() -> Settings:
    """Settings built from defaults only."""
    reset_settings()
    return Settings(git={"binary": "git", "timeout": 5}, log={"default_count": 10})


@pytest.fixture
def spy() -> SpyExecutor:
    return SpyExecutor()


@pytest.fixture
def spy_repo(repo_dir: Path, spy: SpyExecutor, test_settings: Settings) -> GitRepository:
    """A repository whose git calls go to the spy executor."""
    return GitRepository(repo_dir, executor=spy, settings=test_settings)


@pytest.fixture
def temp_config_file(temp_dir: Path) -> Path:
    """Create a temporary config file."""
    config_path = temp_dir / "config.yaml"
    config_path.write_text(
        """
git:
  binary: /usr/local/bin/git
  timeout: 12

log:
  default_count: 5
"""
    )
    return config_path


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Remove GITSCRIBE_* variables for the duration of a test."""
    original = {
        var: os.environ.pop(var)
        for var in list(os.environ)
        if var.startswith("GITSCRIBE_")
    }

    reset_settings()

    yield

    for var in [v for v in os.environ if v.startswith("GITSCRIBE_")]:
        del os.environ[var]
    os.environ.update(original)

    reset_settings()
