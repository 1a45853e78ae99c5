"""Tests for the exception hierarchy."""

import pytest

from gitscribe.errors import (
    CommandFailedError,
    CommandTimeoutError,
    EngineUnavailableError,
    GitError,
    GitScribeError,
    InvalidArgumentError,
    InvalidConfigError,
    MalformedOutputError,
    NotARepositoryError,
)
from gitscribe.git.command import CommandResult


def make_result(returncode=128, stderr="fatal: not a git repository (or any of the parent directories): .git\n"):
    return CommandResult(
        subcommand="status",
        args=("--porcelain",),
        command=("git", "-c", "color.ui=false", "status", "--porcelain"),
        stdout="",
        stderr=stderr,
        returncode=returncode,
    )


class TestGitScribeError:
    """Tests for the base error."""

    def test_str_with_code(self):
        error = GitScribeError("boom", code="X")
        assert str(error) == "[X] boom"

    def test_str_without_code(self):
        assert str(GitScribeError("boom")) == "boom"

    def test_to_dict(self):
        error = GitScribeError("boom", code="X", details={"a": 1})
        assert error.to_dict() == {
            "error_type": "GitScribeError",
            "message": "boom",
            "code": "X",
            "details": {"a": 1},
            "retryable": False,
        }

    @pytest.mark.parametrize("error", [
        InvalidArgumentError("ref", "-x", "bad"),
        MalformedOutputError("git log", "junk", "a sha"),
        EngineUnavailableError("git", "not found"),
        CommandFailedError(make_result()),
        CommandTimeoutError("fetch", 1.0),
        NotARepositoryError("/tmp"),
        InvalidConfigError("git.timeout", -1, "negative"),
    ])
    def test_all_errors_share_base(self, error):
        assert isinstance(error, GitScribeError)


class TestCommandFailedError:
    """Tests for CommandFailedError."""

    def test_keeps_stderr_verbatim(self):
        result = make_result()
        error = CommandFailedError(result)
        assert error.stderr == result.stderr
        assert error.returncode == 128
        assert error.subcommand == "status"
        assert error.args_vector == ["--porcelain"]
        assert error.details["stderr"] == result.stderr

    def test_is_git_error_and_retryable(self):
        error = CommandFailedError(make_result())
        assert isinstance(error, GitError)
        assert error.retryable is True
        assert error.command[0] == "git"

    def test_message_without_stderr(self):
        error = CommandFailedError(make_result(returncode=1, stderr=""))
        assert "exit code 1" in error.message


class TestOtherErrors:
    """Tests for the remaining error kinds."""

    def test_invalid_argument(self):
        error = InvalidArgumentError("commit or commit range", "--all", "must not start with '-'")
        assert error.code == "INVALID_ARGUMENT"
        assert error.argument == "commit or commit range"
        assert error.value == "--all"
        assert error.retryable is False

    def test_malformed_output_location(self):
        error = MalformedOutputError("git branch --list", "oops", "three columns", 2)
        assert "at index 2" in error.message
        assert error.line == "oops"

    def test_timeout_is_retryable(self):
        error = CommandTimeoutError("fetch", 2.5, stderr="partial")
        assert error.retryable is True
        assert error.timeout == 2.5
        assert error.stderr == "partial"

    def test_engine_unavailable_not_retryable(self):
        error = EngineUnavailableError("/nope/git", "No such file")
        assert error.retryable is False
        assert error.binary == "/nope/git"

    def test_not_a_repository(self):
        error = NotARepositoryError("/tmp/x")
        assert error.code == "NOT_A_REPOSITORY"
        assert error.details["path"] == "/tmp/x"
