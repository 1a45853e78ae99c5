"""Tests for the git command executor."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from gitscribe.errors import (
    CommandFailedError,
    CommandTimeoutError,
    EngineUnavailableError,
    InvalidArgumentError,
)
from gitscribe.git.command import GLOBAL_OPTIONS, CommandLine, assert_not_option


class TestAssertNotOption:
    """Tests for option-injection checks."""

    def test_accepts_plain_values(self):
        assert_not_option("ref", "main", "HEAD~1", None)

    def test_rejects_leading_hyphen(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            assert_not_option("ref", "main", "--output=/tmp/x")
        assert exc_info.value.value == "--output=/tmp/x"


class TestBuildCommand:
    """Tests for argument vector construction."""

    def test_global_options_first(self):
        cmd = CommandLine().build_command("branch", ["--list"], ["main"])
        assert cmd == ["git", *GLOBAL_OPTIONS, "branch", "--list", "main"]

    def test_paths_after_separator(self):
        cmd = CommandLine().build_command("diff", ["--numstat"], ["HEAD"], ["-weird-name"])
        assert cmd[-3:] == ["HEAD", "--", "-weird-name"]

    def test_rejects_option_subcommand(self):
        with pytest.raises(InvalidArgumentError):
            CommandLine().build_command("--exec-path")


class TestExecute:
    """Tests for CommandLine.execute."""

    @patch("subprocess.run")
    def test_success(self, mock_run):
        """Test a zero exit returns the captured output."""
        mock_run.return_value = MagicMock(stdout="main\n", stderr="", returncode=0)

        result = CommandLine().execute("branch", ["--show-current"], cwd="/repo")

        assert result.ok
        assert result.stdout == "main\n"
        assert result.subcommand == "branch"
        assert result.args == ("--show-current",)
        call = mock_run.call_args
        assert call.args[0] == ["git", *GLOBAL_OPTIONS, "branch", "--show-current"]
        assert call.kwargs["cwd"] == "/repo"
        assert call.kwargs["capture_output"] is True

    @patch("subprocess.run")
    def test_environment_overrides(self, mock_run):
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        CommandLine(env={"GIT_TERMINAL_PROMPT": "0", "LC_ALL": "C"}).execute("status")

        env = mock_run.call_args.kwargs["env"]
        assert env["GIT_TERMINAL_PROMPT"] == "0"
        assert env["LC_ALL"] == "C"

    @patch("subprocess.run")
    def test_non_zero_exit_preserves_stderr(self, mock_run):
        """Test stderr reaches the error exactly as git printed it."""
        stderr = "fatal: not a git repository (or any of the parent directories): .git\n"
        mock_run.return_value = MagicMock(stdout="", stderr=stderr, returncode=128)

        with pytest.raises(CommandFailedError) as exc_info:
            CommandLine().execute("status", ["--porcelain"])

        error = exc_info.value
        assert error.stderr == stderr
        assert error.returncode == 128
        assert error.subcommand == "status"
        assert error.args_vector == ["--porcelain"]

    @patch("subprocess.run")
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="git", timeout=2, stderr=b"partial")

        with pytest.raises(CommandTimeoutError) as exc_info:
            CommandLine(timeout=2).execute("fetch")

        assert exc_info.value.timeout == 2
        assert exc_info.value.stderr == "partial"
        assert mock_run.call_args.kwargs["timeout"] == 2

    @patch("subprocess.run")
    def test_per_call_timeout_and_zero_disables(self, mock_run):
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)
        executor = CommandLine(timeout=30)

        executor.execute("status", timeout=5)
        assert mock_run.call_args.kwargs["timeout"] == 5

        executor.execute("status", timeout=0)
        assert mock_run.call_args.kwargs["timeout"] is None

    @patch("subprocess.run")
    def test_missing_binary(self, mock_run):
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory")

        with pytest.raises(EngineUnavailableError) as exc_info:
            CommandLine(binary="/nowhere/git").execute("status")

        assert exc_info.value.binary == "/nowhere/git"

    @patch("subprocess.run")
    def test_operand_option_rejected_before_spawn(self, mock_run):
        with pytest.raises(InvalidArgumentError):
            CommandLine().execute("log", operands=["--output=/tmp/pwned"])

        mock_run.assert_not_called()
