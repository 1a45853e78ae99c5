"""Git integration for gitscribe.

This package runs the git binary, parses its output into immutable records,
and wraps listings in indexed collections and lazily computed views.
"""

from gitscribe.git.collections import Branches, Stashes, Worktree, Worktrees
from gitscribe.git.command import (
    CommandLine,
    CommandResult,
    GitExecutor,
    assert_not_option,
)
from gitscribe.git.models import (
    Author,
    BranchInfo,
    DiffFileStat,
    DiffTotal,
    RemoteInfo,
    StashInfo,
    TagDeleteFailure,
    TagDeleteResult,
    TagInfo,
    WorktreeInfo,
)
from gitscribe.git.repository import GitRepository
from gitscribe.git.utils import find_git_root, is_git_repository
from gitscribe.git.views import DiffStats, Log

__all__ = [
    # Main class
    "GitRepository",
    # Execution
    "CommandLine",
    "CommandResult",
    "GitExecutor",
    "assert_not_option",
    # Collections and views
    "Branches",
    "Worktree",
    "Worktrees",
    "Stashes",
    "DiffStats",
    "Log",
    # Data classes
    "Author",
    "BranchInfo",
    "DiffFileStat",
    "DiffTotal",
    "RemoteInfo",
    "StashInfo",
    "TagDeleteFailure",
    "TagDeleteResult",
    "TagInfo",
    "WorktreeInfo",
    # Utility functions
    "find_git_root",
    "is_git_repository",
]
