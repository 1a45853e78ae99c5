"""gitscribe: typed access to git branches, worktrees, tags, diffs and history."""

__version__ = "0.1.0"

import logging

from gitscribe.errors import (
    CommandFailedError,
    CommandTimeoutError,
    EngineUnavailableError,
    GitError,
    GitScribeError,
    InvalidArgumentError,
    MalformedOutputError,
    NotARepositoryError,
)
from gitscribe.git import GitRepository

# Silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "GitRepository",
    "GitScribeError",
    "GitError",
    "InvalidArgumentError",
    "MalformedOutputError",
    "EngineUnavailableError",
    "CommandFailedError",
    "CommandTimeoutError",
    "NotARepositoryError",
]
