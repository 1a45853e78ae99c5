"""Git repository operations for gitscribe."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from gitscribe.config import Settings, get_settings
from gitscribe.errors import CommandFailedError, NotARepositoryError
from gitscribe.git.collections import Branches, Stashes, Worktrees
from gitscribe.git.command import CommandLine, CommandResult, GitExecutor, assert_not_option
from gitscribe.git.models import (
    BranchInfo,
    DiffFileStat,
    RemoteInfo,
    StashInfo,
    TagDeleteResult,
    TagInfo,
    WorktreeInfo,
)
from gitscribe.git.parsers import (
    BRANCH_FORMAT,
    STASH_FORMAT,
    TAG_FORMAT,
    build_tag_delete_result,
    parse_branch_list,
    parse_deleted_tags,
    parse_log,
    parse_numstat,
    parse_remote_config,
    parse_remote_names,
    parse_stash_list,
    parse_tag_delete_errors,
    parse_tag_list,
    parse_worktree_list,
)
from gitscribe.git.utils import find_git_root
from gitscribe.git.views import DiffStats, Log

logger = logging.getLogger(__name__)


class GitRepository:
    """A git working tree and the operations gitscribe can run in it.

    Operations against one repository share git's on-disk state. Nothing
    here locks; if two processes touch the index at once, git's own lock
    file makes one of them fail with CommandFailedError.
    """

    def __init__(
        self,
        path: Path | str,
        executor: Optional[GitExecutor] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize a GitRepository.

        Args:
            path: Path to the repository root.
            executor: Runs git commands. Built from settings when omitted.
            settings: Settings to use instead of the global ones.
        """
        self.path = Path(path).resolve()
        self._git_dir = self.path / ".git"

        if not self._git_dir.exists() and not self._is_bare(self.path):
            raise NotARepositoryError(str(self.path))

        self.settings = settings or get_settings()
        self.executor = executor or CommandLine(
            binary=self.settings.git.binary,
            env=self.settings.git.env,
            timeout=self.settings.effective_timeout,
        )

    @staticmethod
    def _is_bare(path: Path) -> bool:
        return (path / "HEAD").is_file() and (path / "objects").is_dir()

    @classmethod
    def find(
        cls,
        start_path: Path | str,
        executor: Optional[GitExecutor] = None,
    ) -> Optional["GitRepository"]:
        """Find a git repository from a starting path.

        Args:
            start_path: Path to start searching from.
            executor: Optional executor for the repository.

        Returns:
            GitRepository instance, or None if not found.
        """
        root = find_git_root(start_path)
        if root:
            return cls(root, executor=executor)
        return None

    def execute(
        self,
        subcommand: str,
        args: Sequence[str] = (),
        operands: Sequence[str] = (),
        paths: Sequence[str] = (),
        cwd: Path | str | None = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """Run a git subcommand in this repository.

        See CommandLine.execute for the arguments and the errors raised.
        """
        return self.executor.execute(
            subcommand,
            args=args,
            operands=operands,
            paths=paths,
            cwd=cwd or self.path,
            timeout=timeout,
        )

    def _run(self, subcommand: str, *args: str, **kwargs) -> str:
        return self.execute(subcommand, args=args, **kwargs).stdout

    # -------------------------------------------------------------------------
    # Branches
    # -------------------------------------------------------------------------

    def branch_list(self) -> list[BranchInfo]:
        """List local and remote-tracking branches."""
        output = self._run("branch", "--list", "--all", f"--format={BRANCH_FORMAT}")
        return parse_branch_list(output)

    def branches(self) -> Branches:
        """Snapshot of all branches, indexed for lookup."""
        return Branches(self)

    def current_branch(self) -> str:
        """Name of the checked-out branch, or 'HEAD' when detached."""
        name = self._run("branch", "--show-current").strip()
        return name or "HEAD"

    # -------------------------------------------------------------------------
    # Worktrees
    # -------------------------------------------------------------------------

    def worktree_list(self) -> list[WorktreeInfo]:
        return parse_worktree_list(self._run("worktree", "list", "--porcelain"))

    def worktrees(self) -> Worktrees:
        """Snapshot of all worktrees, indexed by directory."""
        return Worktrees(self)

    def worktree_add(self, directory: str, commitish: Optional[str] = None) -> None:
        operands = [str(directory)]
        if commitish is not None:
            operands.append(commitish)
        self.execute("worktree", args=["add"], operands=operands)

    def worktree_remove(self, directory: str, force: bool = False) -> None:
        args = ["remove"]
        if force:
            args.append("--force")
        self.execute("worktree", args=args, operands=[str(directory)])

    def worktree_prune(self) -> None:
        self.execute("worktree", args=["prune"])

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def tags(self) -> list[TagInfo]:
        """List tags with their tagger and message details."""
        output = self._run("tag", "--list", f"--format={TAG_FORMAT}")
        return parse_tag_list(output)

    def tag_delete(self, *names: str) -> TagDeleteResult:
        """Delete tags, reporting which ones could not be deleted.

        git deletes what it can and exits non-zero if anything failed. That
        partial failure is returned in the result rather than raised.

        Raises:
            InvalidArgumentError: If a name starts with '-'.
            CommandFailedError: If git failed without reporting on any tag.
        """
        assert_not_option("tag name", *names)
        if not names:
            return TagDeleteResult()

        try:
            result = self.execute("tag", args=["--delete"], operands=list(names))
        except CommandFailedError as e:
            stdout, stderr = e.result.stdout, e.result.stderr
            if not parse_deleted_tags(stdout) and not parse_tag_delete_errors(stderr):
                raise
            logger.debug(f"git tag --delete partially failed: {stderr.strip()}")
            return build_tag_delete_result(names, stdout, stderr)

        return build_tag_delete_result(names, result.stdout, result.stderr)

    # -------------------------------------------------------------------------
    # Diffs and history
    # -------------------------------------------------------------------------

    def diff_numstat(
        self,
        from_ref: Optional[str] = "HEAD",
        to_ref: Optional[str] = None,
        path_limiter: Optional[str] = None,
    ) -> list[DiffFileStat]:
        """Per-file insertion and deletion counts between two revisions."""
        operands = [ref for ref in (from_ref, to_ref) if ref]
        paths = [path_limiter] if path_limiter else []
        output = self._run("diff", "--numstat", "-M", operands=operands, paths=paths)
        return parse_numstat(output)

    def diff_stats(
        self,
        from_ref: Optional[str] = "HEAD",
        to_ref: Optional[str] = None,
        path_limiter: Optional[str] = None,
    ) -> DiffStats:
        """Lazily computed diff statistics between two revisions."""
        return DiffStats(self, from_ref, to_ref, path_limiter)

    def log_shas(
        self,
        count: int,
        object: Optional[str] = None,
        path_limiter: Optional[str] = None,
    ) -> list[str]:
        """Up to `count` commit shas, most recent first."""
        output = self._run(
            "log",
            "--no-color",
            "--pretty=format:%H",
            f"--max-count={count}",
            operands=[object] if object else [],
            paths=[path_limiter] if path_limiter else [],
        )
        return parse_log(output, count)

    def log(
        self,
        count: Optional[int] = None,
        object: Optional[str] = None,
        path_limiter: Optional[str] = None,
    ) -> Log:
        """The most recent commits, fetched immediately."""
        if count is None:
            count = self.settings.log.default_count
        return Log(self, count, object, path_limiter)

    def rev_parse(self, revision: str, cwd: Path | str | None = None) -> str:
        """Resolve a revision to its full sha."""
        return self._run("rev-parse", "--verify", operands=[revision], cwd=cwd).strip()

    # -------------------------------------------------------------------------
    # Stashes
    # -------------------------------------------------------------------------

    def stash_list(self) -> list[StashInfo]:
        return parse_stash_list(self._run("stash", "list", f"--format={STASH_FORMAT}"))

    def stashes(self) -> Stashes:
        return Stashes(self)

    def stash_save(self, message: str) -> bool:
        """Stash local changes.

        Returns:
            True if a stash was created, False if there was nothing to save.
        """
        output = self._run("stash", "push", "--message", message)
        return "Saved working directory" in output

    def stash_apply(self, name: Optional[str] = None) -> None:
        self.execute("stash", args=["apply"], operands=[name] if name else [])

    def stash_clear(self) -> None:
        self.execute("stash", args=["clear"])

    # -------------------------------------------------------------------------
    # Remotes
    # -------------------------------------------------------------------------

    def remote_names(self) -> list[str]:
        return parse_remote_names(self._run("remote"))

    def remote(self, name: str) -> RemoteInfo:
        """Configuration of a single remote, such as its url and fetch refspec."""
        assert_not_option("remote name", name)
        return parse_remote_config(self._run("config", "--list"), name)
