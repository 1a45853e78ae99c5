"""Snapshot collections of branches, worktrees and stashes.

Each collection runs one listing command when it is constructed and never
refreshes. Create a new collection to see changes made afterwards.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, Optional, TypeVar

from gitscribe.git.models import BranchInfo, StashInfo, WorktreeInfo

if TYPE_CHECKING:
    from gitscribe.git.repository import GitRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_lookup(
    items: Iterable[T],
    key: Callable[[T], str],
    aliases: Callable[[T], Iterable[str]],
) -> dict[str, T]:
    """Index items by their key, then by their aliases.

    Exact keys are registered first. An alias is only added when nothing
    claimed it yet, so the first item in listing order wins a shared alias
    and an exact key always beats an alias.
    """
    items = list(items)
    lookup: dict[str, T] = {}
    for item in items:
        lookup.setdefault(key(item), item)
    for item in items:
        for alias in aliases(item):
            lookup.setdefault(alias, item)
    return lookup


def branch_aliases(branch: BranchInfo) -> list[str]:
    """Other names git accepts for a branch.

    Examples:
        refs/heads/main          -> main
        refs/remotes/origin/main -> remotes/origin/main, origin/main
        remotes/origin/main      -> origin/main
    """
    full = branch.full
    if full.startswith("refs/heads/"):
        return [full[len("refs/heads/"):]]
    if full.startswith("refs/remotes/"):
        short = full[len("refs/remotes/"):]
        return [f"remotes/{short}", short]
    if full.startswith("remotes/"):
        return [full[len("remotes/"):]]
    return []


class Branches:
    """All local and remote-tracking branches of a repository."""

    def __init__(self, repo: GitRepository):
        self._repo = repo
        self._branches: dict[str, BranchInfo] = {}
        for branch in repo.branch_list():
            self._branches.setdefault(branch.full, branch)
        self._lookup = build_lookup(self._branches.values(), lambda b: b.full, branch_aliases)

    @property
    def local(self) -> list[BranchInfo]:
        return [b for b in self if not b.remote]

    @property
    def remote(self) -> list[BranchInfo]:
        return [b for b in self if b.remote]

    @property
    def current(self) -> Optional[BranchInfo]:
        """The checked-out branch, or None with a detached HEAD."""
        for branch in self:
            if branch.current:
                return branch
        return None

    @property
    def size(self) -> int:
        return len(self._branches)

    def get(self, name: str) -> Optional[BranchInfo]:
        """Find a branch by full ref or by a name git would accept for it.

        Returns:
            The branch, or None when nothing matches.
        """
        return self._lookup.get(str(name))

    def __getitem__(self, name: str) -> Optional[BranchInfo]:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return str(name) in self._lookup

    def __iter__(self) -> Iterator[BranchInfo]:
        return iter(list(self._branches.values()))

    def __len__(self) -> int:
        return self.size

    def __str__(self) -> str:
        out = ""
        for branch in self:
            out += ("* " if branch.current else "  ") + str(branch) + "\n"
        return out


class Worktree:
    """One worktree plus lazy access to the commit checked out in it."""

    _UNRESOLVED = object()

    def __init__(self, repo: GitRepository, info: WorktreeInfo):
        self._repo = repo
        self.info = info
        self._commit = self._UNRESOLVED
        self._lock = threading.Lock()

    @property
    def full(self) -> str:
        return self.info.full

    @property
    def dir(self) -> str:
        return self.info.dir

    @property
    def head(self) -> Optional[str]:
        return self.info.head

    @property
    def branch(self) -> Optional[str]:
        return self.info.branch

    @property
    def resolved(self) -> bool:
        return self._commit is not self._UNRESOLVED

    @property
    def commit(self) -> str:
        """Full sha of the worktree's commit, resolved once and cached."""
        with self._lock:
            if self._commit is self._UNRESOLVED:
                if self.info.head:
                    self._commit = self._repo.rev_parse(self.info.head)
                else:
                    self._commit = self._repo.rev_parse("HEAD", cwd=self.info.dir)
            return self._commit

    def remove(self, force: bool = False) -> None:
        self._repo.worktree_remove(self.info.dir, force=force)

    def __str__(self) -> str:
        return self.full

    def __repr__(self) -> str:
        return f"Worktree({self.full!r})"


class Worktrees:
    """All worktrees attached to a repository, keyed by directory."""

    def __init__(self, repo: GitRepository):
        self._repo = repo
        self._worktrees: dict[str, Worktree] = {}
        for info in repo.worktree_list():
            self._worktrees.setdefault(info.dir, Worktree(repo, info))
        self._lookup = build_lookup(
            self._worktrees.values(),
            lambda w: w.full,
            lambda w: [w.dir],
        )

    @property
    def size(self) -> int:
        return len(self._worktrees)

    def get(self, name: str) -> Optional[Worktree]:
        """Find a worktree by its full name or its directory."""
        return self._lookup.get(str(name))

    def __getitem__(self, name: str) -> Optional[Worktree]:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return str(name) in self._lookup

    def __iter__(self) -> Iterator[Worktree]:
        return iter(list(self._worktrees.values()))

    def __len__(self) -> int:
        return self.size

    def __str__(self) -> str:
        return "".join(f"{worktree}\n" for worktree in self)

    def prune(self) -> None:
        """Remove administrative data for worktrees whose directory is gone."""
        self._repo.worktree_prune()


class Stashes:
    """Stash entries, most recent first."""

    def __init__(self, repo: GitRepository):
        self._repo = repo
        self._stashes: list[StashInfo] = repo.stash_list()

    @property
    def size(self) -> int:
        return len(self._stashes)

    def get(self, index: int) -> Optional[StashInfo]:
        index = int(index)
        if 0 <= index < len(self._stashes):
            return self._stashes[index]
        return None

    def __getitem__(self, index: int) -> Optional[StashInfo]:
        return self.get(index)

    def __iter__(self) -> Iterator[StashInfo]:
        return iter(list(self._stashes))

    def __len__(self) -> int:
        return self.size

    def __str__(self) -> str:
        return "".join(f"{stash.name}: {stash.message}\n" for stash in self)
