"""Derived views over git output: diff statistics and bounded history."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Iterator, Optional

from gitscribe.errors import InvalidArgumentError
from gitscribe.git.command import assert_not_option
from gitscribe.git.models import DiffFileStat, DiffTotal
from gitscribe.git.parsers import summarize_numstat

if TYPE_CHECKING:
    from gitscribe.git.repository import GitRepository

logger = logging.getLogger(__name__)


class DiffStats:
    """Insertion and deletion counts between two revisions.

    The endpoints are checked when the object is created. `git diff` itself
    only runs on first access to one of the statistics, and runs once.
    """

    def __init__(
        self,
        repo: GitRepository,
        from_ref: Optional[str] = "HEAD",
        to_ref: Optional[str] = None,
        path_limiter: Optional[str] = None,
    ):
        assert_not_option("commit or commit range", from_ref, to_ref)

        self._repo = repo
        self.from_ref = from_ref
        self.to_ref = to_ref
        self.path_limiter = path_limiter
        self._stats: Optional[tuple[DiffTotal, dict[str, DiffFileStat]]] = None
        self._lock = threading.Lock()

    def _fetch(self) -> tuple[DiffTotal, dict[str, DiffFileStat]]:
        with self._lock:
            if self._stats is None:
                stats = self._repo.diff_numstat(self.from_ref, self.to_ref, self.path_limiter)
                self._stats = (summarize_numstat(stats), {s.path: s for s in stats})
            return self._stats

    @property
    def total(self) -> DiffTotal:
        return self._fetch()[0]

    @property
    def insertions(self) -> int:
        return self.total.insertions

    @property
    def deletions(self) -> int:
        return self.total.deletions

    @property
    def lines(self) -> int:
        return self.total.lines

    @property
    def files(self) -> dict[str, DiffFileStat]:
        """Per-file statistics keyed by destination path."""
        return dict(self._fetch()[1])

    def __repr__(self) -> str:
        return f"DiffStats(from_ref={self.from_ref!r}, to_ref={self.to_ref!r}, path_limiter={self.path_limiter!r})"


class Log:
    """The most recent commits, up to a fixed count.

    History is fetched when the object is created. Ask for a larger count
    with a new Log to see further back.
    """

    def __init__(
        self,
        repo: GitRepository,
        count: int = 30,
        object: Optional[str] = None,
        path_limiter: Optional[str] = None,
    ):
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidArgumentError("log count", count, "must be a positive integer")
        assert_not_option("object", object)

        self.count = count
        self.object = object
        self.path_limiter = path_limiter
        self._commits: list[str] = repo.log_shas(count, object, path_limiter)
        logger.debug(f"Loaded {len(self._commits)} commit(s) of history")

    @property
    def size(self) -> int:
        return len(self._commits)

    @property
    def first(self) -> Optional[str]:
        return self._commits[0] if self._commits else None

    @property
    def last(self) -> Optional[str]:
        return self._commits[-1] if self._commits else None

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._commits))

    def __getitem__(self, index: int) -> str:
        return self._commits[index]

    def __str__(self) -> str:
        return "\n".join(self._commits)
