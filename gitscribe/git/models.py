"""Immutable records parsed from git output.

None of these hold a reference back to the repository; they are plain data.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

REMOTE_PREFIXES = ("refs/remotes/", "remotes/")

AUTHOR_PATTERN = re.compile(r"(.*?) <(.*?)> (\d+) ([-+]\d{2})(\d{2})")


@dataclass(frozen=True)
class BranchInfo:
    """A branch as listed by `git branch`."""

    name: str
    full: str
    remote: bool = False
    current: bool = False
    worktree: bool = False
    symref: bool = False

    @property
    def remote_name(self) -> Optional[str]:
        """Name of the remote for remote-tracking branches, e.g. 'origin'."""
        for prefix in REMOTE_PREFIXES:
            if self.full.startswith(prefix):
                return self.full[len(prefix):].split("/", 1)[0]
        return None

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class WorktreeInfo:
    """A worktree as listed by `git worktree list --porcelain`."""

    dir: str
    head: Optional[str] = None
    branch: Optional[str] = None
    bare: bool = False
    detached: bool = False
    locked: bool = False
    prunable: bool = False

    @property
    def full(self) -> str:
        """Directory, suffixed with the head commit when one is known."""
        if self.head:
            return f"{self.dir} {self.head}"
        return self.dir

    def __str__(self) -> str:
        return self.full


@dataclass(frozen=True)
class Author:
    """Name, email and timestamp of whoever made a commit or tag.

    Build one from raw git text with ``Author.parse``; text that does not
    match leaves every field unset.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    date: Optional[datetime] = None
    timezone: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "Author":
        """Parse ``"Name <email> 1700000000 +0100"``."""
        match = AUTHOR_PATTERN.match(text or "")
        if not match:
            return cls()

        name, email, seconds, tz_hours, tz_minutes = match.groups()
        sign = -1 if tz_hours.startswith("-") else 1
        offset = timedelta(hours=abs(int(tz_hours)), minutes=int(tz_minutes)) * sign
        date = datetime.fromtimestamp(int(seconds), tz=timezone(offset))
        return cls(
            name=name,
            email=email,
            date=date,
            timezone=f"{tz_hours}:{tz_minutes}",
        )

    def __str__(self) -> str:
        if self.name is None:
            return ""
        return f"{self.name} <{self.email}>"


@dataclass(frozen=True)
class TagInfo:
    """A tag as listed by `git tag --format`.

    Annotated tags have ``object_type == "tag"`` and carry tagger and message
    fields; for lightweight tags all four are None. A tag object written
    without a tagger header is still annotated, with only the message set.
    """

    name: str
    sha: str
    object_type: str
    target_sha: Optional[str] = None
    tagger_name: Optional[str] = None
    tagger_email: Optional[str] = None
    tagger_date: Optional[datetime] = None
    message: Optional[str] = None

    @property
    def annotated(self) -> bool:
        return self.object_type == "tag"

    @property
    def lightweight(self) -> bool:
        return not self.annotated

    @property
    def tagger(self) -> Optional[Author]:
        """The tagger as an Author, or None for lightweight tags."""
        if not self.annotated or self.tagger_name is None:
            return None
        return Author(
            name=self.tagger_name,
            email=self.tagger_email,
            date=self.tagger_date,
            timezone=_format_offset(self.tagger_date),
        )

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TagDeleteFailure:
    """A tag that `git tag -d` could not delete."""

    name: str
    error_message: str


@dataclass(frozen=True)
class TagDeleteResult:
    """Outcome of a batch tag deletion.

    `git tag -d` deletes what it can and reports the rest, so a single call
    can both succeed and fail.
    """

    deleted: tuple[str, ...] = ()
    not_deleted: tuple[TagDeleteFailure, ...] = ()

    @property
    def success(self) -> bool:
        return not self.not_deleted


@dataclass(frozen=True)
class DiffFileStat:
    """Insertions and deletions for one file in a numstat diff."""

    path: str
    insertions: int = 0
    deletions: int = 0
    src_path: Optional[str] = None
    binary: bool = False

    @property
    def renamed(self) -> bool:
        return self.src_path is not None

    @property
    def lines(self) -> int:
        return self.insertions + self.deletions


@dataclass(frozen=True)
class DiffTotal:
    """Summed statistics over every file in a diff."""

    insertions: int = 0
    deletions: int = 0
    files: int = 0

    @property
    def lines(self) -> int:
        return self.insertions + self.deletions


@dataclass(frozen=True)
class StashInfo:
    """A stash entry as listed by `git stash list --format`."""

    index: int
    name: str
    sha: str
    short_sha: str
    message: str
    branch: Optional[str] = None
    author_name: Optional[str] = None
    author_email: Optional[str] = None
    author_date: Optional[str] = None
    committer_name: Optional[str] = None
    committer_email: Optional[str] = None
    committer_date: Optional[str] = None

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class RemoteInfo:
    """Configuration of one remote, taken from `git config --list`."""

    name: str
    url: Optional[str] = None
    fetch: Optional[str] = None
    fetch_refspecs: tuple[str, ...] = ()
    config: dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    def __str__(self) -> str:
        return self.name


def _format_offset(value: Optional[datetime]) -> Optional[str]:
    if value is None or value.utcoffset() is None:
        return None
    minutes = int(value.utcoffset().total_seconds() // 60)
    sign = "-" if minutes < 0 else "+"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"
