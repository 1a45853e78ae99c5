"""Parsers turning raw git output into value objects.

Every function here is pure: text in, records out. Line formats that can
carry noise (worktree porcelain, remote config) skip what they do not
understand. Fixed-column formats (branch, tag, numstat, stash, log) raise
MalformedOutputError on the first line that does not fit.
"""

from __future__ import annotations

import codecs
import re
from datetime import datetime
from typing import Iterable, Optional

from gitscribe.errors import MalformedOutputError
from gitscribe.git.models import (
    REMOTE_PREFIXES,
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

# =============================================================================
# Branches
# =============================================================================

# name<TAB>full ref<TAB>space separated flags
BRANCH_FORMAT = (
    "%(refname:short)%09%(refname)%09"
    "%(if:equals=*)%(HEAD)%(then)current%(end)"
    "%(if)%(worktreepath)%(then) worktree%(end)"
    "%(if)%(symref)%(then) symref%(end)"
)
BRANCH_FIELDS = 3


def parse_branch_list(output: str) -> list[BranchInfo]:
    """Parse `git branch --list --format=BRANCH_FORMAT` output.

    Args:
        output: Raw stdout.

    Returns:
        Branches in listing order. Detached HEAD pseudo-entries are dropped.

    Raises:
        MalformedOutputError: If a line does not have three tab-separated columns.
    """
    branches = []
    for index, line in enumerate(output.split("\n")):
        if not line.strip():
            continue

        fields = line.split("\t")
        if len(fields) != BRANCH_FIELDS:
            raise MalformedOutputError(
                "git branch --list",
                line,
                "name<TAB>full-ref<TAB>flags",
                index,
            )

        name, full, flags = fields
        # "(HEAD detached at abc1234)" and "(no branch)" are not branches
        if name.startswith("("):
            continue

        flag_set = set(flags.split())
        current = "current" in flag_set
        branches.append(BranchInfo(
            name=name,
            full=full,
            remote=full.startswith(REMOTE_PREFIXES),
            current=current,
            worktree="worktree" in flag_set and not current,
            symref="symref" in flag_set,
        ))

    return branches


# =============================================================================
# Worktrees
# =============================================================================

def parse_worktree_list(output: str) -> list[WorktreeInfo]:
    """Parse `git worktree list --porcelain` output.

    Each record starts with a ``worktree <path>`` line. A record without a
    HEAD line (a bare repository, for instance) is still returned, with
    ``head`` set to None.
    """
    worktrees: list[WorktreeInfo] = []
    current: Optional[dict] = None

    for raw_line in output.split("\n"):
        line = raw_line.rstrip("\r")
        if not line:
            continue

        key, _, value = line.partition(" ")
        if key == "worktree":
            if current:
                worktrees.append(WorktreeInfo(**current))
            current = {"dir": value}
        elif current is None:
            continue
        elif key == "HEAD":
            current["head"] = value or None
        elif key == "branch":
            current["branch"] = value or None
        elif key == "bare":
            current["bare"] = True
        elif key == "detached":
            current["detached"] = True
        elif key == "locked":
            current["locked"] = True
        elif key == "prunable":
            current["prunable"] = True

    if current:
        worktrees.append(WorktreeInfo(**current))

    return worktrees


# =============================================================================
# Tags
# =============================================================================

# Unit and record separators; tag messages may span several lines.
TAG_FIELD_SEPARATOR = "\x1f"
TAG_RECORD_SEPARATOR = "\x1e"
TAG_FIELDS = 8

TAG_FORMAT = TAG_FIELD_SEPARATOR.join([
    "%(refname:short)",
    "%(objectname)",
    "%(*objectname)",
    "%(objecttype)",
    "%(taggername)",
    "%(taggeremail)",
    "%(taggerdate:iso8601-strict)",
    "%(contents)",
]) + TAG_RECORD_SEPARATOR

DELETED_TAG_PATTERN = re.compile(r"^Deleted tag '([^']+)'", re.MULTILINE)
TAG_ERROR_PATTERN = re.compile(r"^error: tag '([^']+)'(.*)$")


def parse_tag_list(output: str) -> list[TagInfo]:
    """Parse `git tag --list --format=TAG_FORMAT` output.

    Raises:
        MalformedOutputError: If a record does not have exactly eight fields
            or carries an unreadable tagger date.
    """
    # %(contents) ends with a newline that lands in front of the next record
    records = [r.lstrip("\n") for r in output.split(TAG_RECORD_SEPARATOR)]
    records = [r for r in records if r.strip()]
    return [_parse_tag_record(record, index) for index, record in enumerate(records)]


def _parse_tag_record(record: str, index: int) -> TagInfo:
    parts = record.split(TAG_FIELD_SEPARATOR, TAG_FIELDS - 1)
    if len(parts) != TAG_FIELDS:
        raise MalformedOutputError(
            "git tag --list",
            record,
            f"{TAG_FIELDS} fields separated by \\x1f",
            index,
        )

    name, objectname, dereferenced, object_type, tagger_name, tagger_email, tagger_date, contents = parts

    if object_type != "tag":
        return TagInfo(name=name, sha=objectname, object_type=object_type, target_sha=objectname)

    # tag objects written without a tagger header leave these fields empty
    email = tagger_email.strip().removeprefix("<").removesuffix(">")
    return TagInfo(
        name=name,
        sha=objectname,
        object_type=object_type,
        target_sha=dereferenced or None,
        tagger_name=tagger_name or None,
        tagger_email=email or None,
        tagger_date=_parse_iso_date(tagger_date, record, index) if tagger_date else None,
        message=contents.rstrip("\n"),
    )


def _parse_iso_date(value: str, record: str, index: int) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise MalformedOutputError(
            "git tag --list",
            record,
            "an ISO 8601 tagger date",
            index,
        ) from None


def parse_deleted_tags(stdout: str) -> list[str]:
    """Names of the tags `git tag -d` reported as deleted."""
    return DELETED_TAG_PATTERN.findall(stdout)


def parse_tag_delete_errors(stderr: str) -> dict[str, str]:
    """Map tag name to the error line `git tag -d` printed for it."""
    errors = {}
    for line in stderr.splitlines():
        match = TAG_ERROR_PATTERN.match(line)
        if match:
            errors[match.group(1)] = line.strip()
    return errors


def build_tag_delete_result(
    requested: Iterable[str],
    stdout: str,
    stderr: str,
) -> TagDeleteResult:
    """Combine `git tag -d` output into a TagDeleteResult.

    Every requested name not confirmed on stdout becomes a failure, using
    the matching stderr line when git printed one.
    """
    deleted = parse_deleted_tags(stdout)
    errors = parse_tag_delete_errors(stderr)
    failures = tuple(
        TagDeleteFailure(name=name, error_message=errors.get(name, f"tag '{name}' could not be deleted"))
        for name in requested
        if name not in deleted
    )
    return TagDeleteResult(deleted=tuple(deleted), not_deleted=failures)


# =============================================================================
# Numstat
# =============================================================================

NUMSTAT_COUNT = re.compile(r"[0-9]+")

# "dir/{old => new}/file", "{ => sub}/file", "dir/{old => }/file"
BRACED_RENAME = re.compile(r"^(?P<prefix>.*)\{(?P<old>.*) => (?P<new>.*)\}(?P<suffix>.*)$")


def unquote_path(path: str) -> str:
    """Undo git's C-style quoting of unusual paths.

    Paths with control or non-ASCII characters are printed in double quotes
    with backslash escapes and octal-encoded UTF-8 bytes.

    Raises:
        ValueError: If the quoted text holds an invalid escape.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    raw = path[1:-1].encode("utf-8")
    return codecs.escape_decode(raw)[0].decode("utf-8", errors="replace")


def split_rename(path: str) -> tuple[Optional[str], str]:
    """Split a numstat path column into (source, destination).

    Returns:
        (None, path) when the column is not a rename.
    """
    match = BRACED_RENAME.match(path)
    if match:
        prefix, old, new, suffix = match.group("prefix", "old", "new", "suffix")
        return _join_rename(prefix, old, suffix), _join_rename(prefix, new, suffix)

    if " => " in path:
        src, dst = path.split(" => ", 1)
        return src, dst

    return None, path


def _join_rename(prefix: str, middle: str, suffix: str) -> str:
    # an empty side of the braces leaves a doubled or leading slash behind
    return (prefix + middle + suffix).replace("//", "/").lstrip("/")


def _unquote_column(value: str, line: str, index: int) -> str:
    try:
        return unquote_path(value)
    except ValueError:
        raise MalformedOutputError(
            "git diff --numstat",
            line,
            "a plain or C-quoted path",
            index,
        ) from None


def _parse_count(value: str, line: str, index: int) -> Optional[int]:
    if value == "-":
        return None
    if not NUMSTAT_COUNT.fullmatch(value):
        raise MalformedOutputError(
            "git diff --numstat",
            line,
            "a non-negative count or '-'",
            index,
        )
    return int(value)


def parse_numstat(output: str) -> list[DiffFileStat]:
    """Parse `git diff --numstat` output.

    Accepts both rename encodings git can produce: a single path column
    holding ``old => new`` (optionally braced), and two separate
    tab-separated path columns.

    Raises:
        MalformedOutputError: On a line without 3 or 4 columns, or with a
            count that is neither a number nor '-', or with a quoted
            path that does not decode.
    """
    stats = []
    for index, line in enumerate(output.split("\n")):
        if not line.strip():
            continue

        fields = line.split("\t")
        if len(fields) not in (3, 4):
            raise MalformedOutputError(
                "git diff --numstat",
                line,
                "insertions<TAB>deletions<TAB>path",
                index,
            )

        insertions = _parse_count(fields[0], line, index)
        deletions = _parse_count(fields[1], line, index)
        binary = insertions is None or deletions is None

        if len(fields) == 4:
            src_path = _unquote_column(fields[2], line, index)
            path = _unquote_column(fields[3], line, index)
        else:
            src_path, path = split_rename(_unquote_column(fields[2], line, index))

        stats.append(DiffFileStat(
            path=path,
            src_path=src_path,
            insertions=insertions or 0,
            deletions=deletions or 0,
            binary=binary,
        ))

    return stats


def summarize_numstat(stats: Iterable[DiffFileStat]) -> DiffTotal:
    """Sum insertions and deletions; binary files count as changed files only."""
    stats = list(stats)
    return DiffTotal(
        insertions=sum(s.insertions for s in stats if not s.binary),
        deletions=sum(s.deletions for s in stats if not s.binary),
        files=len(stats),
    )


# =============================================================================
# Log
# =============================================================================

SHA_PATTERN = re.compile(r"^[0-9a-f]{40}([0-9a-f]{24})?$")


def parse_log(output: str, count: Optional[int] = None) -> list[str]:
    """Parse `git log --pretty=format:%H` output into commit shas.

    Args:
        output: Raw stdout, most recent commit first.
        count: Keep at most this many shas.

    Raises:
        MalformedOutputError: If a non-blank line is not a full sha.
    """
    shas = []
    for index, line in enumerate(output.split("\n")):
        sha = line.strip()
        if not sha:
            continue
        if not SHA_PATTERN.match(sha):
            raise MalformedOutputError("git log", line, "one commit sha per line", index)
        shas.append(sha)

    if count is not None:
        return shas[:count]
    return shas


# =============================================================================
# Stashes
# =============================================================================

STASH_FIELD_SEPARATOR = "\x1f"
STASH_FIELDS = 10
STASH_FORMAT = STASH_FIELD_SEPARATOR.join([
    "%H",   # full sha
    "%h",   # short sha
    "%gd",  # reflog selector, stash@{n}
    "%gs",  # reflog subject, the stash message
    "%an",
    "%ae",
    "%aI",
    "%cn",
    "%ce",
    "%cI",
])

STASH_INDEX_PATTERN = re.compile(r"stash@\{(\d+)\}")
STASH_BRANCH_PATTERN = re.compile(r"^(?:WIP on|On)\s+([^:]+):")


def parse_stash_list(output: str) -> list[StashInfo]:
    """Parse `git stash list --format=STASH_FORMAT` output.

    Raises:
        MalformedOutputError: If a line does not have ten fields.
    """
    stashes = []
    lines = [line for line in output.split("\n") if line.strip()]
    for index, line in enumerate(lines):
        parts = line.split(STASH_FIELD_SEPARATOR, STASH_FIELDS - 1)
        if len(parts) != STASH_FIELDS:
            raise MalformedOutputError(
                "git stash list",
                line,
                f"{STASH_FIELDS} fields separated by \\x1f",
                index,
            )

        sha, short_sha, selector, message, a_name, a_email, a_date, c_name, c_email, c_date = parts
        index_match = STASH_INDEX_PATTERN.search(selector)
        branch_match = STASH_BRANCH_PATTERN.match(message)

        stashes.append(StashInfo(
            index=int(index_match.group(1)) if index_match else index,
            name=selector,
            sha=sha,
            short_sha=short_sha,
            message=message,
            branch=branch_match.group(1) if branch_match else None,
            author_name=a_name,
            author_email=a_email,
            author_date=a_date,
            committer_name=c_name,
            committer_email=c_email,
            committer_date=c_date,
        ))

    return stashes


# =============================================================================
# Remotes
# =============================================================================

def parse_config_list(output: str) -> list[tuple[str, str]]:
    """Parse `git config --list` into (key, value) pairs in listing order.

    Lines without '=' are boolean keys set to "true".
    """
    pairs = []
    for line in output.split("\n"):
        if not line:
            continue
        key, sep, value = line.partition("=")
        pairs.append((key, value if sep else "true"))
    return pairs


def parse_remote_config(output: str, name: str) -> RemoteInfo:
    """Collect the ``remote.<name>.*`` settings from `git config --list`."""
    prefix = f"remote.{name}."
    config: dict[str, str] = {}
    fetch_refspecs = []
    for key, value in parse_config_list(output):
        if not key.startswith(prefix):
            continue
        setting = key[len(prefix):]
        if setting == "fetch":
            fetch_refspecs.append(value)
        config[setting] = value

    return RemoteInfo(
        name=name,
        url=config.get("url"),
        fetch=fetch_refspecs[0] if fetch_refspecs else None,
        fetch_refspecs=tuple(fetch_refspecs),
        config=config,
    )


def parse_remote_names(output: str) -> list[str]:
    """Parse `git remote` output, one name per line."""
    return [line.strip() for line in output.split("\n") if line.strip()]


# =============================================================================
# Authors
# =============================================================================

def parse_author(text: str) -> Author:
    """Parse an author/committer/tagger header value."""
    return Author.parse(text)
