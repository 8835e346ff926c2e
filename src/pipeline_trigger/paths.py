"""Changed-path accumulation across paginated commit diffs."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, Iterator, Protocol

from .deadline import Deadline
from .errors import DiffRetrievalFailed, InvocationTimeout


logger = logging.getLogger("pipeline_trigger.paths")


@dataclass(frozen=True)
class CommitRange:
    repository: str
    before_commit: str | None
    after_commit: str


@dataclass(frozen=True)
class DiffEntry:
    after_path: str | None
    before_path: str | None = None
    change_type: str | None = None


@dataclass(frozen=True)
class DiffPage:
    entries: tuple[DiffEntry, ...]
    next_token: str | None = None


class DiffSource(Protocol):
    def get_differences(self, commit_range: CommitRange, next_token: str | None = None) -> DiffPage:
        ...


class PathSet:
    """De-duplicating set of changed paths that remembers first-seen order."""

    def __init__(self, paths: Iterable[str] = ()) -> None:
        self._paths: dict[str, None] = {}
        self.update(paths)

    def add(self, path: str) -> bool:
        if path in self._paths:
            return False
        self._paths[path] = None
        return True

    def update(self, paths: Iterable[str]) -> None:
        for path in paths:
            self.add(path)

    def as_tuple(self) -> tuple[str, ...]:
        return tuple(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __repr__(self) -> str:
        return f"PathSet({list(self._paths)!r})"


@dataclass(frozen=True)
class PathCollection:
    paths: PathSet
    pages: int
    skipped_deletions: tuple[str, ...]


def collect_changed_paths(
    source: DiffSource,
    commit_range: CommitRange,
    *,
    include_deletions: bool = False,
    deadline: Deadline | None = None,
) -> PathCollection:
    """Fetch every diff page for ``commit_range`` and return the union of paths.

    Pages are fetched strictly in order because each continuation token comes
    from the previous response. An empty page does not end the loop; only a
    missing token does. Entries without an after-path are pure deletions: they
    are skipped (and reported) unless ``include_deletions`` is set, in which
    case every before-path is added alongside the after-paths, so deletions
    and renames out of a prefix count against that prefix.
    """
    paths = PathSet()
    skipped: list[str] = []
    pages = 0
    next_token: str | None = None
    while True:
        if deadline is not None:
            deadline.check("diff retrieval")
        try:
            page = source.get_differences(commit_range, next_token)
        except InvocationTimeout:
            raise
        except Exception as exc:
            raise DiffRetrievalFailed(
                f"cannot get file diff for {commit_range.repository} "
                f"{commit_range.before_commit}..{commit_range.after_commit} "
                f"(page {pages + 1}): {exc}",
                repository=commit_range.repository,
                before_commit=commit_range.before_commit,
                after_commit=commit_range.after_commit,
            ) from exc
        pages += 1
        for entry in page.entries:
            if include_deletions and entry.before_path:
                paths.add(entry.before_path)
            if entry.after_path:
                paths.add(entry.after_path)
            elif not include_deletions or not entry.before_path:
                skipped.append(entry.before_path or "")
        logger.debug(
            "diff page repository=%s page=%s entries=%s has_next=%s",
            commit_range.repository,
            pages,
            len(page.entries),
            bool(page.next_token),
        )
        next_token = page.next_token
        if not next_token:
            break
    logger.info(
        "changed paths collected repository=%s range=%s..%s pages=%s paths=%s skipped_deletions=%s",
        commit_range.repository,
        commit_range.before_commit,
        commit_range.after_commit,
        pages,
        len(paths),
        len(skipped),
    )
    return PathCollection(paths=paths, pages=pages, skipped_deletions=tuple(skipped))
