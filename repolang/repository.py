"""
repository.py - Read-only access to a git repository's object store.

Key responsibilities:
1. open a repository (searching parent directories) and locate its git dir
2. resolve revisions to full commit ids
3. list the regular-file blobs of a commit's tree
4. diff two commits into (old blob, new blob) pairs

Symlinks and submodules are never reported: only blobs with a regular or
executable file mode count as files.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional

import git
from git.exc import BadName, BadObject
from git.objects import Blob

logger = logging.getLogger(__name__)

REGULAR_FILE_MODES = frozenset({Blob.file_mode, Blob.executable_mode})


class RepositoryError(Exception):
    """Raised when a path is not a git repository or a revision does not resolve."""


def _is_regular_file(blob: Optional[Blob]) -> bool:
    return blob is not None and blob.type == "blob" and blob.mode in REGULAR_FILE_MODES


class Repository:
    """Thin GitPython wrapper exposing only what the stats engine needs."""

    def __init__(self, path: str = "."):
        try:
            self._repo = git.Repo(path, search_parent_directories=True)
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as exc:
            raise RepositoryError(f"Not a git repository: {path}") from exc
        logger.debug("Opened repository %s (git dir %s)", self.working_dir, self.git_dir)

    @property
    def git_dir(self) -> str:
        return str(self._repo.git_dir)

    @property
    def working_dir(self) -> Optional[str]:
        wd = self._repo.working_tree_dir
        return str(wd) if wd is not None else None

    # ------------------------------------------------------------------
    # Revisions
    # ------------------------------------------------------------------

    def resolve(self, rev: str) -> str:
        """Return the 40-hex id of the commit *rev* points to."""
        try:
            return self._repo.commit(rev).hexsha
        except (BadName, BadObject, ValueError) as exc:
            raise RepositoryError(f"Cannot resolve commit '{rev}': {exc}") from exc

    def has_commit(self, rev: str) -> bool:
        try:
            self.resolve(rev)
        except RepositoryError:
            return False
        return True

    # ------------------------------------------------------------------
    # Trees and blobs
    # ------------------------------------------------------------------

    def iter_blobs(self, commit: str) -> Iterator[Blob]:
        """Yield every regular-file blob in the commit's tree."""
        tree = self._repo.commit(commit).tree
        for item in tree.traverse():
            if _is_regular_file(item):
                yield item

    def tree_size(self, commit: str, limit: Optional[int] = None) -> int:
        """Count regular files in the tree, stopping once *limit* is exceeded."""
        count = 0
        for _ in self.iter_blobs(commit):
            count += 1
            if limit is not None and count > limit:
                break
        return count

    def diff(self, old_commit: str, new_commit: str) -> list[tuple[Optional[Blob], Optional[Blob]]]:
        """List changed files between two commits as (old, new) blob pairs.

        Either side is None when the file was added, deleted, or is not a
        regular file on that side (e.g. a file replaced by a symlink).
        """
        old_rev = self._repo.commit(old_commit)
        new_rev = self._repo.commit(new_commit)

        changes: list[tuple[Optional[Blob], Optional[Blob]]] = []
        for diff_item in old_rev.diff(new_rev):
            # a_blob = old side, b_blob = new side
            old_blob = diff_item.a_blob if _is_regular_file(diff_item.a_blob) else None
            new_blob = diff_item.b_blob if _is_regular_file(diff_item.b_blob) else None
            if old_blob is None and new_blob is None:
                continue
            changes.append((old_blob, new_blob))

        logger.info(
            "%d changed files between %s and %s",
            len(changes), old_commit[:8], new_commit[:8],
        )
        return changes

    @staticmethod
    def read_blob(blob: Blob) -> bytes:
        """Read a blob's full content from the object store."""
        return blob.data_stream.read()
