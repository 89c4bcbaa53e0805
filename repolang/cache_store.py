"""
cache_store.py - Durable storage for the per-repository stats cache.

Provides:
- CacheStore: reads, atomically writes and removes one cache blob
- cache_path_for(): the well-known cache location inside a git directory

Writes go to a temp file in the same directory and are renamed over the
canonical path, so a concurrent reader sees either the old blob or the new
one, never a torn file.  There is no locking: the last writer wins.
"""

from __future__ import annotations

import logging
import os
import tempfile
from typing import Optional

logger = logging.getLogger(__name__)

# Default cache file name inside the repository's git directory
CACHE_FILE = "repolang"

# Permission bits applied after every successful write
CACHE_FILE_MODE = 0o644


def cache_path_for(git_dir: str, file_name: str = CACHE_FILE) -> str:
    """Return the cache file path for a repository's git directory."""
    return os.path.join(os.path.abspath(git_dir), file_name)


class CacheStore:
    """Atomic file-backed persistence for a single cache blob.

    The store never creates the directory holding the cache; if it is
    missing, writes are skipped and reported as failures.
    """

    def __init__(self, path: str):
        self.path = os.path.abspath(path)
        self.directory = os.path.dirname(self.path)

    def read(self) -> Optional[bytes]:
        """Return the stored blob, or None if it is missing or unreadable."""
        try:
            with open(self.path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Failed to read cache %s: %s", self.path, e)
            return None

    def write(self, data: bytes) -> bool:
        """Atomically replace the stored blob with *data*.

        Returns:
            True on success, False if the directory is missing or the
            filesystem rejected the write.
        """
        if not os.path.isdir(self.directory):
            logger.debug("Cache directory %s does not exist; skipping write", self.directory)
            return False

        try:
            fd, tmp_path = tempfile.mkstemp(
                prefix=".tmp_", suffix=".cache", dir=self.directory
            )
        except OSError as e:
            logger.warning("Failed to create temp file for cache: %s", e)
            return False

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.warning("Failed to write cache %s: %s", self.path, e)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            return False

        # mkstemp creates files with mode 0600
        try:
            os.chmod(self.path, CACHE_FILE_MODE)
        except OSError as e:
            logger.warning("Failed to set permissions on %s: %s", self.path, e)

        logger.debug("Saved cache (%d bytes) to %s", len(data), self.path)
        return True

    def remove(self) -> bool:
        """Delete the stored blob. Returns False if there was nothing to delete."""
        try:
            os.unlink(self.path)
        except FileNotFoundError:
            return False
        logger.debug("Removed cache %s", self.path)
        return True

    def exists(self) -> bool:
        return os.path.isfile(self.path)

    def info(self) -> dict:
        """Get cache file details."""
        exists = self.exists()
        return {
            "cache_path": self.path,
            "exists": exists,
            "size": os.path.getsize(self.path) if exists else 0,
        }
