"""
blob_cache.py - In-memory classification memo for the stats engine.

Responsibilities (single):
    Remember the (language, weight) assigned to a blob so the same content
    at the same path is never classified twice in one process lifetime.

Design notes
------------
- The key is (path, blob sha).  Git blob ids already address content, and
  the path is part of the key because classification depends on the file
  name (extension, well-known names, vendored directories).
- Negative results are cached too: a blob that classifies to "no language"
  is stored as None.
- Nothing here is persisted; the on-disk cache stores only aggregates.
"""

from __future__ import annotations

import logging
from typing import Optional

logger = logging.getLogger(__name__)

Classification = Optional[tuple[str, int]]

_MISSING = object()


class BlobCache:
    """Content-addressed in-memory cache of blob classifications.

    Usage::

        cache = BlobCache()

        found, result = cache.get(path, blob_sha)
        if not found:
            result = classifier.classify(path, data)
            cache.put(path, blob_sha, result)
    """

    def __init__(self) -> None:
        # key: (path, blob sha)
        # value: (language, weight) or None when the blob is not counted
        self._store: dict[tuple[str, str], Classification] = {}
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    # Core interface
    # ------------------------------------------------------------------

    def get(self, path: str, blob_sha: str) -> tuple[bool, Classification]:
        """Look up a classification.

        Returns:
            ``(True, result)`` on a hit (``result`` may be None for blobs that
            are not counted), ``(False, None)`` on a miss.
        """
        entry = self._store.get((path, blob_sha), _MISSING)
        if entry is _MISSING:
            self._misses += 1
            return False, None
        self._hits += 1
        logger.debug("BlobCache HIT : %s@%s", path, blob_sha[:8])
        return True, entry  # type: ignore[return-value]

    def put(self, path: str, blob_sha: str, result: Classification) -> None:
        """Store (or refresh) a classification."""
        self._store[(path, blob_sha)] = result

    def clear(self) -> None:
        """Forget every classification."""
        self._store.clear()
        logger.debug("BlobCache cleared")

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def stats(self) -> dict:
        """Snapshot of cache performance counters.

        Returns::

            {
                'size':     int,    # number of classifications stored
                'hits':     int,    # cumulative hits since instantiation
                'misses':   int,    # cumulative misses since instantiation
                'hit_rate': float,  # hits / (hits + misses), or 0.0 if no ops
            }
        """
        total = self._hits + self._misses
        return {
            "size": len(self._store),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / total if total else 0.0,
        }
