"""
stats_engine.py - Full and incremental language statistics for a commit.

Key responsibilities:
1. compute_full:        classify every file in a commit's tree
2. compute_incremental: start from a baseline commit's stats and apply only
                        the files that changed between baseline and target
3. breakdown:           per-language file lists for a commit

Incremental merge:
- For each changed file, the old blob's weight is subtracted from its old
  language and the new blob's weight is added to its new language.
- Languages whose weight drops to zero disappear from the result.
- Because classification depends only on (path, content), the result is
  identical to compute_full for the target commit.

Neither entry point touches the persisted cache.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Optional

from git.objects import Blob

from repolang.blob_cache import BlobCache, Classification
from repolang.classifier import LanguageClassifier
from repolang.metrics import FILES_CLASSIFIED_TOTAL
from repolang.repository import Repository

logger = logging.getLogger(__name__)

DEFAULT_MAX_TREE_SIZE = 100_000


def _finalize(totals: dict[str, int]) -> dict[str, int]:
    """Drop non-positive weights and order languages by name."""
    return {lang: weight for lang, weight in sorted(totals.items()) if weight > 0}


class StatsEngine:
    """Computes language -> weight mappings for commits.

    Usage::

        engine = StatsEngine(Repository("."), LanguageClassifier())
        stats = engine.compute_full(head_sha)
        stats = engine.compute_incremental(head_sha, old_sha, old_stats)
    """

    def __init__(
        self,
        repo: Repository,
        classifier: LanguageClassifier,
        max_tree_size: int = DEFAULT_MAX_TREE_SIZE,
        cache: Optional[BlobCache] = None,
    ) -> None:
        self.repo = repo
        self.classifier = classifier
        self.max_tree_size = max_tree_size
        self._cache: BlobCache = cache if cache is not None else BlobCache()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _classify_blob(self, blob: Blob, mode: str) -> Classification:
        found, result = self._cache.get(blob.path, blob.hexsha)
        if found:
            return result
        data = self.repo.read_blob(blob)
        result = self.classifier.classify(blob.path, data)
        self._cache.put(blob.path, blob.hexsha, result)
        FILES_CLASSIFIED_TOTAL.labels(mode=mode).inc()
        return result

    def _exceeds_tree_limit(self, commit: str) -> bool:
        size = self.repo.tree_size(commit, limit=self.max_tree_size)
        if size > self.max_tree_size:
            logger.info(
                "Tree of %s has more than %d files; skipping classification",
                commit[:8], self.max_tree_size,
            )
            return True
        return False

    def cache_stats(self) -> dict:
        """Return classification memo counters (delegates to BlobCache.stats)."""
        return self._cache.stats()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def compute_full(self, commit: str) -> dict[str, int]:
        """Classify every regular file at *commit*."""
        if self._exceeds_tree_limit(commit):
            return {}

        totals: dict[str, int] = defaultdict(int)
        files = 0
        for blob in self.repo.iter_blobs(commit):
            result = self._classify_blob(blob, "full")
            if result is None:
                continue
            lang, weight = result
            totals[lang] += weight
            files += 1

        logger.info("Full scan of %s: %d counted files, %d languages", commit[:8], files, len(totals))
        return _finalize(totals)

    def compute_incremental(
        self,
        commit: str,
        baseline_commit: str,
        baseline_stats: dict[str, int],
    ) -> dict[str, int]:
        """Derive stats for *commit* from a baseline plus the diff between them."""
        if not baseline_stats:
            # An empty baseline may be the product of the tree-size cap
            logger.info("Empty baseline for %s; falling back to full scan", baseline_commit[:8])
            return self.compute_full(commit)

        if self._exceeds_tree_limit(commit):
            return {}

        totals: dict[str, int] = defaultdict(int, baseline_stats)
        for old_blob, new_blob in self.repo.diff(baseline_commit, commit):
            if old_blob is not None:
                result = self._classify_blob(old_blob, "incremental")
                if result is not None:
                    totals[result[0]] -= result[1]
            if new_blob is not None:
                result = self._classify_blob(new_blob, "incremental")
                if result is not None:
                    totals[result[0]] += result[1]

        return _finalize(totals)

    def breakdown(self, commit: str) -> dict[str, list[str]]:
        """Return language -> sorted file paths for *commit*."""
        if self._exceeds_tree_limit(commit):
            return {}

        files: dict[str, list[str]] = defaultdict(list)
        for blob in self.repo.iter_blobs(commit):
            result = self._classify_blob(blob, "breakdown")
            if result is not None:
                files[result[0]].append(blob.path)
        return {lang: sorted(paths) for lang, paths in sorted(files.items())}
