"""
controller.py - Decides how to answer "what languages compose commit X".

Flow for compute():
  1. Load the stored record (absent / corrupt records count as no cache)
  2. Frozen record (null commit) -> return its stats, nothing else happens
  3. Stale version, orphaned commit, no cache or forced rescan -> full scan,
     otherwise incremental update from the cached commit
  4. Replace the stored record with (version, commit, stats)
  5. Return the stats

Persistence failures are logged and never change the returned answer.
"""

from __future__ import annotations

import logging
from typing import Optional

from repolang.cache_store import CacheStore, cache_path_for
from repolang.classifier import LanguageClassifier
from repolang.codec import decode, encode
from repolang.models import (
    CACHE_SCHEMA_VERSION,
    NULL_COMMIT,
    CacheDecision,
    CacheRecord,
    CacheState,
    DecodeFailure,
    RepoLangConfig,
)
from repolang.metrics import (
    CACHE_DECISIONS_TOTAL,
    CACHE_WRITES_TOTAL,
    COMPUTE_LATENCY,
    track_latency,
)
from repolang.repository import Repository
from repolang.stats_engine import StatsEngine

logger = logging.getLogger(__name__)


class UsageError(Exception):
    """Raised when a required input (such as the target commit) is missing."""


def cache_version(classifier: LanguageClassifier) -> str:
    """Version tag stored with every record: schema tag + classifier version."""
    return f"{CACHE_SCHEMA_VERSION}:{classifier.version}"


class CacheController:
    """Owns the stored record for one repository.

    Usage::

        ctl = CacheController.open(".", RepoLangConfig())
        ctl.compute("HEAD")          # {"Python": 1234, ...}
        ctl.disable()                # freeze: later computes return {}
        ctl.clear()                  # forget everything
    """

    def __init__(
        self,
        repo: Repository,
        engine: StatsEngine,
        store: CacheStore,
        version: str,
    ) -> None:
        self.repo = repo
        self.engine = engine
        self.store = store
        self.version = version

    @classmethod
    def open(
        cls,
        repo_path: str,
        config: Optional[RepoLangConfig] = None,
        max_tree_size: Optional[int] = None,
    ) -> "CacheController":
        """Wire repository, classifier, engine and store from configuration."""
        cfg = config if config is not None else RepoLangConfig()
        repo = Repository(repo_path)
        classifier = LanguageClassifier(cfg.classifier)
        engine = StatsEngine(
            repo,
            classifier,
            max_tree_size=max_tree_size if max_tree_size is not None else cfg.max_tree_size,
        )
        store = CacheStore(cache_path_for(repo.git_dir, cfg.cache_file_name))
        return cls(repo, engine, store, cache_version(classifier))

    # ------------------------------------------------------------------
    # Load / decide
    # ------------------------------------------------------------------

    def dump(self) -> Optional[CacheRecord]:
        """Return the stored record without computing anything, or None."""
        data = self.store.read()
        if data is None:
            return None
        decoded = decode(data)
        if isinstance(decoded, DecodeFailure):
            logger.info("Ignoring unreadable cache %s: %s", self.store.path, decoded.reason)
            return None
        return decoded

    def inspect(self) -> CacheDecision:
        """Classify the stored record into one of the CacheState variants."""
        data = self.store.read()
        if data is None:
            return CacheDecision(state=CacheState.ABSENT, detail="no cache file")

        decoded = decode(data)
        if isinstance(decoded, DecodeFailure):
            logger.info("Ignoring unreadable cache %s: %s", self.store.path, decoded.reason)
            return CacheDecision(state=CacheState.ABSENT, detail=decoded.reason)

        if decoded.is_frozen:
            return CacheDecision(state=CacheState.FROZEN, record=decoded)
        if decoded.version != self.version:
            return CacheDecision(
                state=CacheState.STALE,
                record=decoded,
                detail=f"cached {decoded.version}, running {self.version}",
            )
        if not self.repo.has_commit(decoded.commit_id):
            return CacheDecision(
                state=CacheState.ORPHANED,
                record=decoded,
                detail=f"commit {decoded.commit_id[:8]} not found",
            )
        return CacheDecision(state=CacheState.BASELINE, record=decoded)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @track_latency(COMPUTE_LATENCY)
    def compute(self, commit: Optional[str], incremental: bool = True) -> dict[str, int]:
        """Return language stats for *commit*, reusing the cache when possible.

        Args:
            commit:      Any revision git can resolve; required.
            incremental: False forces a full rescan even with a usable cache.

        Raises:
            UsageError:      no commit was given.
            RepositoryError: the commit does not resolve.
        """
        if not commit:
            raise UsageError("A target commit is required")

        decision = self.inspect()
        CACHE_DECISIONS_TOTAL.labels(state=decision.state.value).inc()
        logger.info("Cache state: %s %s", decision.state.value, decision.detail)

        if decision.state is CacheState.FROZEN:
            return dict(decision.record.stats)

        target = self.repo.resolve(commit)

        if incremental and decision.usable_baseline:
            baseline = decision.record
            stats = self.engine.compute_incremental(target, baseline.commit_id, dict(baseline.stats))
        else:
            if decision.usable_baseline:
                logger.info("Full rescan forced; ignoring cached %s", decision.record.commit_id[:8])
            stats = self.engine.compute_full(target)

        self._save(CacheRecord(version=self.version, commit_id=target, stats=stats))
        return stats

    def breakdown(self, commit: Optional[str]) -> dict[str, list[str]]:
        """Per-language file lists for *commit*; never reads or writes the cache."""
        if not commit:
            raise UsageError("A target commit is required")
        return self.engine.breakdown(self.repo.resolve(commit))

    def disable(self) -> bool:
        """Freeze the cache: write the null commit with empty stats."""
        logger.info("Freezing language stats for %s", self.store.path)
        return self._save(CacheRecord(version=self.version, commit_id=NULL_COMMIT, stats={}))

    def clear(self) -> bool:
        """Delete the stored record. Returns False if none existed."""
        return self.store.remove()

    def _save(self, record: CacheRecord) -> bool:
        ok = self.store.write(encode(record))
        CACHE_WRITES_TOTAL.labels(status="success" if ok else "failure").inc()
        if not ok:
            logger.warning("Could not persist language stats cache to %s", self.store.path)
        return ok
