import pytest
from prometheus_client import REGISTRY, Histogram

from conftest import SpyClassifier
from repolang.cache_store import CacheStore, cache_path_for
from repolang.controller import CacheController, cache_version
from repolang.metrics import track_latency
from repolang.repository import Repository
from repolang.stats_engine import StatsEngine


def _sample(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


def test_compute_records_decisions_writes_and_classifications(repo_builder):
    sha = repo_builder.commit({"a.py": "x\n", "b.rb": "y\n"})
    repo = Repository(str(repo_builder.path))
    clf = SpyClassifier()
    ctl = CacheController(
        repo, StatsEngine(repo, clf), CacheStore(cache_path_for(repo.git_dir)), cache_version(clf)
    )

    absent = _sample("repolang_cache_decisions_total", state="absent")
    baseline = _sample("repolang_cache_decisions_total", state="baseline")
    writes = _sample("repolang_cache_writes_total", status="success")
    full = _sample("repolang_files_classified_total", mode="full")
    latency = _sample("repolang_compute_latency_seconds_count")

    ctl.compute(sha)
    ctl.compute(sha)

    assert _sample("repolang_cache_decisions_total", state="absent") == absent + 1
    assert _sample("repolang_cache_decisions_total", state="baseline") == baseline + 1
    assert _sample("repolang_cache_writes_total", status="success") == writes + 2
    assert _sample("repolang_files_classified_total", mode="full") == full + 2
    assert _sample("repolang_compute_latency_seconds_count") == latency + 2


def test_track_latency_reraises_and_observes():
    metric = Histogram("repolang_test_latency_seconds", "test only")

    @track_latency(metric)
    def fail():
        raise ValueError("boom")

    with pytest.raises(ValueError):
        fail()
    assert REGISTRY.get_sample_value("repolang_test_latency_seconds_count") == 1.0
