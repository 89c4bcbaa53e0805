import pytest
from pydantic import ValidationError

from repolang.models import (
    NULL_COMMIT,
    CacheDecision,
    CacheRecord,
    CacheState,
    ClassifierConfig,
    RepoLangConfig,
)

SHA = "a" * 40


class TestCacheRecord:

    def test_record_creation(self):
        record = CacheRecord(version="v1:x", commit_id=SHA, stats={"Ruby": 1000})
        assert record.stats == {"Ruby": 1000}
        assert not record.is_frozen

    def test_null_commit_is_frozen(self):
        record = CacheRecord(version="v1:x", commit_id=NULL_COMMIT, stats={})
        assert record.is_frozen

    @pytest.mark.parametrize("commit_id", ["abc123", "A" * 40, "g" * 40, "a" * 41, ""])
    def test_rejects_malformed_commit_id(self, commit_id):
        with pytest.raises(ValidationError):
            CacheRecord(version="v1:x", commit_id=commit_id, stats={})

    def test_rejects_negative_weight(self):
        with pytest.raises(ValidationError):
            CacheRecord(version="v1:x", commit_id=SHA, stats={"Go": -1})

    def test_rejects_non_integer_weight(self):
        with pytest.raises(ValidationError):
            CacheRecord(version="v1:x", commit_id=SHA, stats={"Go": "12"})

    def test_to_output(self):
        record = CacheRecord(version="v1:x", commit_id=SHA, stats={"Go": 3})
        assert record.to_output() == {"version": "v1:x", "commit": SHA, "stats": {"Go": 3}}


def test_decision_usable_baseline_only_for_baseline_state():
    record = CacheRecord(version="v1:x", commit_id=SHA, stats={"Go": 3})
    assert CacheDecision(state=CacheState.BASELINE, record=record).usable_baseline
    assert not CacheDecision(state=CacheState.STALE, record=record).usable_baseline
    assert not CacheDecision(state=CacheState.ABSENT).usable_baseline


class TestConfig:

    def test_defaults(self):
        cfg = RepoLangConfig()
        assert cfg.max_tree_size == 100_000
        assert cfg.cache_file_name == "repolang"
        assert cfg.classifier.weight_unit == "bytes"

    def test_max_tree_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            RepoLangConfig(max_tree_size=0)

    def test_fingerprint_is_stable(self):
        assert ClassifierConfig().fingerprint() == ClassifierConfig().fingerprint()

    def test_fingerprint_tracks_rules(self):
        base = ClassifierConfig()
        assert ClassifierConfig(weight_unit="lines").fingerprint() != base.fingerprint()
        assert ClassifierConfig(exclude_patterns=[]).fingerprint() != base.fingerprint()

    def test_load_from_json(self):
        cfg = RepoLangConfig.model_validate_json(
            '{"max_tree_size": 10, "classifier": {"weight_unit": "lines"}}'
        )
        assert cfg.max_tree_size == 10
        assert cfg.classifier.weight_unit == "lines"
        assert "Python" in cfg.classifier.language_extensions
