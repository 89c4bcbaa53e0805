import os
import stat
from pathlib import Path

from repolang.cache_store import CacheStore, cache_path_for


def _store(tmp_path: Path) -> CacheStore:
    git_dir = tmp_path / ".git"
    git_dir.mkdir()
    return CacheStore(cache_path_for(str(git_dir)))


def test_cache_path_for_uses_git_dir(tmp_path: Path):
    assert cache_path_for(str(tmp_path), "stats") == os.path.join(str(tmp_path), "stats")
    assert cache_path_for(str(tmp_path)).endswith("repolang")


def test_read_missing_returns_none(tmp_path: Path):
    store = _store(tmp_path)
    assert store.read() is None
    assert not store.exists()


def test_write_then_read(tmp_path: Path):
    store = _store(tmp_path)
    assert store.write(b"payload") is True
    assert store.read() == b"payload"
    assert store.info() == {"cache_path": store.path, "exists": True, "size": 7}


def test_write_replaces_previous_blob(tmp_path: Path):
    store = _store(tmp_path)
    store.write(b"first")
    store.write(b"second")
    assert store.read() == b"second"


def test_write_leaves_no_temp_files(tmp_path: Path):
    store = _store(tmp_path)
    store.write(b"payload")
    assert sorted(os.listdir(store.directory)) == ["repolang"]


def test_write_sets_0644_regardless_of_umask(tmp_path: Path):
    store = _store(tmp_path)
    old_umask = os.umask(0o077)
    try:
        store.write(b"payload")
    finally:
        os.umask(old_umask)
    assert stat.S_IMODE(os.stat(store.path).st_mode) == 0o644


def test_write_skipped_when_directory_missing(tmp_path: Path):
    store = CacheStore(str(tmp_path / "missing" / "repolang"))
    assert store.write(b"payload") is False
    assert not (tmp_path / "missing").exists()


def test_write_failure_cleans_up_temp_file(tmp_path: Path):
    store = _store(tmp_path)
    # A directory at the target path makes os.replace fail
    os.mkdir(store.path)
    assert store.write(b"payload") is False
    assert os.listdir(store.directory) == ["repolang"]


def test_remove(tmp_path: Path):
    store = _store(tmp_path)
    store.write(b"payload")
    assert store.remove() is True
    assert store.read() is None
    assert store.remove() is False


def test_unreadable_path_reads_as_none(tmp_path: Path):
    store = _store(tmp_path)
    os.mkdir(store.path)
    assert store.read() is None
