"""
conftest.py - Shared fixtures: throwaway git repositories built with GitPython.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Union

import git
import pytest

from repolang.classifier import LanguageClassifier


class RepoBuilder:
    """Creates commits in a fresh repository.

    ``commit({"a.py": "x = 1\\n", "old.rb": None})`` writes/overwrites
    ``a.py``, deletes ``old.rb`` and returns the new commit id.
    """

    def __init__(self, path: Path):
        self.path = path
        self.repo = git.Repo.init(path)
        with self.repo.config_writer() as cw:
            cw.set_value("user", "name", "Test User")
            cw.set_value("user", "email", "test@example.com")

    def commit(
        self,
        files: dict[str, Optional[Union[str, bytes]]],
        message: str = "update",
    ) -> str:
        for rel, content in files.items():
            full = self.path / rel
            if content is None:
                self.repo.index.remove([rel], working_tree=True)
                continue
            full.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, str):
                content = content.encode()
            full.write_bytes(content)
            self.repo.index.add([rel])
        return self.repo.index.commit(message).hexsha

    def symlink(self, rel: str, target: str, message: str = "symlink") -> str:
        full = self.path / rel
        full.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(target, full)
        self.repo.index.add([rel])
        return self.repo.index.commit(message).hexsha


class SpyClassifier(LanguageClassifier):
    """Records every path it is asked to classify."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls: list[str] = []

    def classify(self, path, data):
        self.calls.append(path)
        return super().classify(path, data)


def lines(n: int, text: str = "x = 1") -> str:
    """Return *n* newline-terminated lines."""
    return f"{text}\n" * n


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    return RepoBuilder(tmp_path / "repo")
