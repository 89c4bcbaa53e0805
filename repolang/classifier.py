"""
classifier.py - Assigns a language and a weight to a single file.

Responsibilities:
- Map file names to languages (well-known names, then extensions).
- Fall back to the shebang line for extensionless scripts.
- Skip vendored paths and binary content.
- Weigh counted files by bytes or lines.

The rules come from ClassifierConfig; their fingerprint is part of
``LanguageClassifier.version`` so any rule change invalidates stored caches.
"""

from __future__ import annotations

import logging
import os
import re
from fnmatch import fnmatchcase
from pathlib import PurePosixPath
from typing import Optional

from repolang import __version__
from repolang.models import ClassifierConfig

logger = logging.getLogger(__name__)

_VERSION_SUFFIX = re.compile(r"[\d.]+$")


def _invert(mapping: dict[str, list[str]], lower: bool = False) -> dict[str, str]:
    """Turn language -> [keys] into key -> language (first language wins)."""
    result: dict[str, str] = {}
    for lang, keys in mapping.items():
        for key in keys:
            result.setdefault(key.lower() if lower else key, lang)
    return result


class LanguageClassifier:
    """Deterministic per-file language classification.

    Usage::

        clf = LanguageClassifier(ClassifierConfig())
        clf.classify("src/app.py", b"print('hi')\\n")   # ("Python", 12)
        clf.classify("vendor/lib.js", b"...")            # None (vendored)
    """

    def __init__(self, config: Optional[ClassifierConfig] = None) -> None:
        self.config = config if config is not None else ClassifierConfig()
        self._ext_to_lang = _invert(self.config.language_extensions, lower=True)
        self._name_to_lang = _invert(self.config.filenames)
        self._interp_to_lang = _invert(self.config.interpreters)

    @property
    def version(self) -> str:
        """Identifies the package release, weight unit and rule set."""
        return f"{__version__}+{self.config.weight_unit}+{self.config.fingerprint()}"

    # ------------------------------------------------------------------
    # Path rules
    # ------------------------------------------------------------------

    def is_excluded(self, path: str) -> bool:
        """True if any component of *path* matches a vendored pattern."""
        parts = PurePosixPath(path).parts
        return any(
            fnmatchcase(part, pattern)
            for part in parts
            for pattern in self.config.exclude_patterns
        )

    def detect_language(self, path: str) -> Optional[str]:
        """Return the language implied by the file name alone, if any."""
        name = PurePosixPath(path).name
        lang = self._name_to_lang.get(name)
        if lang is not None:
            return lang
        ext = PurePosixPath(name).suffix.lower()
        if not ext:
            return None
        return self._ext_to_lang.get(ext)

    # ------------------------------------------------------------------
    # Content rules
    # ------------------------------------------------------------------

    def interpreter_language(self, data: bytes) -> Optional[str]:
        """Resolve a ``#!`` line to a language, e.g. ``#!/usr/bin/env python3``."""
        if not data.startswith(b"#!"):
            return None
        first_line = data[2:].split(b"\n", 1)[0].decode("utf-8", errors="replace")
        tokens = first_line.split()
        if not tokens:
            return None

        interpreter = os.path.basename(tokens[0])
        if interpreter == "env":
            args = [t for t in tokens[1:] if not t.startswith("-")]
            if not args:
                return None
            interpreter = os.path.basename(args[0])

        lang = self._interp_to_lang.get(interpreter)
        if lang is None:
            lang = self._interp_to_lang.get(_VERSION_SUFFIX.sub("", interpreter))
        return lang

    def is_binary(self, data: bytes) -> bool:
        return b"\0" in data[: self.config.binary_sniff_bytes]

    def weigh(self, data: bytes) -> int:
        if self.config.weight_unit == "lines":
            lines = data.count(b"\n")
            if data and not data.endswith(b"\n"):
                lines += 1
            return lines
        return len(data)

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def classify(self, path: str, data: bytes) -> Optional[tuple[str, int]]:
        """Classify one file.

        Args:
            path: Repository-relative POSIX path.
            data: Full file content.

        Returns:
            ``(language, weight)``, or None if the file is not counted
            (vendored, binary, or of no known language).
        """
        if self.is_excluded(path):
            logger.debug("Excluded (vendored): %s", path)
            return None

        lang = self.detect_language(path) or self.interpreter_language(data)
        if lang is None:
            return None
        if self.is_binary(data):
            logger.debug("Skipping binary file: %s", path)
            return None
        return lang, self.weigh(data)
