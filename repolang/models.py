"""
models.py - Pydantic v2 data models for repolang.

Defines data structures for:
- The persisted cache record and the null-commit sentinel
- Decode failures (returned as values, never raised)
- Cache-state decisions made by the controller
- System configuration
"""

from __future__ import annotations

import hashlib
import json
from enum import Enum
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# Reserved all-zero commit id meaning "stats are frozen, do not recompute".
NULL_COMMIT = "0" * 40

# Bump when the on-disk record layout changes.
CACHE_SCHEMA_VERSION = "v1"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class CacheState(str, Enum):
    """Outcome of inspecting the stored cache before a computation."""
    ABSENT = "absent"        # no file, unreadable, or undecodable
    FROZEN = "frozen"        # null-commit sentinel written by disable()
    STALE = "stale"          # schema or classifier version changed
    ORPHANED = "orphaned"    # cached commit no longer exists in the repo
    BASELINE = "baseline"    # usable for an incremental update


# ---------------------------------------------------------------------------
# Cache record
# ---------------------------------------------------------------------------

Weight = Annotated[int, Field(ge=0)]


class CacheRecord(BaseModel):
    """The unit of persistence: one per repository, replaced wholesale.

    ``stats`` maps a language name to its aggregate weight (bytes or lines,
    depending on the classifier configuration baked into ``version``).
    """
    model_config = ConfigDict(strict=True, frozen=True)

    version: str
    commit_id: str = Field(pattern=r"^[0-9a-f]{40}$")
    stats: dict[str, Weight] = Field(default_factory=dict)

    @property
    def is_frozen(self) -> bool:
        return self.commit_id == NULL_COMMIT

    def to_output(self) -> dict:
        """Serialize to the flat dict printed by ``dump-cache``."""
        return {
            "version": self.version,
            "commit": self.commit_id,
            "stats": dict(self.stats),
        }


class DecodeFailure(BaseModel):
    """Why a cache blob could not be turned into a CacheRecord."""
    reason: str


class CacheDecision(BaseModel):
    """Tagged result of the controller's mode-decision step."""
    state: CacheState
    record: Optional[CacheRecord] = None
    detail: str = ""

    @property
    def usable_baseline(self) -> bool:
        return self.state is CacheState.BASELINE and self.record is not None


# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------

class ClassifierConfig(BaseModel):
    """Rules used to assign a language and weight to a single file."""
    # "bytes" weighs a file by blob size, "lines" by line count
    weight_unit: Literal["bytes", "lines"] = "bytes"
    # key = language name, value = list of file extensions (lowercase, with dot)
    language_extensions: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "C": [".c", ".h"],
            "C#": [".cs"],
            "C++": [".cpp", ".cc", ".cxx", ".hpp", ".hh", ".hxx"],
            "CMake": [".cmake"],
            "CSS": [".css"],
            "Clojure": [".clj", ".cljs", ".cljc"],
            "Dart": [".dart"],
            "Dockerfile": [".dockerfile"],
            "Elixir": [".ex", ".exs"],
            "Erlang": [".erl", ".hrl"],
            "Go": [".go"],
            "Groovy": [".groovy", ".gradle"],
            "HTML": [".html", ".htm"],
            "Haskell": [".hs"],
            "Java": [".java"],
            "JavaScript": [".js", ".mjs", ".cjs", ".jsx"],
            "Julia": [".jl"],
            "Kotlin": [".kt", ".kts"],
            "Lua": [".lua"],
            "Makefile": [".mk", ".mak"],
            "OCaml": [".ml", ".mli"],
            "Objective-C": [".m"],
            "PHP": [".php"],
            "Perl": [".pl", ".pm"],
            "Python": [".py", ".pyi", ".pyw"],
            "R": [".r"],
            "Ruby": [".rb", ".rake", ".gemspec"],
            "Rust": [".rs"],
            "SCSS": [".scss"],
            "SQL": [".sql"],
            "Scala": [".scala"],
            "Shell": [".sh", ".bash", ".zsh"],
            "Swift": [".swift"],
            "TypeScript": [".ts", ".tsx", ".mts", ".cts"],
            "Vue": [".vue"],
            "Zig": [".zig"],
        }
    )
    # Exact base names that identify a language regardless of extension
    filenames: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "CMake": ["CMakeLists.txt"],
            "Dockerfile": ["Dockerfile", "Containerfile"],
            "Makefile": ["Makefile", "GNUmakefile", "makefile"],
            "Ruby": ["Rakefile", "Gemfile", "Vagrantfile"],
        }
    )
    # Shebang interpreters for extensionless scripts
    interpreters: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "JavaScript": ["node", "nodejs"],
            "Lua": ["lua"],
            "PHP": ["php"],
            "Perl": ["perl"],
            "Python": ["python", "python2", "python3"],
            "Ruby": ["ruby"],
            "Shell": ["sh", "bash", "zsh", "dash", "ksh"],
        }
    )
    # Vendored / generated directories (matched against each path component)
    exclude_patterns: list[str] = Field(
        default_factory=lambda: [
            "node_modules", "vendor", "vendored", "third_party", "third-party",
            "bower_components", "Godeps", "dist", "*.min.js", "*.min.css",
        ]
    )
    # A NUL byte within this many leading bytes marks the blob as binary
    binary_sniff_bytes: int = 8000

    def fingerprint(self) -> str:
        """Short stable hash of the rules; changes invalidate old caches."""
        raw = json.dumps(self.model_dump(), sort_keys=True)
        return hashlib.sha256(raw.encode()).hexdigest()[:12]


class RepoLangConfig(BaseModel):
    """Top-level configuration for repolang."""
    # Trees with more blobs than this are skipped entirely (stats = {})
    max_tree_size: int = Field(default=100_000, gt=0)
    # File name of the cache inside the repository's git directory
    cache_file_name: str = "repolang"
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
