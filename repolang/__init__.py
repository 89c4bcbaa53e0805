"""
repolang - Incrementally cached language-composition statistics for git repositories.

Computes how many bytes (or lines) of each language a commit contains and keeps
the last result in the repository's git directory, so the next request only
reclassifies files that changed since the cached commit.
"""

__version__ = "0.1.0"
__author__ = "repolang contributors"
