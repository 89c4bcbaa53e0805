"""
output.py - Output formatters for CLI.

Abstraction layer for formatting CLI output. Supports:
- JSON (script-friendly, default)
- Human-readable (Rich tables, with --humanize flag)
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console
from rich.table import Table

from repolang.models import CacheRecord


console = Console()


def _by_weight(stats: dict[str, int]) -> list[tuple[str, int]]:
    return sorted(stats.items(), key=lambda item: (-item[1], item[0]))


class OutputFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format_stats(self, stats: dict[str, int]) -> None:
        """Format language -> weight statistics."""
        pass

    @abstractmethod
    def format_breakdown(self, breakdown: dict[str, list[str]]) -> None:
        """Format language -> files breakdown."""
        pass

    @abstractmethod
    def format_record(self, record: Optional[CacheRecord]) -> None:
        """Format a raw cache record."""
        pass


class JSONFormatter(OutputFormatter):
    """Machine-friendly JSON output (default)."""

    def format_stats(self, stats: dict[str, int]) -> None:
        print(json.dumps(dict(_by_weight(stats)), indent=2))

    def format_breakdown(self, breakdown: dict[str, list[str]]) -> None:
        print(json.dumps(breakdown, indent=2))

    def format_record(self, record: Optional[CacheRecord]) -> None:
        print(json.dumps(record.to_output() if record is not None else None, indent=2))


class HumanFormatter(OutputFormatter):
    """Human-readable output using Rich (table format)."""

    def format_stats(self, stats: dict[str, int]) -> None:
        total = sum(stats.values())
        table = Table("Language", "Weight", "Share", title="Languages")
        for lang, weight in _by_weight(stats):
            share = weight / total * 100 if total else 0.0
            table.add_row(lang, f"{weight:,}", f"{share:.2f}%")
        console.print(table)

    def format_breakdown(self, breakdown: dict[str, list[str]]) -> None:
        for lang, paths in breakdown.items():
            console.print(f"[bold]{lang}[/bold] ({len(paths)} files)")
            for path in paths:
                console.print(f"  {path}")

    def format_record(self, record: Optional[CacheRecord]) -> None:
        if record is None:
            console.print("[yellow]No usable cache.[/yellow]")
            return
        state = "[cyan]frozen[/cyan]" if record.is_frozen else record.commit_id
        console.print(f"Version: {record.version}\nCommit:  {state}")
        self.format_stats(dict(record.stats))


def get_formatter(humanize: bool = False) -> OutputFormatter:
    """Get the appropriate formatter based on flags."""
    if humanize:
        return HumanFormatter()
    return JSONFormatter()
