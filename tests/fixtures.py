"""Test fixtures for export tests.

Builds small libraries on disk and in-memory feeds whose expected
snapshot contents are known.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

from photosnap.core.config import ExportCategory, ExportConfig
from photosnap.core.models import ExportItem


@dataclass
class FakeFeed:
    """In-memory metadata feed."""
    entries: dict[ExportCategory, list[ExportItem]] = field(default_factory=dict)

    def add(self, category: ExportCategory, item: ExportItem) -> ExportItem:
        self.entries.setdefault(category, []).append(item)
        return item

    def items(self, category: ExportCategory) -> Iterator[ExportItem]:
        return iter(self.entries.get(category, []))


@dataclass
class Library:
    """A library folder holding source assets."""
    root: Path

    def asset(self, name: str, content: bytes = b"photo-bytes") -> Path:
        """Create a source file below the library and return its path."""
        path = self.root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    def item(
        self,
        relative_path: str,
        content: bytes = b"photo-bytes",
        source_name: Optional[str] = None,
        albums: tuple[str, ...] = (),
    ) -> ExportItem:
        """Create a source asset and an item exporting it to relative_path."""
        source = self.asset(source_name or relative_path, content)
        return ExportItem(relative_path=Path(relative_path), source=source, albums=albums)


def write_snapshot(root: Path, files: dict[str, bytes]) -> Path:
    """Create a snapshot-like tree with files relative to root."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return root


def snapshot_files(root: Path) -> dict[str, bytes]:
    """All files below root, keyed by POSIX relative path."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def make_config(target: Path, **kwargs) -> ExportConfig:
    """Export config with only originals enabled unless overridden."""
    options = {"export_current": False, "export_derived": False}
    options.update(kwargs)
    return ExportConfig(target_path=target, **options)
