"""Metadata feeds listing the items to export."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator, Mapping, Optional

from ..core.config import ExportCategory
from ..core.errors import ConfigError
from ..core.models import ExportItem


logger = logging.getLogger(__name__)


IMAGE_EXTENSIONS = frozenset({
    ".jpg", ".jpeg", ".png", ".webp", ".heic", ".heif",
    ".tif", ".tiff", ".bmp", ".gif", ".dng", ".cr2", ".nef", ".arw",
})

VIDEO_EXTENSIONS = frozenset({
    ".mp4", ".mov", ".avi", ".mkv", ".webm", ".m4v",
    ".3gp", ".wmv", ".flv", ".mts", ".m2ts",
})


def is_media(path: Path) -> bool:
    suffix = path.suffix.lower()
    return suffix in IMAGE_EXTENSIONS or suffix in VIDEO_EXTENSIONS


class ManifestFeed:
    """Feed read from a JSON manifest.

    Format:
        {
          "originals": [
            {"path": "2021/IMG_0001.HEIC", "source": "/library/IMG_0001.HEIC",
             "albums": ["Trips/Rome"]}
          ],
          "current": [...],
          "derived": [...]
        }

    Relative sources are resolved against the manifest's folder. Missing
    categories yield no items.
    """

    def __init__(self, manifest_path: Path):
        """Load the manifest.

        Raises:
            ConfigError: If the manifest cannot be read or is malformed.
        """
        self._path = manifest_path
        self._base = manifest_path.parent
        try:
            data = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read manifest {manifest_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Manifest {manifest_path} must contain an object")

        self._items: dict[ExportCategory, list[ExportItem]] = {}
        for category in ExportCategory:
            entries = data.get(category.value, [])
            if not isinstance(entries, list):
                raise ConfigError(f"Manifest entry '{category.value}' must be a list")
            self._items[category] = [self._parse(category, e) for e in entries]

    def _parse(self, category: ExportCategory, entry: object) -> ExportItem:
        if not isinstance(entry, dict) or "path" not in entry or "source" not in entry:
            raise ConfigError(
                f"Manifest item in '{category.value}' needs 'path' and 'source': {entry!r}"
            )
        albums = entry.get("albums", [])
        if not isinstance(albums, list) or not all(isinstance(a, str) for a in albums):
            raise ConfigError(
                f"Manifest item in '{category.value}' has invalid albums: {albums!r}"
            )
        source = Path(entry["source"]).expanduser()
        if not source.is_absolute():
            source = self._base / source
        try:
            return ExportItem(
                relative_path=Path(entry["path"]),
                source=source,
                albums=tuple(albums),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid manifest item in '{category.value}': {e}") from e

    def items(self, category: ExportCategory) -> Iterator[ExportItem]:
        return iter(self._items.get(category, []))

    def count(self, category: ExportCategory) -> int:
        return len(self._items.get(category, []))


class DirectoryFeed:
    """Feed that walks one library folder per category.

    Each file becomes an item whose relative path mirrors its location
    below the category folder. An edited current/a.jpg therefore shares
    its path with originals/a.jpg; the exporter only links the two when
    size and modification time agree.
    """

    def __init__(
        self,
        roots: Mapping[ExportCategory, Path],
        include_non_media: bool = False,
        follow_symlinks: bool = False,
    ):
        """Initialize the feed.

        Args:
            roots: Library folder of each category.
            include_non_media: Whether to include non-media files.
            follow_symlinks: Whether to follow symbolic links.
        """
        self._roots = dict(roots)
        self._include_non_media = include_non_media
        self._follow_symlinks = follow_symlinks

    @classmethod
    def from_library(cls, library: Path, **kwargs) -> "DirectoryFeed":
        """Feed for a library with one subfolder per category value."""
        roots = {
            category: library / category.value
            for category in ExportCategory
            if (library / category.value).is_dir()
        }
        if not roots:
            raise ConfigError(
                f"Library {library} has none of the folders "
                + ", ".join(c.value for c in ExportCategory)
            )
        return cls(roots, **kwargs)

    def root(self, category: ExportCategory) -> Optional[Path]:
        return self._roots.get(category)

    def items(self, category: ExportCategory) -> Iterator[ExportItem]:
        root = self._roots.get(category)
        if root is None:
            return
        if not root.is_dir():
            logger.warning("Library folder missing: %s", root)
            return
        yield from self._scan_directory(root, root)

    def _scan_directory(self, directory: Path, root: Path) -> Iterator[ExportItem]:
        """Scan a single directory in name order."""
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except PermissionError:
            logger.warning("Permission denied: %s", directory)
            return

        for entry in entries:
            if entry.name.startswith("."):
                continue
            if entry.is_symlink() and not self._follow_symlinks:
                continue

            if entry.is_file():
                if is_media(entry) or self._include_non_media:
                    yield ExportItem(relative_path=entry.relative_to(root), source=entry)
            elif entry.is_dir():
                yield from self._scan_directory(entry, root)
