"""Flat-folder export of one category."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

from ..core.config import ExportCategory
from ..core.models import ExportItem, FlatFolderDescriptor, LinkOrCopyResult
from ..core.protocols import Materializer, ProgressReporter


logger = logging.getLogger(__name__)


def same_version(candidate: Path, source: Path) -> bool:
    """Quick check that candidate holds the same version as source.

    Files match when they share an inode, or when size and modification
    time (whole seconds) agree. A source that cannot be stat'ed leaves
    the decision to the relative path alone.
    """
    try:
        candidate_stat = candidate.stat()
    except OSError:
        return False
    try:
        source_stat = source.stat()
    except OSError:
        return True

    if (candidate_stat.st_dev, candidate_stat.st_ino) == (source_stat.st_dev, source_stat.st_ino):
        return True
    return (
        candidate_stat.st_size == source_stat.st_size
        and int(candidate_stat.st_mtime) == int(source_stat.st_mtime)
    )


def find_link_source(
    item: ExportItem,
    candidates: Sequence[FlatFolderDescriptor],
) -> Optional[Path]:
    """First candidate file holding the item's version, in candidate order."""
    for folder in candidates:
        candidate = folder.candidate_for(item.relative_path)
        if not candidate.is_file():
            continue
        if same_version(candidate, item.source):
            return candidate
        logger.debug("Skipping %s, differs from %s", candidate, item.source)
    return None


def export_item(
    item: ExportItem,
    candidates: Sequence[FlatFolderDescriptor],
    flat_path: Path,
    materializer: Materializer,
) -> tuple[LinkOrCopyResult, bool]:
    """Materialize one item into the flat folder.

    Returns:
        The materialization result and whether a candidate was used.

    Raises:
        MaterializeError: If the file cannot be linked or copied.
    """
    target = flat_path / item.relative_path
    target.parent.mkdir(parents=True, exist_ok=True)

    source = find_link_source(item, candidates)
    if source is not None:
        logger.debug("Reusing %s for %s", source, item.relative_path)
        return materializer.materialize(source, target), True

    return materializer.materialize(item.source, target), False


def export_category(
    category: ExportCategory,
    items: Iterable[ExportItem],
    candidates: Sequence[FlatFolderDescriptor],
    flat_path: Path,
    materializer: Materializer,
    progress: Optional[ProgressReporter] = None,
) -> int:
    """Export all items of a category into its flat folder.

    Each item is linked or copied from the first candidate folder that
    already holds the same version of the file at the item's relative
    path (see same_version), or from the item's source when none does.
    The first failure aborts the whole category.

    Args:
        category: Category being exported.
        items: Items from the metadata feed.
        candidates: Ordered link sources for this category.
        flat_path: Flat folder in the staging tree.
        materializer: Link-or-copy implementation.
        progress: Optional progress reporter.

    Returns:
        Number of exported items.

    Raises:
        MaterializeError: On the first file that cannot be materialized.
    """
    items = list(items)
    flat_path.mkdir(parents=True, exist_ok=True)
    stats = materializer.stats

    logger.info(
        "Export %s files to %s (%d items, %d candidate folders)",
        category.value, flat_path, len(items), len(candidates),
    )
    for folder in candidates:
        logger.debug("Candidate folder: %s (%s)", folder.path, folder.category.value)

    if progress:
        progress.start_phase(f"Export {category.value}", len(items))

    try:
        for item in items:
            try:
                _, from_candidate = export_item(item, candidates, flat_path, materializer)
            except Exception:
                logger.error("Export of %s aborted at %s", category.value, item.relative_path)
                raise
            stats.record_item(category, from_candidate)
            if progress:
                progress.advance_phase()
    finally:
        if progress:
            progress.end_phase()

    return len(items)


def unique_album_target(directory: Path, name: str) -> Path:
    """Find a free file name in directory, adding a counter if needed."""
    candidate = directory / name
    if not candidate.exists():
        return candidate

    stem, suffix = Path(name).stem, Path(name).suffix
    for counter in range(1, 10000):
        candidate = directory / f"{stem}_{counter}{suffix}"
        if not candidate.exists():
            return candidate

    raise FileExistsError(f"No free file name for {name} in {directory}")


def build_album_views(
    category: ExportCategory,
    items: Iterable[ExportItem],
    flat_path: Path,
    category_path: Path,
    materializer: Materializer,
) -> int:
    """Link every item from the flat folder into its album folders.

    Returns:
        Number of album entries created.
    """
    created = 0
    for item in items:
        if not item.albums:
            continue
        source = flat_path / item.relative_path
        for album in item.albums:
            directory = category_path / album
            directory.mkdir(parents=True, exist_ok=True)
            materializer.materialize(source, unique_album_target(directory, item.name))
            created += 1

    materializer.stats.album_links += created
    logger.info("Created %d album entries for %s", created, category.value)
    return created
