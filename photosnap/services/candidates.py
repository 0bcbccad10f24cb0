"""Candidate link sources and export strategies."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.config import ExportCategory, ExportMode, SnapshotLayout
from ..core.models import ExportStats, FlatFolderDescriptor
from ..core.protocols import CandidatePolicy, Materializer
from .materializer import CopyOnlyMaterializer, LinkOrCopyMaterializer


logger = logging.getLogger(__name__)


def flat_folder_if_exists(path: Path, category: ExportCategory) -> list[FlatFolderDescriptor]:
    """Descriptor list for path, empty if the folder is missing."""
    if path.is_dir():
        return [FlatFolderDescriptor(path=path, category=category)]
    logger.debug("Candidate folder missing, skipped: %s", path)
    return []


def resolve_candidates(
    category: ExportCategory,
    staging_path: Path,
    base_export_path: Optional[Path],
    layout: SnapshotLayout,
    enabled: tuple[ExportCategory, ...],
) -> tuple[FlatFolderDescriptor, ...]:
    """Ordered folders that may already hold the files of a category.

    Order:
    1. The category's flat folder in the base export, if configured.
    2. For current and derived files, the originals flat folder of the
       running export, if originals are exported in this run.

    Folders that do not exist are left out. Callers check the list in
    order and use the first folder holding the file.
    """
    candidates: list[FlatFolderDescriptor] = []

    if base_export_path is not None:
        candidates += flat_folder_if_exists(
            layout.flat_path(category, root=base_export_path), category,
        )

    if category != ExportCategory.ORIGINALS and ExportCategory.ORIGINALS in enabled:
        candidates += flat_folder_if_exists(
            layout.flat_path(ExportCategory.ORIGINALS, root=staging_path),
            ExportCategory.ORIGINALS,
        )

    return tuple(candidates)


def no_candidates(
    category: ExportCategory,
    staging_path: Path,
    base_export_path: Optional[Path],
    layout: SnapshotLayout,
    enabled: tuple[ExportCategory, ...],
) -> tuple[FlatFolderDescriptor, ...]:
    """Candidate policy of the full-copy mode: always export from source."""
    return ()


@dataclass(frozen=True)
class ExportStrategy:
    """Candidate policy and materializer used for one export run."""
    candidates: CandidatePolicy
    materializer: Materializer


def create_strategy(mode: ExportMode, stats: Optional[ExportStats] = None) -> ExportStrategy:
    """Factory function to create the strategy for an export mode.

    Args:
        mode: Export mode from configuration.
        stats: Statistics shared with the caller.

    Returns:
        An ExportStrategy.
    """
    stats = stats if stats is not None else ExportStats()

    if mode == ExportMode.COPY:
        return ExportStrategy(no_candidates, CopyOnlyMaterializer(stats))

    return ExportStrategy(resolve_candidates, LinkOrCopyMaterializer(stats))
