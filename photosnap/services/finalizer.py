"""Promotion of a staging tree to the current snapshot.

Invariant: if the staging folder is gone and the snapshot folder
exists, the last run finished without error. Any other combination
tells the next run (or an operator) that a run was interrupted; see
inspect_target().
"""
from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Collection

from ..core.config import ExportCategory, ExportConfig, SnapshotLayout
from ..core.errors import DeletionError, PromotionError
from .retry import DELETE_ATTEMPTS, retry


logger = logging.getLogger(__name__)

FolderRemover = Callable[[Path], None]
FolderRenamer = Callable[[Path, Path], None]


class FinalizePhase(Enum):
    """Folder operations of a run, in order."""
    RESET_STAGING = "reset-staging"
    FLAT_CLEANUP = "flat-cleanup"
    REMOVE_PREVIOUS = "remove-previous"
    PROMOTE = "promote"


def delete_folder_if_exists(
    path: Path,
    phase: FinalizePhase,
    remover: FolderRemover = shutil.rmtree,
    max_attempts: int = DELETE_ATTEMPTS,
    delay: float = 0.0,
) -> bool:
    """Delete a folder with bounded retry.

    Returns:
        True if a folder was deleted, False if none existed.

    Raises:
        DeletionError: If the last attempt still fails.
    """
    if not path.exists():
        return False

    logger.info("Delete folder: %s", path)
    try:
        retry(
            lambda: remover(path),
            max_attempts=max_attempts,
            delay=delay,
            description=f"delete {path}",
        )
    except OSError as e:
        logger.error("Error deleting folder %s", path)
        raise DeletionError(path, phase.value, e) from e
    return True


@dataclass
class FinalizeReport:
    """What the finalizer did."""
    removed_flat_folders: list[Path] = field(default_factory=list)
    failed_flat_folders: list[Path] = field(default_factory=list)
    replaced_previous: bool = False


class Finalizer:
    """Turns a complete staging tree into the current snapshot.

    Steps:
    1. Optionally delete the .flat folders of all enabled categories
       (best effort, failures are logged).
    2. Delete the previous snapshot folder (fatal on failure, nothing
       has changed yet).
    3. Rename the staging folder to the snapshot folder (fatal on
       failure, the previous snapshot is already gone).
    """

    def __init__(
        self,
        config: ExportConfig,
        remover: FolderRemover = shutil.rmtree,
        renamer: FolderRenamer = os.rename,
    ):
        """Initialize finalizer.

        Args:
            config: Export configuration.
            remover: Recursive folder removal, replaceable in tests.
            renamer: Folder rename, replaceable in tests.
        """
        self._config = config
        self._remover = remover
        self._renamer = renamer

    def _delete(self, path: Path, phase: FinalizePhase) -> bool:
        return delete_folder_if_exists(
            path,
            phase,
            remover=self._remover,
            max_attempts=self._config.delete_attempts,
            delay=self._config.retry_delay,
        )

    def reset_staging(self) -> bool:
        """Remove a staging folder left behind by an interrupted run.

        Raises:
            DeletionError: If the folder cannot be removed.
        """
        return self._delete(self._config.staging_path, FinalizePhase.RESET_STAGING)

    def cleanup_flat_folders(
        self,
        report: FinalizeReport,
        keep: Collection[ExportCategory] = (),
    ) -> None:
        for category in self._config.enabled_categories:
            if category in keep:
                logger.info("Keeping flat folder of %s", category.value)
                continue
            path = self._config.flat_path(category)
            try:
                if self._delete(path, FinalizePhase.FLAT_CLEANUP):
                    report.removed_flat_folders.append(path)
            except DeletionError as e:
                logger.warning("Could not remove flat folder, continuing: %s", e)
                report.failed_flat_folders.append(path)

    def remove_previous(self, report: FinalizeReport) -> None:
        report.replaced_previous = self._delete(
            self._config.snapshot_path, FinalizePhase.REMOVE_PREVIOUS,
        )

    def promote(self, report: FinalizeReport) -> None:
        staging = self._config.staging_path
        snapshot = self._config.snapshot_path
        logger.info("Rename %s to %s", staging, snapshot)
        try:
            self._renamer(staging, snapshot)
        except OSError as e:
            logger.error("Error renaming %s folder: %s => abort export", staging, e)
            raise PromotionError(
                staging, snapshot, e, previous_removed=report.replaced_previous,
            ) from e

    def finalize(self, keep_flat: Collection[ExportCategory] = ()) -> FinalizeReport:
        """Run all finalization steps.

        Args:
            keep_flat: Categories whose flat folder must survive cleanup.

        Raises:
            DeletionError: The previous snapshot could not be removed;
                both trees are still in place.
            PromotionError: The staging tree could not be renamed after
                the previous snapshot was removed.
        """
        report = FinalizeReport()

        if self._config.delete_flat_folders:
            self.cleanup_flat_folders(report, keep_flat)

        self.remove_previous(report)
        self.promote(report)

        logger.info("Snapshot finalized: %s", self._config.snapshot_path)
        return report


class TargetState(Enum):
    """What a target root looks like between runs."""
    EMPTY = "empty"              # Nothing exported yet
    CLEAN = "clean"              # Snapshot present, no staging folder
    INTERRUPTED = "interrupted"  # Snapshot and staging present
    BROKEN = "broken"            # Staging present, snapshot missing


def inspect_target(layout: SnapshotLayout) -> TargetState:
    """Classify a target root by which of its folders exist."""
    has_staging = layout.staging_path.exists()
    has_snapshot = layout.snapshot_path.exists()

    if has_staging and has_snapshot:
        return TargetState.INTERRUPTED
    if has_staging:
        return TargetState.BROKEN
    if has_snapshot:
        return TargetState.CLEAN
    return TargetState.EMPTY
