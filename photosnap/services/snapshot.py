"""Snapshot export run - orchestrates all services."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from ..core.config import ExportCategory, ExportConfig
from ..core.errors import StagingNotCleanError
from ..core.models import ExportResult, ExportStats
from ..core.protocols import MetadataFeed, ProgressReporter
from .candidates import ExportStrategy, create_strategy
from .exporter import build_album_views, export_category
from .finalizer import Finalizer, inspect_target


logger = logging.getLogger(__name__)


@dataclass
class ExporterDependencies:
    """Collaborators of a snapshot export.

    This is explicitly passed in - no globals or singletons.
    """
    feed: MetadataFeed
    strategy: ExportStrategy
    finalizer: Finalizer
    progress: Optional[ProgressReporter] = None


class SnapshotExporter:
    """Exports a library into a new snapshot next to the previous one.

    Each enabled category is exported into the staging tree, linking
    unchanged files against the base export or the originals of this
    run. Only a completely populated staging tree is promoted to the
    snapshot folder; on any failure it stays in place for inspection
    and the previous snapshot is left untouched.
    """

    def __init__(self, config: ExportConfig, deps: ExporterDependencies):
        """Initialize exporter with config and dependencies.

        Args:
            config: Export configuration.
            deps: All required dependencies.
        """
        self._config = config
        self._deps = deps
        self._keep_flat: set[ExportCategory] = set()

    @property
    def stats(self) -> ExportStats:
        return self._deps.strategy.materializer.stats

    def _prepare_staging(self) -> None:
        staging = self._config.staging_path
        if staging.exists():
            state = inspect_target(self._config.resolved_layout)
            if not self._config.reset_stale_staging:
                raise StagingNotCleanError(
                    staging, f"target state {state.value}, remove it or enable reset_stale_staging",
                )
            logger.warning("Removing staging folder of an interrupted run: %s", staging)
            self._deps.finalizer.reset_staging()
        staging.mkdir(parents=True)

    def _export(self, category: ExportCategory) -> None:
        """Export one category into staging, with album views if enabled."""
        config = self._config
        layout = config.resolved_layout
        strategy = self._deps.strategy

        candidates = strategy.candidates(
            category,
            config.staging_path,
            config.effective_base_export_path,
            layout,
            config.enabled_categories,
        )
        items = list(self._deps.feed.items(category))
        flat_path = config.flat_path(category)

        export_category(
            category,
            items,
            candidates,
            flat_path,
            strategy.materializer,
            progress=self._deps.progress,
        )

        if config.build_albums:
            without_album = sum(1 for item in items if not item.albums)
            if config.delete_flat_folders and without_album:
                logger.warning(
                    "%d %s items have no album, keeping their flat folder",
                    without_album, category.value,
                )
                self._keep_flat.add(category)
            build_album_views(
                category,
                items,
                flat_path,
                config.staging_path / layout.category_name(category),
                strategy.materializer,
            )

    def run(self) -> ExportResult:
        """Run the export and promote the new snapshot.

        Returns:
            Result with statistics of the run.

        Raises:
            StagingNotCleanError: A staging folder from an earlier run exists.
            MaterializeError: A file could not be linked or copied.
            DeletionError: A stale staging folder or the previous snapshot
                could not be removed.
            PromotionError: The new snapshot could not be moved into place.
        """
        config = self._config
        started = time.time()

        base = config.effective_base_export_path
        if base is not None and not base.is_dir():
            logger.warning("Base export folder does not exist, exporting without it: %s", base)

        self._keep_flat.clear()
        self._prepare_staging()

        for category in config.enabled_categories:
            self._export(category)

        self._deps.strategy.materializer.log_timings()

        report = self._deps.finalizer.finalize(keep_flat=self._keep_flat)

        stats = self.stats
        stats.elapsed_seconds = time.time() - started
        logger.info(
            "Export finished: %d linked, %d copied in %.1fs",
            stats.linked, stats.copied, stats.elapsed_seconds,
        )

        return ExportResult(
            snapshot_path=config.snapshot_path,
            stats=stats,
            flat_cleanup_failures=tuple(report.failed_flat_folders),
            replaced_previous=report.replaced_previous,
            base_export_path=base,
        )


def create_snapshot_exporter(
    config: ExportConfig,
    feed: MetadataFeed,
    progress: Optional[ProgressReporter] = None,
    stats: Optional[ExportStats] = None,
) -> SnapshotExporter:
    """Create a SnapshotExporter wired with the default services.

    Args:
        config: Export configuration.
        feed: Source of the items to export.
        progress: Optional progress reporter.
        stats: Statistics object shared with the caller.

    Returns:
        Configured SnapshotExporter instance
    """
    deps = ExporterDependencies(
        feed=feed,
        strategy=create_strategy(config.mode, stats),
        finalizer=Finalizer(config),
        progress=progress,
    )
    return SnapshotExporter(config, deps)
