"""Snapshot export of photo libraries.

Each run materializes a complete new snapshot next to the previous one,
hard linking unchanged files, and promotes it only once it is complete.
"""

__version__ = "1.0.0"

# Core exports
from .core.config import ExportCategory, ExportConfig, ExportMode, SnapshotLayout
from .core.models import ExportItem, ExportResult, ExportStats, FlatFolderDescriptor, LinkOrCopyResult
from .core.errors import (
    PhotosnapError,
    DeletionError,
    MaterializeError,
    PromotionError,
)
from .core.plans import ExportPlan, PlanFile, load_plans

# Service exports
from .services.snapshot import SnapshotExporter, create_snapshot_exporter
from .services.feeds import DirectoryFeed, ManifestFeed
from .services.finalizer import Finalizer, TargetState, inspect_target

# Logging exports
from .logging.rich_logger import RichProgressReporter

__all__ = [
    # Core
    "ExportCategory",
    "ExportConfig",
    "ExportMode",
    "SnapshotLayout",
    "ExportItem",
    "ExportResult",
    "ExportStats",
    "FlatFolderDescriptor",
    "LinkOrCopyResult",
    "PhotosnapError",
    "DeletionError",
    "MaterializeError",
    "PromotionError",
    "ExportPlan",
    "PlanFile",
    "load_plans",
    # Services
    "SnapshotExporter",
    "create_snapshot_exporter",
    "DirectoryFeed",
    "ManifestFeed",
    "Finalizer",
    "TargetState",
    "inspect_target",
    # Logging
    "RichProgressReporter",
]
