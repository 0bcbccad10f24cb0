"""Service layer - materialization, export and finalization."""
from .devices import same_device
from .materializer import CopyOnlyMaterializer, LinkOrCopyMaterializer, copy_file_atomic
from .candidates import ExportStrategy, create_strategy, no_candidates, resolve_candidates
from .exporter import build_album_views, export_category
from .finalizer import Finalizer, FinalizeReport, TargetState, inspect_target
from .retry import DELETE_ATTEMPTS, retry
from .stopwatch import StopWatch
from .feeds import DirectoryFeed, ManifestFeed
from .snapshot import ExporterDependencies, SnapshotExporter, create_snapshot_exporter

__all__ = [
    # Devices
    "same_device",
    # Materializers
    "CopyOnlyMaterializer",
    "LinkOrCopyMaterializer",
    "copy_file_atomic",
    # Candidates
    "ExportStrategy",
    "create_strategy",
    "no_candidates",
    "resolve_candidates",
    # Export
    "build_album_views",
    "export_category",
    # Finalization
    "Finalizer",
    "FinalizeReport",
    "TargetState",
    "inspect_target",
    "DELETE_ATTEMPTS",
    "retry",
    "StopWatch",
    # Feeds
    "DirectoryFeed",
    "ManifestFeed",
    # Orchestration
    "ExporterDependencies",
    "SnapshotExporter",
    "create_snapshot_exporter",
]
