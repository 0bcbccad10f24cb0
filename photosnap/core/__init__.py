"""Core domain models, configuration and protocols."""
from .protocols import (
    MetadataFeed,
    Materializer,
    CandidatePolicy,
    ProgressReporter,
)
from .models import (
    ExportItem,
    ExportResult,
    ExportStats,
    FlatFolderDescriptor,
    LinkOrCopyResult,
    MaterializeMethod,
)
from .config import ExportCategory, ExportConfig, ExportMode, SnapshotLayout
from .errors import (
    PhotosnapError,
    ConfigError,
    DeviceProbeError,
    MaterializeError,
    DeletionError,
    PromotionError,
    StagingNotCleanError,
)

__all__ = [
    # Protocols
    "MetadataFeed",
    "Materializer",
    "CandidatePolicy",
    "ProgressReporter",
    # Models
    "ExportItem",
    "ExportResult",
    "ExportStats",
    "FlatFolderDescriptor",
    "LinkOrCopyResult",
    "MaterializeMethod",
    # Config
    "ExportCategory",
    "ExportConfig",
    "ExportMode",
    "SnapshotLayout",
    # Errors
    "PhotosnapError",
    "ConfigError",
    "DeviceProbeError",
    "MaterializeError",
    "DeletionError",
    "PromotionError",
    "StagingNotCleanError",
]
