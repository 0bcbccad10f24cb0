"""Exception hierarchy for snapshot exports."""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class PhotosnapError(Exception):
    """Base class for all export errors."""


class ConfigError(PhotosnapError):
    """Invalid configuration, plan file or manifest."""


class DeviceProbeError(PhotosnapError):
    """The device of a path could not be determined."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"Cannot determine device of {path}: {cause}")
        self.path = path
        self.cause = cause


class MaterializeError(PhotosnapError):
    """Linking or copying a file failed."""

    def __init__(self, path: Path, cause: BaseException):
        super().__init__(f"Cannot materialize {path}: {cause}")
        self.path = path
        self.cause = cause


class DeletionError(PhotosnapError):
    """A folder could not be removed, even after retrying."""

    def __init__(self, path: Path, phase: str, cause: BaseException):
        super().__init__(f"Cannot delete folder {path} during {phase}: {cause}")
        self.path = path
        self.phase = phase
        self.cause = cause


class PromotionError(PhotosnapError):
    """Renaming the staging tree to the snapshot tree failed.

    When this is raised the previous snapshot has already been removed,
    so the target has no current snapshot until an operator moves the
    staging tree into place.
    """

    def __init__(
        self,
        staging_path: Path,
        snapshot_path: Path,
        cause: BaseException,
        previous_removed: bool = True,
    ):
        super().__init__(
            f"Cannot rename {staging_path} to {snapshot_path}: {cause}"
        )
        self.staging_path = staging_path
        self.snapshot_path = snapshot_path
        self.cause = cause
        self.previous_removed = previous_removed


class StagingNotCleanError(PhotosnapError):
    """A staging tree left behind by an earlier run is in the way."""

    def __init__(self, staging_path: Path, detail: Optional[str] = None):
        message = f"Staging folder already exists: {staging_path}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.staging_path = staging_path
