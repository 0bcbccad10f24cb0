"""Link-or-copy materialization of single files."""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional

from ..core.errors import DeviceProbeError, MaterializeError
from ..core.models import ExportStats, LinkOrCopyResult, MaterializeMethod
from .devices import same_device
from .stopwatch import StopWatch


logger = logging.getLogger(__name__)


def _check_source(source: Path, target: Path) -> int:
    """Return the source size; raise if source or target state is wrong."""
    try:
        if not source.is_file():
            raise FileNotFoundError(f"Source is not a regular file: {source}")
        if target.exists() or target.is_symlink():
            raise FileExistsError(f"Target already exists: {target}")
        return source.stat().st_size
    except OSError as e:
        raise MaterializeError(target, e) from e


def copy_file_atomic(source: Path, target: Path) -> None:
    """Copy source to target so that target is either complete or absent.

    The bytes go to a hidden temporary file in the target directory,
    which is renamed into place once complete.

    Raises:
        OSError: If copying or renaming fails; no partial file remains.
    """
    fd, tmp_name = tempfile.mkstemp(
        dir=target.parent, prefix=f".{target.name}.", suffix=".partial",
    )
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        shutil.copy2(source, tmp_path)
        os.replace(tmp_path, target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class CopyOnlyMaterializer:
    """Materializer that always copies.

    Used for the full-copy export mode, and as the fallback of
    LinkOrCopyMaterializer when source and target are on different
    devices.
    """

    def __init__(self, stats: Optional[ExportStats] = None):
        """Initialize materializer.

        Args:
            stats: Shared statistics; a fresh object is created if omitted.
        """
        self._stats = stats if stats is not None else ExportStats()
        self.copy_watch = StopWatch("shutil.copy2", logging.INFO, add_file_sizes=True)

    @property
    def stats(self) -> ExportStats:
        return self._stats

    def materialize(self, source: Path, target: Path) -> LinkOrCopyResult:
        size = _check_source(source, target)
        return self._copy(source, target, size)

    def _copy(self, source: Path, target: Path, size: int) -> LinkOrCopyResult:
        logger.debug("copy file: %s to %s", source, target)
        try:
            with self.copy_watch.measure(size):
                copy_file_atomic(source, target)
        except OSError as e:
            logger.error("Unable to copy file %s to %s: %s", source, target, e)
            raise MaterializeError(target, e) from e

        result = LinkOrCopyResult(source, target, MaterializeMethod.COPIED, size)
        self._stats.record(result)
        return result

    def log_timings(self) -> None:
        self.copy_watch.log_summary()


class LinkOrCopyMaterializer(CopyOnlyMaterializer):
    """Hard links when source and target share a device, copies otherwise."""

    def __init__(
        self,
        stats: Optional[ExportStats] = None,
        device_check: Callable[[Path, Path], bool] = same_device,
    ):
        """Initialize materializer.

        Args:
            stats: Shared statistics; a fresh object is created if omitted.
            device_check: Same-device test, replaceable in tests.
        """
        super().__init__(stats)
        self._device_check = device_check
        self.link_watch = StopWatch("os.link", logging.INFO, add_file_sizes=False)

    def materialize(self, source: Path, target: Path) -> LinkOrCopyResult:
        size = _check_source(source, target)

        try:
            linkable = self._device_check(source, target.parent)
        except DeviceProbeError as e:
            raise MaterializeError(target, e.cause) from e

        if not linkable:
            return self._copy(source, target, size)

        logger.debug("link file: %s to %s", source, target)
        try:
            with self.link_watch.measure():
                os.link(source, target)
        except OSError as e:
            logger.error("Unable to link file %s to %s: %s", source, target, e)
            raise MaterializeError(target, e) from e

        result = LinkOrCopyResult(source, target, MaterializeMethod.LINKED, size)
        self._stats.record(result)
        return result

    def log_timings(self) -> None:
        self.link_watch.log_summary()
        super().log_timings()
