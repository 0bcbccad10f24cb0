"""Same-device detection for hard link eligibility."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from ..core.errors import DeviceProbeError


logger = logging.getLogger(__name__)


def device_id(path: Path) -> Optional[int]:
    """Device identifier of a path, or None if the platform reports none.

    Raises:
        OSError: If the path cannot be stat'ed.
    """
    return getattr(os.stat(path), "st_dev", None)


def same_device(source: Path, target_dir: Path) -> bool:
    """Check whether source and target_dir live on the same volume.

    An unreadable target directory is an error; an unreadable source
    just means "not the same device" and the caller falls back to copy.

    Raises:
        DeviceProbeError: If target_dir cannot be stat'ed.
    """
    try:
        target_device = device_id(target_dir)
    except OSError as e:
        raise DeviceProbeError(target_dir, e) from e

    try:
        source_device = device_id(source)
    except OSError as e:
        logger.debug("Cannot stat %s, assuming other device: %s", source, e)
        return False

    if source_device is None or target_device is None:
        return False
    return source_device == target_device
