"""Tests for domain models."""
from pathlib import Path

import pytest

from photosnap.core.models import (
    ExportItem,
    ExportStats,
    LinkOrCopyResult,
    MaterializeMethod,
    check_album_name,
)


class TestExportItem:
    """Tests for ExportItem validation."""

    def test_valid_item(self):
        item = ExportItem(Path("2021/a.jpg"), Path("/library/a.jpg"), albums=("Trips/Rome",))

        assert item.name == "a.jpg"

    def test_absolute_path(self):
        with pytest.raises(ValueError, match="absolute"):
            ExportItem(Path("/a.jpg"), Path("/library/a.jpg"))

    def test_escaping_path(self):
        with pytest.raises(ValueError, match="inside"):
            ExportItem(Path("../a.jpg"), Path("/library/a.jpg"))

    @pytest.mark.parametrize("album", [".flat", "Trips/.flat", ".hidden"])
    def test_hidden_album(self, album):
        """Test albums cannot land in the flat folder or other hidden folders."""
        with pytest.raises(ValueError, match="hidden"):
            ExportItem(Path("a.jpg"), Path("/library/a.jpg"), albums=(album,))

    @pytest.mark.parametrize("album", ["../outside", "/abs/album"])
    def test_escaping_album(self, album):
        with pytest.raises(ValueError, match="relative"):
            ExportItem(Path("a.jpg"), Path("/library/a.jpg"), albums=(album,))

    def test_empty_album(self):
        with pytest.raises(ValueError, match="empty"):
            check_album_name("")


class TestExportStats:
    """Tests for ExportStats."""

    def test_record(self):
        stats = ExportStats()

        stats.record(LinkOrCopyResult(Path("a"), Path("b"), MaterializeMethod.LINKED, 10))
        stats.record(LinkOrCopyResult(Path("c"), Path("d"), MaterializeMethod.COPIED, 5))

        assert stats.linked == 1
        assert stats.copied == 1
        assert stats.bytes_linked == 10
        assert stats.bytes_copied == 5
        assert stats.files_total == 2
