"""Tests for metadata feeds."""
import json
from pathlib import Path

import pytest

from photosnap.core.config import ExportCategory
from photosnap.core.errors import ConfigError
from photosnap.services.feeds import DirectoryFeed, ManifestFeed, is_media


def write_manifest(tmp_path: Path, data) -> Path:
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps(data))
    return path


class TestManifestFeed:
    """Tests for ManifestFeed."""

    def test_items(self, tmp_path):
        """Test items are read per category."""
        path = write_manifest(tmp_path, {
            "originals": [
                {"path": "2021/a.jpg", "source": "/library/a.jpg", "albums": ["Trips/Rome"]},
            ],
            "current": [{"path": "2021/a.jpg", "source": "/library/a-edit.jpg"}],
        })

        feed = ManifestFeed(path)
        originals = list(feed.items(ExportCategory.ORIGINALS))

        assert originals[0].relative_path == Path("2021/a.jpg")
        assert originals[0].source == Path("/library/a.jpg")
        assert originals[0].albums == ("Trips/Rome",)
        assert feed.count(ExportCategory.CURRENT) == 1
        assert list(feed.items(ExportCategory.DERIVED)) == []

    def test_relative_source(self, tmp_path):
        """Test relative sources resolve against the manifest folder."""
        path = write_manifest(tmp_path, {"originals": [{"path": "a.jpg", "source": "lib/a.jpg"}]})

        item = next(ManifestFeed(path).items(ExportCategory.ORIGINALS))

        assert item.source == tmp_path / "lib" / "a.jpg"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot read"):
            ManifestFeed(tmp_path / "missing.json")

    def test_not_an_object(self, tmp_path):
        with pytest.raises(ConfigError, match="object"):
            ManifestFeed(write_manifest(tmp_path, ["a.jpg"]))

    def test_category_not_a_list(self, tmp_path):
        with pytest.raises(ConfigError, match="list"):
            ManifestFeed(write_manifest(tmp_path, {"originals": {"a": 1}}))

    def test_item_without_source(self, tmp_path):
        with pytest.raises(ConfigError, match="source"):
            ManifestFeed(write_manifest(tmp_path, {"originals": [{"path": "a.jpg"}]}))

    def test_escaping_path(self, tmp_path):
        """Test a relative path leaving the flat folder is rejected."""
        path = write_manifest(tmp_path, {"originals": [{"path": "../a.jpg", "source": "/x.jpg"}]})

        with pytest.raises(ConfigError, match="Invalid manifest item"):
            ManifestFeed(path)

    @pytest.mark.parametrize("album", [".flat", "Trips/.flat", "../Elsewhere"])
    def test_reserved_album(self, tmp_path, album):
        """Test albums cannot point at the flat folder or leave the category."""
        path = write_manifest(tmp_path, {
            "originals": [{"path": "a.jpg", "source": "/x.jpg", "albums": [album]}],
        })

        with pytest.raises(ConfigError, match="Invalid manifest item"):
            ManifestFeed(path)

    @pytest.mark.parametrize("albums", ["Trips", [1, 2], {"a": "b"}])
    def test_albums_not_a_list_of_names(self, tmp_path, albums):
        path = write_manifest(tmp_path, {
            "originals": [{"path": "a.jpg", "source": "/x.jpg", "albums": albums}],
        })

        with pytest.raises(ConfigError, match="invalid albums"):
            ManifestFeed(path)


class TestDirectoryFeed:
    """Tests for DirectoryFeed."""

    @pytest.fixture
    def library(self, tmp_path: Path) -> Path:
        root = tmp_path / "library"
        for relative in (
            "originals/2021/b.jpg",
            "originals/2021/a.mov",
            "originals/2021/notes.txt",
            "originals/.hidden/c.jpg",
            "current/2021/a.mov",
        ):
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"x")
        return root

    def test_from_library(self, library):
        """Test category folders are found and scanned in name order."""
        feed = DirectoryFeed.from_library(library)

        paths = [item.relative_path for item in feed.items(ExportCategory.ORIGINALS)]

        assert paths == [Path("2021/a.mov"), Path("2021/b.jpg")]
        assert feed.root(ExportCategory.DERIVED) is None
        assert list(feed.items(ExportCategory.DERIVED)) == []

    def test_include_non_media(self, library):
        feed = DirectoryFeed.from_library(library, include_non_media=True)

        paths = [item.relative_path for item in feed.items(ExportCategory.ORIGINALS)]

        assert Path("2021/notes.txt") in paths

    def test_sources(self, library):
        feed = DirectoryFeed.from_library(library)

        item = next(feed.items(ExportCategory.CURRENT))

        assert item.source == library / "current" / "2021" / "a.mov"

    def test_skips_symlinks(self, library, tmp_path):
        (library / "originals" / "link.jpg").symlink_to(library / "originals" / "2021" / "b.jpg")

        feed = DirectoryFeed.from_library(library)
        paths = [item.relative_path for item in feed.items(ExportCategory.ORIGINALS)]

        assert Path("link.jpg") not in paths

    def test_empty_library(self, tmp_path):
        with pytest.raises(ConfigError, match="none of the folders"):
            DirectoryFeed.from_library(tmp_path)


def test_is_media():
    assert is_media(Path("IMG_0001.HEIC"))
    assert is_media(Path("clip.mp4"))
    assert not is_media(Path("notes.txt"))
