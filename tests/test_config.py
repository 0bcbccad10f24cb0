"""Unit tests for export configuration and plan files."""
import pytest
from pathlib import Path

from photosnap.core.config import (
    ExportCategory,
    ExportConfig,
    ExportMode,
    SnapshotLayout,
)
from photosnap.core.errors import ConfigError
from photosnap.core.plans import ExportPlan, PlanFile, load_plans


class TestSnapshotLayout:
    """Tests for SnapshotLayout."""

    def test_default_names(self):
        """Test default folder names below the target."""
        layout = SnapshotLayout(Path("/exports"))

        assert layout.staging_path == Path("/exports/InProgress")
        assert layout.snapshot_path == Path("/exports/Snapshot")

    def test_flat_paths(self):
        """Test flat folders below staging and other roots."""
        layout = SnapshotLayout(Path("/exports"))

        assert layout.flat_path(ExportCategory.CURRENT) == Path("/exports/InProgress/Current/.flat")
        assert layout.flat_path(ExportCategory.DERIVED, root=Path("/base")) == Path("/base/Derived/.flat")
        assert layout.category_relative_path(ExportCategory.ORIGINALS) == Path("Originals/.flat")


class TestExportConfig:
    """Tests for ExportConfig."""

    def test_defaults(self):
        """Test default configuration values."""
        config = ExportConfig(target_path=Path("/exports"))

        assert config.enabled_categories == (ExportCategory.ORIGINALS, ExportCategory.CURRENT)
        assert config.mode == ExportMode.SNAPSHOT
        assert config.delete_flat_folders is False
        assert config.delete_attempts == 3
        assert config.layout == SnapshotLayout(Path("/exports"))

    def test_category_order(self):
        """Test categories come in processing order."""
        config = ExportConfig(target_path=Path("/exports"), export_derived=True)

        assert config.enabled_categories == (
            ExportCategory.ORIGINALS, ExportCategory.CURRENT, ExportCategory.DERIVED,
        )
        assert config.is_enabled(ExportCategory.DERIVED)

    def test_no_category(self):
        """Test at least one category is required."""
        with pytest.raises(ValueError, match="category"):
            ExportConfig(
                target_path=Path("/exports"),
                export_originals=False,
                export_current=False,
            )

    def test_invalid_attempts(self):
        with pytest.raises(ValueError, match="attempts"):
            ExportConfig(target_path=Path("/exports"), delete_attempts=0)

    def test_negative_delay(self):
        with pytest.raises(ValueError, match="delay"):
            ExportConfig(target_path=Path("/exports"), retry_delay=-1.0)

    def test_base_is_staging(self):
        """Test the staging folder cannot be its own link source."""
        with pytest.raises(ValueError, match="staging"):
            ExportConfig(target_path=Path("/exports"), base_export_path=Path("/exports/InProgress"))

    def test_layout_mismatch(self):
        with pytest.raises(ValueError, match="Layout"):
            ExportConfig(target_path=Path("/exports"), layout=SnapshotLayout(Path("/other")))

    def test_delete_flat_requires_albums(self):
        """Test flat folders cannot be deleted when they are the only view."""
        with pytest.raises(ValueError, match="build_albums"):
            ExportConfig(target_path=Path("/exports"), delete_flat_folders=True)

    def test_delete_flat_conflicts_with_link_previous(self):
        """Test the next run must find the flat folders it links against."""
        with pytest.raises(ValueError, match="link_previous"):
            ExportConfig(
                target_path=Path("/exports"),
                build_albums=True,
                delete_flat_folders=True,
                link_previous=True,
            )

    def test_delete_flat_with_albums(self):
        config = ExportConfig(
            target_path=Path("/exports"), build_albums=True, delete_flat_folders=True,
        )

        assert config.delete_flat_folders is True

    def test_effective_base(self):
        """Test the base export wins over the previous snapshot."""
        config = ExportConfig(target_path=Path("/exports"))
        assert config.effective_base_export_path is None

        config = config.with_overrides(link_previous=True)
        assert config.effective_base_export_path == Path("/exports/Snapshot")

        config = config.with_overrides(base_export_path=Path("/base"))
        assert config.effective_base_export_path == Path("/base")

    def test_with_overrides_new_target(self):
        """Test a new target gets a matching layout."""
        config = ExportConfig(target_path=Path("/exports"))

        moved = config.with_overrides(target_path=Path("/elsewhere"))

        assert moved.staging_path == Path("/elsewhere/InProgress")
        assert config.staging_path == Path("/exports/InProgress")


class TestExportPlan:
    """Tests for ExportPlan."""

    def test_defaults(self, tmp_path):
        plan = ExportPlan(target_path=tmp_path)

        assert plan.name == "default"
        assert plan.link_previous is True
        assert plan.export_derived is False

    def test_to_export_config(self, tmp_path):
        """Test a plan becomes a run configuration."""
        plan = ExportPlan(
            target_path=tmp_path,
            export_derived=True,
            mode="copy",
            snapshot_name="Latest",
        )

        config = plan.to_export_config()

        assert config.mode == ExportMode.COPY
        assert config.snapshot_path == tmp_path.resolve() / "Latest"
        assert config.effective_base_export_path == tmp_path.resolve() / "Latest"
        assert ExportCategory.DERIVED in config.enabled_categories

    def test_invalid_combination(self, tmp_path):
        """Test config validation errors become ConfigError."""
        plan = ExportPlan(target_path=tmp_path, export_originals=False, export_current=False)

        with pytest.raises(ConfigError, match="default"):
            plan.to_export_config()

    def test_delete_flat_with_link_previous(self, tmp_path):
        """Test a plan deleting flat folders must turn off link_previous."""
        plan = ExportPlan(target_path=tmp_path, build_albums=True, delete_flat_folders=True)

        with pytest.raises(ConfigError, match="link_previous"):
            plan.to_export_config()

        plan = plan.model_copy(update={"link_previous": False})
        assert plan.to_export_config().delete_flat_folders is True


class TestPlanFile:
    """Tests for plan files."""

    def write(self, tmp_path: Path, text: str) -> Path:
        path = tmp_path / "plans.yaml"
        path.write_text(text)
        return path

    def test_load(self, tmp_path):
        """Test loading several plans."""
        path = self.write(tmp_path, f"""
plans:
  - name: family
    target_path: {tmp_path}/family
  - name: work
    target_path: {tmp_path}/work
    export_current: false
""")
        plans = load_plans(path)

        assert [p.name for p in plans.plans] == ["family", "work"]
        assert plans.get("work").export_current is False

    def test_get_requires_name(self, tmp_path):
        plans = PlanFile(plans=[
            ExportPlan(name="a", target_path=tmp_path),
            ExportPlan(name="b", target_path=tmp_path),
        ])

        with pytest.raises(ConfigError, match="--name"):
            plans.get()
        with pytest.raises(ConfigError, match="missing"):
            plans.get("missing")

    def test_single_plan_without_name(self, tmp_path):
        plans = PlanFile(plans=[ExportPlan(name="only", target_path=tmp_path)])

        assert plans.get().name == "only"

    def test_to_yaml(self, tmp_path):
        """Test rendered YAML loads back to the same plans."""
        plans = PlanFile(plans=[ExportPlan(name="only", target_path=tmp_path)])

        text = plans.to_yaml()
        reloaded = load_plans(self.write(tmp_path, text))

        assert text.startswith("---")
        assert reloaded == plans

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot read"):
            load_plans(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_plans(self.write(tmp_path, "plans: [unclosed"))

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigError, match="mapping"):
            load_plans(self.write(tmp_path, "- a\n- b\n"))

    def test_invalid_values(self, tmp_path):
        path = self.write(tmp_path, f"""
plans:
  - target_path: {tmp_path}
    delete_attempts: 0
""")
        with pytest.raises(ConfigError, match="Invalid plan file"):
            load_plans(path)
