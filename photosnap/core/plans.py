"""Export plans loaded from a YAML preferences file.

A plan file holds one or more named plans:

    plans:
      - name: family
        target_path: /Volumes/Backup/Photos
        base_export_path: /Volumes/Backup/Photos/Snapshot
        export_current: true
        export_derived: false
        delete_flat_folders: false

CLI flags override plan values.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .config import ExportConfig, ExportMode, SnapshotLayout
from .errors import ConfigError


class ExportPlan(BaseModel):
    """A named export plan."""
    name: str = Field(default="default", description="Plan name used with --name")
    target_path: Path = Field(..., description="Root folder holding InProgress and Snapshot")
    base_export_path: Optional[Path] = Field(
        default=None,
        description="Earlier export to link unchanged files against",
    )
    link_previous: bool = Field(
        default=True,
        description="Link against the current snapshot when no base export is given",
    )
    export_originals: bool = Field(default=True, description="Export original files")
    export_current: bool = Field(default=True, description="Export current (edited) files")
    export_derived: bool = Field(default=False, description="Export derived files")
    mode: ExportMode = Field(default=ExportMode.SNAPSHOT, description="snapshot or copy")
    build_albums: bool = Field(default=False, description="Create per-album folders")
    delete_flat_folders: bool = Field(
        default=False,
        description="Remove the .flat folders before promoting the snapshot",
    )
    reset_stale_staging: bool = Field(
        default=False,
        description="Remove a staging folder left by an interrupted run",
    )
    delete_attempts: int = Field(default=3, ge=1, description="Attempts per folder deletion")
    retry_delay: float = Field(default=0.0, ge=0, description="Seconds between deletion attempts")
    snapshot_name: str = Field(default="Snapshot", description="Name of the current snapshot folder")
    in_progress_name: str = Field(default="InProgress", description="Name of the staging folder")

    @field_validator("target_path")
    @classmethod
    def expand_target(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    @field_validator("base_export_path")
    @classmethod
    def expand_base(cls, value: Optional[Path]) -> Optional[Path]:
        if value is None:
            return None
        return value.expanduser().resolve()

    def to_export_config(self) -> ExportConfig:
        """Build the immutable run configuration."""
        layout = SnapshotLayout(
            target_path=self.target_path,
            in_progress_name=self.in_progress_name,
            snapshot_name=self.snapshot_name,
        )
        try:
            return ExportConfig(
                target_path=self.target_path,
                export_originals=self.export_originals,
                export_current=self.export_current,
                export_derived=self.export_derived,
                mode=self.mode,
                base_export_path=self.base_export_path,
                link_previous=self.link_previous,
                layout=layout,
                build_albums=self.build_albums,
                delete_flat_folders=self.delete_flat_folders,
                reset_stale_staging=self.reset_stale_staging,
                delete_attempts=self.delete_attempts,
                retry_delay=self.retry_delay,
            )
        except ValueError as e:
            raise ConfigError(f"Invalid plan '{self.name}': {e}") from e


class PlanFile(BaseModel):
    """All plans of a preferences file."""
    plans: List[ExportPlan] = Field(default_factory=list)

    def get(self, name: Optional[str] = None) -> ExportPlan:
        """Look up a plan by name; without a name the file must hold exactly one."""
        if name is None:
            if len(self.plans) != 1:
                raise ConfigError(
                    f"Plan file holds {len(self.plans)} plans, choose one with --name"
                )
            return self.plans[0]

        for plan in self.plans:
            if plan.name == name:
                return plan
        raise ConfigError(f"No plan named '{name}'")

    def to_yaml(self) -> str:
        """Render the plans back to YAML."""
        data = self.model_dump(mode="json", exclude_defaults=False)
        return yaml.safe_dump(data, sort_keys=False, explicit_start=True).rstrip("\n")


def load_plans(path: Path) -> PlanFile:
    """Load and validate a plan file.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read plan file {path}: {e}") from e

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Plan file {path} must contain a mapping")

    try:
        return PlanFile.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid plan file {path}: {e}") from e
