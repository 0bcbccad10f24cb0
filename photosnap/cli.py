"""CLI with subcommands: export, status, plan-show."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from .core.config import ExportConfig, SnapshotLayout
from .core.errors import (
    ConfigError,
    DeletionError,
    PhotosnapError,
    PromotionError,
    StagingNotCleanError,
)
from .core.plans import ExportPlan, load_plans
from .logging.rich_logger import QuietProgressReporter, RichProgressReporter, configure_logging


EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PREVIOUS_INTACT = 2
EXIT_MANUAL_RECOVERY = 3
EXIT_INTERRUPTED = 130


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="photosnap",
        description="Export a photo library into hard-linked snapshots.",
    )

    # Global options
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ============ EXPORT command ============
    export_parser = subparsers.add_parser(
        "export",
        help="Export the library into a new snapshot",
    )
    source = export_parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--manifest",
        type=Path,
        help="JSON manifest listing the items of each category",
    )
    source.add_argument(
        "--library",
        type=Path,
        help="Library folder with originals/, current/ and derived/ subfolders",
    )
    export_parser.add_argument(
        "--plan",
        type=Path,
        default=None,
        help="YAML plan file (CLI flags override plan values)",
    )
    export_parser.add_argument(
        "--name",
        type=str,
        default=None,
        help="Plan to use when the plan file holds several",
    )
    export_parser.add_argument(
        "-o", "--target",
        type=Path,
        default=None,
        help="Target root holding InProgress/ and Snapshot/",
    )
    export_parser.add_argument(
        "--base",
        type=Path,
        default=None,
        help="Earlier export to link unchanged files against",
    )
    export_parser.add_argument(
        "--mode",
        type=str,
        choices=["snapshot", "copy"],
        default=None,
        help="snapshot links where possible, copy always copies (default: snapshot)",
    )
    for flag, help_text in (
        ("originals", "Export original files (default: on)"),
        ("current", "Export current files (default: on)"),
        ("derived", "Export derived files (default: off)"),
        ("link-previous", "Link against the current snapshot when --base is not given (default: on)"),
        ("albums", "Create per-album folders (default: off)"),
        ("delete-flat", "Remove .flat folders before promotion; needs --albums and --no-link-previous (default: off)"),
        ("reset-staging", "Remove a staging folder left by an interrupted run (default: off)"),
    ):
        export_parser.add_argument(
            f"--{flag}",
            action=argparse.BooleanOptionalAction,
            default=None,
            help=help_text,
        )
    export_parser.add_argument(
        "--delete-attempts",
        type=int,
        default=None,
        help="Attempts per folder deletion (default: 3)",
    )

    # ============ STATUS command ============
    status_parser = subparsers.add_parser(
        "status",
        help="Show whether the last export of a target finished",
    )
    status_parser.add_argument(
        "target",
        type=Path,
        help="Target root to inspect",
    )

    # ============ PLAN-SHOW command ============
    plan_parser = subparsers.add_parser(
        "plan-show",
        help="Validate a plan file and print it",
    )
    plan_parser.add_argument(
        "plan",
        type=Path,
        help="YAML plan file",
    )

    return parser


def _plan_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Plan fields given explicitly on the command line."""
    mapping = {
        "target_path": args.target,
        "base_export_path": args.base,
        "mode": args.mode,
        "export_originals": args.originals,
        "export_current": args.current,
        "export_derived": args.derived,
        "link_previous": args.link_previous,
        "build_albums": args.albums,
        "delete_flat_folders": args.delete_flat,
        "reset_stale_staging": args.reset_staging,
        "delete_attempts": args.delete_attempts,
    }
    return {key: value for key, value in mapping.items() if value is not None}


def build_config(args: argparse.Namespace) -> ExportConfig:
    """Build the export configuration from plan file and flags.

    Raises:
        ConfigError: If the result is not a valid configuration.
    """
    overrides = _plan_overrides(args)

    if args.plan is not None:
        base: dict[str, Any] = load_plans(args.plan).get(args.name).model_dump()
    elif "target_path" not in overrides:
        raise ConfigError("Either --target or --plan is required")
    else:
        base = {}

    try:
        plan = ExportPlan.model_validate({**base, **overrides})
    except ValidationError as e:
        raise ConfigError(f"Invalid export options: {e}") from e
    return plan.to_export_config()


def build_feed(args: argparse.Namespace):
    from .services.feeds import DirectoryFeed, ManifestFeed

    if args.manifest is not None:
        return ManifestFeed(args.manifest.expanduser().resolve())
    return DirectoryFeed.from_library(args.library.expanduser().resolve())


# ============ Command Handlers ============

def cmd_export(args: argparse.Namespace, reporter) -> int:
    """Handle the export command."""
    from .services.finalizer import FinalizePhase
    from .services.snapshot import create_snapshot_exporter

    config = build_config(args)
    feed = build_feed(args)

    reporter.print_header("photosnap export")
    reporter.print_config({
        "Target": str(config.target_path),
        "Categories": ", ".join(c.value for c in config.enabled_categories),
        "Mode": config.mode.value,
        "Link Source": str(config.effective_base_export_path or "none"),
        "Albums": config.build_albums,
        "Delete Flat Folders": config.delete_flat_folders,
    })

    exporter = create_snapshot_exporter(config, feed, progress=reporter)
    try:
        result = exporter.run()
    except StagingNotCleanError as e:
        reporter.error(str(e))
        reporter.info("Inspect the staging folder, then remove it or pass --reset-staging.")
        return EXIT_FAILED
    except DeletionError as e:
        reporter.error(str(e))
        if e.phase != FinalizePhase.REMOVE_PREVIOUS.value:
            return EXIT_FAILED
        reporter.warning(
            f"The previous snapshot is intact. The new export is complete in "
            f"{config.staging_path} but was not promoted."
        )
        return EXIT_PREVIOUS_INTACT
    except PromotionError as e:
        reporter.error(str(e))
        reporter.error(
            f"No current snapshot exists. Move {e.staging_path} to {e.snapshot_path} "
            f"manually after inspecting it."
        )
        return EXIT_MANUAL_RECOVERY

    reporter.print_result(result)
    return EXIT_OK


def cmd_status(args: argparse.Namespace, reporter) -> int:
    """Handle the status command."""
    from .services.finalizer import TargetState, inspect_target

    layout = SnapshotLayout(args.target.expanduser().resolve())
    state = inspect_target(layout)

    match state:
        case TargetState.EMPTY:
            reporter.info(f"No export found in {layout.target_path}")
            return EXIT_OK
        case TargetState.CLEAN:
            reporter.success(f"Last export finished: {layout.snapshot_path}")
            return EXIT_OK
        case TargetState.INTERRUPTED:
            reporter.warning(
                f"Last export was interrupted. The previous snapshot is intact; "
                f"inspect {layout.staging_path}."
            )
            return EXIT_PREVIOUS_INTACT
        case TargetState.BROKEN:
            reporter.error(
                f"No current snapshot. An unfinished export is in {layout.staging_path}; "
                f"manual inspection required."
            )
            return EXIT_MANUAL_RECOVERY
    return EXIT_FAILED


def cmd_plan_show(args: argparse.Namespace, reporter) -> int:
    """Handle the plan-show command."""
    plans = load_plans(args.plan)
    for plan in plans.plans:
        plan.to_export_config()
    print(plans.to_yaml())
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    verbose = getattr(args, "verbose", False)
    quiet = getattr(args, "quiet", False)
    configure_logging(verbose=verbose, quiet=quiet)

    if quiet:
        reporter = QuietProgressReporter()
    else:
        reporter = RichProgressReporter(verbose=verbose)

    if not args.command:
        parser.print_help()
        return EXIT_OK

    try:
        if args.command == "export":
            return cmd_export(args, reporter)
        elif args.command == "status":
            return cmd_status(args, reporter)
        elif args.command == "plan-show":
            return cmd_plan_show(args, reporter)
        else:
            reporter.error(f"Unknown command: {args.command}")
            return EXIT_FAILED

    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    except PhotosnapError as e:
        reporter.error(f"Error: {e}")
        return EXIT_FAILED
    except Exception as e:
        reporter.error(f"Error: {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
