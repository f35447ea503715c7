"""Main application entry point for Armorsmith Patcher."""
import sys
import asyncio
import argparse
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from armorsmith_patcher import ArmorsmithPatcherError
from armorsmith_patcher.utils.logging_utils import setup_logging
from armorsmith_patcher.config.config_manager import ConfigManager
from armorsmith_patcher.core.pipeline import PatchPipeline, PatchSummary
from armorsmith_patcher.records.record_store import JsonRecordStore


class ArmorsmithPatcher:
    """Main application class for the Armorsmith Patcher."""

    def __init__(self, records_path: Path, config_path: Optional[Path] = None,
                 overrides_dir: Optional[Path] = None, output_dir: Optional[Path] = None,
                 log_level: Optional[str] = None):
        """Initialize the patcher application.

        Args:
            records_path: JSON snapshot of winning records
            config_path: Optional path to configuration file
            overrides_dir: Optional override directory, replacing the configured one
            output_dir: Directory for the patch file (defaults to the snapshot's directory)
            log_level: Optional log level, replacing the configured one
        """
        self.logger = setup_logging()

        try:
            self.config_manager = ConfigManager(config_path, self.logger)
            self.config = self.config_manager.config

            level = log_level or self.config.log_level
            if level != "INFO":
                self.logger = setup_logging(level=level)

            self.store = JsonRecordStore(
                records_path,
                patch_file_name=self.config.patch.patch_file_name,
                output_dir=output_dir,
                logger=self.logger,
            )

            self.pipeline = PatchPipeline.from_config(self.config_manager, self.store, self.logger)
            if overrides_dir is not None:
                self.pipeline.overrides_directory = Path(overrides_dir)

            self.logger.info("Armorsmith Patcher initialized successfully",
                             records=str(records_path),
                             patch_file_name=self.config.patch.patch_file_name)

        except Exception as e:
            self.logger.error("Failed to initialize patcher", error=str(e))
            raise

    def run(self, dry_run: bool = False) -> PatchSummary:
        """Run the patch, saving the result unless ``dry_run`` is set."""
        return asyncio.run(self.pipeline.run(save=not dry_run))


def render_summary(summary: PatchSummary, console: Optional[Console] = None) -> None:
    """Print the run summary as a table."""
    console = console or Console()

    table = Table(title="Armorsmith Patcher", show_header=True, header_style="bold cyan")
    table.add_column("Phase", style="bold")
    table.add_column("Result", justify="right")

    table.add_row("Items seen", str(summary.items_seen))
    table.add_row("Items patched", str(summary.items_patched))
    table.add_row("Items already compliant", str(summary.items_unchanged))
    table.add_row("Items ignored", str(summary.items_ineligible))
    table.add_row("Items skipped", str(summary.items_skipped))
    table.add_row("Slot guesses", str(summary.guesses))
    table.add_row("Models patched", str(summary.models_patched))
    table.add_row("Recipes patched", str(summary.recipes_patched))
    table.add_row("Patch file", str(summary.patch_path) if summary.patch_path else "not written")

    console.print(table)


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Armorsmith Patcher - reconcile armor records with the slot taxonomy")
    parser.add_argument("--records", type=Path, required=True,
                        help="JSON snapshot of winning armor, model and recipe records")
    parser.add_argument("--config", type=Path, help="Path to configuration file")
    parser.add_argument("--overrides-dir", type=Path, help="Directory of per-source override CSVs")
    parser.add_argument("--output-dir", type=Path, help="Directory for the patch file")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Log level")
    parser.add_argument("--dry-run", action="store_true", help="Compute the patch without saving it")

    args = parser.parse_args(argv)

    try:
        patcher = ArmorsmithPatcher(
            args.records,
            config_path=args.config,
            overrides_dir=args.overrides_dir,
            output_dir=args.output_dir,
            log_level=args.log_level,
        )
        summary = patcher.run(dry_run=args.dry_run)
        render_summary(summary)
        return 0

    except ArmorsmithPatcherError as e:
        print(f"Patcher error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nStopped by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
