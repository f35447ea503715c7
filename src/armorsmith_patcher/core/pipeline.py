"""Phase-ordered patch run.

Phases run strictly in order:

1. Load the slot taxonomy and override sources (concurrently)
2. Decide and apply per-item patches, indexing patched items
3. Propagate unioned slot masks to shared models
4. Adjust recipes that produce patched items
5. Write the guess report and save the patch
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional
import structlog

from armorsmith_patcher import ItemSkipped, SourceLoadError
from armorsmith_patcher.config.config_manager import ConfigManager
from armorsmith_patcher.core.crafting import CraftingAdjuster
from armorsmith_patcher.core.propagation import ModelSlotPropagator
from armorsmith_patcher.core.reconciler import ArmorReconciler, ReconcileContext, ineligibility_reason
from armorsmith_patcher.export.guess_report import GuessLogger
from armorsmith_patcher.records.models import ArmorRecord
from armorsmith_patcher.records.record_store import RecordStore
from armorsmith_patcher.taxonomy.overrides import OverrideTable
from armorsmith_patcher.taxonomy.slots import SlotTaxonomy


@dataclass
class PatchSummary:
    """Counts from one patch run."""
    items_seen: int = 0
    items_ineligible: int = 0
    items_skipped: int = 0
    items_unchanged: int = 0
    items_patched: int = 0
    guesses: int = 0
    models_patched: int = 0
    recipes_patched: int = 0
    patch_path: Optional[Path] = None


class PatchPipeline:
    """Runs every patch phase against a record store."""

    def __init__(self, store: RecordStore,
                 overrides_directory: Path,
                 guesses_path: Path,
                 slot_data_path: Optional[Path] = None,
                 ballistic_weave_only_for_clothes: bool = True,
                 logger: Optional[structlog.BoundLogger] = None):
        """Initialize the pipeline.

        Args:
            store: Host record store
            overrides_directory: Directory holding per-source override CSVs
            guesses_path: Where the guess report is written
            slot_data_path: Slot taxonomy CSV (packaged default when None)
            ballistic_weave_only_for_clothes: Strip ballistic weave from armor pieces
            logger: Structured logger
        """
        self.store = store
        self.overrides_directory = Path(overrides_directory)
        self.slot_data_path = slot_data_path
        self.ballistic_weave_only_for_clothes = ballistic_weave_only_for_clothes
        self.logger = logger or structlog.get_logger(__name__)

        self.guess_logger = GuessLogger(guesses_path, self.logger)
        self.propagator = ModelSlotPropagator(self.logger)
        self.crafting = CraftingAdjuster(self.logger)
        self.summary = PatchSummary()

    @classmethod
    def from_config(cls, config_manager: ConfigManager, store: RecordStore,
                    logger: Optional[structlog.BoundLogger] = None) -> "PatchPipeline":
        config = config_manager.config
        return cls(
            store,
            overrides_directory=config_manager.get_overrides_directory(),
            guesses_path=config_manager.get_guesses_path(),
            slot_data_path=config_manager.get_slot_data_path(),
            ballistic_weave_only_for_clothes=config.patch.ballistic_weave_only_for_clothes,
            logger=logger,
        )

    async def load_context(self) -> ReconcileContext:
        """Load taxonomy and overrides; source failures leave empty tables."""
        taxonomy_result, overrides = await asyncio.gather(
            asyncio.to_thread(SlotTaxonomy.load, self.slot_data_path, self.logger),
            OverrideTable.load_directory(self.overrides_directory, self.logger),
            return_exceptions=True
        )

        if isinstance(taxonomy_result, SourceLoadError):
            self.logger.error("Slot data unavailable, every item will be skipped", error=str(taxonomy_result))
            taxonomy_result = SlotTaxonomy()
        elif isinstance(taxonomy_result, BaseException):
            raise taxonomy_result

        if isinstance(overrides, BaseException):
            raise overrides

        return ReconcileContext(
            taxonomy=taxonomy_result,
            overrides=overrides,
            ballistic_weave_only_for_clothes=self.ballistic_weave_only_for_clothes,
        )

    def patch_items(self, context: ReconcileContext) -> Dict[str, ArmorRecord]:
        """Decide and apply item patches.

        Returns:
            Patched items keyed by form ID
        """
        reconciler = ArmorReconciler(context, self.logger)
        patched: Dict[str, ArmorRecord] = {}

        for armor in self.store.armors():
            self.summary.items_seen += 1

            reason = ineligibility_reason(armor)
            if reason is not None:
                self.summary.items_ineligible += 1
                self.logger.debug("Ignoring record", record=armor.long_name, reason=reason)
                continue

            try:
                outcome = reconciler.decide(armor)
            except ItemSkipped as e:
                self.summary.items_skipped += 1
                if e.guessed_slot_keyword is not None:
                    self.guess_logger.record(armor.source_file, armor.editor_id, e.guessed_slot_keyword)
                    self.logger.warning("Skipping item", record=armor.long_name,
                                        source_file=armor.source_file, reason=e.reason)
                else:
                    self.logger.error("Skipping item", record=armor.long_name,
                                      source_file=armor.source_file, reason=e.reason)
                continue

            self.propagator.record(armor.models, outcome.target_slot_mask)

            if not outcome.decision.has_changes:
                self.summary.items_unchanged += 1
                continue

            reconciler.apply(armor, outcome.decision)
            self.store.mark_modified(armor)
            patched[armor.form_id] = armor

        self.summary.items_patched = len(patched)
        self.summary.guesses = len(self.guess_logger)
        self.logger.info("Item phase complete",
                         seen=self.summary.items_seen,
                         patched=self.summary.items_patched,
                         unchanged=self.summary.items_unchanged,
                         skipped=self.summary.items_skipped)
        return patched

    def propagate_models(self) -> int:
        self.summary.models_patched = self.propagator.apply(self.store)
        return self.summary.models_patched

    def patch_recipes(self, patched_items: Dict[str, ArmorRecord]) -> int:
        """Adjust recipes whose created object was patched this run."""
        count = 0
        for recipe in self.store.recipes():
            if recipe.created_object is None:
                self.logger.info("Skipping recipe because it doesn't create anything",
                                 record=recipe.long_name)
                continue

            armor = patched_items.get(recipe.created_object)
            if armor is None:
                continue

            adjustment = self.crafting.decide(recipe, armor)
            if not adjustment.has_changes:
                continue

            self.crafting.apply(recipe, adjustment)
            self.store.mark_modified(recipe)
            count += 1

        self.summary.recipes_patched = count
        self.logger.info("Recipe phase complete", patched=count)
        return count

    async def run(self, save: bool = True) -> PatchSummary:
        """Run every phase and return the run summary."""
        context = await self.load_context()

        patched_items = self.patch_items(context)
        self.propagate_models()
        self.patch_recipes(patched_items)

        self.guess_logger.write()

        if save:
            self.summary.patch_path = self.store.save()

        return self.summary
