"""Slot mask propagation to shared model records.

A model may be referenced by several armor records, so it has to cover
every slot any of them occupies. Masks are collected while items are
reconciled and written only once every item has been seen.
"""

from typing import Dict, Iterable, List, Optional
import structlog

from armorsmith_patcher.core.decisions import ModelGroup
from armorsmith_patcher.records.models import ModelRecord
from armorsmith_patcher.records.record_store import RecordStore
from armorsmith_patcher.taxonomy.slots import are_bits_set


class ModelSlotPropagator:
    """Accumulates and applies unioned slot masks per shared model."""

    def __init__(self, logger: Optional[structlog.BoundLogger] = None):
        self.logger = logger or structlog.get_logger(__name__)
        self.groups: Dict[str, ModelGroup] = {}

    def record(self, model_ids: Iterable[str], target_slot_mask: int) -> None:
        """Add one item's target mask to every model it references."""
        for model_id in model_ids:
            group = self.groups.get(model_id)
            if group is None:
                group = self.groups[model_id] = ModelGroup(model_id=model_id)
            group.add(target_slot_mask)

    def pending(self, store: RecordStore) -> List[ModelRecord]:
        """Models whose stored mask does not yet contain the accumulated union."""
        models = []
        for model_id, group in self.groups.items():
            model = store.get_model(model_id)
            if model is None:
                self.logger.warning("Model reference does not resolve", model_id=model_id)
                continue
            if not are_bits_set(model.current_slot_mask, group.unioned_slot_mask):
                models.append(model)
        return models

    def apply(self, store: RecordStore) -> int:
        """Write unioned masks to every model that needs them.

        Returns:
            Number of models patched
        """
        patched = 0
        for model in self.pending(store):
            union = self.groups[model.form_id].unioned_slot_mask
            self.logger.info("Processing", record=model.long_name)
            model.slot_mask = union
            store.mark_modified(model)
            patched += 1

        self.logger.info("Model slot propagation complete",
                         models_seen=len(self.groups), models_patched=patched)
        return patched
