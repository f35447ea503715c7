"""Sparse change records produced by the decide phases."""

from dataclasses import dataclass, field
from typing import List, Optional, Set


@dataclass
class PatchDecision:
    """Fields of one armor record that differ from the target state."""
    name: Optional[str] = None
    slot_mask: Optional[int] = None
    added_keywords: Set[str] = field(default_factory=set)
    removed_keywords: Set[str] = field(default_factory=set)
    added_attach_points: Set[str] = field(default_factory=set)
    removed_attach_points: Set[str] = field(default_factory=set)
    naming_rules: Optional[str] = None
    add_object_template: bool = False

    @property
    def has_changes(self) -> bool:
        return any([
            self.name is not None,
            self.slot_mask is not None,
            self.added_keywords,
            self.removed_keywords,
            self.added_attach_points,
            self.removed_attach_points,
            self.naming_rules is not None,
            self.add_object_template,
        ])


@dataclass
class ItemReconciliation:
    """Outcome of reconciling one classified item."""
    slot_keyword: str
    class_keyword: Optional[str]
    target_slot_mask: int
    decision: PatchDecision


@dataclass
class ModelGroup:
    """Union of target slot masks across items sharing one model."""
    model_id: str
    unioned_slot_mask: int = 0

    def add(self, slot_mask: int) -> None:
        self.unioned_slot_mask |= slot_mask


@dataclass
class RecipeAdjustment:
    """Changes to one recipe derived from the produced item's armor rating."""
    material_count: Optional[int] = None
    added_perks: List[str] = field(default_factory=list)
    removed_perks: Set[str] = field(default_factory=set)
    ensure_produces_one: bool = False

    @property
    def has_changes(self) -> bool:
        return (self.material_count is not None
                or bool(self.added_perks)
                or bool(self.removed_perks)
                or self.ensure_produces_one)
