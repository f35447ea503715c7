"""Reconciliation engine: item decisions, recipes and model propagation."""

from .decisions import PatchDecision, RecipeAdjustment, ModelGroup, ItemReconciliation
from .keyword_delta import KeywordDelta
from .reconciler import ArmorReconciler, ReconcileContext
from .crafting import CraftingAdjuster
from .propagation import ModelSlotPropagator
from .pipeline import PatchPipeline, PatchSummary

__all__ = [
    "PatchDecision",
    "RecipeAdjustment",
    "ModelGroup",
    "ItemReconciliation",
    "KeywordDelta",
    "ArmorReconciler",
    "ReconcileContext",
    "CraftingAdjuster",
    "ModelSlotPropagator",
    "PatchPipeline",
    "PatchSummary",
]
