"""Armorsmith Patcher: slot taxonomy reconciliation for armor records.

This package computes and applies keyword, attach-point, body-slot and
crafting corrections so armor and clothing from any content pack conform to
a shared slot taxonomy.

Main Components:
- PatchPipeline: Phase-ordered batch orchestrator
- ArmorReconciler: Per-item patch decisions
- CraftingAdjuster: Recipe material and perk requirements
- ModelSlotPropagator: Slot mask union across shared models
- ConfigManager: Configuration management
"""

from typing import Optional

__version__ = "1.0.0"
__author__ = "Armorsmith Patcher Team"


class ArmorsmithPatcherError(Exception):
    """Base exception for all patcher errors."""


class ConfigurationError(ArmorsmithPatcherError):
    """Raised when configuration cannot be loaded or is invalid."""


class SourceLoadError(ArmorsmithPatcherError):
    """Raised when a taxonomy or override source is missing or malformed."""


class RecordStoreError(ArmorsmithPatcherError):
    """Raised when the record snapshot cannot be read or written."""


class RecordWriteError(ArmorsmithPatcherError):
    """Raised when a structural write to a record fails."""


class ItemSkipped(ArmorsmithPatcherError):
    """Raised when an item cannot be classified and is left unpatched.

    Attributes:
        reason: Human readable reason for the skip
        guessed_slot_keyword: Heuristic slot keyword, if one was inferred
    """

    def __init__(self, reason: str, guessed_slot_keyword: Optional[str] = None):
        super().__init__(reason)
        self.reason = reason
        self.guessed_slot_keyword = guessed_slot_keyword


__all__ = [
    "ArmorsmithPatcherError",
    "ConfigurationError",
    "SourceLoadError",
    "RecordStoreError",
    "RecordWriteError",
    "ItemSkipped",
    "__version__",
    "__author__",
]
