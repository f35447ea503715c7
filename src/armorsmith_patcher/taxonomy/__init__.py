"""Slot taxonomy and per-item override tables."""

from .slots import SlotDescriptor, SlotTaxonomy, slot_list_to_mask, mask_to_slot_list
from .overrides import OverrideRecord, OverrideTable

__all__ = [
    "SlotDescriptor",
    "SlotTaxonomy",
    "slot_list_to_mask",
    "mask_to_slot_list",
    "OverrideRecord",
    "OverrideTable",
]
