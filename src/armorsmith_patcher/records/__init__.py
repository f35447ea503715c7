"""Record types and the stores that host them."""

from .models import ArmorRecord, ModelRecord, RecipeRecord, Component, Condition
from .record_store import RecordStore, JsonRecordStore

__all__ = [
    "ArmorRecord",
    "ModelRecord",
    "RecipeRecord",
    "Component",
    "Condition",
    "RecordStore",
    "JsonRecordStore",
]
