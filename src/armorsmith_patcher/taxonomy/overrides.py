"""Per-item override tables.

Each content source may ship a ``<source file>.csv`` (for example
``Fallout4.esm.csv``) in the overrides directory. Rows are keyed by the
armor editor ID and take precedence over anything derived from the record.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional
import structlog

from armorsmith_patcher import SourceLoadError
from armorsmith_patcher.taxonomy.slots import TRUTH_MARKER, slot_list_to_mask
from armorsmith_patcher.utils.table_io import read_table

OVERRIDE_COLUMNS = [
    "armorEditorID",
    "slotKeyword",
    "classKeyword",
    "slotMask",
    "addsCarryWeight",
    "isHighTech",
]

# Optional column that replaces the display name
NAME_COLUMN = "name"


@dataclass(frozen=True)
class OverrideRecord:
    """Authoritative corrections for one armor record. ``None`` means "derive"."""
    armor_editor_id: str
    slot_keyword: Optional[str] = None
    class_keyword: Optional[str] = None
    slot_mask: Optional[int] = None
    adds_carry_weight: Optional[bool] = None
    is_high_tech: Optional[bool] = None
    name: Optional[str] = None


EMPTY_OVERRIDE = OverrideRecord(armor_editor_id="")


def _parse_flag(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value == TRUTH_MARKER


def parse_override_row(row: Dict[str, str]) -> OverrideRecord:
    """Build an override from one CSV row.

    Raises:
        ValueError: If the editor ID is missing or the slot mask is invalid
    """
    editor_id = row.get("armorEditorID")
    if not editor_id:
        raise ValueError("row has no armorEditorID")

    slot_mask = row.get("slotMask")

    return OverrideRecord(
        armor_editor_id=editor_id,
        slot_keyword=row.get("slotKeyword"),
        class_keyword=row.get("classKeyword"),
        slot_mask=slot_list_to_mask(slot_mask) if slot_mask is not None else None,
        adds_carry_weight=_parse_flag(row.get("addsCarryWeight")),
        is_high_tech=_parse_flag(row.get("isHighTech")),
        name=row.get(NAME_COLUMN),
    )


def load_override_file(path: Path) -> Dict[str, OverrideRecord]:
    """Load one override CSV keyed by editor ID.

    Raises:
        SourceLoadError: If the file is missing or malformed
    """
    try:
        rows = read_table(path, required_columns=OVERRIDE_COLUMNS[:1])
    except (OSError, ValueError) as e:
        raise SourceLoadError(f"Couldn't load {path.name}: {e}") from e

    records = {}
    for line_number, row in enumerate(rows, start=2):
        try:
            record = parse_override_row(row)
        except ValueError as e:
            raise SourceLoadError(f"{path.name} line {line_number}: {e}") from e
        records[record.armor_editor_id] = record
    return records


class OverrideTable:
    """Override records keyed by (source file, editor ID)."""

    def __init__(self, sources: Optional[Dict[str, Dict[str, OverrideRecord]]] = None):
        self._sources: Dict[str, Dict[str, OverrideRecord]] = dict(sources or {})

    @property
    def source_names(self) -> List[str]:
        return sorted(self._sources)

    def __len__(self) -> int:
        return sum(len(records) for records in self._sources.values())

    def lookup(self, source_file: str, editor_id: str) -> OverrideRecord:
        """Return the override for an item, or an empty override when none exists."""
        return self._sources.get(source_file, {}).get(editor_id, EMPTY_OVERRIDE)

    @classmethod
    async def load_directory(cls, directory: Path,
                             logger: Optional[structlog.BoundLogger] = None) -> "OverrideTable":
        """Load every ``*.csv`` override source in ``directory`` concurrently.

        A source that fails to load is logged and left out; the other
        sources are still used.
        """
        logger = logger or structlog.get_logger(__name__)
        directory = Path(directory)

        if not directory.is_dir():
            logger.warning("Override directory not found, no overrides loaded",
                           directory=str(directory))
            return cls()

        paths = sorted(directory.glob("*.csv"))
        for path in paths:
            logger.info("Loading override data", source=path.stem, file=path.name)

        results = await asyncio.gather(
            *(asyncio.to_thread(load_override_file, path) for path in paths),
            return_exceptions=True
        )

        sources = {}
        for path, result in zip(paths, results):
            if isinstance(result, SourceLoadError):
                logger.warning("Override source unavailable", source=path.stem, error=str(result))
                continue
            if isinstance(result, BaseException):
                raise result
            sources[path.stem] = result

        table = cls(sources)
        logger.info("Override data loaded", sources=len(sources), records=len(table))
        return table
