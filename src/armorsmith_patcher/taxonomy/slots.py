"""Slot taxonomy and body-coverage mask conversion.

Body slots are numbered 30 to 61. Slot ``n`` occupies bit ``n - 30`` of the
32-bit body-coverage mask stored on armor and model records.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union
import structlog

from armorsmith_patcher import SourceLoadError
from armorsmith_patcher.utils.table_io import read_table

FIRST_SLOT = 30
LAST_SLOT = 61

TRUTH_MARKER = "Y"

DEFAULT_SLOT_DATA_PATH = Path(__file__).parent.parent / "data" / "slot_data.csv"

SLOT_DATA_COLUMNS = [
    "keyword",
    "identifySlots",
    "mandatorySlots",
    "allowedSlots",
    "isArmored",
    "isOutfit",
]


def slot_to_bit(slot_number: int) -> int:
    """Return the mask bit for a slot number.

    Raises:
        ValueError: If the slot number is outside 30-61
    """
    if not FIRST_SLOT <= slot_number <= LAST_SLOT:
        raise ValueError(f"Slot number {slot_number} outside {FIRST_SLOT}-{LAST_SLOT}")
    return 1 << (slot_number - FIRST_SLOT)


def slot_list_to_mask(slots: Union[str, Iterable[int]]) -> int:
    """Convert a comma-separated slot list (or iterable of slot numbers) to a mask.

    Args:
        slots: Text such as ``"30,31,46"`` or an iterable of integers

    Returns:
        Body-coverage bitmask

    Raises:
        ValueError: If a token is not a number or is outside 30-61
    """
    if isinstance(slots, str):
        tokens = [token.strip() for token in slots.split(',')]
        numbers = []
        for token in tokens:
            if not token:
                continue
            try:
                numbers.append(int(token))
            except ValueError:
                raise ValueError(f"Invalid slot number: {token!r}") from None
    else:
        numbers = list(slots)

    mask = 0
    for number in numbers:
        mask |= slot_to_bit(number)
    return mask


def mask_to_slot_list(mask: int) -> List[int]:
    """Convert a body-coverage mask to an ascending list of slot numbers."""
    return [
        slot for slot in range(FIRST_SLOT, LAST_SLOT + 1)
        if mask & slot_to_bit(slot)
    ]


def are_bits_set(value: int, mask: int) -> bool:
    """True when every bit of ``mask`` is also set in ``value``."""
    return (value & mask) == mask


@dataclass(frozen=True)
class SlotDescriptor:
    """Taxonomy entry for one slot keyword."""
    keyword: str
    identify_mask: int = 0
    mandatory_mask: int = 0
    allowed_mask: int = 0
    is_armored: bool = False
    is_outfit: bool = False

    def identifies(self, slot_mask: int) -> bool:
        """True when this descriptor's identifying slots are all present in ``slot_mask``.

        Descriptors without identifying slots never match.
        """
        return self.identify_mask != 0 and are_bits_set(slot_mask, self.identify_mask)


class SlotTaxonomy:
    """Read-only table of slot descriptors in source order."""

    def __init__(self, descriptors: Optional[Iterable[SlotDescriptor]] = None):
        self._descriptors: List[SlotDescriptor] = []
        self._by_keyword: Dict[str, SlotDescriptor] = {}
        for descriptor in descriptors or []:
            if descriptor.keyword in self._by_keyword:
                self._descriptors = [d for d in self._descriptors if d.keyword != descriptor.keyword]
            self._descriptors.append(descriptor)
            self._by_keyword[descriptor.keyword] = descriptor

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self):
        return iter(self._descriptors)

    def __contains__(self, keyword: str) -> bool:
        return keyword in self._by_keyword

    def get(self, keyword: str) -> Optional[SlotDescriptor]:
        return self._by_keyword.get(keyword)

    def is_slot_keyword(self, keyword: str) -> bool:
        return keyword in self._by_keyword

    def candidates_for(self, slot_mask: int) -> List[SlotDescriptor]:
        """Descriptors identified by ``slot_mask``, in taxonomy order."""
        return [d for d in self._descriptors if d.identifies(slot_mask)]

    @classmethod
    def load(cls, path: Optional[Path] = None, logger: Optional[structlog.BoundLogger] = None) -> "SlotTaxonomy":
        """Load the taxonomy from a slot data CSV file.

        Args:
            path: CSV path (defaults to the packaged slot data)
            logger: Structured logger

        Returns:
            Loaded taxonomy

        Raises:
            SourceLoadError: If the file is missing or malformed
        """
        logger = logger or structlog.get_logger(__name__)
        path = Path(path) if path else DEFAULT_SLOT_DATA_PATH

        try:
            rows = read_table(path, required_columns=SLOT_DATA_COLUMNS[:1])
        except (OSError, ValueError) as e:
            raise SourceLoadError(f"Couldn't load slot data from {path}: {e}") from e

        descriptors = []
        seen = set()
        for line_number, row in enumerate(rows, start=2):
            try:
                descriptor = parse_slot_row(row)
            except ValueError as e:
                raise SourceLoadError(f"{path.name} line {line_number}: {e}") from e

            if descriptor.keyword in seen:
                logger.warning("Duplicate slot keyword, later row wins",
                               keyword=descriptor.keyword, file=str(path))
            seen.add(descriptor.keyword)
            descriptors.append(descriptor)

        taxonomy = cls(descriptors)
        logger.info("Loaded slot data", file=str(path), descriptors=len(taxonomy))
        return taxonomy


def parse_slot_row(row: Dict[str, str]) -> SlotDescriptor:
    """Build a descriptor from one slot data row.

    Raises:
        ValueError: If the keyword is missing or a slot list is invalid
    """
    keyword = row.get("keyword")
    if not keyword:
        raise ValueError("row has no keyword")

    return SlotDescriptor(
        keyword=keyword,
        identify_mask=slot_list_to_mask(row.get("identifySlots", "")),
        mandatory_mask=slot_list_to_mask(row.get("mandatorySlots", "")),
        allowed_mask=slot_list_to_mask(row.get("allowedSlots", "")),
        is_armored=row.get("isArmored") == TRUTH_MARKER,
        is_outfit=row.get("isOutfit") == TRUTH_MARKER,
    )
