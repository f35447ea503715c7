"""Report of items whose slot keyword had to be guessed."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional
import structlog

from armorsmith_patcher.utils.table_io import write_table


@dataclass(frozen=True)
class GuessEntry:
    """One heuristically classified item."""
    file_name: str
    armor_editor_id: str
    slot_keyword: str

    def to_row(self) -> Dict[str, str]:
        return {
            'fileName': self.file_name,
            'armorEditorID': self.armor_editor_id,
            'slotKeyword': self.slot_keyword,
        }


class GuessLogger:
    """Collects slot guesses during a run and writes them out at the end.

    The rows use the override CSV column names so they can be reviewed and
    copied into an override file.
    """

    def __init__(self, report_path: Path, logger: Optional[structlog.BoundLogger] = None):
        self.report_path = Path(report_path)
        self.logger = logger or structlog.get_logger(__name__)
        self.entries: List[GuessEntry] = []

    def __len__(self) -> int:
        return len(self.entries)

    def record(self, file_name: str, armor_editor_id: str, slot_keyword: str) -> GuessEntry:
        entry = GuessEntry(file_name, armor_editor_id, slot_keyword)
        self.entries.append(entry)
        return entry

    def write(self) -> bool:
        """Write the report if there is anything to report.

        Returns:
            True if a report was written
        """
        if not self.entries:
            return False

        self.logger.info("Saving guesses...", path=str(self.report_path), count=len(self.entries))
        try:
            write_table(self.report_path, (entry.to_row() for entry in self.entries))
        except OSError as e:
            self.logger.error("Failed to save guesses", path=str(self.report_path), error=str(e))
            return False
        return True
