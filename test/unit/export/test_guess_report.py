"""Unit tests for the slot guess report."""

import csv

from armorsmith_patcher.export.guess_report import GuessLogger


class TestGuessLogger:
    """Guess collection and CSV output."""

    def test_nothing_written_when_empty(self, tmp_path, mock_logger):
        report = GuessLogger(tmp_path / "guesses.csv", mock_logger)
        assert report.write() is False
        assert not (tmp_path / "guesses.csv").exists()

    def test_rows_use_override_columns(self, tmp_path, mock_logger):
        path = tmp_path / "reports" / "guesses.csv"
        report = GuessLogger(path, mock_logger)
        report.record('Test.esp', 'Armor_A', '_ArmorSlotGlove_Slot34')
        report.record('Test.esp', 'Armor_B', '_ClothingSlotDevice')

        assert len(report) == 2
        assert report.write() is True

        raw = path.read_bytes()
        assert raw.startswith(b'armorEditorID,fileName,slotKeyword\r\n')
        with open(path, newline='', encoding='utf-8') as f:
            rows = list(csv.DictReader(f))
        assert rows == [
            {'armorEditorID': 'Armor_A', 'fileName': 'Test.esp', 'slotKeyword': '_ArmorSlotGlove_Slot34'},
            {'armorEditorID': 'Armor_B', 'fileName': 'Test.esp', 'slotKeyword': '_ClothingSlotDevice'},
        ]

    def test_write_failure_is_logged(self, tmp_path, mock_logger):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        report = GuessLogger(blocker / "guesses.csv", mock_logger)
        report.record('Test.esp', 'Armor_A', '_ClothingSlotDevice')

        assert report.write() is False
        mock_logger.error.assert_called_once()
