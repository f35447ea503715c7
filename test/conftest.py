"""Pytest configuration and shared fixtures for Armorsmith Patcher tests."""

import json
import pytest
import sys
from pathlib import Path
from unittest.mock import Mock

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from armorsmith_patcher.records.models import ArmorRecord
from armorsmith_patcher.taxonomy.slots import SlotDescriptor, SlotTaxonomy, slot_list_to_mask


@pytest.fixture
def mock_logger():
    """Create a mock logger for unit tests."""
    return Mock()


@pytest.fixture
def test_data_path():
    """Path to test data directory."""
    return Path(__file__).parent / "test_data"


@pytest.fixture
def taxonomy():
    """Small slot taxonomy covering armor, clothing and outfit slots."""
    return SlotTaxonomy([
        SlotDescriptor("_ArmorSlotHelmet_Slot30", slot_list_to_mask("30"), slot_list_to_mask("30"),
                       slot_list_to_mask("30,31,46,47"), is_armored=True),
        SlotDescriptor("_ArmorSlotTorso_Slot41", slot_list_to_mask("41"), slot_list_to_mask("41"),
                       slot_list_to_mask("36,41"), is_armored=True),
        SlotDescriptor("_ArmorSlotGlove_Slot34", slot_list_to_mask("34"), slot_list_to_mask("34"),
                       slot_list_to_mask("34,35"), is_armored=True),
        SlotDescriptor("_ClothingSlotGlove_Slot34", slot_list_to_mask("34"), slot_list_to_mask("34"),
                       slot_list_to_mask("34,35")),
        SlotDescriptor("_ClothesTypeUnderarmor_Slot33", slot_list_to_mask("33"), slot_list_to_mask("33"),
                       slot_list_to_mask("33,36,37,38,39,40"), is_outfit=True),
        SlotDescriptor("_ClothingSlotHat_Slot46", slot_list_to_mask("46"), slot_list_to_mask("46"),
                       slot_list_to_mask("30,46")),
        SlotDescriptor("_ClothingSlotBackpack_Slot54", slot_list_to_mask("54"), slot_list_to_mask("54"),
                       slot_list_to_mask("54")),
        SlotDescriptor("_ClothingSlotDevice", 0, 0, slot_list_to_mask("54,60")),
    ])


@pytest.fixture
def make_armor():
    """Factory for eligible armor records with sensible defaults."""
    def _make_armor(**overrides):
        values = {
            'form_id': '00001000',
            'editor_id': 'Armor_Test',
            'source_file': 'Test.esp',
            'name': 'Test Armor',
            'race': 'HumanRace',
            'keywords': [],
            'attach_points': [],
            'slot_mask': None,
            'armor_rating': 0,
            'naming_rules': None,
            'object_template': [{'addon_index': -1, 'default': True}],
        }
        values.update(overrides)
        return ArmorRecord(**values)
    return _make_armor


@pytest.fixture
def write_snapshot(tmp_path):
    """Write a JSON record snapshot and return its path."""
    def _write_snapshot(armors=(), models=(), recipes=(), name="records.json"):
        path = tmp_path / name
        with open(path, 'w', encoding='utf-8') as f:
            json.dump({'armors': list(armors), 'models': list(models), 'recipes': list(recipes)}, f)
        return path
    return _write_snapshot


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


def pytest_collection_modifyitems(config, items):
    """Add markers based on file location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def suppress_logging():
    """Suppress logging during tests unless explicitly needed."""
    import logging
    logging.getLogger().setLevel(logging.WARNING)
    logging.getLogger('armorsmith_patcher').setLevel(logging.WARNING)
