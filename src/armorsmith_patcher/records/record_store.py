"""Record stores supplying winning record state and persisting edits."""

import json
from abc import ABC, abstractmethod
from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Union
import structlog

from armorsmith_patcher import RecordStoreError
from armorsmith_patcher.records.models import (
    ArmorRecord,
    Component,
    Condition,
    ModelRecord,
    RecipeRecord,
)

Record = Union[ArmorRecord, ModelRecord, RecipeRecord]


class RecordStore(ABC):
    """Host collaborator contract.

    Stores hand out the winning override of every record and keep track of
    which records were edited so only those end up in the patch.
    """

    def __init__(self):
        self._modified: Dict[str, Record] = {}

    @abstractmethod
    def armors(self) -> Iterator[ArmorRecord]:
        """Iterate winning armor records."""

    @abstractmethod
    def recipes(self) -> Iterator[RecipeRecord]:
        """Iterate winning recipe records."""

    @abstractmethod
    def get_model(self, form_id: str) -> Optional[ModelRecord]:
        """Resolve a model reference."""

    @abstractmethod
    def save(self) -> Optional[Path]:
        """Persist modified records, returning the written location if any."""

    def mark_modified(self, record: Record) -> None:
        self._modified[record.form_id] = record

    def modified_records(self) -> List[Record]:
        return list(self._modified.values())


class JsonRecordStore(RecordStore):
    """Record store backed by a JSON snapshot of winning records.

    The snapshot has ``armors``, ``models`` and ``recipes`` arrays. Saving
    writes the modified records, in the same format, to ``patch_file_name``
    inside ``output_dir``.
    """

    def __init__(self, snapshot_path: Path, patch_file_name: str = "zPatch.esp",
                 output_dir: Optional[Path] = None,
                 logger: Optional[structlog.BoundLogger] = None):
        """Initialize the store.

        Args:
            snapshot_path: JSON snapshot to read
            patch_file_name: Name of the patch artifact written by ``save``
            output_dir: Directory for the patch (defaults to the snapshot's directory)
            logger: Structured logger

        Raises:
            RecordStoreError: If the snapshot cannot be read or is not a JSON object
        """
        super().__init__()
        self.logger = logger or structlog.get_logger(__name__)
        self.snapshot_path = Path(snapshot_path)
        self.patch_file_name = patch_file_name
        self.output_dir = Path(output_dir) if output_dir else self.snapshot_path.parent

        data = self._load_snapshot()

        self._armors = self._parse_records(data, 'armors', armor_from_dict)
        self._models = {m.form_id: m for m in self._parse_records(data, 'models', model_from_dict)}
        self._recipes = self._parse_records(data, 'recipes', recipe_from_dict)

        self.logger.info("Record snapshot loaded",
                         snapshot=str(self.snapshot_path),
                         armors=len(self._armors),
                         models=len(self._models),
                         recipes=len(self._recipes))

    def _load_snapshot(self) -> Dict[str, Any]:
        try:
            with open(self.snapshot_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RecordStoreError(f"Couldn't read record snapshot {self.snapshot_path}: {e}") from e

        if not isinstance(data, dict):
            raise RecordStoreError(f"Record snapshot {self.snapshot_path} must be a JSON object")
        return data

    def _parse_records(self, data: Dict[str, Any], section: str,
                       parse: Callable[[Dict[str, Any]], Record]) -> List[Any]:
        """Parse one snapshot section, dropping entries that are malformed.

        Raises:
            RecordStoreError: If the section is not an array
        """
        entries = data.get(section) or []
        if not isinstance(entries, list):
            raise RecordStoreError(f"'{section}' in {self.snapshot_path.name} must be an array")

        records = []
        for entry in entries:
            try:
                records.append(parse(entry))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                fields = entry if isinstance(entry, dict) else {}
                self.logger.warning("Dropping malformed record", section=section,
                                    form_id=fields.get('form_id'), editor_id=fields.get('editor_id'),
                                    error=repr(e))
        return records

    def armors(self) -> Iterator[ArmorRecord]:
        return iter(self._armors)

    def recipes(self) -> Iterator[RecipeRecord]:
        return iter(self._recipes)

    def get_model(self, form_id: str) -> Optional[ModelRecord]:
        return self._models.get(form_id)

    @property
    def patch_path(self) -> Path:
        return self.output_dir / self.patch_file_name

    def save(self) -> Optional[Path]:
        """Write modified records to the patch file.

        Raises:
            RecordStoreError: If the patch cannot be written
        """
        modified = self.modified_records()
        patch = {
            'armors': [asdict(r) for r in modified if isinstance(r, ArmorRecord)],
            'models': [asdict(r) for r in modified if isinstance(r, ModelRecord)],
            'recipes': [asdict(r) for r in modified if isinstance(r, RecipeRecord)],
        }

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with open(self.patch_path, 'w', encoding='utf-8') as f:
                json.dump(patch, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise RecordStoreError(f"Couldn't write patch {self.patch_path}: {e}") from e

        self.logger.info("Patch saved", path=str(self.patch_path), records=len(modified))
        return self.patch_path


def _optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def _required_str(data: Dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return value


def _optional_list(data: Dict[str, Any], key: str) -> Optional[list]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise TypeError(f"{key} must be an array, got {value!r}")
    return list(value)


def armor_from_dict(data: Dict[str, Any]) -> ArmorRecord:
    return ArmorRecord(
        form_id=str(data['form_id']),
        editor_id=_required_str(data, 'editor_id'),
        source_file=_required_str(data, 'source_file'),
        name=data.get('name'),
        playable=data.get('playable', True),
        race=data.get('race'),
        keywords=_optional_list(data, 'keywords'),
        attach_points=_optional_list(data, 'attach_points'),
        slot_mask=_optional_int(data.get('slot_mask')),
        armor_rating=_optional_int(data.get('armor_rating')),
        naming_rules=data.get('naming_rules'),
        models=[str(m) for m in _optional_list(data, 'models') or []],
        object_template=data.get('object_template'),
    )


def model_from_dict(data: Dict[str, Any]) -> ModelRecord:
    return ModelRecord(
        form_id=str(data['form_id']),
        editor_id=data['editor_id'],
        slot_mask=_optional_int(data.get('slot_mask')),
    )


def recipe_from_dict(data: Dict[str, Any]) -> RecipeRecord:
    components = data.get('components')
    conditions = data.get('conditions')
    created_object = data.get('created_object')
    return RecipeRecord(
        form_id=str(data['form_id']),
        editor_id=data['editor_id'],
        created_object=str(created_object) if created_object is not None else None,
        components=[Component(**c) for c in components] if components is not None else None,
        conditions=[Condition(**c) for c in conditions] if conditions is not None else None,
        created_object_count=_optional_int(data.get('created_object_count')),
    )
