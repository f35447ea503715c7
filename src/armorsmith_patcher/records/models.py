"""Record types handled by the patcher.

Records mirror the subset of plugin fields the patcher reads and writes.
Optional fields use ``None`` for "element not present on the record", which
is distinct from an empty value (an empty keyword list still means the
keyword element exists).

Mutation methods are idempotent: adding something already present or
removing something absent is a no-op.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from armorsmith_patcher import RecordWriteError

HUMAN_RACE = "HumanRace"
HAS_PERK = "HasPerk"
EQUAL_TO = "10000000"
RUN_ON_SUBJECT = "Subject"


@dataclass
class ArmorRecord:
    """Armor or clothing item."""
    form_id: str
    editor_id: str
    source_file: str
    name: Optional[str] = None
    playable: bool = True
    race: Optional[str] = None
    keywords: Optional[List[str]] = None
    attach_points: Optional[List[str]] = None
    slot_mask: Optional[int] = None
    armor_rating: Optional[int] = None
    naming_rules: Optional[str] = None
    models: List[str] = field(default_factory=list)
    object_template: Optional[List[Dict[str, Any]]] = None

    @property
    def long_name(self) -> str:
        return f"{self.editor_id} \"{self.name or ''}\" [ARMO:{self.form_id}]"

    @property
    def current_slot_mask(self) -> int:
        return self.slot_mask or 0

    def has_keyword(self, keyword: str) -> bool:
        return keyword in (self.keywords or [])

    def has_object_template(self) -> bool:
        """True when the item has an object template with at least one combination."""
        return bool(self.object_template)

    def add_keyword(self, keyword: str) -> None:
        if self.keywords is None:
            self.keywords = []
        if keyword not in self.keywords:
            self.keywords.append(keyword)

    def remove_keyword(self, keyword: str) -> None:
        if self.keywords and keyword in self.keywords:
            self.keywords.remove(keyword)

    def add_attach_point(self, attach_point: str) -> None:
        if self.attach_points is None:
            self.attach_points = []
        if attach_point not in self.attach_points:
            self.attach_points.append(attach_point)

    def remove_attach_point(self, attach_point: str) -> None:
        if self.attach_points and attach_point in self.attach_points:
            self.attach_points.remove(attach_point)

    def set_slot_mask(self, slot_mask: int) -> None:
        """Set the body-coverage mask; zero removes the element entirely."""
        self.slot_mask = slot_mask if slot_mask != 0 else None

    def add_default_object_template(self) -> None:
        """Add one inert combination so instance naming rules apply.

        Raises:
            RecordWriteError: If the template element cannot take combinations
        """
        if self.object_template is None:
            self.object_template = []
        if not isinstance(self.object_template, list):
            raise RecordWriteError(f"Failed to add array item to object template of {self.editor_id}")
        if not self.object_template:
            self.object_template.append({"addon_index": -1, "default": True})


@dataclass
class ModelRecord:
    """Shared visual model (armor addon) referenced by armor records."""
    form_id: str
    editor_id: str
    slot_mask: Optional[int] = None

    @property
    def long_name(self) -> str:
        return f"{self.editor_id} [ARMA:{self.form_id}]"

    @property
    def current_slot_mask(self) -> int:
        return self.slot_mask or 0


@dataclass
class Component:
    """Crafting component and its required count."""
    component: str
    count: int = 1


@dataclass
class Condition:
    """Recipe condition. Only ``HasPerk`` conditions are interpreted."""
    function: str
    parameter: Optional[str] = None
    comparison: str = EQUAL_TO
    value: float = 1
    run_on: str = RUN_ON_SUBJECT

    @property
    def is_perk_check(self) -> bool:
        return self.function == HAS_PERK


@dataclass
class RecipeRecord:
    """Constructible object recipe."""
    form_id: str
    editor_id: str
    created_object: Optional[str] = None
    components: Optional[List[Component]] = None
    conditions: Optional[List[Condition]] = None
    created_object_count: Optional[int] = None

    @property
    def long_name(self) -> str:
        return f"{self.editor_id} [COBJ:{self.form_id}]"

    def get_component(self, component: str) -> Optional[Component]:
        for entry in self.components or []:
            if entry.component == component:
                return entry
        return None

    def perk_conditions(self) -> List[Condition]:
        return [c for c in self.conditions or [] if c.is_perk_check]

    def set_component_count(self, component: str, count: int) -> None:
        entry = self.get_component(component)
        if entry is None:
            if self.components is None:
                self.components = []
            entry = Component(component=component)
            self.components.append(entry)
        entry.count = count

    def remove_perk_conditions(self, perks) -> None:
        if not self.conditions:
            return
        self.conditions = [
            c for c in self.conditions
            if not (c.is_perk_check and c.parameter in perks)
        ]

    def add_perk_condition(self, perk: str) -> Condition:
        condition = Condition(function=HAS_PERK, parameter=perk)
        if self.conditions is None:
            self.conditions = []
        self.conditions.append(condition)
        return condition
