"""Per-item reconciliation of armor records against the slot taxonomy."""

from dataclasses import dataclass, field
from typing import List, Optional
import structlog

from armorsmith_patcher import ItemSkipped, RecordWriteError
from armorsmith_patcher.core import rules
from armorsmith_patcher.core.decisions import ItemReconciliation, PatchDecision
from armorsmith_patcher.core.keyword_delta import KeywordDelta
from armorsmith_patcher.records.models import HUMAN_RACE, ArmorRecord
from armorsmith_patcher.taxonomy.overrides import OverrideTable
from armorsmith_patcher.taxonomy.slots import SlotDescriptor, SlotTaxonomy, mask_to_slot_list


@dataclass(frozen=True)
class ReconcileContext:
    """Read-only tables and settings shared by every item decision."""
    taxonomy: SlotTaxonomy
    overrides: OverrideTable = field(default_factory=OverrideTable)
    ballistic_weave_only_for_clothes: bool = True


def guess_slot_keyword(taxonomy: SlotTaxonomy, slot_mask: Optional[int], is_armored: bool) -> str:
    """Infer a slot keyword from the body-coverage mask alone.

    Candidates are the descriptors whose identifying slots are all covered,
    in taxonomy order. The first candidate whose armored flag matches the
    item wins, then the first candidate, then the generic device keyword.
    """
    if slot_mask is None:
        return rules.DEVICE_SLOT_KEYWORD

    shortlist = taxonomy.candidates_for(slot_mask)
    for descriptor in shortlist:
        if descriptor.is_armored == is_armored:
            return descriptor.keyword
    if shortlist:
        return shortlist[0].keyword
    return rules.DEVICE_SLOT_KEYWORD


def resolve_slot_mask(current: int, descriptor: SlotDescriptor, override: Optional[int] = None) -> int:
    """Target body-coverage mask for an item."""
    if override is not None:
        return override
    return (current & descriptor.allowed_mask) | descriptor.mandatory_mask


def select_naming_rule(slot_keyword: str, class_keyword: Optional[str]) -> str:
    """Instance naming rules for a slot/class classification."""
    if rules.is_vault_suit(slot_keyword, class_keyword):
        return rules.NAMING_VAULT_SUIT
    if rules.is_armor(slot_keyword):
        # Helmets share the clothes naming rules
        if rules.is_helmet(slot_keyword):
            return rules.NAMING_CLOTHES
        return rules.NAMING_COMMON_ARMOR
    return rules.NAMING_CLOTHES


def ineligibility_reason(armor: ArmorRecord) -> Optional[str]:
    """Why an armor record is not a patch candidate, or ``None`` if it is."""
    if not armor.playable:
        return "non-playable"
    if not armor.name:
        return "no display name"
    if armor.race != HUMAN_RACE:
        return f"race is {armor.race}"
    if armor.has_keyword(rules.POWER_ARMOR_KEYWORD):
        return "power armor"
    if armor.editor_id in rules.BLACKLIST:
        return "blacklisted"
    return None


def malformed_reason(armor: ArmorRecord) -> Optional[str]:
    """Why an armor record's base fields cannot be reconciled, or ``None``."""
    if not isinstance(armor.editor_id, str) or not isinstance(armor.source_file, str):
        return "editor id and source file must be strings"
    for name in ("keywords", "attach_points"):
        values = getattr(armor, name)
        if values is not None and not (isinstance(values, list) and all(isinstance(v, str) for v in values)):
            return f"{name} must be a list of strings"
    for name in ("slot_mask", "armor_rating"):
        value = getattr(armor, name)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            return f"{name} must be an integer"
    if not isinstance(armor.models, list) or not all(isinstance(m, str) for m in armor.models):
        return "models must be a list of form ids"
    return None


class ArmorReconciler:
    """Computes and applies patch decisions for armor records."""

    def __init__(self, context: ReconcileContext, logger: Optional[structlog.BoundLogger] = None):
        self.context = context
        self.logger = logger or structlog.get_logger(__name__)

    def decide(self, armor: ArmorRecord) -> ItemReconciliation:
        """Compute the patch decision for one item.

        Raises:
            ItemSkipped: If the record is malformed, or the slot keyword cannot be
                resolved or has no taxonomy entry
        """
        reason = malformed_reason(armor)
        if reason is not None:
            raise ItemSkipped(f"malformed record: {reason}")

        taxonomy = self.context.taxonomy
        override = self.context.overrides.lookup(armor.source_file, armor.editor_id)

        present_keywords = armor.keywords or []
        keywords = KeywordDelta(present_keywords)
        attach_points = KeywordDelta(armor.attach_points or [])

        slot_keywords: List[str] = []
        class_keywords: List[str] = []
        for keyword in present_keywords:
            if rules.is_class_keyword(keyword):
                class_keywords.append(keyword)
            if taxonomy.is_slot_keyword(keyword):
                slot_keywords.append(keyword)

        slot_keyword = override.slot_keyword or (slot_keywords[0] if slot_keywords else None)
        if slot_keyword is None:
            guess = guess_slot_keyword(
                taxonomy, armor.slot_mask, (armor.armor_rating or 0) > 0
            )
            raise ItemSkipped(f"no slot keyword, but it could be {guess}", guessed_slot_keyword=guess)

        class_keyword = override.class_keyword or (class_keywords[0] if class_keywords else None)

        descriptor = taxonomy.get(slot_keyword)
        if descriptor is None:
            raise ItemSkipped(f"no slot data for {slot_keyword}")

        decision = PatchDecision()

        if override.name is not None and override.name != armor.name:
            decision.name = override.name

        current_mask = armor.current_slot_mask
        target_mask = resolve_slot_mask(current_mask, descriptor, override.slot_mask)
        if target_mask != current_mask:
            decision.slot_mask = target_mask

        keywords.apply_exclusive(slot_keyword, slot_keywords)
        if class_keyword:
            keywords.apply_exclusive(class_keyword, class_keywords)

        keywords.remove(rules.FORBIDDEN_KEYWORDS)
        attach_points.remove(rules.FORBIDDEN_ATTACH_POINTS)

        attach_points.ensure(rules.GLOBAL_ATTACH_POINTS)

        naming_rules = select_naming_rule(slot_keyword, class_keyword)
        if armor.naming_rules != naming_rules:
            decision.naming_rules = naming_rules

        slots = list(mask_to_slot_list(target_mask))
        if descriptor.is_outfit:
            slots.append(rules.OUTFIT_PSEUDO_SLOT)
        for slot in slots:
            slot_rule = rules.SLOT_RULES.get(slot)
            if slot_rule is None:
                continue
            keywords.ensure(slot_rule.keywords)
            attach_points.ensure(slot_rule.attach_points)

        self._apply_feature_pair(
            keywords, attach_points,
            override.adds_carry_weight is True or slot_keyword in rules.EXTRA_CARRY_WEIGHT_SLOTS,
            rules.CARRY_WEIGHT_KEYWORDS, rules.CARRY_WEIGHT_ATTACH_POINTS,
        )

        self._apply_feature_pair(
            keywords, attach_points,
            override.is_high_tech is True or class_keyword == rules.THERMO_OPTIC_CLASS_KEYWORD,
            rules.THERMO_OPTIC_KEYWORDS, rules.THERMO_OPTIC_ATTACH_POINTS,
        )

        if self.context.ballistic_weave_only_for_clothes and rules.is_armor(slot_keyword):
            keywords.remove(rules.BALLISTIC_WEAVE_KEYWORDS)
            attach_points.remove(rules.BALLISTIC_WEAVE_ATTACH_POINTS)

        if not armor.has_object_template():
            decision.add_object_template = True

        decision.added_keywords = keywords.added
        decision.removed_keywords = keywords.removed
        decision.added_attach_points = attach_points.added
        decision.removed_attach_points = attach_points.removed

        return ItemReconciliation(
            slot_keyword=slot_keyword,
            class_keyword=class_keyword,
            target_slot_mask=target_mask,
            decision=decision,
        )

    @staticmethod
    def _apply_feature_pair(keywords: KeywordDelta, attach_points: KeywordDelta, enabled: bool,
                            feature_keywords, feature_attach_points) -> None:
        if enabled:
            keywords.ensure(feature_keywords)
            attach_points.ensure(feature_attach_points)
        else:
            keywords.remove(feature_keywords)
            attach_points.remove(feature_attach_points)

    def apply(self, armor: ArmorRecord, decision: PatchDecision) -> None:
        """Apply a decision to the record.

        A failure to add the object template is logged and the rest of the
        decision stays applied.
        """
        self.logger.info("Processing", record=armor.long_name)

        if decision.name is not None:
            armor.name = decision.name

        for keyword in sorted(decision.removed_keywords):
            armor.remove_keyword(keyword)
        for keyword in sorted(decision.added_keywords):
            armor.add_keyword(keyword)

        for attach_point in sorted(decision.removed_attach_points):
            armor.remove_attach_point(attach_point)
        for attach_point in sorted(decision.added_attach_points):
            armor.add_attach_point(attach_point)

        if decision.slot_mask is not None:
            armor.set_slot_mask(decision.slot_mask)

        if decision.naming_rules is not None:
            armor.naming_rules = decision.naming_rules

        if decision.add_object_template:
            try:
                armor.add_default_object_template()
            except RecordWriteError as e:
                self.logger.warning("Failed to add simple object template, instance naming rules may not work",
                                    record=armor.long_name, error=str(e))
