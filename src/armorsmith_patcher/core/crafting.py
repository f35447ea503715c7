"""Recipe material and perk requirements derived from armor rating."""

import re
from typing import Dict, Iterable, List, Optional, Set, Tuple
import structlog

from armorsmith_patcher.core.decisions import RecipeAdjustment
from armorsmith_patcher.records.models import ArmorRecord, RecipeRecord

BALLISTIC_FIBER = "c_AntiBallisticFiber"

# Families raised, in order, when a recipe's perk requirements fall short
PERK_FAMILIES = ("Armorer", "Science")
MAX_PERK_LEVEL = 4

PERK_NAME_PATTERN = re.compile(r"^(?P<family>.+?)(?P<level>\d{2})$")


def required_material_count(armor_rating: int) -> int:
    return armor_rating * 3 // 10


def required_perk_level(armor_rating: int) -> int:
    return armor_rating // 10 + 1


def perk_name(family: str, level: int) -> str:
    return f"{family}{level:02d}"


def parse_perk(perk: str) -> Optional[Tuple[str, int]]:
    """Split a ranked perk editor ID such as ``Armorer02`` into family and level."""
    match = PERK_NAME_PATTERN.match(perk or "")
    if match is None:
        return None
    return match.group("family"), int(match.group("level"))


def summarize_perks(perks: Iterable[str]) -> Tuple[Dict[str, Tuple[List[str], int]], int]:
    """Group ranked perks by family.

    Returns:
        Perks and summed level per family, total level across all perks.
        Perks without a two digit rank suffix are ignored.
    """
    by_family: Dict[str, Tuple[List[str], int]] = {}
    total = 0
    for perk in perks:
        parsed = parse_perk(perk)
        if parsed is None:
            continue
        family, level = parsed
        total += level
        names, family_level = by_family.get(family, ([], 0))
        by_family[family] = (names + [perk], family_level + level)
    return by_family, total


def allocate_perks(required_level: int, by_family: Dict[str, Tuple[List[str], int]],
                   total_level: int) -> Tuple[List[str], Set[str]]:
    """Raise perk families until the total perk level meets ``required_level``.

    Families in ``PERK_FAMILIES`` are raised in order, each capped at
    ``MAX_PERK_LEVEL``. Raising a family replaces every perk it already has.

    Returns:
        Perks to add, perks to remove
    """
    added: List[str] = []
    removed: Set[str] = set()

    missing = required_level - total_level
    if missing <= 0:
        return added, removed

    for family in PERK_FAMILIES:
        perks, level = by_family.get(family, ([], 0))
        if level >= MAX_PERK_LEVEL:
            continue
        removed.update(perks)

        raised = min(MAX_PERK_LEVEL, level + missing)
        missing -= raised - level
        added.append(perk_name(family, raised))

        if missing <= 0:
            break

    return added, removed


class CraftingAdjuster:
    """Keeps recipes for patched armor in line with the armor's rating."""

    def __init__(self, logger: Optional[structlog.BoundLogger] = None):
        self.logger = logger or structlog.get_logger(__name__)

    def decide(self, recipe: RecipeRecord, armor: ArmorRecord) -> RecipeAdjustment:
        adjustment = RecipeAdjustment()

        if armor.armor_rating is not None:
            rating = armor.armor_rating

            target_count = required_material_count(rating)
            ingredient = recipe.get_component(BALLISTIC_FIBER)
            if ingredient is None:
                if target_count != 0:
                    adjustment.material_count = target_count
            elif ingredient.count != target_count:
                adjustment.material_count = target_count

            by_family, total = summarize_perks(c.parameter for c in recipe.perk_conditions())
            adjustment.added_perks, adjustment.removed_perks = allocate_perks(
                required_perk_level(rating), by_family, total
            )

        if recipe.created_object_count is None:
            adjustment.ensure_produces_one = True

        return adjustment

    def apply(self, recipe: RecipeRecord, adjustment: RecipeAdjustment) -> None:
        self.logger.info("Processing", record=recipe.long_name)

        if adjustment.ensure_produces_one:
            recipe.created_object_count = 1

        if adjustment.material_count is not None:
            recipe.set_component_count(BALLISTIC_FIBER, adjustment.material_count)

        if adjustment.removed_perks:
            recipe.remove_perk_conditions(adjustment.removed_perks)

        for perk in adjustment.added_perks:
            recipe.add_perk_condition(perk)
