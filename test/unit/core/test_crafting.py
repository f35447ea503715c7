"""Unit tests for recipe material and perk adjustments."""

import pytest

from armorsmith_patcher.core.crafting import (
    BALLISTIC_FIBER,
    MAX_PERK_LEVEL,
    PERK_FAMILIES,
    CraftingAdjuster,
    allocate_perks,
    parse_perk,
    required_material_count,
    required_perk_level,
    summarize_perks,
)
from armorsmith_patcher.records.models import HAS_PERK, Component, Condition, RecipeRecord


def make_recipe(perks=(), fiber=None, created_object_count=1):
    components = [Component('c_Cloth', 2)]
    if fiber is not None:
        components.append(Component(BALLISTIC_FIBER, fiber))
    conditions = [Condition(HAS_PERK, parameter=perk) for perk in perks]
    conditions.append(Condition('GetIsID', parameter='Player'))
    return RecipeRecord(
        form_id='00002000',
        editor_id='co_Armor_Test',
        created_object='00001000',
        components=components,
        conditions=conditions,
        created_object_count=created_object_count,
    )


class TestRequirements:
    """Material and perk requirements from armor rating."""

    @pytest.mark.parametrize("rating,count,level", [
        (0, 0, 1),
        (3, 0, 1),
        (9, 2, 1),
        (10, 3, 2),
        (25, 7, 3),
        (100, 30, 11),
    ])
    def test_requirements(self, rating, count, level):
        assert required_material_count(rating) == count
        assert required_perk_level(rating) == level

    def test_parse_perk(self):
        assert parse_perk('Armorer03') == ('Armorer', 3)
        assert parse_perk('Science01') == ('Science', 1)
        assert parse_perk('LoneWanderer') is None
        assert parse_perk(None) is None

    def test_summarize_groups_by_family(self):
        by_family, total = summarize_perks(['Armorer01', 'Armorer03', 'Science02', 'Junk'])
        assert by_family == {'Armorer': (['Armorer01', 'Armorer03'], 4), 'Science': (['Science02'], 2)}
        assert total == 6


class TestAllocatePerks:
    """Perk allocation across families."""

    def test_no_existing_perks(self):
        added, removed = allocate_perks(3, {}, 0)
        assert added == ['Armorer03']
        assert removed == set()

    def test_requirement_already_met(self):
        added, removed = allocate_perks(3, {'Armorer': (['Armorer03'], 3)}, 3)
        assert added == []
        assert removed == set()

    def test_replaces_existing_perk(self):
        added, removed = allocate_perks(6, {'Armorer': (['Armorer02'], 2)}, 2)
        assert added == ['Armorer04', 'Science02']
        assert removed == {'Armorer02'}

    def test_capped_family_is_skipped(self):
        added, removed = allocate_perks(7, {'Armorer': (['Armorer04'], 4)}, 4)
        assert added == ['Science03']
        assert removed == set()

    def test_unreachable_requirement_caps_every_family(self):
        added, removed = allocate_perks(11, {}, 0)
        assert added == ['Armorer04', 'Science04']

    def test_raised_family_drops_every_rank(self):
        by_family, total = summarize_perks(['Armorer01', 'Armorer02'])
        added, removed = allocate_perks(5, by_family, total)
        assert removed == {'Armorer01', 'Armorer02'}
        assert added == ['Armorer04', 'Science01']

    @pytest.mark.parametrize("required", range(0, 12))
    @pytest.mark.parametrize("existing", [(), ('Armorer01',), ('Armorer04',), ('Science02',),
                                          ('Armorer02', 'Science01'), ('Lockpick02',),
                                          ('Armorer01', 'Armorer02'), ('Science03', 'Lockpick01')])
    def test_final_levels_meet_requirement(self, required, existing):
        by_family, total = summarize_perks(existing)
        added, removed = allocate_perks(required, by_family, total)

        for perk in added:
            family, level = parse_perk(perk)
            assert 1 <= level <= MAX_PERK_LEVEL

        remaining = [p for p in existing if p not in removed]
        added_families = {parse_perk(p)[0] for p in added}
        assert len(added_families) == len(added)
        assert not added_families & {parse_perk(p)[0] for p in remaining}

        final, final_total = summarize_perks(remaining + added)
        if required <= 2 * MAX_PERK_LEVEL:
            assert final_total >= required
        else:
            assert final_total >= required or all(
                final.get(family, ([], 0))[1] >= MAX_PERK_LEVEL for family in PERK_FAMILIES)

        again_added, _ = allocate_perks(required, final, final_total)
        assert final_total >= required or again_added == []


class TestCraftingAdjuster:
    """Recipe adjustment decisions and application."""

    def test_rating_25_recipe(self, make_armor, mock_logger):
        adjuster = CraftingAdjuster(mock_logger)
        recipe = make_recipe()

        adjustment = adjuster.decide(recipe, make_armor(armor_rating=25))

        assert adjustment.material_count == 7
        assert adjustment.added_perks == ['Armorer03']
        assert adjustment.removed_perks == set()
        assert adjustment.ensure_produces_one is False

    def test_zero_material_not_added(self, make_armor, mock_logger):
        adjustment = CraftingAdjuster(mock_logger).decide(make_recipe(), make_armor(armor_rating=3))
        assert adjustment.material_count is None

    def test_existing_material_lowered_to_zero(self, make_armor, mock_logger):
        adjustment = CraftingAdjuster(mock_logger).decide(make_recipe(fiber=5), make_armor(armor_rating=0))
        assert adjustment.material_count == 0

    def test_matching_material_unchanged(self, make_armor, mock_logger):
        adjustment = CraftingAdjuster(mock_logger).decide(
            make_recipe(perks=['Armorer02'], fiber=3), make_armor(armor_rating=10))
        assert not adjustment.has_changes

    def test_missing_rating_only_fixes_count(self, make_armor, mock_logger):
        adjustment = CraftingAdjuster(mock_logger).decide(
            make_recipe(created_object_count=None), make_armor(armor_rating=None))
        assert adjustment.material_count is None
        assert adjustment.added_perks == []
        assert adjustment.ensure_produces_one is True

    def test_apply(self, make_armor, mock_logger):
        adjuster = CraftingAdjuster(mock_logger)
        recipe = make_recipe(perks=['Armorer02'], fiber=1, created_object_count=None)

        adjuster.apply(recipe, adjuster.decide(recipe, make_armor(armor_rating=50)))

        assert recipe.created_object_count == 1
        assert recipe.get_component(BALLISTIC_FIBER).count == 15
        assert recipe.get_component('c_Cloth').count == 2
        assert sorted(c.parameter for c in recipe.perk_conditions()) == ['Armorer04', 'Science02']
        assert any(c.function == 'GetIsID' for c in recipe.conditions)

        assert not adjuster.decide(recipe, make_armor(armor_rating=50)).has_changes

    def test_apply_replaces_every_rank_of_raised_family(self, make_armor, mock_logger):
        adjuster = CraftingAdjuster(mock_logger)
        recipe = make_recipe(perks=['Armorer01', 'Armorer02'], fiber=12)

        adjustment = adjuster.decide(recipe, make_armor(armor_rating=40))
        assert adjustment.removed_perks == {'Armorer01', 'Armorer02'}
        adjuster.apply(recipe, adjustment)

        assert sorted(c.parameter for c in recipe.perk_conditions()) == ['Armorer04', 'Science01']
        assert not adjuster.decide(recipe, make_armor(armor_rating=40)).has_changes
