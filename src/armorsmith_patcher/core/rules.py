"""Static rule tables for keyword and attach-point reconciliation."""

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Union

DEVICE_SLOT_KEYWORD = "_ClothingSlotDevice"

VAULT_SUIT_SLOT_KEYWORD = "_ClothesTypeUnderarmor_Slot33"
VAULT_SUIT_CLASS_KEYWORD = "_ClothingClassVault-Tec"
THERMO_OPTIC_CLASS_KEYWORD = "_ArmorClassThermOptics"
POWER_ARMOR_KEYWORD = "ArmorTypePower"

ARMOR_SLOT_PREFIX = "_ArmorSlot"
HEAD_SLOT_SUFFIX = "30"

CLASS_KEYWORD_PATTERN = re.compile(r"_(?:Armor|Clothing)Class")

# Instance naming rules
NAMING_VAULT_SUIT = "dn_VaultSuit"
NAMING_CLOTHES = "dn_Clothes"
NAMING_COMMON_ARMOR = "dn_CommonArmor"

OUTFIT_PSEUDO_SLOT = "outfit"

FORBIDDEN_KEYWORDS = frozenset([
    "ma_armor_lining",
    "ma_VaultSuit",
    "ma_armor_Metal_Torso",
    "ma_armor_Lining_Leather_LimbArm",
    "ma_armor_Lining_Leather_LimbLeg",
])

FORBIDDEN_ATTACH_POINTS = frozenset([
    "ap_armor_Lining",
])

GLOBAL_ATTACH_POINTS = frozenset([
    "ap_Legendary",
])

CARRY_WEIGHT_KEYWORDS = frozenset([
    "AEC_ma_armor_CarryWeight",
])

CARRY_WEIGHT_ATTACH_POINTS = frozenset([
    "AEC_ap_CarryWeightBaseEffect",
    "AEC_ap_CarryWeightModifier",
])

EXTRA_CARRY_WEIGHT_SLOTS = frozenset([
    "_ClothingSlotBackpack_Slot54",
    "_ClothingSlotBandolier_Slot56",
    "_ClothingSlotBelt_Slot57",
    "_ClothingSlotPack_Slot54",
    "_ClothingSlotSatchel_Slot55",
    "_ClothingSlotTacticalVest_Slot57",
])

THERMO_OPTIC_KEYWORDS = frozenset(["AEC_ma_armor_ThermOptics"])
THERMO_OPTIC_ATTACH_POINTS = frozenset(["AEC_ap_ThermOptics"])

BALLISTIC_WEAVE_KEYWORDS = frozenset(["ma_Railroad_ClothingArmor"])
BALLISTIC_WEAVE_ATTACH_POINTS = frozenset(["ap_Railroad_ClothingArmor"])

BLACKLIST = frozenset([
    "AEC_One_Ring_To_Nude_Them_All",
    "AEC_One_Ring_To_Soil_Them_All",
    "AEC_One_Ring_For_The_Ghoulish",
])


@dataclass(frozen=True)
class SlotRule:
    """Keywords and attach points every item covering a slot must carry."""
    keywords: FrozenSet[str]
    attach_points: FrozenSet[str]


def _rule(keywords, attach_points) -> SlotRule:
    return SlotRule(frozenset(keywords), frozenset(attach_points))


_LINING_RULE = _rule(["ma_armor_lining"], ["ap_armor_Lining"])

_BODY_RULE = _rule(
    ["AEC_ma_armor_Addon", "AEC_ma_armor_Lining", "ma_Railroad_ClothingArmor"],
    ["AEC_ap_Addon", "AEC_ap_Lining", "ap_Railroad_ClothingArmor"],
)

SLOT_RULES: Dict[Union[int, str], SlotRule] = {
    30: _rule(
        ["AEC_ma_armor_Lining", "AEC_ma_armor_Headgear_Addon", "ma_Railroad_ClothingArmor"],
        ["AEC_ap_AddonHeadgear", "AEC_ap_Lining", "ap_Railroad_ClothingArmor"],
    ),
    34: _rule(["AEC_ma_armor_Glove"], ["AEC_ap_Glove"]),
    38: _BODY_RULE,
    41: _LINING_RULE,
    42: _LINING_RULE,
    43: _LINING_RULE,
    44: _LINING_RULE,
    45: _LINING_RULE,
    47: _rule(["AEC_ma_armor_Eyewear"], ["AEC_ap_Eyewear"]),
    OUTFIT_PSEUDO_SLOT: _BODY_RULE,
}


def is_class_keyword(keyword: str) -> bool:
    return CLASS_KEYWORD_PATTERN.search(keyword) is not None


def is_armor(slot_keyword: str) -> bool:
    return slot_keyword.startswith(ARMOR_SLOT_PREFIX)


def is_helmet(slot_keyword: str) -> bool:
    return is_armor(slot_keyword) and slot_keyword.endswith(HEAD_SLOT_SUFFIX)


def is_vault_suit(slot_keyword: str, class_keyword) -> bool:
    return slot_keyword == VAULT_SUIT_SLOT_KEYWORD and class_keyword == VAULT_SUIT_CLASS_KEYWORD
