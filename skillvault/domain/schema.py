"""
Flat-file record layout.

One line per player, fields joined by ``:`` with a trailing ``:`` before the
CRLF terminator. Fields are positional; every index constant below is derived
from ``FIELDS`` so the codec and the validator read the same table.
"""
from dataclasses import dataclass
from enum import Enum

from skillvault.domain.enums import PrimarySkill, SuperAbility

SEPARATOR = ":"
TERMINATOR = "\r\n"
NULL_UUID = "NULL"

# Oldest layout the migrator can still upgrade.
MINIMUM_LENGTH = 33


class FieldKind(str, Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    UUID = "uuid"
    HEALTHBAR = "healthbar"
    BAR_STATE = "bar_state"
    LEGACY = "legacy"

    @property
    def is_numeric(self) -> bool:
        return self in (FieldKind.INT, FieldKind.FLOAT)


@dataclass(frozen=True)
class FieldSpec:
    index: int
    name: str
    kind: FieldKind
    allow_empty: bool = False
    skill: PrimarySkill | None = None
    ability: SuperAbility | None = None


_LAYOUT = [
    ("username", FieldKind.STRING, None, None),
    ("skill_mining", FieldKind.INT, PrimarySkill.MINING, None),
    ("legacy_2", FieldKind.LEGACY, None, None),
    ("legacy_3", FieldKind.LEGACY, None, None),
    ("exp_mining", FieldKind.FLOAT, PrimarySkill.MINING, None),
    ("skill_woodcutting", FieldKind.INT, PrimarySkill.WOODCUTTING, None),
    ("exp_woodcutting", FieldKind.FLOAT, PrimarySkill.WOODCUTTING, None),
    ("skill_repair", FieldKind.INT, PrimarySkill.REPAIR, None),
    ("skill_unarmed", FieldKind.INT, PrimarySkill.UNARMED, None),
    ("skill_herbalism", FieldKind.INT, PrimarySkill.HERBALISM, None),
    ("skill_excavation", FieldKind.INT, PrimarySkill.EXCAVATION, None),
    ("skill_archery", FieldKind.INT, PrimarySkill.ARCHERY, None),
    ("skill_swords", FieldKind.INT, PrimarySkill.SWORDS, None),
    ("skill_axes", FieldKind.INT, PrimarySkill.AXES, None),
    ("skill_acrobatics", FieldKind.INT, PrimarySkill.ACROBATICS, None),
    ("exp_repair", FieldKind.FLOAT, PrimarySkill.REPAIR, None),
    ("exp_unarmed", FieldKind.FLOAT, PrimarySkill.UNARMED, None),
    ("exp_herbalism", FieldKind.FLOAT, PrimarySkill.HERBALISM, None),
    ("exp_excavation", FieldKind.FLOAT, PrimarySkill.EXCAVATION, None),
    ("exp_archery", FieldKind.FLOAT, PrimarySkill.ARCHERY, None),
    ("exp_swords", FieldKind.FLOAT, PrimarySkill.SWORDS, None),
    ("exp_axes", FieldKind.FLOAT, PrimarySkill.AXES, None),
    ("exp_acrobatics", FieldKind.FLOAT, PrimarySkill.ACROBATICS, None),
    ("legacy_23", FieldKind.LEGACY, None, None),
    ("skill_taming", FieldKind.INT, PrimarySkill.TAMING, None),
    ("exp_taming", FieldKind.FLOAT, PrimarySkill.TAMING, None),
    ("cooldown_berserk", FieldKind.INT, None, SuperAbility.BERSERK),
    ("cooldown_giga_drill_breaker", FieldKind.INT, None, SuperAbility.GIGA_DRILL_BREAKER),
    ("cooldown_tree_feller", FieldKind.INT, None, SuperAbility.TREE_FELLER),
    ("cooldown_green_terra", FieldKind.INT, None, SuperAbility.GREEN_TERRA),
    ("cooldown_serrated_strikes", FieldKind.INT, None, SuperAbility.SERRATED_STRIKES),
    ("cooldown_skull_splitter", FieldKind.INT, None, SuperAbility.SKULL_SPLITTER),
    ("cooldown_super_breaker", FieldKind.INT, None, SuperAbility.SUPER_BREAKER),
    ("legacy_hud", FieldKind.LEGACY, None, None),
    ("skill_fishing", FieldKind.INT, PrimarySkill.FISHING, None),
    ("exp_fishing", FieldKind.FLOAT, PrimarySkill.FISHING, None),
    ("cooldown_blast_mining", FieldKind.INT, None, SuperAbility.BLAST_MINING),
    ("last_login", FieldKind.INT, None, None),
    ("healthbar", FieldKind.HEALTHBAR, None, None),
    ("skill_alchemy", FieldKind.INT, PrimarySkill.ALCHEMY, None),
    ("exp_alchemy", FieldKind.FLOAT, PrimarySkill.ALCHEMY, None),
    ("uuid", FieldKind.UUID, None, None),
    ("scoreboard_tips", FieldKind.INT, None, None),
    ("cooldown_chimaera_wing", FieldKind.INT, None, None),
    ("skill_tridents", FieldKind.INT, PrimarySkill.TRIDENTS, None),
    ("exp_tridents", FieldKind.FLOAT, PrimarySkill.TRIDENTS, None),
    ("skill_crossbows", FieldKind.INT, PrimarySkill.CROSSBOWS, None),
    ("exp_crossbows", FieldKind.FLOAT, PrimarySkill.CROSSBOWS, None),
] + [
    (f"barstate_{skill.value}", FieldKind.BAR_STATE, skill, None)
    for skill in PrimarySkill
] + [
    ("cooldown_archery_super", FieldKind.INT, None, SuperAbility.ARCHERY_SUPER),
    ("cooldown_crossbows_super", FieldKind.INT, None, SuperAbility.SUPER_SHOTGUN),
    ("cooldown_tridents_super", FieldKind.INT, None, SuperAbility.TRIDENT_SUPER),
    ("chatspy_toggle", FieldKind.INT, None, None),
    ("leaderboard_ignored", FieldKind.INT, None, None),
]

# Indices that may legitimately hold an empty string.
EMPTY_ALLOWED = frozenset({2, 3, 23, 33, 41})

FIELDS = tuple(
    FieldSpec(
        index=i,
        name=name,
        kind=kind,
        allow_empty=i in EMPTY_ALLOWED,
        skill=skill,
        ability=ability,
    )
    for i, (name, kind, skill, ability) in enumerate(_LAYOUT)
)

SCHEMA_LENGTH = len(FIELDS)

_BY_NAME = {spec.name: spec.index for spec in FIELDS}


def index_of(name: str) -> int:
    return _BY_NAME[name]


USERNAME = index_of("username")
UUID_INDEX = index_of("uuid")
LEGACY_HUD = index_of("legacy_hud")
LAST_LOGIN = index_of("last_login")
HEALTHBAR = index_of("healthbar")
SCOREBOARD_TIPS = index_of("scoreboard_tips")
COOLDOWN_CHIMAERA_WING = index_of("cooldown_chimaera_wing")
CHATSPY_TOGGLE = index_of("chatspy_toggle")
LEADERBOARD_IGNORED = index_of("leaderboard_ignored")

SKILL_LEVEL_INDEX = {
    spec.skill: spec.index for spec in FIELDS if spec.kind == FieldKind.INT and spec.skill
}
SKILL_EXP_INDEX = {
    spec.skill: spec.index for spec in FIELDS if spec.kind == FieldKind.FLOAT and spec.skill
}
BAR_STATE_INDEX = {
    spec.skill: spec.index for spec in FIELDS if spec.kind == FieldKind.BAR_STATE
}
COOLDOWN_INDEX = {spec.ability: spec.index for spec in FIELDS if spec.ability}
