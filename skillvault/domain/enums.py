"""Enums and value objects used across the domain."""
from enum import Enum


class PrimarySkill(str, Enum):
    """Progression categories, in bar-state (ordinal) order."""

    ACROBATICS = "acrobatics"
    ALCHEMY = "alchemy"
    ARCHERY = "archery"
    AXES = "axes"
    EXCAVATION = "excavation"
    FISHING = "fishing"
    HERBALISM = "herbalism"
    MINING = "mining"
    REPAIR = "repair"
    SALVAGE = "salvage"
    SMELTING = "smelting"
    SWORDS = "swords"
    TAMING = "taming"
    UNARMED = "unarmed"
    WOODCUTTING = "woodcutting"
    TRIDENTS = "tridents"
    CROSSBOWS = "crossbows"

    @property
    def is_child(self) -> bool:
        return self in (PrimarySkill.SALVAGE, PrimarySkill.SMELTING)

    @staticmethod
    def non_child() -> list:
        return [s for s in PrimarySkill if not s.is_child]

    @staticmethod
    def parse(value: str) -> "PrimarySkill":
        """Case-insensitive lookup by value or member name."""
        key = value.strip().lower()
        for skill in PrimarySkill:
            if skill.value == key:
                return skill
        raise ValueError(f"Unknown skill: {value}")


class SuperAbility(str, Enum):
    """Abilities whose deactivation timestamp (DATS) is persisted."""

    BERSERK = "berserk"
    GIGA_DRILL_BREAKER = "giga_drill_breaker"
    TREE_FELLER = "tree_feller"
    GREEN_TERRA = "green_terra"
    SERRATED_STRIKES = "serrated_strikes"
    SKULL_SPLITTER = "skull_splitter"
    SUPER_BREAKER = "super_breaker"
    BLAST_MINING = "blast_mining"
    ARCHERY_SUPER = "archery_super"
    SUPER_SHOTGUN = "super_shotgun"
    TRIDENT_SUPER = "trident_super"


class UniqueDataType(str, Enum):
    CHIMAERA_WING_DATS = "chimaera_wing_dats"


class MobHealthBarType(str, Enum):
    HEARTS = "HEARTS"
    BAR = "BAR"
    DISABLED = "DISABLED"


class BarState(str, Enum):
    NORMAL = "NORMAL"
    ALWAYS_ON = "ALWAYS_ON"
    DISABLED = "DISABLED"

    @staticmethod
    def default_for(skill: PrimarySkill) -> "BarState":
        return BarState.DISABLED if skill.is_child else BarState.NORMAL

    @staticmethod
    def default_map() -> dict:
        return {skill: BarState.default_for(skill) for skill in PrimarySkill}


class UpgradeType(str, Enum):
    """One-time upgrades tracked by the external upgrade manager."""

    ADD_FISHING = "ADD_FISHING"
    ADD_BLAST_MINING_COOLDOWN = "ADD_BLAST_MINING_COOLDOWN"
    ADD_SQL_INDEXES = "ADD_SQL_INDEXES"
    ADD_MOB_HEALTHBARS = "ADD_MOB_HEALTHBARS"
    DROP_SPOUT = "DROP_SPOUT"
    ADD_ALCHEMY = "ADD_ALCHEMY"
    ADD_UUIDS = "ADD_UUIDS"

    @staticmethod
    def flatfile_upgrades() -> list:
        """Upgrades that the structure check completes for the flat file."""
        return [
            UpgradeType.ADD_FISHING,
            UpgradeType.ADD_BLAST_MINING_COOLDOWN,
            UpgradeType.ADD_SQL_INDEXES,
            UpgradeType.ADD_MOB_HEALTHBARS,
            UpgradeType.DROP_SPOUT,
            UpgradeType.ADD_ALCHEMY,
        ]
