"""Player progression record and leaderboard entry."""
from uuid import UUID

from skillvault.domain.enums import (
    BarState,
    MobHealthBarType,
    PrimarySkill,
    SuperAbility,
    UniqueDataType,
)

STORED_SKILLS = tuple(PrimarySkill.non_child())

# Characters that would split or end a stored line.
FORBIDDEN_NAME_CHARS = frozenset(":\r\n")


def check_name(name: str) -> str:
    if name is None:
        raise ValueError("Player name cannot be None")
    if any(c in FORBIDDEN_NAME_CHARS for c in name):
        raise ValueError(f"Player name {name!r} contains a separator or line break")
    return name


class PlayerStat:
    """Leaderboard entry. Immutable."""

    __slots__ = ("_name", "_value")

    def __init__(self, name: str, value: int):
        self._name = name
        self._value = value

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> int:
        return self._value

    def __eq__(self, other):
        if not isinstance(other, PlayerStat):
            return NotImplemented
        return self._name == other._name and self._value == other._value

    def __hash__(self):
        return hash((self._name, self._value))

    def __repr__(self):
        return f"PlayerStat({self._name!r}, {self._value})"

    def to_dict(self) -> dict:
        return {"name": self._name, "value": self._value}


class PlayerRecord:
    """
    All persisted progression state for one player.

    Skill values are held in fixed-size lists indexed by position in
    ``STORED_SKILLS`` so every stored skill always has a level and experience.
    """

    def __init__(
        self,
        name: str,
        uuid: UUID | None = None,
        skill_levels: dict | None = None,
        skill_experience: dict | None = None,
        cooldowns: dict | None = None,
        mob_health_bar: MobHealthBarType = MobHealthBarType.HEARTS,
        last_login: int = 0,
        scoreboard_tips_shown: int = 0,
        unique_data: dict | None = None,
        bar_states: dict | None = None,
        chat_spy: bool = False,
        leaderboard_ignored: bool = False,
        legacy_fields: dict | None = None,
        uuid_text: str | None = None,
    ):
        check_name(name)

        skill_levels = skill_levels or {}
        skill_experience = skill_experience or {}
        cooldowns = cooldowns or {}
        unique_data = unique_data or {}
        bar_states = bar_states or {}

        self._name = name
        self._uuid = uuid
        self._levels = [int(skill_levels.get(s, 0)) for s in STORED_SKILLS]
        self._experience = [float(skill_experience.get(s, 0.0)) for s in STORED_SKILLS]
        self._cooldowns = {a: int(cooldowns.get(a, 0)) for a in SuperAbility}
        self._mob_health_bar = MobHealthBarType(mob_health_bar)
        self._last_login = int(last_login)
        self._scoreboard_tips_shown = int(scoreboard_tips_shown)
        self._unique_data = {u: int(unique_data.get(u, 0)) for u in UniqueDataType}
        self._bar_states = {
            s: BarState(bar_states.get(s, BarState.default_for(s))) for s in PrimarySkill
        }
        self._chat_spy = bool(chat_spy)
        self._leaderboard_ignored = bool(leaderboard_ignored)
        self._legacy_fields = dict(legacy_fields or {})
        self._uuid_text = uuid_text

    @classmethod
    def new(
        cls,
        name: str,
        uuid: UUID | None,
        starting_level: int,
        mob_health_bar: MobHealthBarType,
        now: int,
    ) -> "PlayerRecord":
        """Fresh record for a player seen for the first time."""
        return cls(
            name=name,
            uuid=uuid,
            skill_levels={s: starting_level for s in STORED_SKILLS},
            mob_health_bar=mob_health_bar,
            last_login=now,
        )

    # --- Properties ---

    @property
    def name(self) -> str:
        return self._name

    @property
    def uuid(self) -> UUID | None:
        return self._uuid

    @property
    def uuid_text(self) -> str | None:
        """UUID as stored on disk (case kept), or None without a UUID."""
        if self._uuid is None:
            return None
        if self._uuid_text is not None and UUID(self._uuid_text) == self._uuid:
            return self._uuid_text
        return str(self._uuid)

    @property
    def mob_health_bar(self) -> MobHealthBarType:
        return self._mob_health_bar

    @property
    def last_login(self) -> int:
        return self._last_login

    @property
    def scoreboard_tips_shown(self) -> int:
        return self._scoreboard_tips_shown

    @property
    def chat_spy(self) -> bool:
        return self._chat_spy

    @property
    def leaderboard_ignored(self) -> bool:
        return self._leaderboard_ignored

    @property
    def legacy_fields(self) -> dict:
        return dict(self._legacy_fields)

    def level(self, skill: PrimarySkill) -> int:
        return self._levels[_slot(skill)]

    def experience(self, skill: PrimarySkill) -> float:
        return self._experience[_slot(skill)]

    def cooldown(self, ability: SuperAbility) -> int:
        return self._cooldowns[ability]

    def unique_datum(self, kind: UniqueDataType) -> int:
        return self._unique_data[kind]

    def bar_state(self, skill: PrimarySkill) -> BarState:
        return self._bar_states[skill]

    def skill_levels(self) -> dict:
        return dict(zip(STORED_SKILLS, self._levels))

    def power_level(self) -> int:
        return sum(self._levels)

    # --- Mutation ---

    def rename(self, name: str) -> None:
        self._name = check_name(name)

    def set_level(self, skill: PrimarySkill, level: int) -> None:
        if level < 0:
            raise ValueError("Skill level cannot be negative")
        self._levels[_slot(skill)] = int(level)

    def set_experience(self, skill: PrimarySkill, experience: float) -> None:
        if experience < 0:
            raise ValueError("Experience cannot be negative")
        self._experience[_slot(skill)] = float(experience)

    def set_cooldown(self, ability: SuperAbility, timestamp: int) -> None:
        self._cooldowns[ability] = int(timestamp)

    def set_bar_state(self, skill: PrimarySkill, state: BarState) -> None:
        self._bar_states[skill] = BarState(state)

    def mark_login(self, now: int) -> None:
        self._last_login = int(now)

    def set_leaderboard_ignored(self, ignored: bool) -> None:
        self._leaderboard_ignored = bool(ignored)

    def to_dict(self) -> dict:
        return {
            "name": self._name,
            "uuid": str(self._uuid) if self._uuid else None,
            "levels": {s.value: lvl for s, lvl in zip(STORED_SKILLS, self._levels)},
            "power_level": self.power_level(),
            "mob_health_bar": self._mob_health_bar.value,
            "last_login": self._last_login,
            "leaderboard_ignored": self._leaderboard_ignored,
        }


def _slot(skill: PrimarySkill) -> int:
    try:
        return STORED_SKILLS.index(skill)
    except ValueError:
        raise ValueError(f"{skill.value} is a child skill and has no stored value") from None
