"""Line codec: flat-file line <-> field list <-> PlayerRecord."""
from uuid import UUID

from skillvault.domain import schema
from skillvault.domain.enums import BarState, MobHealthBarType, UniqueDataType
from skillvault.domain.errors import MalformedUuidError, RecordBuildError
from skillvault.domain.record import PlayerRecord, STORED_SKILLS

_LEGACY_INDICES = tuple(s.index for s in schema.FIELDS if s.kind == schema.FieldKind.LEGACY)


def is_valid_uuid(value: str) -> bool:
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def format_float(value: float) -> str:
    """Integral values are written without a fractional part."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


class RecordCodec:
    """Positional codec driven by ``schema.FIELDS``."""

    def __init__(self, default_healthbar: MobHealthBarType = MobHealthBarType.HEARTS):
        self._default_healthbar = MobHealthBarType(default_healthbar)

    # --- line <-> fields ---

    def decode(self, line: str) -> list:
        """Split a line into raw fields.

        Raises MalformedUuidError if the UUID slot holds something that is
        neither empty, the NULL sentinel nor a UUID.
        """
        line = line.rstrip("\r\n")
        if line.endswith(schema.SEPARATOR):
            line = line[:-1]
        fields = line.split(schema.SEPARATOR)
        self.check_uuid(fields)
        return fields

    @staticmethod
    def check_uuid(fields: list) -> None:
        if len(fields) > schema.UUID_INDEX:
            value = fields[schema.UUID_INDEX]
            if value and value != schema.NULL_UUID and not is_valid_uuid(value):
                raise MalformedUuidError(value)

    def join(self, fields: list) -> str:
        """Fields back to a line, trailing separator included, no terminator."""
        return "".join(f + schema.SEPARATOR for f in fields)

    @staticmethod
    def username_of(line: str) -> str:
        return line.split(schema.SEPARATOR, 1)[0]

    # --- fields <-> record ---

    def to_fields(self, record: PlayerRecord) -> list:
        fields = [""] * schema.SCHEMA_LENGTH
        fields[schema.USERNAME] = record.name
        for index, value in record.legacy_fields.items():
            if index in _LEGACY_INDICES:
                fields[index] = value
        for skill in STORED_SKILLS:
            fields[schema.SKILL_LEVEL_INDEX[skill]] = str(record.level(skill))
            fields[schema.SKILL_EXP_INDEX[skill]] = format_float(record.experience(skill))
        for ability, index in schema.COOLDOWN_INDEX.items():
            fields[index] = str(record.cooldown(ability))
        for skill, index in schema.BAR_STATE_INDEX.items():
            fields[index] = record.bar_state(skill).value
        fields[schema.LAST_LOGIN] = str(record.last_login)
        fields[schema.HEALTHBAR] = record.mob_health_bar.value
        fields[schema.UUID_INDEX] = record.uuid_text or schema.NULL_UUID
        fields[schema.SCOREBOARD_TIPS] = str(record.scoreboard_tips_shown)
        fields[schema.COOLDOWN_CHIMAERA_WING] = str(
            record.unique_datum(UniqueDataType.CHIMAERA_WING_DATS)
        )
        fields[schema.CHATSPY_TOGGLE] = "1" if record.chat_spy else "0"
        fields[schema.LEADERBOARD_IGNORED] = "1" if record.leaderboard_ignored else "0"
        return fields

    def encode(self, record: PlayerRecord) -> str:
        """Full line for a record, CRLF terminated."""
        return self.join(self.to_fields(record)) + schema.TERMINATOR

    def build(self, fields: list) -> PlayerRecord:
        """Typed record from a migrated, repaired field list."""
        if len(fields) != schema.SCHEMA_LENGTH:
            raise RecordBuildError(
                f"Expected {schema.SCHEMA_LENGTH} fields, got {len(fields)}"
            )
        try:
            levels = {s: int(fields[schema.SKILL_LEVEL_INDEX[s]]) for s in STORED_SKILLS}
            experience = {s: float(fields[schema.SKILL_EXP_INDEX[s]]) for s in STORED_SKILLS}
            cooldowns = {a: int(fields[i]) for a, i in schema.COOLDOWN_INDEX.items()}
            last_login = int(fields[schema.LAST_LOGIN])
        except ValueError as exc:
            raise RecordBuildError(str(exc)) from exc

        raw_uuid = fields[schema.UUID_INDEX]
        if raw_uuid and raw_uuid != schema.NULL_UUID:
            try:
                uuid = UUID(raw_uuid)
            except ValueError:
                raise MalformedUuidError(raw_uuid) from None
        else:
            uuid = None

        try:
            health_bar = MobHealthBarType(fields[schema.HEALTHBAR])
        except ValueError:
            health_bar = self._default_healthbar

        try:
            tips = int(fields[schema.SCOREBOARD_TIPS])
        except ValueError:
            tips = 0

        try:
            chimaera = int(fields[schema.COOLDOWN_CHIMAERA_WING])
        except ValueError:
            chimaera = 0

        try:
            bar_states = {
                s: BarState(fields[i]) for s, i in schema.BAR_STATE_INDEX.items()
            }
        except ValueError:
            bar_states = BarState.default_map()

        try:
            return PlayerRecord(
                name=fields[schema.USERNAME],
                uuid=uuid,
                skill_levels=levels,
                skill_experience=experience,
                cooldowns=cooldowns,
                mob_health_bar=health_bar,
                last_login=last_login,
                scoreboard_tips_shown=tips,
                unique_data={UniqueDataType.CHIMAERA_WING_DATS: chimaera},
                bar_states=bar_states,
                chat_spy=_flag(fields[schema.CHATSPY_TOGGLE]),
                leaderboard_ignored=_flag(fields[schema.LEADERBOARD_IGNORED]),
                legacy_fields={i: fields[i] for i in _LEGACY_INDICES},
                uuid_text=raw_uuid if uuid else None,
            )
        except (TypeError, ValueError) as exc:
            raise RecordBuildError(str(exc)) from exc

    @staticmethod
    def skill_levels(fields: list) -> dict:
        """Stored skill levels straight from a field list."""
        return {s: int(fields[schema.SKILL_LEVEL_INDEX[s]]) for s in STORED_SKILLS}


def _flag(value: str) -> bool:
    try:
        return int(value) != 0
    except ValueError:
        return False
