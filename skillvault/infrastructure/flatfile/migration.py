"""Schema migration for historical record layouts.

Each step fires purely on the current field count, so running the table on a
record that already has the current length changes nothing. The version label
of a migration is the first step that fired, i.e. the oldest layout fixed.
"""
from skillvault.domain import schema
from skillvault.domain.enums import BarState, MobHealthBarType
from skillvault.domain.errors import SchemaTooOldError

# Placeholder replaced by the configured default mob healthbar mode.
HEALTHBAR_DEFAULT = object()


class AppendStep:
    """Append ``values`` when the record has at most ``max_length`` fields."""

    def __init__(self, max_length: int, values: tuple, version: str):
        self.max_length = max_length
        self.values = values
        self.version = version

    def applies(self, fields: list) -> bool:
        return len(fields) <= self.max_length

    def apply(self, fields: list, healthbar: MobHealthBarType) -> None:
        for value in self.values:
            fields.append(healthbar.value if value is HEALTHBAR_DEFAULT else value)


APPEND_STEPS = (
    AppendStep(33, ("",), "1.1.06"),                    # HUD type
    AppendStep(35, ("0", "0"), "1.2.00"),               # fishing
    AppendStep(36, ("0",), "1.3.00"),                   # blast mining DATS
    AppendStep(37, ("0",), "1.4.00"),                   # last login, fixed by purge
    AppendStep(38, (HEALTHBAR_DEFAULT,), "1.4.06"),     # mob healthbar
    AppendStep(39, ("0", "0"), "1.4.08"),               # alchemy
    AppendStep(41, (schema.NULL_UUID,), "1.5.01"),      # uuid
    AppendStep(42, ("0",), "1.5.02"),                   # scoreboard tips
    AppendStep(43, ("0",), "2.1.133"),                  # chimaera wing DATS
)

LEGACY_HUD_VERSION = "1.4.07"
EXPANSION_VERSION = "2.1.134"

_EXPANSION_ZEROED = (
    schema.index_of("skill_tridents"),
    schema.index_of("exp_tridents"),
    schema.index_of("skill_crossbows"),
    schema.index_of("exp_crossbows"),
    schema.index_of("cooldown_archery_super"),
    schema.index_of("cooldown_crossbows_super"),
    schema.index_of("cooldown_tridents_super"),
    schema.CHATSPY_TOGGLE,
    schema.LEADERBOARD_IGNORED,
    # The slot existed before but was never written.
    schema.LAST_LOGIN,
)


class MigrationResult:
    def __init__(self, fields: list, old_version: str | None):
        self.fields = fields
        self.old_version = old_version

    @property
    def updated(self) -> bool:
        return self.old_version is not None


class SchemaMigrator:
    """Upgrades a raw field list of any supported length to the current layout."""

    def __init__(self, default_healthbar: MobHealthBarType = MobHealthBarType.HEARTS):
        self._healthbar = MobHealthBarType(default_healthbar)

    def migrate(self, fields: list) -> MigrationResult:
        if len(fields) < schema.MINIMUM_LENGTH:
            raise SchemaTooOldError(len(fields), schema.MINIMUM_LENGTH)

        fields = list(fields)
        old_version = None

        # Spout support removal cleared the HUD slot.
        if len(fields) > schema.LEGACY_HUD and fields[schema.LEGACY_HUD]:
            fields[schema.LEGACY_HUD] = ""
            old_version = LEGACY_HUD_VERSION

        for step in APPEND_STEPS:
            if step.applies(fields):
                step.apply(fields, self._healthbar)
                old_version = old_version or step.version

        if len(fields) < schema.SCHEMA_LENGTH:
            self._expand(fields)
            old_version = old_version or EXPANSION_VERSION
        elif len(fields) > schema.SCHEMA_LENGTH:
            del fields[schema.SCHEMA_LENGTH:]
            old_version = old_version or EXPANSION_VERSION

        return MigrationResult(fields, old_version)

    @staticmethod
    def _expand(fields: list) -> None:
        fields.extend([""] * (schema.SCHEMA_LENGTH - len(fields)))
        for index in _EXPANSION_ZEROED:
            fields[index] = "0"
        for skill, index in schema.BAR_STATE_INDEX.items():
            fields[index] = BarState.default_for(skill).value
