"""Tests for SchemaMigrator -- every historical layout lands on the current one."""
import pytest

from skillvault.domain import schema
from skillvault.domain.enums import MobHealthBarType, PrimarySkill
from skillvault.domain.errors import SchemaTooOldError
from skillvault.infrastructure.flatfile.codec import RecordCodec
from skillvault.infrastructure.flatfile.migration import SchemaMigrator
from tests.conftest import legacy_line, make_fields

HISTORICAL = [
    (33, "1.1.06"),
    (34, "1.2.00"),
    (36, "1.3.00"),
    (37, "1.4.00"),
    (38, "1.4.06"),
    (39, "1.4.08"),
    (41, "1.5.01"),
    (42, "1.5.02"),
    (43, "2.1.133"),
    (44, "2.1.134"),
]


@pytest.fixture
def migrator():
    return SchemaMigrator(MobHealthBarType.HEARTS)


def _fields(length):
    return RecordCodec().decode(legacy_line(length))


class TestHistoricalLayouts:
    @pytest.mark.parametrize("length,version", HISTORICAL)
    def test_reaches_current_length(self, migrator, length, version):
        result = migrator.migrate(_fields(length))
        assert len(result.fields) == schema.SCHEMA_LENGTH
        assert result.old_version == version
        assert result.updated

    @pytest.mark.parametrize("length,_", HISTORICAL)
    def test_deterministic(self, migrator, length, _):
        assert migrator.migrate(_fields(length)).fields == migrator.migrate(_fields(length)).fields

    @pytest.mark.parametrize("length,_", HISTORICAL)
    def test_idempotent(self, migrator, length, _):
        once = migrator.migrate(_fields(length))
        twice = migrator.migrate(once.fields)
        assert twice.fields == once.fields
        assert not twice.updated

    @pytest.mark.parametrize("length,_", HISTORICAL)
    def test_existing_values_kept(self, migrator, length, _):
        fields = migrator.migrate(_fields(length)).fields
        assert fields[schema.USERNAME] == "Oldtimer"
        assert fields[schema.SKILL_LEVEL_INDEX[PrimarySkill.MINING]] == "7"

    def test_oldest_layout_defaults(self, migrator):
        fields = migrator.migrate(_fields(33)).fields
        assert fields[schema.LEGACY_HUD] == ""
        assert fields[schema.SKILL_LEVEL_INDEX[PrimarySkill.FISHING]] == "0"
        assert fields[schema.HEALTHBAR] == "HEARTS"
        assert fields[schema.UUID_INDEX] == "NULL"
        assert fields[schema.LAST_LOGIN] == "0"
        assert fields[schema.BAR_STATE_INDEX[PrimarySkill.SALVAGE]] == "DISABLED"
        assert fields[schema.BAR_STATE_INDEX[PrimarySkill.TRIDENTS]] == "NORMAL"
        assert fields[schema.LEADERBOARD_IGNORED] == "0"

    def test_healthbar_uses_configured_default(self):
        fields = SchemaMigrator(MobHealthBarType.DISABLED).migrate(_fields(37)).fields
        assert fields[schema.HEALTHBAR] == "DISABLED"


class TestCurrentLayout:
    def test_current_line_untouched(self, migrator):
        fields = make_fields()
        result = migrator.migrate(fields)
        assert result.fields == fields
        assert result.old_version is None

    def test_input_not_mutated(self, migrator):
        fields = _fields(33)
        migrator.migrate(fields)
        assert len(fields) == 33

    def test_legacy_hud_cleared(self, migrator):
        fields = make_fields()
        fields[schema.LEGACY_HUD] = "STANDARD"
        result = migrator.migrate(fields)
        assert result.fields[schema.LEGACY_HUD] == ""
        assert result.old_version == "1.4.07"

    def test_overlong_line_truncated(self, migrator):
        fields = make_fields() + ["extra", "more"]
        result = migrator.migrate(fields)
        assert len(result.fields) == schema.SCHEMA_LENGTH
        assert result.updated


class TestTooOld:
    def test_short_line_rejected(self, migrator):
        with pytest.raises(SchemaTooOldError) as exc:
            migrator.migrate(["Steve"] * 20)
        assert exc.value.length == 20
        assert exc.value.minimum == 33
