"""Tests for PlayerRecord and PlayerStat."""
import pytest

from skillvault.domain.enums import BarState, MobHealthBarType, PrimarySkill, SuperAbility
from skillvault.domain.record import STORED_SKILLS, PlayerRecord, PlayerStat
from tests.conftest import UUID_STEVE, make_record


class TestPlayerRecordCreation:
    def test_defaults(self):
        r = PlayerRecord("Steve")
        assert r.uuid is None
        assert r.power_level() == 0
        assert r.mob_health_bar is MobHealthBarType.HEARTS
        assert r.bar_state(PrimarySkill.SMELTING) is BarState.DISABLED
        assert r.bar_state(PrimarySkill.MINING) is BarState.NORMAL

    def test_none_name_rejected(self):
        with pytest.raises(ValueError):
            PlayerRecord(None)

    @pytest.mark.parametrize("name", ["Ev:il", "line\nbreak", "carriage\rreturn"])
    def test_separator_in_name_rejected(self, name):
        with pytest.raises(ValueError):
            PlayerRecord(name)

    def test_uuid_text_ignored_when_it_does_not_match(self):
        r = PlayerRecord("Steve", UUID_STEVE, uuid_text="22222222-2222-4222-8222-222222222222")
        assert r.uuid_text == str(UUID_STEVE)

    def test_new_uses_starting_level_for_every_skill(self):
        r = PlayerRecord.new("Steve", UUID_STEVE, starting_level=5,
                             mob_health_bar=MobHealthBarType.BAR, now=123)
        assert all(level == 5 for level in r.skill_levels().values())
        assert r.power_level() == 5 * len(STORED_SKILLS)
        assert r.last_login == 123
        assert r.mob_health_bar is MobHealthBarType.BAR


class TestPlayerRecordSkills:
    def test_level_and_experience(self):
        r = make_record(levels={"mining": 12})
        r.set_experience(PrimarySkill.MINING, 40.5)
        assert r.level(PrimarySkill.MINING) == 12
        assert r.experience(PrimarySkill.MINING) == 40.5

    def test_child_skill_has_no_stored_level(self):
        r = make_record()
        with pytest.raises(ValueError):
            r.level(PrimarySkill.SALVAGE)

    def test_negative_level_rejected(self):
        r = make_record()
        with pytest.raises(ValueError):
            r.set_level(PrimarySkill.AXES, -1)

    def test_power_level_sums_all_stored(self):
        r = make_record(levels={"mining": 10, "axes": 5, "crossbows": 1})
        assert r.power_level() == 16

    def test_cooldowns(self):
        r = make_record()
        r.set_cooldown(SuperAbility.BERSERK, 999)
        assert r.cooldown(SuperAbility.BERSERK) == 999
        assert r.cooldown(SuperAbility.TREE_FELLER) == 0


class TestPlayerRecordMutation:
    def test_rename(self):
        r = make_record()
        r.rename("Steven")
        assert r.name == "Steven"

    def test_rename_rejects_separator(self):
        r = make_record()
        with pytest.raises(ValueError):
            r.rename("Ste:ve")
        assert r.name == "Steve"

    def test_mark_login(self):
        r = make_record(last_login=1)
        r.mark_login(50)
        assert r.last_login == 50

    def test_leaderboard_ignored(self):
        r = make_record()
        r.set_leaderboard_ignored(True)
        assert r.leaderboard_ignored

    def test_to_dict(self):
        d = make_record(levels={"mining": 3}).to_dict()
        assert d["name"] == "Steve"
        assert d["uuid"] == str(UUID_STEVE)
        assert d["levels"]["mining"] == 3
        assert d["power_level"] == 3


class TestPlayerStat:
    def test_equality(self):
        assert PlayerStat("a", 1) == PlayerStat("a", 1)
        assert PlayerStat("a", 1) != PlayerStat("a", 2)

    def test_to_dict(self):
        assert PlayerStat("a", 7).to_dict() == {"name": "a", "value": 7}
