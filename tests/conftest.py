"""
Shared pytest fixtures for the skillvault test suite.

Strategy:
- Domain tests: pure in-memory, zero I/O.
- Flat-file / repository tests: a users file in ``tmp_path``, a fake clock.
- API tests: FastAPI TestClient over a repository seeded in ``tmp_path``.
"""
import os
from uuid import UUID

import pytest

# Keep a developer's .env from leaking into the settings under test.
for _key in [k for k in os.environ if k.startswith("SKILLVAULT_")]:
    os.environ.pop(_key, None)

from skillvault.application.collaborators import InMemoryUpgradeTracker
from skillvault.config import StoreSettings
from skillvault.domain import schema
from skillvault.domain.enums import MobHealthBarType, PrimarySkill
from skillvault.domain.record import PlayerRecord
from skillvault.infrastructure.flatfile.codec import RecordCodec
from skillvault.infrastructure.repositories.flatfile_repository import (
    FlatFileProgressionRepository,
)

NOW = 1_700_000_000

UUID_STEVE = UUID("11111111-1111-4111-8111-111111111111")
UUID_ALEX = UUID("22222222-2222-4222-8222-222222222222")
UUID_HEROBRINE = UUID("33333333-3333-4333-8333-333333333333")


# ---------------------------------------------------------------------------
# Domain helpers (reusable across many test modules)
# ---------------------------------------------------------------------------

def make_record(name="Steve", uuid=UUID_STEVE, levels=None, last_login=NOW, **kwargs) -> PlayerRecord:
    levels = levels or {}
    return PlayerRecord(
        name=name,
        uuid=uuid,
        skill_levels={PrimarySkill.parse(k) if isinstance(k, str) else k: v
                      for k, v in levels.items()},
        last_login=last_login,
        **kwargs,
    )


def make_fields(name="Steve", uuid=UUID_STEVE, levels=None, last_login=NOW, **kwargs) -> list:
    """Current-layout field list for a record built with ``make_record``."""
    return RecordCodec().to_fields(
        make_record(name, uuid, levels=levels, last_login=last_login, **kwargs)
    )


def make_line(name="Steve", uuid=UUID_STEVE, levels=None, last_login=NOW, **kwargs) -> str:
    """Encoded line, trailing separator included, no terminator."""
    return RecordCodec().join(make_fields(name, uuid, levels, last_login, **kwargs))


def legacy_line(length: int, name="Oldtimer", mining="7") -> str:
    """A line as written by an older layout with ``length`` fields."""
    fields = make_fields(name=name, uuid=None, last_login=0)
    fields[schema.SKILL_LEVEL_INDEX[PrimarySkill.MINING]] = mining
    return RecordCodec().join(fields[:length])


def write_users(path, lines) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        for line in lines:
            f.write(line + schema.TERMINATOR)


def read_users(path) -> list:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read().split(schema.TERMINATOR)[:-1]


class FakeClock:
    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeOfflinePlayers:
    def __init__(self, last_seen=None):
        self._last_seen = dict(last_seen or {})
        self.asked = []

    def last_seen(self, name: str) -> int:
        self.asked.append(name)
        return self._last_seen.get(name, 0)


class RecordingStore:
    """Destination for conversions; refuses the names in ``fail_on``."""

    def __init__(self, fail_on=()):
        self.saved = []
        self._fail_on = set(fail_on)

    def save_record(self, record) -> bool:
        if record.name in self._fail_on:
            raise RuntimeError(f"cannot store {record.name}")
        self.saved.append(record)
        return True


class RecordingBackfill:
    def __init__(self):
        self.started_with = None

    def start(self, names) -> None:
        self.started_with = list(names)


# ---------------------------------------------------------------------------
# pytest fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def users_path(tmp_path):
    return str(tmp_path / "flatfile" / "mcmmo.users")


@pytest.fixture
def settings(users_path, tmp_path):
    return StoreSettings(
        users_file_path=users_path,
        mob_healthbar_default=MobHealthBarType.HEARTS,
        audit_dir=str(tmp_path / "audit"),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tracker():
    return InMemoryUpgradeTracker()


@pytest.fixture
def offline_players():
    return FakeOfflinePlayers()


@pytest.fixture
def repo(settings, tracker, offline_players, clock):
    return FlatFileProgressionRepository(
        settings,
        upgrade_tracker=tracker,
        offline_players=offline_players,
        clock=clock,
    )
