"""Contracts for the services the store talks to but does not own."""
from typing import Iterable, Protocol

from skillvault.domain.enums import UpgradeType
from skillvault.domain.record import PlayerRecord


class ProgressionStore(Protocol):
    """Anything a flat file can be converted into."""

    def save_record(self, record: PlayerRecord) -> bool: ...


class OfflinePlayerDirectory(Protocol):
    def last_seen(self, name: str) -> int:
        """Epoch seconds of the player's last session, 0 if never seen."""
        ...


class UpgradeTracker(Protocol):
    def should_upgrade(self, upgrade: UpgradeType) -> bool: ...

    def set_upgrade_completed(self, upgrade: UpgradeType) -> None: ...


class UuidBackfill(Protocol):
    def start(self, names: Iterable[str]) -> None: ...


class InMemoryUpgradeTracker:
    """Process-lifetime upgrade bookkeeping for local runs and tests."""

    def __init__(self, completed: Iterable[UpgradeType] = ()):
        self._completed = set(completed)

    def should_upgrade(self, upgrade: UpgradeType) -> bool:
        return upgrade not in self._completed

    def set_upgrade_completed(self, upgrade: UpgradeType) -> None:
        self._completed.add(upgrade)

    @property
    def completed(self) -> set:
        return set(self._completed)
