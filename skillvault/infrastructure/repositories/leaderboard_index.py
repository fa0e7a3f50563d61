"""Leaderboards derived from the users file (rebuilt at most every refresh interval)."""
import logging
import time
from typing import Callable, Iterable

from skillvault.domain.enums import PrimarySkill
from skillvault.domain.record import PlayerRecord, PlayerStat, STORED_SKILLS

log = logging.getLogger("skillvault.leaderboard")

DEFAULT_REFRESH_INTERVAL = 600  # seconds


class LeaderboardSnapshot:
    """One complete set of rankings. Replaced wholesale, never edited."""

    def __init__(self, skills: dict | None = None, power_levels: list | None = None,
                 computed_at: float = 0.0):
        self._skills = skills or {s: [] for s in STORED_SKILLS}
        self._power_levels = power_levels or []
        self._computed_at = computed_at

    @property
    def computed_at(self) -> float:
        return self._computed_at

    def stats_for(self, skill: PrimarySkill | None) -> list:
        if skill is None:
            return self._power_levels
        if skill.is_child:
            raise ValueError(f"{skill.value} is a child skill and has no leaderboard")
        return self._skills[skill]


def _ranked(stats: list) -> list:
    # sorted() is stable, so ties keep file-scan order.
    return sorted(stats, key=lambda s: s.value, reverse=True)


class LeaderboardIndex:
    """Per-skill and power-level rankings with a rebuild cooldown."""

    def __init__(
        self,
        source: Callable[[], Iterable[PlayerRecord]],
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        clock: Callable[[], float] = time.time,
    ):
        self._source = source
        self._refresh_interval = refresh_interval
        self._clock = clock
        self._last_update: float | None = None
        self._snapshot = LeaderboardSnapshot()

    @property
    def snapshot(self) -> LeaderboardSnapshot:
        return self._snapshot

    def invalidate(self) -> None:
        self._last_update = None

    def refresh(self, force: bool = False) -> bool:
        """Rebuild if the cooldown elapsed (or forced). Returns True if rebuilt."""
        now = self._clock()
        if (
            not force
            and self._last_update is not None
            and now - self._last_update < self._refresh_interval
        ):
            return False

        # Stamp first so a failing scan is not retried on every request.
        self._last_update = now

        skills = {s: [] for s in STORED_SKILLS}
        power_levels = []
        try:
            for record in self._source():
                if record.leaderboard_ignored:
                    continue
                power = 0
                for skill in STORED_SKILLS:
                    level = record.level(skill)
                    skills[skill].append(PlayerStat(record.name, level))
                    power += level
                power_levels.append(PlayerStat(record.name, power))
        except OSError as exc:
            log.error("Could not rebuild leaderboards, keeping previous rankings: %s", exc)
            return False

        self._snapshot = LeaderboardSnapshot(
            skills={s: _ranked(stats) for s, stats in skills.items()},
            power_levels=_ranked(power_levels),
            computed_at=now,
        )
        log.debug("Leaderboards rebuilt with %d players", len(power_levels))
        return True

    def page(self, skill: PrimarySkill | None, page_number: int, page_size: int) -> list:
        stats = self._snapshot.stats_for(skill)
        if page_size <= 0:
            return []
        start = (max(page_number, 1) - 1) * page_size
        return stats[min(start, len(stats)):min(start + page_size, len(stats))]

    def rank(self, name: str, skill: PrimarySkill | None = None) -> int | None:
        """1-based position of the first case-insensitive match, or None."""
        wanted = name.casefold()
        for position, stat in enumerate(self._snapshot.stats_for(skill), start=1):
            if stat.name.casefold() == wanted:
                return position
        return None

    def ranks(self, name: str) -> dict:
        ranks = {skill: self.rank(name, skill) for skill in STORED_SKILLS}
        ranks[None] = self.rank(name, None)
        return ranks
