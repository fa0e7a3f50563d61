"""Player progression persistence (flat file + derived leaderboards).

Every operation runs under the file store lock. Mutations read the whole
file, push each line through decode -> migrate -> repair, edit the line set in
memory and rewrite the file in one go. Nothing raises past this class:
failures are logged and reported as False / None / empty results.
"""
import logging
import time
from datetime import timedelta
from typing import Callable
from uuid import UUID

from skillvault.application.collaborators import (
    OfflinePlayerDirectory,
    ProgressionStore,
    UpgradeTracker,
    UuidBackfill,
)
from skillvault.config import StoreSettings
from skillvault.domain import schema
from skillvault.domain.enums import PrimarySkill, UpgradeType
from skillvault.domain.errors import MalformedUuidError, RecordBuildError, SchemaTooOldError
from skillvault.domain.record import PlayerRecord, PlayerStat, check_name
from skillvault.infrastructure import audit
from skillvault.infrastructure.flatfile.codec import RecordCodec
from skillvault.infrastructure.flatfile.file_store import FileStore
from skillvault.infrastructure.flatfile.migration import SchemaMigrator
from skillvault.infrastructure.flatfile.validator import IntegrityValidator
from skillvault.infrastructure.repositories.leaderboard_index import LeaderboardIndex

log = logging.getLogger("skillvault.flatfile")

INVALID_OLD_USERNAME = "_INVALID_OLD_USERNAME_'"
CONVERT_PROGRESS_INTERVAL = 200


def _same_name(a: str, b: str) -> bool:
    return a.casefold() == b.casefold()


def _all_levels_zero(levels: dict) -> bool:
    return all(level == 0 for level in levels.values())


class FlatFileProgressionRepository:
    """Flat-file backed player records."""

    def __init__(
        self,
        settings: StoreSettings,
        upgrade_tracker: UpgradeTracker | None = None,
        offline_players: OfflinePlayerDirectory | None = None,
        uuid_backfill: UuidBackfill | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._settings = settings
        self._upgrades = upgrade_tracker
        self._offline_players = offline_players
        self._uuid_backfill = uuid_backfill
        self._clock = clock

        healthbar = settings.mob_healthbar_default
        self._store = FileStore(settings.users_file_path)
        self._codec = RecordCodec(healthbar)
        self._migrator = SchemaMigrator(healthbar)
        self._validator = IntegrityValidator(healthbar)
        self._leaderboards = LeaderboardIndex(
            self._records_for_leaderboards,
            refresh_interval=settings.leaderboard_refresh_seconds,
            clock=clock,
        )

    @property
    def store(self) -> FileStore:
        return self._store

    @property
    def leaderboards(self) -> LeaderboardIndex:
        return self._leaderboards

    def _now(self) -> int:
        return int(self._clock())

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Validate the file, build the first leaderboards, kick off the UUID backfill."""
        self.check_structure()
        self._leaderboards.refresh(force=True)
        if (
            self._upgrades is not None
            and self._uuid_backfill is not None
            and self._upgrades.should_upgrade(UpgradeType.ADD_UUIDS)
        ):
            self._uuid_backfill.start(self.list_names_for_backfill())

    def check_structure(self) -> dict:
        """Rewrite the file in the current layout, repairing what can be repaired.

        Returns counts of kept, dropped and updated lines.
        """
        report = {"ok": True, "kept": 0, "dropped": 0, "updated": 0}
        try:
            if self._store.ensure_exists():
                log.info("Creating users file %s", self._store.path)
                self._complete_flatfile_upgrades()
                return report

            now = self._now()
            with self._store.transaction() as lines:
                output = []
                usernames = set()
                players = set()

                for line in lines:
                    if not line:
                        continue
                    fields = self._structure_fields(line, usernames, players, now, report)
                    if fields is None:
                        report["dropped"] += 1
                        continue
                    output.append(self._codec.join(fields))
                    report["kept"] += 1

                lines[:] = output
        except OSError as exc:
            log.error(
                "Exception while reading %s (Are you sure you formatted it correctly?) %s",
                self._store.path, exc,
            )
            report["ok"] = False
            return report

        self._complete_flatfile_upgrades()
        return report

    def _structure_fields(self, line, usernames, players, now, report) -> list | None:
        try:
            fields = self._codec.decode(line)
        except MalformedUuidError as exc:
            log.warning("Dropping line for %s: %s", self._codec.username_of(line), exc)
            return None

        original_length = len(fields)
        updated = False

        # Same username present more than once.
        key = fields[schema.USERNAME].casefold()
        if key in usernames:
            fields[schema.USERNAME] = INVALID_OLD_USERNAME
            updated = True
            if len(fields) <= schema.UUID_INDEX or fields[schema.UUID_INDEX] == schema.NULL_UUID:
                log.warning("Dropping duplicate entry for %s without a UUID", key)
                return None
        else:
            usernames.add(key)

        try:
            migrated = self._migrator.migrate(fields)
        except SchemaTooOldError:
            log.warning("Dropping malformed or before version 1.0 line from database - %s", line)
            return None

        checked = self._validator.repair(migrated.fields, now)
        fields = checked.fields
        name = fields[schema.USERNAME]

        if self._settings.truncate_skills:
            updated |= self._truncate_levels(fields)

        if checked.corrupted:
            log.info("Updating corrupted database line for player %s", name)
        if migrated.old_version is not None:
            log.info("Updating database line from before version %s for player %s",
                     migrated.old_version, name)

        try:
            self._codec.check_uuid(fields)
        except MalformedUuidError as exc:
            log.warning("Dropping line for %s after migration: %s", name, exc)
            return None

        # Same player present more than once. Expanded lines are not checked.
        uuid = fields[schema.UUID_INDEX].lower()
        if len(fields) == original_length and uuid and uuid != schema.NULL_UUID.lower():
            if uuid in players:
                log.warning("Dropping duplicate entry for UUID %s", uuid)
                return None
            players.add(uuid)

        if updated or checked.corrupted or migrated.updated:
            report["updated"] += 1
        return fields

    def _truncate_levels(self, fields: list) -> bool:
        changed = False
        for skill, index in schema.SKILL_LEVEL_INDEX.items():
            cap = self._settings.cap_for(skill)
            if cap is not None and int(fields[index]) > cap:
                log.warning("Truncating %s to configured max level for player %s",
                            skill.value, fields[schema.USERNAME])
                fields[index] = str(cap)
                changed = True
        return changed

    def _complete_flatfile_upgrades(self) -> None:
        if self._upgrades is None:
            return
        for upgrade in UpgradeType.flatfile_upgrades():
            self._upgrades.set_upgrade_completed(upgrade)

    # ------------------------------------------------------------------
    # Record pipeline
    # ------------------------------------------------------------------

    def _fields(self, line: str) -> list | None:
        """decode -> migrate -> repair; None means drop the line."""
        if not line:
            return None
        try:
            fields = self._codec.decode(line)
            migrated = self._migrator.migrate(fields)
        except MalformedUuidError as exc:
            log.warning("Skipping entry for %s: %s", self._codec.username_of(line), exc)
            return None
        except SchemaTooOldError:
            log.warning("Dropping malformed or before version 1.0 line from database - %s", line)
            return None

        name = migrated.fields[schema.USERNAME]
        if migrated.updated:
            log.info("Updating database line from before version %s for player %s",
                     migrated.old_version, name)

        checked = self._validator.repair(migrated.fields, self._now())
        if checked.corrupted:
            log.info("Updating corrupted database line for player %s", name)

        try:
            self._codec.check_uuid(checked.fields)
        except MalformedUuidError as exc:
            log.warning("Skipping entry for %s: %s", name, exc)
            return None
        return checked.fields

    def _build(self, fields: list) -> PlayerRecord | None:
        try:
            return self._codec.build(fields)
        except RecordBuildError as exc:
            log.critical(
                "Critical failure when trying to construct player data for %s: %s",
                fields[schema.USERNAME], exc,
            )
            return None

    def _records(self) -> list:
        records = []
        for line in self._store.read_lines():
            fields = self._fields(line)
            if fields is None:
                continue
            record = self._build(fields)
            if record is not None:
                records.append(record)
        return records

    def _records_for_leaderboards(self) -> list:
        with self._store.locked():
            return self._records()

    def _io_failed(self, exc: OSError) -> None:
        log.error(
            "Exception while reading %s (Are you sure you formatted it correctly?) %s",
            self._store.path, exc,
        )

    def _audit(self, action: str, subject: str | None, payload: dict | None = None) -> None:
        log_file = self._settings.audit_file
        if log_file is None:
            return
        try:
            audit.log_event(log_file, action, subject, payload)
        except OSError as exc:
            log.warning("Could not write audit entry %s: %s", action, exc)

    # ------------------------------------------------------------------
    # Lookup / creation
    # ------------------------------------------------------------------

    def load_record(self, name: str, uuid: UUID | None = None,
                    create_if_missing: bool = False) -> PlayerRecord | None:
        """Find a player by UUID (or by name for legacy NULL-UUID lines)."""
        try:
            check_name(name or "")
        except ValueError as exc:
            log.error("Cannot look up player: %s", exc)
            return None
        try:
            with self._store.locked():
                for line in self._store.read_lines():
                    fields = self._fields(line)
                    if fields is None:
                        continue

                    stored_name = fields[schema.USERNAME]
                    stored_uuid = fields[schema.UUID_INDEX]
                    if stored_uuid in ("", schema.NULL_UUID):
                        # No UUID on file yet, the name is all we can compare.
                        if not _same_name(stored_name, name):
                            continue
                    elif uuid is not None:
                        if stored_uuid.lower() != str(uuid).lower():
                            continue
                    elif not _same_name(stored_name, name):
                        continue

                    record = self._build(fields)
                    if record is None:
                        return None
                    if name and not _same_name(stored_name, name):
                        log.info("Name change detected: %s => %s", stored_name, name)
                        record.rename(name)
                    return record

                if not create_if_missing:
                    return None
                if uuid is None:
                    log.error("Cannot create a record for %s without a UUID", name)
                    return None
                return self.new_record(name, uuid)
        except OSError as exc:
            self._io_failed(exc)
            return None

    def load_record_by_uuid(self, uuid: UUID) -> PlayerRecord | None:
        return self.load_record("", uuid, create_if_missing=False)

    def new_record(self, name: str, uuid: UUID | None) -> PlayerRecord | None:
        """Append a fresh record at the end of the file."""
        try:
            record = PlayerRecord.new(
                name,
                uuid,
                starting_level=self._settings.starting_level,
                mob_health_bar=self._settings.mob_healthbar_default,
                now=self._now(),
            )
        except ValueError as exc:
            log.error("Cannot create a record: %s", exc)
            return None
        try:
            self._store.append_line(self._codec.join(self._codec.to_fields(record)))
        except OSError as exc:
            self._io_failed(exc)
            return None
        return record

    def list_all_names(self) -> list:
        """Stored usernames in file order."""
        try:
            with self._store.locked():
                return [
                    self._codec.username_of(line)
                    for line in self._store.read_lines()
                    if line
                ]
        except OSError as exc:
            self._io_failed(exc)
            return []

    def list_names_for_backfill(self) -> list:
        """Names handed to the one-time UUID backfill."""
        return self.list_all_names()

    # ------------------------------------------------------------------
    # Mutations (whole-file rewrite)
    # ------------------------------------------------------------------

    def save_record(self, record: PlayerRecord) -> bool:
        """Replace the player's line (matched by UUID or name) or append it.

        The stored last-login is stamped with the current time.
        """
        stamped = self._codec.to_fields(record)
        stamped[schema.LAST_LOGIN] = str(self._now())
        encoded = self._codec.join(stamped)
        uuid_text = str(record.uuid).lower() if record.uuid else None
        try:
            with self._store.transaction() as lines:
                output = []
                wrote = False
                for line in lines:
                    fields = self._fields(line)
                    if fields is None:
                        continue
                    matches = (
                        uuid_text is not None
                        and fields[schema.UUID_INDEX].lower() == uuid_text
                    ) or _same_name(fields[schema.USERNAME], record.name)
                    if not matches:
                        output.append(self._codec.join(fields))
                    elif not wrote:
                        output.append(encoded)
                        wrote = True
                if not wrote:
                    output.append(encoded)
                lines[:] = output
        except OSError as exc:
            self._io_failed(exc)
            return False
        return True

    def remove_record(self, name: str) -> bool:
        """Drop the first line whose username matches. False if absent."""
        found = False
        try:
            with self._store.transaction() as lines:
                output = []
                for line in lines:
                    fields = self._fields(line)
                    if fields is None:
                        continue
                    if not found and _same_name(fields[schema.USERNAME], name):
                        log.info("User found, removing...")
                        found = True
                        continue
                    output.append(self._codec.join(fields))
                lines[:] = output
        except OSError as exc:
            self._io_failed(exc)
            return False

        if found:
            self._audit("remove_record", name)
        return found

    def purge_where(self, predicate: Callable[[dict], bool]) -> int:
        """Remove every player whose skill-level mapping satisfies ``predicate``."""
        removed = 0
        try:
            with self._store.transaction() as lines:
                output = []
                for line in lines:
                    fields = self._fields(line)
                    if fields is None:
                        continue
                    if predicate(self._codec.skill_levels(fields)):
                        removed += 1
                        continue
                    output.append(self._codec.join(fields))
                lines[:] = output
        except OSError as exc:
            self._io_failed(exc)
            return 0

        log.info("Purged %d users from the database.", removed)
        return removed

    def purge_powerless(self) -> int:
        log.info("Purging powerless users...")
        removed = self.purge_where(_all_levels_zero)
        self._audit("purge_powerless", None, {"removed": removed})
        return removed

    def purge_stale_since(self, cutoff: timedelta | int, now: int | None = None) -> int:
        """Remove players not seen within ``cutoff``.

        A zero last-login is resolved through the offline player directory and
        written back for players that survive the purge.
        """
        log.info("Purging old users...")
        cutoff_seconds = cutoff.total_seconds() if isinstance(cutoff, timedelta) else cutoff
        now = self._now() if now is None else now
        removed = 0
        try:
            with self._store.transaction() as lines:
                output = []
                for line in lines:
                    fields = self._fields(line)
                    if fields is None:
                        continue
                    last_login = int(fields[schema.LAST_LOGIN])
                    backfilled = False
                    if last_login == 0:
                        last_login = self._last_seen(fields[schema.USERNAME])
                        if last_login is None:
                            output.append(self._codec.join(fields))
                            continue
                        backfilled = True

                    if now - last_login > cutoff_seconds:
                        removed += 1
                        continue
                    if backfilled:
                        fields[schema.LAST_LOGIN] = str(last_login)
                    output.append(self._codec.join(fields))
                lines[:] = output
        except OSError as exc:
            self._io_failed(exc)
            return 0

        log.info("Purged %d users from the database.", removed)
        self._audit("purge_stale", None, {"removed": removed, "cutoff_seconds": cutoff_seconds})
        return removed

    def _last_seen(self, name: str) -> int | None:
        if self._offline_players is None:
            return None
        try:
            return int(self._offline_players.last_seen(name) or 0)
        except Exception as exc:
            log.warning("Offline player lookup failed for %s: %s", name, exc)
            return None

    def reset_mob_health_settings(self) -> bool:
        """Set every player's mob healthbar mode to the configured default."""
        default = self._settings.mob_healthbar_default.value
        try:
            with self._store.transaction() as lines:
                output = []
                for line in lines:
                    fields = self._fields(line)
                    if fields is None:
                        continue
                    fields[schema.HEALTHBAR] = default
                    output.append(self._codec.join(fields))
                lines[:] = output
        except OSError as exc:
            self._io_failed(exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def convert_to(self, destination: ProgressionStore) -> int:
        """Copy every readable record into another store. Returns the count copied."""
        converted = 0
        started = time.monotonic()
        try:
            with self._store.locked():
                for record in self._records():
                    try:
                        if destination.save_record(record) is False:
                            log.warning("Destination refused record for %s", record.name)
                            continue
                    except Exception:
                        log.exception("Could not convert record for %s", record.name)
                        continue
                    converted += 1
                    if converted % CONVERT_PROGRESS_INTERVAL == 0:
                        log.info("Converted %d users (%.1fs)", converted,
                                 time.monotonic() - started)
        except OSError as exc:
            self._io_failed(exc)
        return converted

    # ------------------------------------------------------------------
    # Leaderboards
    # ------------------------------------------------------------------

    def read_leaderboard_page(self, skill: PrimarySkill | None, page: int,
                              page_size: int) -> list[PlayerStat]:
        self._leaderboards.refresh()
        try:
            return self._leaderboards.page(skill, page, page_size)
        except ValueError as exc:
            log.warning("Leaderboard request rejected: %s", exc)
            return []

    def read_ranks(self, name: str) -> dict:
        """Rank per stored skill plus the power-level rank under the ``None`` key."""
        self._leaderboards.refresh()
        return self._leaderboards.ranks(name)
