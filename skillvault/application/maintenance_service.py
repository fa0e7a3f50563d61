"""Scheduled store maintenance -- powerless and inactive player purges."""
import logging
from datetime import datetime, timezone

from skillvault.config import StoreSettings
from skillvault.infrastructure import audit

log = logging.getLogger("skillvault.maintenance")


class MaintenanceService:
    """Runs the purge jobs against a repository and reports what they removed."""

    def __init__(self, repository, settings: StoreSettings):
        self._repo = repository
        self._settings = settings

    def purge_powerless(self) -> int:
        return self._repo.purge_powerless()

    def purge_inactive(self) -> int:
        return self._repo.purge_stale_since(self._settings.old_user_cutoff)

    def run(self, powerless: bool = True, inactive: bool = True) -> dict:
        started = datetime.now(timezone.utc)
        summary = {
            "started_at": started.isoformat(),
            "powerless_removed": 0,
            "inactive_removed": 0,
        }
        if powerless:
            summary["powerless_removed"] = self.purge_powerless()
        if inactive:
            summary["inactive_removed"] = self.purge_inactive()
        summary["total_removed"] = summary["powerless_removed"] + summary["inactive_removed"]
        log.info(
            "Maintenance finished: %d powerless, %d inactive (cutoff %d days)",
            summary["powerless_removed"],
            summary["inactive_removed"],
            self._settings.old_user_cutoff.days,
        )
        self._audit(summary)
        return summary

    def _audit(self, summary: dict) -> None:
        log_file = self._settings.audit_file
        if log_file is None:
            return
        try:
            audit.log_event(log_file, "maintenance_run", None, summary)
        except OSError as exc:
            log.warning("Could not write maintenance audit entry: %s", exc)
