"""Tests for MaintenanceService."""
import json
import os

from skillvault.application.maintenance_service import MaintenanceService
from tests.conftest import NOW, make_line, write_users

DAY = 24 * 60 * 60


def _seed(users_path):
    os.makedirs(os.path.dirname(users_path), exist_ok=True)
    write_users(users_path, [
        make_line("active", None, levels={"mining": 4}, last_login=NOW - DAY),
        make_line("powerless", None, last_login=NOW - DAY),
        make_line("gone", None, levels={"axes": 9}, last_login=NOW - 365 * DAY),
    ])


class TestMaintenanceRun:
    def test_runs_both_purges(self, repo, settings, users_path):
        _seed(users_path)
        summary = MaintenanceService(repo, settings).run()
        assert summary["powerless_removed"] == 1
        assert summary["inactive_removed"] == 1
        assert summary["total_removed"] == 2
        assert repo.list_all_names() == ["active"]

    def test_powerless_only(self, repo, settings, users_path):
        _seed(users_path)
        summary = MaintenanceService(repo, settings).run(inactive=False)
        assert summary["inactive_removed"] == 0
        assert repo.list_all_names() == ["active", "gone"]

    def test_purge_inactive_uses_configured_window(self, repo, settings, users_path):
        _seed(users_path)
        settings = settings.model_copy(update={"purge_months": 24})
        assert MaintenanceService(repo, settings).purge_inactive() == 0

    def test_runs_are_audited(self, repo, settings, users_path):
        _seed(users_path)
        MaintenanceService(repo, settings).run()
        with open(settings.audit_file, encoding="utf-8") as f:
            actions = [json.loads(line)["action"] for line in f]
        assert actions == ["purge_powerless", "purge_stale", "maintenance_run"]

    def test_run_summary_is_audited(self, repo, settings, users_path):
        _seed(users_path)
        summary = MaintenanceService(repo, settings).run(powerless=False)
        with open(settings.audit_file, encoding="utf-8") as f:
            entries = [json.loads(line) for line in f]
        assert entries[-1]["action"] == "maintenance_run"
        assert entries[-1]["payload"] == summary
        assert entries[-1]["payload"]["inactive_removed"] == 1
