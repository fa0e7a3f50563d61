"""
Integration tests for maintenance routes.

Covers:
- POST /api/maintenance/run (both purges, single purge, nothing selected)
"""
import os

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from skillvault.api.routes.maintenance_routes import init_maintenance_routes, router
from skillvault.application.maintenance_service import MaintenanceService
from tests.conftest import NOW, make_line, write_users

DAY = 24 * 60 * 60


@pytest.fixture
def client(repo, settings, users_path):
    os.makedirs(os.path.dirname(users_path), exist_ok=True)
    write_users(users_path, [
        make_line("active", None, levels={"mining": 4}, last_login=NOW - DAY),
        make_line("powerless", None, last_login=NOW - DAY),
        make_line("gone", None, levels={"axes": 9}, last_login=NOW - 365 * DAY),
    ])

    app = FastAPI()
    init_maintenance_routes(MaintenanceService(repo, settings))
    app.include_router(router)
    return TestClient(app)


class TestMaintenanceRun:
    def test_runs_both_purges(self, client, repo):
        resp = client.post("/api/maintenance/run", json={})
        assert resp.status_code == 200
        body = resp.json()
        assert body["powerless_removed"] == 1
        assert body["inactive_removed"] == 1
        assert body["total_removed"] == 2
        assert repo.list_all_names() == ["active"]

    def test_inactive_only(self, client, repo):
        body = client.post("/api/maintenance/run", json={"powerless": False}).json()
        assert body["powerless_removed"] == 0
        assert body["inactive_removed"] == 1
        assert repo.list_all_names() == ["active", "powerless"]

    def test_nothing_selected_400(self, client, repo):
        resp = client.post("/api/maintenance/run", json={"powerless": False, "inactive": False})
        assert resp.status_code == 400
        assert len(repo.list_all_names()) == 3
