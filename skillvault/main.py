"""Entry point. Loads settings, prepares the users file and serves the API.

Run with ``uvicorn skillvault.main:app`` or ``python -m skillvault.main``.
"""
import logging

from fastapi import FastAPI

from skillvault.api.routes.leaderboard_routes import health_router, init_routes, router
from skillvault.api.routes.maintenance_routes import (
    init_maintenance_routes,
    router as maintenance_router,
)
from skillvault.application.collaborators import InMemoryUpgradeTracker
from skillvault.application.maintenance_service import MaintenanceService
from skillvault.config import StoreSettings, load_settings
from skillvault.infrastructure.repositories.flatfile_repository import (
    FlatFileProgressionRepository,
)

log = logging.getLogger("skillvault.startup")


def create_app(settings: StoreSettings | None = None) -> FastAPI:
    settings = settings or load_settings()

    repository = FlatFileProgressionRepository(
        settings,
        upgrade_tracker=InMemoryUpgradeTracker(),
    )
    repository.start()
    log.info("Users file ready at %s", settings.users_file_path)

    app = FastAPI(
        title="skillvault",
        description="Flat-file player progression store and leaderboards.",
        version="1.0.0",
    )
    init_routes(repository)
    init_maintenance_routes(MaintenanceService(repository, settings))
    app.include_router(router)
    app.include_router(maintenance_router)
    app.include_router(health_router)
    app.state.repository = repository
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run("skillvault.main:app", host="0.0.0.0", port=8000)
