"""
app.py: FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires all services, registers routers, and runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from hotel_backend.controllers.account_controller import router as account_router
from hotel_backend.controllers.auth_controller import router as auth_router
from hotel_backend.controllers.availability_controller import router as availability_router
from hotel_backend.controllers.booking_controller import router as booking_router
from hotel_backend.controllers.errors import register_error_handlers
from hotel_backend.controllers.hotel_controller import router as hotel_router
from hotel_backend.controllers.manager_controller import router as manager_router
from hotel_backend.repository.data_repository import DataRepository
from hotel_backend.services.account_service import AccountService
from hotel_backend.services.auth_service import AuthService
from hotel_backend.services.availability_service import AvailabilityService
from hotel_backend.services.booking_service import BookingService
from hotel_backend.services.hotel_service import HotelService
from hotel_backend.utils.config import Settings, get_settings
from hotel_backend.utils.logger import configure_logging, get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Instantiates all services with explicit dependency injection via app.state.
    Every dependency is traceable from this function.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    # --- Repository (one SQLite connection per operation) ---
    repository = DataRepository(settings)

    # --- Services (business logic, no direct SQL) ---
    availability_service = AvailabilityService(repository=repository, settings=settings)
    booking_service = BookingService(repository=repository, settings=settings)
    hotel_service = HotelService(repository=repository, settings=settings)
    auth_service = AuthService(repository=repository, settings=settings)
    account_service = AccountService(
        repository=repository,
        auth_service=auth_service,
        settings=settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield
        logger.info("Shutdown: stopping availability workers")
        availability_service.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(availability_router)
    app.include_router(booking_router)
    app.include_router(hotel_router)
    app.include_router(auth_router)
    app.include_router(account_router)
    app.include_router(manager_router)

    # --- Inject services into app.state for dependency resolution ---
    app.state.settings = settings
    app.state.repository = repository
    app.state.availability_service = availability_service
    app.state.booking_service = booking_service
    app.state.hotel_service = hotel_service
    app.state.auth_service = auth_service
    app.state.account_service = account_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Order matters:
      1. Schema must exist before any account or catalogue rows.
      2. The bootstrap admin is created once, only if no admin exists.
      3. Demo hotels are seeded last and only into an empty catalogue.
    """
    settings: Settings = app.state.settings
    repository: DataRepository = app.state.repository
    auth_service: AuthService = app.state.auth_service

    logger.info("Startup: initializing database schema | path=%s", settings.database_path)
    repository.initialize_database()

    logger.info("Startup: ensuring bootstrap admin account")
    auth_service.ensure_bootstrap_admin()

    if settings.seed_demo_data:
        seeded = repository.seed_demo_data()
        logger.info("Startup: seeded demo catalogue | room_types=%s", seeded)

    logger.info("Startup complete, accepting requests")


# Module-level app object for uvicorn
app = create_app()
