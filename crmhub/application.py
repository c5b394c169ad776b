# crmhub/application.py
import logging
from typing import Optional

from fastapi import FastAPI

from crmhub.config.security import setup_security_middleware
from crmhub.config.settings import Settings, load_settings
from crmhub.core.handlers import register_exception_handlers
from crmhub.core.log_config import configure_logging
from crmhub.database import build_engine, build_session_factory, create_tables
from crmhub.routers import (
    activities,
    analytics,
    attendance,
    auth,
    deals,
    employees,
    leads,
    posting_schedule,
    social_profiles,
    tasks,
    users,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around one settings object"""
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="CRM Hub API")
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    if settings.auto_create_tables:
        create_tables(app.state.engine)

    setup_security_middleware(app, settings)
    register_exception_handlers(app)

    # Route registration
    for router in (
        auth.router,
        users.router,
        leads.router,
        deals.router,
        employees.router,
        tasks.router,
        attendance.router,
        social_profiles.router,
        posting_schedule.router,
        analytics.router,
        activities.router,
    ):
        app.include_router(router, prefix=API_PREFIX)

    if settings.environment == "development":
        app.include_router(auth.dev_router, prefix=API_PREFIX)
        if settings.passwordless_login_enabled:
            logger.warning("Passwordless login is enabled for accounts without a password")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info("CRM Hub API configured for %s", settings.environment)
    return app
