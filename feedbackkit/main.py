"""FastAPI application exposing feedback flows over HTTP."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from feedbackkit.config import Settings, settings as default_settings
from feedbackkit.logging_config import setup_logging
from feedbackkit.routes import flows as flows_module
from feedbackkit.services.dependencies import FeedbackDependencies, build_dependencies
from feedbackkit.services.flow_registry import FlowRegistry

logger = logging.getLogger("feedbackkit.main")


def create_app(
    settings: Settings | None = None,
    dependencies: FeedbackDependencies | None = None,
) -> FastAPI:
    """Build the app. Missing backend configuration fails here, not mid-flow."""
    settings = settings or default_settings
    dependencies = dependencies or build_dependencies(settings)
    registry = FlowRegistry(
        dependencies,
        copied_confirmation_delay=settings.copied_confirmation_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting feedbackkit (environment=%s)", settings.environment)
        logger.info("Feedback provider: %s", dependencies.provider.name)
        yield
        dismissed = registry.dismiss_all()
        logger.info("Shutdown complete; dismissed %s open flows", dismissed)

    app = FastAPI(title="feedbackkit", lifespan=lifespan)
    app.state.settings = settings
    app.state.flow_registry = registry
    app.include_router(flows_module.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "provider": dependencies.provider.name, "open_flows": len(registry)}

    return app


def get_app() -> FastAPI:
    """Uvicorn factory entry point: ``uvicorn feedbackkit.main:get_app --factory``."""
    setup_logging()
    return create_app()
