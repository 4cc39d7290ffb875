# looproute/main.py

from fastapi import FastAPI

from looproute.api.v1 import routes_health, routes_navigation, routes_routing
from looproute.core.config import settings
from looproute.core.logger import logger


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Loop route generation and live turn-by-turn guidance.",
    )

    # Routers
    app.include_router(routes_health.router, prefix="", tags=["health"])
    app.include_router(routes_routing.router, prefix="", tags=["routing"])
    app.include_router(routes_navigation.router, prefix="", tags=["navigation"])

    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT}) ready")
    return app


app = create_app()
