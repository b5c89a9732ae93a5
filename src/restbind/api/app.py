from __future__ import annotations

from fastapi import FastAPI

from restbind.api.routes.health import router as health_router
from restbind.api.routes.resources import router as resources_router


def create_app() -> FastAPI:
    app = FastAPI(
        title="restbind demo API",
        description="In-memory REST resources for exercising restbind collections.",
        version="0.1.0",
    )

    # Health routes first so /health is not captured by /{resource}
    app.include_router(health_router, include_in_schema=False)
    app.include_router(resources_router)

    return app
