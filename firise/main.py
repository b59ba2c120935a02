import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from firise import __version__, config
from firise.database import create_storage
from firise.errors import register_error_handlers
from firise.routes.article_routes import router as article_router
from firise.routes.budget_routes import router as budget_router
from firise.routes.category_routes import router as category_router
from firise.routes.expense_routes import router as expense_router
from firise.routes.goal_routes import router as goal_router
from firise.routes.health_routes import router as health_router
from firise.routes.resource_routes import router as resource_router
from firise.routes.user_routes import router as user_router

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app(storage=None) -> FastAPI:
    """Build the API around one storage instance.

    When no storage is passed the configured backend is created (and seeded)
    here, once, and lives as long as the app.
    """
    if storage is None:
        storage = create_storage()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.storage.close()

    app = FastAPI(title="FiRise API", version=__version__, lifespan=lifespan)
    app.state.storage = storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials="*" not in config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    for router in (
        health_router,
        user_router,
        category_router,
        expense_router,
        goal_router,
        budget_router,
        resource_router,
        article_router,
    ):
        app.include_router(router)

    return app


# Serve with: uvicorn firise.main:create_app --factory
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("firise.main:create_app", factory=True, host=config.HOST, port=config.PORT)
