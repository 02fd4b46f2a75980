import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import Engine

from dailyposts.api import auth, comments, health, posts, storage, users
from dailyposts.api.error_handlers import register_error_handlers
from dailyposts.core.config import Settings
from dailyposts.core.context import AppContext


@asynccontextmanager
async def lifespan(app: FastAPI):
    ctx: AppContext = app.state.context

    # Configure logging based on settings
    logging.basicConfig(
        level=logging.DEBUG if ctx.settings.debug else ctx.settings.log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s" if ctx.settings.debug
        else "%(levelname)-8s %(name)s: %(message)s",
    )

    ctx.executor.init_db()
    ctx.settings.upload_dir.mkdir(parents=True, exist_ok=True)

    yield


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.context = AppContext.build(settings, engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(posts.router, prefix="/api/posts", tags=["posts"])
    app.include_router(comments.router, prefix="/api/comments", tags=["comments"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(storage.router, prefix="/api/storage", tags=["storage"])
    app.include_router(health.router, prefix="/api/health", tags=["health"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=app.state.context.settings.host, port=app.state.context.settings.port)
