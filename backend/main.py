import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from config import Settings, settings
from database import engine, ensure_schema
from routers.leaderboard import router as leaderboard_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def init_schema(bind: Engine) -> bool:
    """Run the schema check, logging instead of failing when the DB is down."""
    try:
        ensure_schema(bind)
    except SQLAlchemyError as e:
        logger.error(f"Error checking or creating table: {e}")
        return False
    return True


def cors_options(config: Settings) -> dict:
    options = {
        "allow_methods": ["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        "allow_headers": ["*"],
        "allow_credentials": True,
    }
    if config.CORS_ALLOW_ALL:
        # reflect whatever origin the browser sends
        options["allow_origin_regex"] = ".*"
    else:
        options["allow_origins"] = config.cors_origins
    return options


def create_app(config: Settings = settings, bind: Engine = engine) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_: FastAPI):
        init_schema(bind)
        yield

    app = FastAPI(title=config.PROJECT_NAME, version="1.0.0", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, **cors_options(config))
    app.include_router(leaderboard_router, prefix="")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    logger.info(f"Server is running on port {settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
