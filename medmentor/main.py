import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from medmentor.api import advisor, conversations
from medmentor.core.config import Settings
from medmentor.db.session import init_db, make_engine, make_session_factory

logger = logging.getLogger("medmentor")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("MedMentor RAG starting up")
    await init_db(app.state.engine)
    yield
    logger.info("MedMentor RAG shutting down")
    gateway = getattr(app.state, "gateway", None)
    if gateway is not None:
        await gateway.aclose()
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = make_engine(settings)
    app.state.session_factory = make_session_factory(app.state.engine)
    app.state.gateway = None

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    app.include_router(advisor.router)
    app.include_router(conversations.router)
    return app


app = create_app()
