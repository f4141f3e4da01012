import logging
from contextlib import asynccontextmanager
from random import Random

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from lastinn.core.engine.game import GameEngine
from lastinn.core.persistence.progress_store import SqlProgressStore
from lastinn.db.init_db import init_db
from lastinn.api.routers.game import router as game_router
from lastinn.api.routers.progress import router as progress_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        init_db()
    except SQLAlchemyError as e:
        # progress just won't persist
        logger.warning("Database unavailable: %s", e)
    # single-player: one engine per process
    app.state.engine = GameEngine(Random(), progress_store=SqlProgressStore())
    logger.info("Game engine ready")
    yield
    app.state.engine = None


app = FastAPI(title="The Last Inn", lifespan=lifespan)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(game_router)
app.include_router(progress_router)
