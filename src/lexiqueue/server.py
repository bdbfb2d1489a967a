import logging
import time
from contextlib import asynccontextmanager
from typing import Literal

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from lexiqueue.application.registry import EngineRegistry
from lexiqueue.application.session import SessionState
from lexiqueue.consts import VERSION
from lexiqueue.domain.errors import GradeCommitFailure, GradeInProgress
from lexiqueue.domain.rating import Rating

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("lexiqueue.server")

_registry: EngineRegistry | None = None


def get_registry() -> EngineRegistry:
    global _registry
    if _registry is None:
        from lexiqueue.application.config import resolve_config
        from lexiqueue.application.factory import build_registry

        _registry = build_registry(resolve_config())
    return _registry


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _registry
    # Startup
    logger.info(f"lexiqueue server v{VERSION} starting up...")
    yield
    # Shutdown
    if _registry is not None:
        await _registry.aclose()
        _registry = None
    logger.info("lexiqueue server shutting down...")


app = FastAPI(
    title="lexiqueue",
    description="Local review-session API for vocabulary UI clients.",
    version=VERSION,
    lifespan=lifespan,
)

Mode = Literal["learn", "review"]


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class RefreshRequest(BaseModel):
    category: str | None = None
    reset: bool = True


class GradeRequest(BaseModel):
    rating: Rating
    duration_ms: int | None = Field(default=None, alias="durationMs", ge=0)
    category: str | None = None


class SkipRequest(BaseModel):
    duration_ms: int | None = Field(default=None, alias="durationMs", ge=0)
    category: str | None = None


start_time = time.time()


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/session/{mode}")
async def get_session(
    mode: Mode,
    category: str | None = None,
    registry: EngineRegistry = Depends(get_registry),
):
    """Current card, stats and session meta; loads the first batch on first access."""
    engine = registry.get(mode, category)
    if engine.state is SessionState.IDLE:
        await engine.start()
    return engine.to_dict()


@app.post("/session/{mode}/refresh")
async def refresh_session(
    mode: Mode,
    req: RefreshRequest,
    registry: EngineRegistry = Depends(get_registry),
):
    engine = registry.get(mode, req.category)
    await engine.refresh(reset=req.reset)
    return engine.to_dict()


@app.post("/session/{mode}/grade")
async def grade_card(
    mode: Mode,
    req: GradeRequest,
    registry: EngineRegistry = Depends(get_registry),
):
    engine = registry.get(mode, req.category)
    return await _grade(engine, req.rating, req.duration_ms)


@app.post("/session/{mode}/skip")
async def skip_card(
    mode: Mode,
    req: SkipRequest,
    registry: EngineRegistry = Depends(get_registry),
):
    engine = registry.get(mode, req.category)
    return await _grade(engine, Rating.SKIP, req.duration_ms)


@app.delete("/session/{mode}")
async def close_session(
    mode: Mode,
    category: str | None = None,
    registry: EngineRegistry = Depends(get_registry),
):
    registry.close(mode, category)
    return {"ok": True}


async def _grade(engine, rating: Rating, duration_ms: int | None):
    try:
        await engine.grade_card(rating, duration_ms=duration_ms)
    except GradeInProgress as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except GradeCommitFailure as e:
        logger.error(f"Grade commit failed: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e
    return engine.to_dict()
