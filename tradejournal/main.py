"""Trade journal: FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tradejournal import __version__
from tradejournal.api import analytics, catalog, coach, profile, trades
from tradejournal.config import settings
from tradejournal.database import engine, init_models
from tradejournal.services.journal.errors import (
    PersistenceUnavailable,
    TradeNotFound,
    TradeValidationError,
)
from tradejournal.services.journal.normalize import trade_to_dict

logger = logging.getLogger(__name__)

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: create tables if missing. Shutdown: dispose engine."""
    try:
        await init_models()
        logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
    except Exception as e:
        logger.error("Database initialisation failed: %s", e)
        raise
    yield
    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title="Trade Journal",
    description="Trade lifecycle and quality-scoring journal for discretionary traders",
    version=__version__,
    lifespan=lifespan,
)

# Local single-user app: only the dev frontends are allowed
if settings.app_env == "development":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:8000", "http://localhost:3000", "http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["Content-Type"],
    )

app.include_router(trades.router)
app.include_router(analytics.router)
app.include_router(profile.router)
app.include_router(coach.router)
app.include_router(catalog.router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies. Offending input is not echoed back (it may be inf or NaN)."""
    errors = [{k: v for k, v in err.items() if k not in ("input", "ctx")} for err in exc.errors()]
    return JSONResponse(
        status_code=422, content={"detail": jsonable_encoder(errors), "error": type(exc).__name__}
    )


@app.exception_handler(TradeValidationError)
async def validation_error_handler(request: Request, exc: TradeValidationError):
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc), "error": type(exc).__name__})


@app.exception_handler(TradeNotFound)
async def not_found_handler(request: Request, exc: TradeNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc), "error": type(exc).__name__})


@app.exception_handler(PersistenceUnavailable)
async def persistence_error_handler(request: Request, exc: PersistenceUnavailable):
    """The computed trade is still returned so the caller can retry the save."""
    content = {"detail": str(exc), "error": type(exc).__name__}
    if exc.trade is not None:
        content["trade"] = trade_to_dict(exc.trade)
    return JSONResponse(status_code=503, content=content)


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__, "env": settings.app_env}
