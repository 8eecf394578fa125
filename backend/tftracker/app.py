from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette import status
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from tftracker.config import Environment, config, environment
from tftracker.database import database
from tftracker.routes import game_results, players, standings, tournaments
from tftracker.utils.alembic import alembic_run_migrations
from tftracker.utils.errors import (
    FactCommitError,
    NotFoundError,
    TftTrackerError,
    ValidationError,
)
from tftracker.utils.logging import logger


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    await database.connect()

    if config.auto_run_migrations and environment is not Environment.CI:
        alembic_run_migrations()

    yield

    await database.disconnect()


app = FastAPI(
    title="TFT Tournament Tracker API",
    description="Placement ledger and standings for Teamfight Tactics tournaments",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in config.cors_origins.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(_: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        {"detail": "Validation failed", "errors": exc.details},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


@app.exception_handler(NotFoundError)
async def not_found_error_handler(_: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_404_NOT_FOUND)


@app.exception_handler(FactCommitError)
async def fact_commit_error_handler(_: Request, exc: FactCommitError) -> JSONResponse:
    logger.error("%s: %s", exc, exc.describe_facts())
    return JSONResponse(
        {"detail": str(exc), "facts": exc.describe_facts()},
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


@app.exception_handler(TftTrackerError)
async def tftracker_error_handler(_: Request, exc: TftTrackerError) -> JSONResponse:
    logger.exception("Unhandled tracker error", exc_info=exc)
    return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


app.include_router(game_results.router, tags=["game results"])
app.include_router(standings.router, tags=["standings"])
app.include_router(players.router, tags=["players"])
app.include_router(tournaments.router, tags=["tournaments"])
