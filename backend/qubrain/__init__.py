import logging
from contextlib import asynccontextmanager

import aiosqlite
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from qubrain.config import DEV_JWT_SECRET, settings
from qubrain.db import init_all_databases

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.jwt_secret == DEV_JWT_SECRET:
        logger.warning("QUBRAIN_JWT_SECRET is not set; using the development secret")
    await init_all_databases(settings.data_dir)
    yield


async def storage_error_handler(request: Request, exc: aiosqlite.Error) -> JSONResponse:
    logger.exception("Storage failure on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Storage failure"})


def create_app() -> FastAPI:
    application = FastAPI(
        title="QuBrain Backend", version="0.1.0", lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    application.add_exception_handler(aiosqlite.Error, storage_error_handler)

    from qubrain.routers import auth, flashcards, health, stats

    application.include_router(health.router)
    application.include_router(auth.router, prefix="/auth", tags=["auth"])
    application.include_router(
        flashcards.router, prefix="/flashcards", tags=["flashcards"]
    )
    application.include_router(stats.router, prefix="/stats", tags=["stats"])

    return application


app = create_app()
