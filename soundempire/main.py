from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import text

from soundempire import models  # noqa: F401  registers tables on Base.metadata
from soundempire.db.base import Base, engine, get_db
from soundempire.core.config import settings
from soundempire.core.logging import setup_logging
from soundempire.routers import career as career_router
from soundempire.routers import studio as studio_router
from soundempire.routers import schedule as schedule_router
from soundempire.routers import social as social_router
from soundempire.core.errors import (
    CareerException,
    career_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Sound Empire API",
    description=(
        "**Music-career simulator**\n\n"
        "Write and release music, book gigs and interviews, and advance the "
        "calendar one week at a time. Every action answers with the new career "
        "state, the alerts it raised and, if it was refused, a `rejection`.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(CareerException, career_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(career_router.router)
app.include_router(studio_router.router)
app.include_router(schedule_router.router)
app.include_router(social_router.router)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when both the API and the database
    are reachable. Returns HTTP 503 if the DB is down.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except SQLAlchemyError:
        db_status = "unreachable"

    if db_status != "ok":
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": db_status},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}
