import logging

from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import text
from starlette import status

from app.db.base import get_db
from app.core.config import settings
from app.core.logging import configure_logging
from app.routers import analytics as analytics_router
from app.core.errors import (
    InsightsException,
    insights_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Behavior Insights API",
    description=(
        "**Behavior Insight Aggregation Engine**\n\n"
        "Read-only views over append-only child behavior logs and classroom "
        "challenge logs: per-child insights, per-classroom climate, patterns "
        "shared by both levels, and an organization rollup.\n\n"
        "Errors use the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Most specific first.
app.add_exception_handler(InsightsException, insights_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(analytics_router.router)

logger.info("Behavior Insights API ready (env=%s)", settings.APP_ENV)


@app.get("/health", tags=["health"], summary="Liveness and database check")
def health(db: Session = Depends(get_db)):
    """`{"status": "ok", "db": "ok"}`, or HTTP 503 when the record store is unreachable."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "db": "unreachable"},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}
