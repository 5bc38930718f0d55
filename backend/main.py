import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from insightdesk.config import settings
from insightdesk.core.errors import AppError
from insightdesk.database import Base, SessionLocal, engine

# Import all models so they are registered with Base.metadata before create_all
import insightdesk.models  # noqa: F401

from insightdesk.api.routes import (
    analytics,
    app_routes,
    chat,
    data_sources,
    insights,
    reports,
)
from insightdesk.services import scheduler

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
# Suppress SQL echo/logging (engine already has echo=False)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

try:
    Base.metadata.create_all(bind=engine)
except Exception as e:
    logger.warning(
        "Database not available (tables not created): %s. "
        "Set DATABASE_URL or db_* env vars and ensure PostgreSQL is running.",
        e,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.scheduler_enabled:
        scheduler.start()
        db = SessionLocal()
        try:
            count = scheduler.register_report_schedules(db)
            logger.info("Registered %d scheduled report(s)", count)
        except Exception as e:
            logger.warning("Report schedules not registered (non-fatal): %s", e)
        finally:
            db.close()
    try:
        from insightdesk.seed import seed_demo_if_empty

        seeded = seed_demo_if_empty(settings.demo_user_id)
        if seeded:
            logger.info("Seeded %d demo insights for %s", seeded, settings.demo_user_id)
    except Exception as e:
        logger.warning("Seed skipped (non-fatal): %s", e)
    yield
    scheduler.shutdown()


app = FastAPI(
    title="InsightDesk Analytics API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # The analyst contract answers every failure with the same payload shape
    if request.url.path == chat.ANALYST_PATH:
        logger.warning("ai-analyst rejected malformed request: %s", exc.errors())
        return chat.analyst_error_response(400, "Message and userId are required")
    return await request_validation_exception_handler(request, exc)


app.include_router(app_routes.router)
app.include_router(data_sources.router)
app.include_router(analytics.router)
app.include_router(insights.router)
app.include_router(reports.router)
app.include_router(chat.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.env == "development",
    )
