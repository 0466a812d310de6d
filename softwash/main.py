import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import ALLOWED_ORIGINS, PRICING_SWEEP_ENABLED, PRICING_SWEEP_INTERVAL, SEED_CATALOG
from .database import Base, SessionLocal, engine
from .domain.customers.router import router as customers_router
from .domain.ledger.router import router as ledger_router
from .domain.pricing.catalog import seed_catalog
from .domain.pricing.router import admin_router as pricing_admin_router
from .domain.pricing.router import router as pricing_router
from .domain.pricing.service import run_pricing_sweep
from .domain.reports.router import router as reports_router
from .domain.scheduling.router import admin_router as scheduling_admin_router
from .domain.scheduling.router import router as scheduling_router
from .domain.workorders.router import router as workorders_router
from .routes.auth import router as auth_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


async def pricing_sweep_loop(interval: int):
    """Apply due scheduled price changes every `interval` seconds until cancelled"""
    while True:
        await asyncio.sleep(interval)
        await asyncio.to_thread(run_pricing_sweep)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    if SEED_CATALOG:
        db = SessionLocal()
        try:
            seed_catalog(db)
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Failed to seed pricing catalog: {e}")
        finally:
            db.close()

    sweep_task = None
    if PRICING_SWEEP_ENABLED:
        await asyncio.to_thread(run_pricing_sweep)
        sweep_task = asyncio.create_task(pricing_sweep_loop(PRICING_SWEEP_INTERVAL))
        logger.info(f"⏱️ Pricing sweep every {PRICING_SWEEP_INTERVAL}s")

    yield

    if sweep_task is not None:
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass
    logger.info("Application shutting down...")


app = FastAPI(title="D&G Soft Wash API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Errors on the Authorization header are authentication failures, not bad input,
    so they get the same 401 as a missing or unknown token
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(f"Authentication failed for {request.url.path}: invalid Authorization header")
            return JSONResponse(status_code=401, content={"detail": "Unauthorized"})

    # For other validation errors, return 422 as normal
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"❌ {request.method} {request.url.path} - Unhandled error: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Log CORS configuration for debugging
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(scheduling_router)
app.include_router(pricing_router)
app.include_router(auth_router)
app.include_router(scheduling_admin_router)
app.include_router(pricing_admin_router)
app.include_router(customers_router)
app.include_router(workorders_router)
app.include_router(ledger_router)
app.include_router(reports_router)


@app.get("/")
def root():
    return {"message": "D&G Soft Wash API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
