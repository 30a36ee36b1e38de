"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from booking_engine.api import courts, reports, reservations
from booking_engine.core.config import settings
from booking_engine.core.database import init_db, SCHEMA_VERSION
from booking_engine.core.errors import BookingError
from booking_engine.services.scheduler import reservation_finalizer

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Club Booking Engine")
    logger.info(f"Debug mode: {settings.DEBUG}")

    version = await init_db()
    logger.info(f"Database schema version {version}")

    if settings.FINALIZER_ENABLED:
        await reservation_finalizer.start()

    yield

    # Shutdown
    logger.info("Shutting down Club Booking Engine")
    await reservation_finalizer.stop()


# Create FastAPI app
app = FastAPI(
    title="Club Booking Engine",
    description="Court reservations with overlap protection, tariff pricing and club summaries",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Solicitud inválida")
    detail = f"{field}: {message}" if field else message
    return JSONResponse(status_code=400, content={"detail": detail, "code": "validation_error"})


# Include routers
app.include_router(reservations.router)
app.include_router(courts.router)
app.include_router(reports.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "schema_version": SCHEMA_VERSION,
        "finalizer_running": reservation_finalizer.running,
    }
