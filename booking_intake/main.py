import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import models so every table is registered with SQLAlchemy Base
from . import models  # noqa: F401
from .database import Base, SessionLocal, engine
from .domain.bookings import router as bookings_router
from .domain.notifications import NotificationOrchestrator
from .domain.notifications import router as notifications_router
from .email_service import EmailService
from .services.workforce_webhook import WorkforceWebhook

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_notification_orchestrator() -> NotificationOrchestrator:
    """Process-wide email/webhook clients, shared by every request"""
    email_service = EmailService()
    webhook = WorkforceWebhook()
    if not email_service.api_key:
        logger.warning("RESEND_API_KEY not set - booking emails will be logged as failed")
    if not webhook.enabled:
        logger.info("WORKFORCE_WEBHOOK_URL not set - workforce integration disabled")
    return NotificationOrchestrator(SessionLocal, email_service, webhook)


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

    app.state.notification_orchestrator = build_notification_orchestrator()

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Booking Intake API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies (wrong JSON types) - required-field checks happen in the services"""
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"success": False, "message": "Invalid request body", "detail": jsonable_encoder(exc.errors())},
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

# Routes
app.include_router(bookings_router)
app.include_router(notifications_router)


@app.get("/")
def root():
    return {"message": "Booking Intake API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
