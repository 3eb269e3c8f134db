import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from apace.core.config import settings
from apace.core.errors import register_error_handlers
from apace.core.logging import setup_logging
from apace.database import engine, Base
from apace import models  # noqa: F401  registers every table on Base.metadata
from apace.routes import (
    address,
    admin_accounts,
    admin_auth,
    admin_document,
    analytics,
    auth,
    driver,
    driver_auth,
    driver_document,
    notification,
    preferences,
    shipment,
    user,
    vehicle,
    vehicle_type,
)

setup_logging()
logger = logging.getLogger("apace.requests")

Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Delivery booking backend for customers, drivers and administrators",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


register_error_handlers(app)

# Include routers
app.include_router(auth.router)
app.include_router(driver_auth.router)
app.include_router(admin_auth.router)
app.include_router(user.router)
app.include_router(address.router)
app.include_router(preferences.router)
app.include_router(driver.router)
app.include_router(driver_document.router)
app.include_router(admin_document.router)
app.include_router(admin_accounts.router)
app.include_router(shipment.router)
app.include_router(vehicle_type.public_router)
app.include_router(vehicle_type.router)
app.include_router(vehicle.router)
app.include_router(notification.router)
app.include_router(notification.admin_router)
app.include_router(analytics.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Welcome to the APACE Logistics API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.ENVIRONMENT}
