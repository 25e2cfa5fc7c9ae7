"""
Expert Test - FastAPI Application Entry Point.

This is the main application module that:
1. Initializes the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Implements request ID middleware (X-Request-ID header)
4. Installs the JSON error envelope handlers
5. Registers all API route handlers

The application follows a modular architecture:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models
- services/: Business logic (evaluation, scoring, reporting)
- dependencies.py: bearer token resolution and the admin capability check
- logging_config.py: Structured logging configuration
- database.py: Database connection management
"""

import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from expertcheck.config import CORS_ORIGINS
from expertcheck.logging_config import (
    setup_logging, get_logger, log_with_context,
    request_id_var, generate_request_id
)
from expertcheck.errors import register_exception_handlers
from expertcheck.routes import admin, auth, profile, quiz, results, users
from expertcheck.database import DATABASE_URL, create_tables

# Import all models so they are registered with Base.metadata
from expertcheck import models  # noqa: F401

# Initialize structured logging before anything else logs
setup_logging()
logger = get_logger("http")

# Auto-create tables for SQLite local development
if DATABASE_URL.startswith("sqlite"):
    logger.info("Using SQLite - creating tables directly")
    create_tables()

app = FastAPI(
    title="Expert Test",
    description=(
        "Competence assessment service: administrators author single- and "
        "multiple-choice questions grouped by competence, users take the test "
        "and get scores broken down per competence."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["X-Request-ID"]
)

register_exception_handlers(app)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """
    Tag every request with a UUID and log its start and completion.

    The request ID is stored in a context variable (picked up by every log
    entry) and returned in the X-Request-ID response header.
    """
    req_id = generate_request_id()
    request_id_var.set(req_id)

    start_time = time.time()

    log_with_context(logger, "INFO",
        f"Request started: {request.method} {request.url.path}",
        context={"request_id": req_id},
        extra_data={
            "ip": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent", ""),
            "query_params": dict(request.query_params)
        })

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Request-ID"] = req_id

    log_with_context(logger, "INFO",
        f"Request completed: {request.method} {request.url.path} → {response.status_code}",
        context={"request_id": req_id},
        extra_data={
            "duration_ms": round(duration_ms, 2),
            "status_code": response.status_code
        })

    return response


app.include_router(auth.router, tags=["Auth"])
app.include_router(users.router, tags=["Users"])
app.include_router(quiz.router, tags=["Test"])
app.include_router(results.router, tags=["Results"])
app.include_router(profile.router, tags=["Profile"])
app.include_router(admin.router, tags=["Admin"])


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for container probes and monitoring."""
    return {"success": True, "status": "healthy", "service": "expert-test-backend", "version": "1.0.0"}


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "success": True,
        "service": "Expert Test",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "auth": {
                "register": "POST /api/auth/register",
                "login": "POST /api/auth/login",
                "verify": "GET /api/auth/verify",
                "profile": "GET /api/auth/profile"
            },
            "test": "GET /api/test/questions",
            "results": {
                "save": "POST /api/results/save",
                "all": "GET /api/results/all",
                "detail": "GET /api/results/{id}"
            },
            "profile": "GET /api/profile",
            "admin": "/api/admin/* (admin only)"
        }
    }
