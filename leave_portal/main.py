import time
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from dotenv import load_dotenv
import os

# Load env vars
load_dotenv()

from leave_portal.routes import auth, employees, holidays, leaves
from leave_portal.services.scheduler import start_scheduler, shutdown_scheduler
from leave_portal.db import init_db, close_db
from leave_portal.utils.exceptions import LeavePortalError, Unauthorized
from leave_portal.utils.logging_config import setup_logging

# Configure logging (file + console) on import
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
setup_logging(level=LOG_LEVEL, log_to_file=os.getenv("LOG_TO_FILE", "true").lower() == "true")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    start_scheduler()
    logger.info("Application started")
    yield
    # Shutdown
    shutdown_scheduler()
    await close_db()
    logger.info("Application shutdown")


app = FastAPI(title="Leave Portal", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every HTTP request: method, path, status, duration."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %s %.2fms",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


@app.exception_handler(LeavePortalError)
async def leave_portal_error_handler(request: Request, exc: LeavePortalError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    content = {"detail": exc.message, "error": exc.error_code}
    if exc.details:
        content["details"] = exc.details
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s -> %s %s: %s", request.method, request.url.path, exc.status_code, exc.error_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    message = "; ".join(f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in errors) or "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"detail": message, "error": "validation_error", "details": {"errors": errors}},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# CORS Configuration
origins = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include Routers
@app.get("/")
async def root():
    return {"message": "Leave Portal API is running"}

app.include_router(auth.router)
app.include_router(employees.router)
app.include_router(employees.stats_router)
app.include_router(leaves.router)
app.include_router(holidays.router)
