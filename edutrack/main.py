"""
EduTrack API application
Wires routers, middleware and error handlers around the progress and quiz services
"""
from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import time

from edutrack.config import settings
from edutrack.database import init_db
from edutrack.errors import EduTrackError
from edutrack.api import analytics, progress, quizzes
from edutrack.utils.rate_limiter import rate_limiter

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

UNLIMITED_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Lesson progress, quizzes, attempts and grading"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, error: str, message, /, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": message, **extra})


@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    if request.url.path not in UNLIMITED_PATHS:
        try:
            await rate_limiter.check_rate_limit(request)
        except HTTPException as e:
            return JSONResponse(status_code=e.status_code, content=e.detail)

    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request"""
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({time.perf_counter() - started:.3f}s)"
    )
    return response


@app.exception_handler(EduTrackError)
async def edutrack_exception_handler(request: Request, exc: EduTrackError):
    log = logger.error if exc.status_code >= 500 else logger.info
    log(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.error_code, exc.message)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Identity and permission rejections raised by the request dependencies"""
    return error_response(exc.status_code, "http_error", exc.detail, status_code=exc.status_code)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {str(exc)}", exc_info=True)
    return error_response(
        500,
        "internal_server_error",
        "An unexpected error occurred. Please try again later.",
        detail=str(exc) if settings.DEBUG else None
    )


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": time.time()
    }


@app.get("/")
async def root():
    return {
        "message": f"{settings.APP_NAME} progress and quiz API",
        "version": settings.APP_VERSION,
        "routes": ["/api/quizzes", "/api/courses", "/api/users/me"],
        "docs": "/docs"
    }


app.include_router(quizzes.router)
app.include_router(analytics.router)
app.include_router(progress.router)


@app.on_event("startup")
async def startup_event():
    """Create tables before serving requests"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    init_db()
    logger.info("Database initialized")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("edutrack.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
