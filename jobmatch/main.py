# jobmatch/main.py
import logging
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .errors import JobMatchError, field_errors
from .logger import setup_logging
from .routers import admin, auth, employer, jobseeker

logger = logging.getLogger(__name__)

app = FastAPI(title="JobMatch API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
)

Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount(settings.UPLOAD_BASE_URL, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

app.include_router(auth.router)
app.include_router(employer.router)
app.include_router(jobseeker.router)
app.include_router(admin.router)


# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    from .database import engine, Base
    setup_logging(settings.LOG_LEVEL)
    # Create tables if they don't exist
    Base.metadata.create_all(bind=engine)


@app.exception_handler(JobMatchError)
async def jobmatch_error_handler(request: Request, exc: JobMatchError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "errors": field_errors(exc.errors())},
    )


@app.get("/")
def read_root():
    return {"message": "Welcome to JobMatch API", "version": app.version, "docs": "/docs"}


@app.get("/health", tags=["monitoring"])
def health_check(db: Session = Depends(get_db)):
    """
    Checks if the application is healthy, including the database connection.
    """
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "ok"}
    except Exception:
        logger.exception("Health check failed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database connection error"
        )
