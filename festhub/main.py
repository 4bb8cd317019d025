"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from festhub.config import settings
from festhub.database import Base, engine
from festhub.errors import FestError

# Import routers
from festhub.routers import users, events, updates

# Import all models so Base.metadata knows about them
from festhub.models.user import User                    # noqa: F401
from festhub.models.event import Event                  # noqa: F401
from festhub.models.starred_event import StarredEvent   # noqa: F401
from festhub.models.update import EventUpdate, FestivalUpdate  # noqa: F401

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(
    title="FestHub",
    description="College festival events with approval workflow, stars and live updates",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FestError)
def handle_fest_error(request: Request, exc: FestError):
    """Domain errors surface to the caller with their status and message."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(updates.router, prefix="/api/updates", tags=["Updates"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
