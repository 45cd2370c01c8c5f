"""Circle Visit Planner Web Application."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from visitplan.core.config import settings
from visitplan.core.database import create_db_and_tables, engine
from visitplan.core.scheduler import shutdown_scheduler, start_scheduler
from visitplan.core.snapshot import load_store
from visitplan.routes import auth, days, events, items, sync

# Configure logging
log_dir = Path.home() / ".logs" / "visitplan"
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    # Startup
    logger.info("Starting Visit Planner application")
    create_db_and_tables()
    with Session(engine) as session:
        app.state.store = load_store(session)
    start_scheduler(app.state.store)
    yield
    # Shutdown
    shutdown_scheduler()
    logger.info("Visit Planner application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Plan circle visits at multi-day events and keep shopping lists in sync with a spreadsheet",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router)
app.include_router(events.router)
app.include_router(days.router)
app.include_router(items.router)
app.include_router(sync.router)


@app.get("/")
async def root(request: Request):
    """Redirect root to the event list."""
    rp = request.scope.get("root_path", "")
    return RedirectResponse(f"{rp}/events")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
