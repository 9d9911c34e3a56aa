"""SiteLens API - Website SEO auditing service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import audits_router, checks_router, health_router
from config import settings
from db.session import create_schema, dispose_engine
from reports.assembler import build_assembler
from reports.jobs import build_job_runner
from reports.progress import ProgressBroker

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Builds the process-wide collaborators (assembler with its PageSpeed
    cache, job runner, progress broker) before serving requests.
    """
    logger.info(f"Starting {settings.app_name} (job runner: {settings.job_runner})...")
    if settings.persist_reports:
        await create_schema()
    assembler = build_assembler()
    app.state.page_fetcher = assembler.fetcher
    app.state.job_runner = build_job_runner(assembler)
    app.state.progress_broker = ProgressBroker()
    yield
    logger.info(f"Shutting down {settings.app_name}...")
    await dispose_engine()


app = FastAPI(
    title="SiteLens API",
    description="Single-page SEO auditing: markup signals, performance and recommendations.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api/v1")
app.include_router(audits_router, prefix="/api/v1")
app.include_router(checks_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root():
    """Point clients at the API docs."""
    return {
        "service": "SiteLens API",
        "docs": "/docs",
        "health": "/api/v1/health",
        "audit": "/api/v1/audits",
    }
