import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from archsim.api.routes import router as simulator_router
from archsim.config import settings
from archsim.engine.catalog import COMPONENT_DEFINITIONS
from archsim.engine.validator import get_registry

logger = logging.getLogger("uvicorn.error")

SAMPLES_DIR = Path(__file__).resolve().parent.parent / "samples"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup: log the catalog, registered checks and available samples ---
    logger.info("Loaded %d component kinds", len(COMPONENT_DEFINITIONS))
    checks = get_registry().list_checks()
    logger.info("Registered %d validation checks: %s", len(checks), checks)

    if SAMPLES_DIR.is_dir():
        samples = [p.stem for p in sorted(SAMPLES_DIR.glob("*.json"))]
        logger.info("Available sample graphs: %s", samples)
    else:
        logger.warning("Samples directory does not exist: %s", SAMPLES_DIR)

    yield


app = FastAPI(
    title="Architecture Simulator",
    description="System design sandbox - topology analysis, load simulation and scale-aware validation",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(simulator_router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
