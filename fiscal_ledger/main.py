"""
Fiscal receipt ledger — FastAPI application entry-point.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fiscal_ledger import __version__
from fiscal_ledger.config import settings
from fiscal_ledger.database import Base, engine

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: ensure data dir + tables exist
    os.makedirs(settings.DATA_DIR, exist_ok=True)
    # Import models so Base.metadata knows about them
    import fiscal_ledger.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info(
        "Database tables ready (%s), retention %d years",
        settings.DATABASE_URL, settings.LEDGER_RETENTION_YEARS,
    )
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Fiscal Ledger",
    description="Completed sale → chained, signed, archived receipt → verification + compliance",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {"service": "Fiscal Ledger", "version": __version__, "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# ── Register API routers ─────────────────────────────────────────────────
from fiscal_ledger.routers.receipts import router as receipts_router  # noqa: E402
from fiscal_ledger.routers.merchants import router as merchants_router  # noqa: E402

app.include_router(receipts_router, prefix="/api", tags=["Receipts"])
app.include_router(merchants_router, prefix="/api", tags=["Merchants"])
