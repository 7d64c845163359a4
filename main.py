"""
Restaurant Ledger - FastAPI entry point

Serves trial balance, income statement, balance sheet and cash flow
reports (JSON, CSV, PDF) computed from the hosted store's ledger.

Run locally with:
    uvicorn main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import close_db
from app.routers import financial_statements
from app.utils.error_handling import setup_exception_handlers

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.app_name} starting ({settings.app_env})")
    yield
    await close_db()
    logger.info(f"{settings.app_name} stopped; connection pool disposed")


app = FastAPI(
    title=settings.app_name,
    description="Financial statements for restaurants: trial balance, P&L, balance sheet and cash flow",
    version="0.1.0",
    docs_url="/api/docs" if settings.is_development else None,
    redoc_url=None,
    lifespan=lifespan,
)

# Reports are read-only, so only GET is exposed cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

setup_exception_handlers(app)
app.include_router(financial_statements.router)


@app.get("/health", tags=["Service"])
async def health_check():
    return {
        "status": "healthy",
        "service": settings.app_name,
        "environment": settings.app_env,
    }


@app.get(f"/api/{settings.api_version}", tags=["Service"])
async def api_root():
    """List the report endpoints."""
    base = f"/api/{settings.api_version}/restaurants/{{restaurant_id}}/financial-statements"
    return {
        "service": settings.app_name,
        "reports": [f"{base}/{name}" for name in ("trial-balance", "income-statement", "balance-sheet", "cash-flow")],
        "export": f"{base}/{{report_type}}/export?format=csv|pdf",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.is_development)
