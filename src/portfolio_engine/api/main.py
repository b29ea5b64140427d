"""
FastAPI Main Application

Portfolio Discovery REST API.
"""
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text

from src.portfolio_engine.api.dependencies import get_db
from src.portfolio_engine.api.schemas import HealthCheck
from src.portfolio_engine.api.routers import portfolios
from src.portfolio_engine.db import session as db_session

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release pooled database connections on shutdown."""
    yield
    db_session.close_connections()


app = FastAPI(
    lifespan=lifespan,
    title="Portfolio Discovery API",
    description="Clusters NYC buildings into ownership portfolios from PLUTO and HPD registration data",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.include_router(portfolios.router)


@app.get("/health", response_model=HealthCheck, tags=["health"])
def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
        Health status with database connectivity check
    """
    try:
        db.execute(text("SELECT 1"))
        database_status = "connected"
    except Exception as e:
        database_status = f"error: {str(e)}"

    return HealthCheck(
        status="healthy" if database_status == "connected" else "degraded",
        version=API_VERSION,
        database=database_status,
        timestamp=datetime.utcnow(),
    )


@app.get("/", tags=["root"])
def root():
    """
    Root endpoint.

    Returns:
        API information
    """
    return {
        "name": "Portfolio Discovery API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.portfolio_engine.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
