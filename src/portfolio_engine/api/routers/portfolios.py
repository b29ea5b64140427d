"""
Portfolios Router

Endpoints for reading discovered portfolios and triggering discovery.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError
from sqlalchemy.orm import Session

from src.portfolio_engine.api.dependencies import get_db, get_discovery_pipeline
from src.portfolio_engine.api.schemas import (
    DiscoveryRequest,
    DiscoveryResponse,
    PortfolioDetail,
    PortfolioSummary,
)
from src.portfolio_engine.db.repository import PortfolioRepository
from src.portfolio_engine.models.building import BoundingBox
from src.portfolio_engine.pipelines.discovery import PortfolioDiscoveryPipeline

router = APIRouter(prefix="/api/v1/portfolios", tags=["portfolios"])

repository = PortfolioRepository()


@router.get("/", response_model=List[PortfolioSummary])
def list_portfolios(
    order_by: str = Query(
        "total_units",
        pattern="^(total_units|total_buildings|total_value)$",
        description="Aggregate to sort by (descending)",
    ),
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Number of results to return"),
    db: Session = Depends(get_db),
):
    """
    List portfolios sorted by an aggregate metric.

    Args:
        order_by: total_units, total_buildings or total_value
        limit: Maximum number of portfolios
        db: Database session

    Returns:
        Portfolios, largest first
    """
    return repository.list_portfolios(db, order_by=order_by, limit=limit)


@router.get("/by-building/{bbl}", response_model=PortfolioDetail)
def get_portfolio_for_building(bbl: str, db: Session = Depends(get_db)):
    """
    Find the portfolio that owns a building.

    Raises:
        HTTPException: 404 if the building is not in any portfolio
    """
    portfolio = repository.find_by_building(db, bbl)
    if not portfolio:
        raise HTTPException(status_code=404, detail=f"No portfolio for building: {bbl}")
    return portfolio


@router.get("/{slug}", response_model=PortfolioDetail)
def get_portfolio(slug: str, db: Session = Depends(get_db)):
    """
    Get one portfolio with its member buildings.

    Raises:
        HTTPException: 404 if portfolio not found
    """
    portfolio = repository.get_by_slug(db, slug)
    if not portfolio:
        raise HTTPException(status_code=404, detail=f"Portfolio not found: {slug}")
    return portfolio


@router.post("/discover", response_model=DiscoveryResponse)
async def discover_portfolios(
    request: DiscoveryRequest,
    pipeline: PortfolioDiscoveryPipeline = Depends(get_discovery_pipeline),
):
    """
    Run portfolio discovery for a bounding box.

    Returns:
        Counts of portfolios saved, buildings scanned and contacts fetched

    Raises:
        HTTPException: 422 if the bounding box is inverted
    """
    try:
        bounds = BoundingBox(
            min_lat=request.min_lat,
            max_lat=request.max_lat,
            min_lng=request.min_lng,
            max_lng=request.max_lng,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    result = await pipeline.run_async(bounds, min_units=request.min_units)
    return result.to_dict()
