"""
Pydantic Schemas for API Request/Response Models

These schemas define the JSON structure for API endpoints.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field


class PortfolioBuildingSchema(BaseModel):
    """Member building snapshot."""
    bbl: str
    address: Optional[str] = None
    borough: Optional[str] = None
    units: int = 0
    floors: int = 0
    year_built: int = 0
    assessed_value: float = 0.0
    owner_name: Optional[str] = None
    building_class: Optional[str] = None
    zoning: Optional[str] = None

    class Config:
        from_attributes = True


class PortfolioSummary(BaseModel):
    """Portfolio for list views."""
    id: int
    name: str
    slug: str
    total_buildings: int
    total_units: int
    total_value: float
    borough: Optional[str] = None
    entity_names: List[str] = Field(default_factory=list)
    head_officers: List[str] = Field(default_factory=list)
    addresses: List[str] = Field(default_factory=list)
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PortfolioDetail(PortfolioSummary):
    """Portfolio with member buildings."""
    avg_distress: float = 0.0
    created_at: Optional[datetime] = None
    buildings: List[PortfolioBuildingSchema] = Field(default_factory=list)


class DiscoveryRequest(BaseModel):
    """Bounding box and unit threshold for a discovery run."""
    min_lat: float = Field(..., ge=-90, le=90)
    max_lat: float = Field(..., ge=-90, le=90)
    min_lng: float = Field(..., ge=-180, le=180)
    max_lng: float = Field(..., ge=-180, le=180)
    min_units: int = Field(20, ge=0, description="Minimum residential units per building")


class DiscoveryResponse(BaseModel):
    """Aggregate counts from a discovery run."""
    portfolios_saved: int
    buildings_scanned: int
    contacts_fetched: int


class HealthCheck(BaseModel):
    """Health check response."""
    status: str
    version: str
    database: str
    timestamp: datetime
