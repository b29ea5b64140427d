"""
Building Data Models

Pydantic models for assessor-roll building records and discovery areas.
"""
from pydantic import BaseModel, Field, field_validator, model_validator


class BoundingBox(BaseModel):
    """
    Geographic area scanned by a discovery run.

    Attributes:
        min_lat: Southern edge (WGS84 latitude)
        max_lat: Northern edge (WGS84 latitude)
        min_lng: Western edge (WGS84 longitude)
        max_lng: Eastern edge (WGS84 longitude)
    """

    min_lat: float = Field(..., description="Minimum latitude", ge=-90, le=90)
    max_lat: float = Field(..., description="Maximum latitude", ge=-90, le=90)
    min_lng: float = Field(..., description="Minimum longitude", ge=-180, le=180)
    max_lng: float = Field(..., description="Maximum longitude", ge=-180, le=180)

    @model_validator(mode="after")
    def validate_ordering(self) -> "BoundingBox":
        """Reject inverted boxes."""
        if self.min_lat > self.max_lat:
            raise ValueError("min_lat must not exceed max_lat")
        if self.min_lng > self.max_lng:
            raise ValueError("min_lng must not exceed max_lng")
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary for logging."""
        return {
            "min_lat": self.min_lat,
            "max_lat": self.max_lat,
            "min_lng": self.min_lng,
            "max_lng": self.max_lng,
        }

    class Config:
        """Pydantic model configuration."""
        frozen = True


# Williamsburg/Greenpoint, Brooklyn
WILLIAMSBURG_BOUNDS = BoundingBox(
    min_lat=40.700,
    max_lat=40.730,
    min_lng=-73.970,
    max_lng=-73.935,
)


class BuildingRecord(BaseModel):
    """
    Assessor-roll building record from the NYC PLUTO dataset.

    Attributes:
        bbl: Borough-block-lot parcel identifier (10 digits)
        boro_code: Borough code (1-5)
        block: Tax block
        lot: Tax lot
        address: Street address
        borough: Borough abbreviation (MN, BX, BK, QN, SI)
        units: Residential unit count
        floors: Number of floors
        year_built: Year of construction
        assessed_value: Total assessed value
        owner_name: Owner listed on the assessor roll
        building_class: Building class code
        zoning: Primary zoning district
    """

    bbl: str = Field(..., min_length=1, description="Parcel identifier")
    boro_code: str = Field("", description="Borough code")
    block: str = Field("", description="Tax block")
    lot: str = Field("", description="Tax lot")
    address: str = Field("", description="Street address")
    borough: str = Field("", description="Borough")
    units: int = Field(0, ge=0, description="Residential units")
    floors: int = Field(0, ge=0, description="Number of floors")
    year_built: int = Field(0, ge=0, description="Year built")
    assessed_value: float = Field(0.0, ge=0, description="Total assessed value")
    owner_name: str = Field("", description="Assessor-listed owner name")
    building_class: str = Field("", description="Building class")
    zoning: str = Field("", description="Zoning district")

    @field_validator("bbl")
    @classmethod
    def validate_bbl(cls, v: str) -> str:
        """Strip any decimal suffix from the parcel id."""
        return v.split(".")[0]

    def to_dict(self) -> dict:
        """Convert to dictionary of snapshot columns."""
        return self.model_dump()

    class Config:
        """Pydantic model configuration."""
        str_strip_whitespace = True
        frozen = True
