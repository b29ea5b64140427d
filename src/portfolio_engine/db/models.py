"""
SQLAlchemy ORM Models

Portfolios discovered by the clustering job and the snapshot of each
member building taken when the portfolio was first created.
"""
from typing import Optional

from sqlalchemy import (
    String, Integer, Numeric, Float, ForeignKey, CheckConstraint, UniqueConstraint, Index
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.portfolio_engine.db.base import Base, TimestampMixin, JSONList


class Portfolio(Base, TimestampMixin):
    """
    A cluster of two or more buildings believed to share an owner.

    One row per slug. Rows are refreshed in place by later runs that
    produce the same slug and are never deleted automatically.
    """
    __tablename__ = "portfolios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name (corporate, owner or individual entity)"
    )
    slug: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        comment="Name slug with building-count suffix, e.g. 84th-st-llc-3b"
    )

    # Aggregates
    total_buildings: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Member building count"
    )
    total_units: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Sum of residential units"
    )
    total_value: Mapped[float] = mapped_column(
        Numeric(16, 2),
        default=0,
        nullable=False,
        comment="Sum of assessed values"
    )
    avg_distress: Mapped[float] = mapped_column(
        Float,
        default=0.0,
        nullable=False,
        comment="Reserved for distress scoring"
    )
    borough: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Borough of the first member building"
    )

    # Ownership signals
    entity_names: Mapped[list] = mapped_column(
        JSONList,
        default=list,
        nullable=False,
        comment="Distinct entity names found in the cluster"
    )
    head_officers: Mapped[list] = mapped_column(
        JSONList,
        default=list,
        nullable=False,
        comment="Distinct head officer / individual owner names"
    )
    addresses: Mapped[list] = mapped_column(
        JSONList,
        default=list,
        nullable=False,
        comment="Up to 5 distinct business addresses"
    )

    buildings: Mapped[list["PortfolioBuilding"]] = relationship(
        "PortfolioBuilding",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="PortfolioBuilding.id",
    )

    __table_args__ = (
        CheckConstraint("total_buildings >= 2", name="check_portfolio_min_buildings"),
        Index("idx_portfolios_total_units", "total_units"),
        Index("idx_portfolios_total_value", "total_value"),
    )

    def __repr__(self) -> str:
        return f"<Portfolio(slug={self.slug}, buildings={self.total_buildings})>"


class PortfolioBuilding(Base, TimestampMixin):
    """Snapshot of a member building (many:1 with portfolios)."""
    __tablename__ = "portfolio_buildings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    portfolio_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("portfolios.id", ondelete="CASCADE"),
        nullable=False,
        comment="References portfolios table"
    )

    bbl: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Borough-block-lot parcel id"
    )
    boro_code: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    block: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    lot: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    borough: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    units: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    floors: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    year_built: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    assessed_value: Mapped[float] = mapped_column(Numeric(16, 2), default=0, nullable=False)
    owner_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    building_class: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    zoning: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    portfolio: Mapped["Portfolio"] = relationship("Portfolio", back_populates="buildings")

    __table_args__ = (
        UniqueConstraint("portfolio_id", "bbl", name="uq_portfolio_buildings_portfolio_bbl"),
        Index("idx_portfolio_buildings_bbl", "bbl"),
    )

    def __repr__(self) -> str:
        return f"<PortfolioBuilding(bbl={self.bbl}, portfolio_id={self.portfolio_id})>"
