"""
Pipelines Package

Portfolio discovery pipeline and the portfolio materializer it feeds.
"""
from src.portfolio_engine.pipelines.materializer import (
    PortfolioDraft,
    PortfolioMaterializer,
    choose_portfolio_name,
    slugify,
)
from src.portfolio_engine.pipelines.discovery import DiscoveryResult, PortfolioDiscoveryPipeline

__all__ = [
    "PortfolioDraft",
    "PortfolioMaterializer",
    "choose_portfolio_name",
    "slugify",
    "DiscoveryResult",
    "PortfolioDiscoveryPipeline",
]
