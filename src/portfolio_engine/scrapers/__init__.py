"""
Scrapers Package

Data scrapers for NYC Open Data sources: PLUTO assessor-roll buildings
and HPD registration contacts.
"""

from .building_scraper import BuildingScraper
from .contact_scraper import ContactScraper

__all__ = [
    "BuildingScraper",
    "ContactScraper",
]
