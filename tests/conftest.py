"""
Shared test fixtures.

Points the settings at SQLite before any module builds the engine.
"""
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("CONTACT_BATCH_DELAY_SECONDS", "0")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.portfolio_engine.db.base import Base
from src.portfolio_engine.models.building import BuildingRecord
from src.portfolio_engine.models.contact import ContactRecord


@pytest.fixture(scope="function")
def test_db():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    Session = sessionmaker(bind=engine, expire_on_commit=False)
    session = Session()

    yield session

    session.close()
    Base.metadata.drop_all(engine)


def make_building(bbl, units=30, owner_name="", assessed_value=1000000.0, **kwargs):
    """Build a BuildingRecord with sensible defaults."""
    values = {
        "bbl": bbl,
        "boro_code": bbl[0],
        "block": bbl[1:6],
        "lot": bbl[6:],
        "address": f"{bbl[-3:]} BEDFORD AVENUE",
        "borough": "BK",
        "units": units,
        "floors": 6,
        "year_built": 1931,
        "assessed_value": assessed_value,
        "owner_name": owner_name,
        "building_class": "D1",
        "zoning": "R6",
    }
    values.update(kwargs)
    return BuildingRecord(**values)


def make_contact(bbl, contact_type="Agent", name="", corporate_name="", business_address=""):
    return ContactRecord(
        bbl=bbl,
        contact_type=contact_type,
        name=name,
        corporate_name=corporate_name,
        business_address=business_address,
    )


@pytest.fixture
def building_factory():
    return make_building


@pytest.fixture
def contact_factory():
    return make_contact
