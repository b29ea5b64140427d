"""
Unit tests for building_scraper module
"""
import pytest
import requests
from unittest.mock import MagicMock, Mock
from sodapy import Socrata

from src.portfolio_engine.scrapers.building_scraper import BuildingScraper, PLUTO_FIELDS
from src.portfolio_engine.models.building import BuildingRecord, WILLIAMSBURG_BOUNDS


def socrata_with_response(text, content_type):
    """Real Socrata client whose HTTP session answers every request with one response."""
    client = Socrata("data.cityofnewyork.us", None)
    client.session.get = MagicMock(
        return_value=Mock(status_code=200, text=text, headers={"content-type": content_type})
    )
    return client


def pluto_row(bbl, units="40", **overrides):
    row = {
        "bbl": f"{bbl}.00000000",
        "borocode": bbl[0],
        "block": bbl[1:6],
        "lot": bbl[6:],
        "address": "100 BEDFORD AVENUE",
        "borough": "BK",
        "unitsres": units,
        "numfloors": "6.0",
        "yearbuilt": "1931",
        "assesstot": "1250000",
        "ownername": "84TH ST LLC",
        "bldgclass": "D1",
        "zonedist1": "R6",
    }
    row.update(overrides)
    return row


class TestBuildingScraper:
    """Tests for BuildingScraper class"""

    def test_scraper_initialization_with_client(self):
        client = MagicMock()
        scraper = BuildingScraper(client=client, page_size=50)

        assert scraper.client is client
        assert scraper.page_size == 50
        assert scraper.dataset_id == "64uk-42ks"

    def test_rejects_non_positive_page_size(self):
        with pytest.raises(ValueError):
            BuildingScraper(client=MagicMock(), page_size=-1)

    def test_where_clause(self):
        scraper = BuildingScraper(client=MagicMock())
        where = scraper.build_where_clause(WILLIAMSBURG_BOUNDS, 20)

        assert "latitude >= 40.7" in where
        assert "longitude <= -73.935" in where
        assert where.endswith("unitsres >= 20")

    def test_fetch_buildings_parses_rows(self):
        client = MagicMock()
        client.get.return_value = [pluto_row("3023450001")]
        scraper = BuildingScraper(client=client, page_size=10)

        buildings = scraper.fetch_buildings(WILLIAMSBURG_BOUNDS, min_units=20)

        assert len(buildings) == 1
        building = buildings[0]
        assert isinstance(building, BuildingRecord)
        assert building.bbl == "3023450001"
        assert building.units == 40
        assert building.floors == 6
        assert building.assessed_value == 1250000.0
        assert building.owner_name == "84TH ST LLC"

        _, kwargs = client.get.call_args
        assert kwargs["select"] == PLUTO_FIELDS
        assert kwargs["order"] == "unitsres DESC"
        assert kwargs["offset"] == 0

    def test_pagination_stops_on_short_page(self):
        client = MagicMock()
        client.get.side_effect = [
            [pluto_row("3000010001"), pluto_row("3000010002")],
            [pluto_row("3000010003"), pluto_row("3000010004")],
            [pluto_row("3000010005")],
        ]
        scraper = BuildingScraper(client=client, page_size=2)

        buildings = scraper.fetch_buildings(WILLIAMSBURG_BOUNDS)

        assert len(buildings) == 5
        assert client.get.call_count == 3
        offsets = [c.kwargs["offset"] for c in client.get.call_args_list]
        assert offsets == [0, 2, 4]

    def test_pagination_stops_on_empty_page(self):
        client = MagicMock()
        client.get.side_effect = [
            [pluto_row("3000010001"), pluto_row("3000010002")],
            [],
        ]
        scraper = BuildingScraper(client=client, page_size=2)

        buildings = scraper.fetch_buildings(WILLIAMSBURG_BOUNDS)

        assert len(buildings) == 2
        assert client.get.call_count == 2

    def test_failed_page_returns_partial_results(self):
        client = MagicMock()
        client.get.side_effect = [
            [pluto_row("3000010001"), pluto_row("3000010002")],
            requests.ConnectionError("connection reset"),
        ]
        scraper = BuildingScraper(client=client, page_size=2)

        buildings = scraper.fetch_buildings(WILLIAMSBURG_BOUNDS)

        assert [b.bbl for b in buildings] == ["3000010001", "3000010002"]

    def test_failed_first_page_returns_empty(self):
        client = MagicMock()
        client.get.side_effect = requests.HTTPError("503 Service Unavailable")
        scraper = BuildingScraper(client=client)

        assert scraper.fetch_buildings(WILLIAMSBURG_BOUNDS) == []

    def test_composes_bbl_when_missing(self):
        client = MagicMock()
        row = pluto_row("3023450001")
        del row["bbl"]
        client.get.return_value = [row]
        scraper = BuildingScraper(client=client, page_size=10)

        buildings = scraper.fetch_buildings(WILLIAMSBURG_BOUNDS)

        assert buildings[0].bbl == "3023450001"

    def test_skips_rows_without_bbl(self):
        client = MagicMock()
        client.get.return_value = [
            {"borocode": "3", "unitsres": "25"},
            pluto_row("3023450001"),
        ]
        scraper = BuildingScraper(client=client, page_size=10)

        buildings = scraper.fetch_buildings(WILLIAMSBURG_BOUNDS)

        assert [b.bbl for b in buildings] == ["3023450001"]

    def test_missing_numeric_fields_default_to_zero(self):
        client = MagicMock()
        client.get.return_value = [
            pluto_row("3023450001", units=None, numfloors=None, yearbuilt="", assesstot=None)
        ]
        scraper = BuildingScraper(client=client, page_size=10)

        building = scraper.fetch_buildings(WILLIAMSBURG_BOUNDS)[0]

        assert building.units == 0
        assert building.floors == 0
        assert building.year_built == 0
        assert building.assessed_value == 0.0

    def test_html_maintenance_page_returns_empty(self):
        client = socrata_with_response("<html>maintenance</html>", "text/html; charset=utf-8")
        scraper = BuildingScraper(client=client)

        assert scraper.fetch_buildings(WILLIAMSBURG_BOUNDS) == []
        client.session.get.assert_called_once()

    def test_empty_body_returns_empty(self):
        client = socrata_with_response("", "application/json")
        scraper = BuildingScraper(client=client)

        assert scraper.fetch_buildings(WILLIAMSBURG_BOUNDS) == []

    def test_csv_rows_are_skipped(self):
        client = socrata_with_response("bbl,unitsres\n3023450001,40\n", "text/csv")
        scraper = BuildingScraper(client=client)

        assert scraper.fetch_buildings(WILLIAMSBURG_BOUNDS) == []

    def test_non_dict_rows_skipped(self):
        client = MagicMock()
        client.get.return_value = ["3023450001", None, pluto_row("3023450002")]
        scraper = BuildingScraper(client=client, page_size=10)

        buildings = scraper.fetch_buildings(WILLIAMSBURG_BOUNDS)

        assert [b.bbl for b in buildings] == ["3023450002"]
