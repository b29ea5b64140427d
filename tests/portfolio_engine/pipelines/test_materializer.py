"""
Tests for PortfolioMaterializer
"""
from unittest.mock import MagicMock

import pytest

from src.portfolio_engine.db.repository import PortfolioRepository
from src.portfolio_engine.graph.components import ConnectedComponent
from src.portfolio_engine.pipelines.materializer import (
    PortfolioDraft,
    PortfolioMaterializer,
    UNKNOWN_PORTFOLIO_NAME,
    choose_portfolio_name,
    slugify,
)


class TestSlugify:
    """Tests for slug derivation."""

    def test_basic_slug(self):
        assert slugify("84TH ST LLC", 3) == "84th-st-llc-3b"

    def test_punctuation_runs_collapse(self):
        assert slugify("  J & M  Realty, Inc. ", 2) == "j-m-realty-inc-2b"

    def test_building_count_changes_slug(self):
        assert slugify("ACME HOLDINGS LLC", 2) != slugify("ACME HOLDINGS LLC", 3)

    def test_deterministic(self):
        assert slugify("Unknown Portfolio", 4) == slugify("Unknown Portfolio", 4)

    def test_long_names_truncated(self):
        slug = slugify("A" * 200, 12)
        assert slug == "a" * 80 + "-12b"

    def test_name_without_alphanumerics(self):
        assert slugify("***", 2) == "portfolio-2b"


class TestChoosePortfolioName:
    """Tests for portfolio naming."""

    def test_corporation_beats_person_and_owner(self):
        component = ConnectedComponent(
            buildings=["3000010001", "3000020002"],
            entities=["P:JOHN SMITH", "O:KINGS REALTY", "C:ACME HOLDINGS LLC"],
            entity_links={"P:JOHN SMITH": 2, "O:KINGS REALTY": 2, "C:ACME HOLDINGS LLC": 2},
        )
        assert choose_portfolio_name(component) == "ACME HOLDINGS LLC"

    def test_owner_beats_person(self):
        component = ConnectedComponent(
            buildings=["3000010001", "3000020002"],
            entities=["P:JOHN SMITH", "O:KINGS REALTY"],
            entity_links={"P:JOHN SMITH": 2, "O:KINGS REALTY": 2},
        )
        assert choose_portfolio_name(component) == "KINGS REALTY"

    def test_person_name(self):
        component = ConnectedComponent(
            buildings=["3000010001", "3000020002"],
            entities=["A:55 WATER ST BROOKLYN NY", "P:JOHN SMITH"],
            entity_links={"A:55 WATER ST BROOKLYN NY": 2, "P:JOHN SMITH": 2},
        )
        assert choose_portfolio_name(component) == "JOHN SMITH"

    def test_address_only_is_unknown(self):
        component = ConnectedComponent(
            buildings=["3000010001", "3000020002"],
            entities=["A:55 WATER ST BROOKLYN NY"],
            entity_links={"A:55 WATER ST BROOKLYN NY": 2},
        )
        assert choose_portfolio_name(component) == UNKNOWN_PORTFOLIO_NAME

    def test_most_linked_corporation_wins_then_alphabetical(self):
        component = ConnectedComponent(
            buildings=["3000010001", "3000020002", "3000030003"],
            entities=["C:ZETA LLC", "C:BETA LLC", "C:ALPHA LLC"],
            entity_links={"C:ZETA LLC": 3, "C:BETA LLC": 2, "C:ALPHA LLC": 2},
        )
        assert choose_portfolio_name(component) == "ZETA LLC"

        component.entity_links["C:ZETA LLC"] = 2
        assert choose_portfolio_name(component) == "ALPHA LLC"


class TestPortfolioMaterializer:
    """Tests for building portfolio drafts."""

    def setup_method(self):
        self.materializer = PortfolioMaterializer(repository=MagicMock(spec=PortfolioRepository))

    def test_build_portfolio_aggregates(self, building_factory, contact_factory):
        buildings = [
            building_factory("3000010001", units=40, assessed_value=1000000.25, borough="BK"),
            building_factory("3000020002", units=25, assessed_value=500000.10, borough="MN"),
            building_factory("3000030003", units=99),
        ]
        contacts = [
            contact_factory(
                "3000010001",
                contact_type="HeadOfficer",
                name="JOHN SMITH",
                corporate_name="ACME HOLDINGS LLC",
                business_address="123 BROADWAY NEW YORK NY",
            ),
            contact_factory(
                "3000020002",
                contact_type="IndividualOwner",
                name="JANE DOE",
                corporate_name="ACME HOLDINGS LLC",
                business_address="123 BROADWAY NEW YORK NY",
            ),
            contact_factory("3000020002", contact_type="Agent", name="AL ROKER"),
            contact_factory("3000030003", contact_type="HeadOfficer", name="NOT A MEMBER"),
        ]
        component = ConnectedComponent(
            buildings=["3000010001", "3000020002"],
            entities=["C:ACME HOLDINGS LLC", "A:123 BROADWAY NEW YORK NY"],
            entity_links={"C:ACME HOLDINGS LLC": 2, "A:123 BROADWAY NEW YORK NY": 2},
        )

        draft = self.materializer.materialize(component, buildings, contacts)

        assert isinstance(draft, PortfolioDraft)
        assert draft.name == "ACME HOLDINGS LLC"
        assert draft.slug == "acme-holdings-llc-2b"
        assert draft.total_buildings == 2
        assert draft.total_units == 65
        assert draft.total_value == 1500000.35
        assert draft.borough == "BK"
        assert draft.entity_names == ["ACME HOLDINGS LLC", "123 BROADWAY NEW YORK NY"]
        assert draft.head_officers == ["JOHN SMITH", "JANE DOE"]
        assert draft.addresses == ["123 BROADWAY NEW YORK NY"]

    def test_addresses_capped_at_five(self, building_factory, contact_factory):
        buildings = [building_factory("3000010001"), building_factory("3000020002")]
        contacts = [
            contact_factory("3000010001", business_address=f"{n}00 KENT AVE BROOKLYN NY")
            for n in range(1, 8)
        ]
        component = ConnectedComponent(buildings=["3000010001", "3000020002"])

        draft = self.materializer.materialize(component, buildings, contacts)

        assert len(draft.addresses) == 5
        assert draft.addresses[0] == "100 KENT AVE BROOKLYN NY"

    def test_short_officer_names_and_addresses_excluded(self, building_factory, contact_factory):
        buildings = [building_factory("3000010001"), building_factory("3000020002")]
        contacts = [
            contact_factory("3000010001", contact_type="HeadOfficer", name="AB", business_address="1 ST"),
        ]
        component = ConnectedComponent(buildings=["3000010001", "3000020002"])

        draft = self.materializer.materialize(component, buildings, contacts)

        assert draft.head_officers == []
        assert draft.addresses == []
        assert draft.name == UNKNOWN_PORTFOLIO_NAME

    def test_unresolved_buildings_skip_candidate(self, building_factory):
        component = ConnectedComponent(buildings=["3000010001", "3999990009"])

        draft = self.materializer.materialize(component, [building_factory("3000010001")], [])

        assert draft is None

    def test_portfolio_data_payload(self, building_factory):
        component = ConnectedComponent(
            buildings=["3000010001", "3000020002"],
            entities=["O:KINGS REALTY"],
            entity_links={"O:KINGS REALTY": 2},
        )
        buildings = [building_factory("3000010001"), building_factory("3000020002")]

        draft = self.materializer.materialize(component, buildings, [])
        data = draft.to_portfolio_data()

        assert data["slug"] == "kings-realty-2b"
        assert data["total_buildings"] == 2
        assert data["avg_distress"] == 0.0
        rows = draft.building_rows()
        assert [r["bbl"] for r in rows] == ["3000010001", "3000020002"]
        assert rows[0]["units"] == 30

    def test_save_delegates_to_repository(self, building_factory):
        repository = MagicMock(spec=PortfolioRepository)
        repository.upsert_portfolio.return_value = (MagicMock(), True)
        materializer = PortfolioMaterializer(repository=repository)
        component = ConnectedComponent(buildings=["3000010001", "3000020002"])
        draft = materializer.materialize(
            component,
            [building_factory("3000010001"), building_factory("3000020002")],
            [],
        )
        session = MagicMock()

        _, created = materializer.save(session, draft)

        assert created is True
        args, _ = repository.upsert_portfolio.call_args
        assert args[0] is session
        assert args[1]["slug"] == "unknown-portfolio-2b"
        assert len(args[2]) == 2

    @pytest.mark.parametrize("order", [[0, 1, 2], [2, 1, 0], [1, 2, 0]])
    def test_same_membership_same_slug(self, order, building_factory):
        bbls = ["3000010001", "3000020002", "3000030003"]
        entities = ["C:ACME HOLDINGS LLC", "P:JOHN SMITH", "C:BEDFORD PARTNERS LP"]
        component = ConnectedComponent(
            buildings=[bbls[i] for i in order],
            entities=[entities[i] for i in order],
            entity_links={"C:ACME HOLDINGS LLC": 2, "P:JOHN SMITH": 3, "C:BEDFORD PARTNERS LP": 2},
        )
        buildings = [building_factory(b) for b in bbls]

        draft = self.materializer.materialize(component, buildings, [])

        assert draft.slug == "acme-holdings-llc-3b"
