"""Unit tests for quote calculation."""

import itertools
from datetime import date, datetime, timedelta, timezone

import pytest
from unittest.mock import patch

from models.quote import Complexity, ProjectRequest, ProjectType, Urgency
from services.quote_calculator import (
    BASE_DURATIONS,
    BREAKDOWN_SPLITS,
    calculate_duration,
    calculate_quote,
    calculate_quote_for_request,
    calculate_rate_per_m2,
    generate_breakdown,
    round_half_up,
    valid_until_for,
)


KNOWN_TYPES = [t.value for t in ProjectType.known()]
COMPLEXITIES = ["simple", "medium", "complex"]
URGENCIES = ["normal", "urgent", "asap"]
SIZES = [1, 12.5, 37.5, 99, 100, 101, 250, 1234]


class TestPublishedScenarios:
    """Prices quoted on the website must stay stable."""

    def test_small_simple_insulation_job(self, frozen_now):
        quote = calculate_quote("isolatiewerken", 100, "simple", None, "normal", now=frozen_now)

        assert quote.materials_cost == 1800
        assert quote.labor_cost == 2700
        assert quote.total_cost == 4500
        assert quote.duration == 1
        assert [(b.item, b.cost) for b in quote.breakdown] == [
            ("Isolatiemateriaal", 1080),
            ("Afdichtingsmaterialen", 540),
            ("Overige materialen", 180),
        ]
        assert quote.valid_until == date(2024, 2, 14)

    def test_large_complex_rush_renovation(self, frozen_now):
        quote = calculate_quote("renovatiewerken", 200, "complex", "Gent", "asap", now=frozen_now)

        assert quote.materials_cost == 11520
        assert quote.labor_cost == 17280
        assert quote.total_cost == 28800
        assert quote.duration == 16
        assert [b.cost for b in quote.breakdown] == [5760, 3456, 2304]
        assert quote.location == "Gent"

    def test_unknown_category_uses_defaults(self, frozen_now):
        quote = calculate_quote("zwembad", 100, now=frozen_now)

        assert quote.project_type == "zwembad"
        assert quote.total_cost == 5000
        assert quote.materials_cost == 2000
        assert quote.labor_cost == 3000
        assert quote.duration == 2
        assert [(b.item, b.cost) for b in quote.breakdown] == [
            ("Materialen", 1400),
            ("Overige kosten", 600),
        ]

    def test_unknown_category_is_logged(self, frozen_now):
        with patch("services.quote_calculator.logger") as mock_logger:
            calculate_quote("zwembad", 10, now=frozen_now)

        mock_logger.warning.assert_called_once_with("quote_unknown_project_type", project_type="zwembad")

    def test_known_category_is_not_logged(self, frozen_now):
        with patch("services.quote_calculator.logger") as mock_logger:
            calculate_quote("tuinaanleg", 10, now=frozen_now)

        mock_logger.warning.assert_not_called()


class TestRates:
    """Tests for rate and multiplier lookups."""

    @pytest.mark.parametrize("project_type,expected", [
        ("isolatiewerken", 45),
        ("renovatiewerken", 60),
        ("platedakken", 55),
        ("ramen-deuren", 50),
        ("tuinaanleg", 40),
        ("onbekend", 50),
        (None, 50),
    ])
    def test_base_rate(self, project_type, expected):
        assert calculate_rate_per_m2(project_type, "simple", "normal") == expected

    def test_unknown_modifiers_are_neutral(self):
        assert calculate_rate_per_m2("platedakken", "extreme", "yesterday") == 55
        assert calculate_rate_per_m2("platedakken", None, None) == 55

    def test_multipliers_compound(self):
        assert calculate_rate_per_m2("tuinaanleg", "medium", "urgent") == pytest.approx(40 * 1.3 * 1.2)


class TestDuration:
    """Tests for calculate_duration."""

    def test_small_projects_use_base_duration(self):
        assert calculate_duration("tuinaanleg", 10, "simple") == 3

    def test_size_scales_above_100(self):
        # 1 day x 1.5 x 2.5 = 3.75
        assert calculate_duration("isolatiewerken", 250, "medium") == 4

    def test_rounds_up(self):
        assert calculate_duration("platedakken", 101, "simple") == 3

    def test_unknown_inputs(self):
        assert calculate_duration("zwembad", 50, "weird") == 2


class TestBreakdown:
    """Tests for generate_breakdown."""

    def test_weights_sum_to_one(self):
        for split in BREAKDOWN_SPLITS.values():
            assert sum(share for _, share in split) == pytest.approx(1.0)

    def test_every_category_has_a_split(self):
        assert set(BREAKDOWN_SPLITS) == set(ProjectType)

    def test_items_round_from_unrounded_materials(self):
        # 0.6 x 100.8 = 60.48, 0.3 x 100.8 = 30.24, 0.1 x 100.8 = 10.08
        items = generate_breakdown("isolatiewerken", 100.8, 151.2)
        assert [item.cost for item in items] == [60, 30, 10]

    def test_labor_is_not_itemized(self):
        items = generate_breakdown("ramen-deuren", 1000, 999999)
        assert sum(item.cost for item in items) == 1000


class TestRounding:
    """JavaScript Math.round semantics."""

    @pytest.mark.parametrize("value,expected", [
        (0.5, 1),
        (1.5, 2),
        (2.5, 3),
        (2.4999, 2),
        (-0.5, 0),
        (-1.5, -1),
        (11520.000000000002, 11520),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestValidity:
    """Tests for the 30-day validity date."""

    def test_thirty_days_after_issuance(self, frozen_now):
        assert valid_until_for(frozen_now) - frozen_now.date() == timedelta(days=30)

    def test_uses_utc_calendar_date(self):
        # 23:30 at UTC-2 is already the next day in UTC.
        issued = datetime(2024, 1, 31, 23, 30, tzinfo=timezone(timedelta(hours=-2)))
        assert valid_until_for(issued) == date(2024, 3, 2)

    def test_naive_datetime_is_taken_as_utc(self):
        assert valid_until_for(datetime(2024, 1, 1, 12, 0)) == date(2024, 1, 31)


class TestInvariants:
    """Properties that hold for every valid combination."""

    @pytest.mark.parametrize(
        "project_type,complexity,urgency",
        list(itertools.product(KNOWN_TYPES, COMPLEXITIES, URGENCIES))
    )
    def test_quote_invariants(self, project_type, complexity, urgency, frozen_now):
        for size in SIZES:
            quote = calculate_quote(project_type, size, complexity, None, urgency, now=frozen_now)

            assert quote.total_cost > 0
            assert abs(quote.materials_cost + quote.labor_cost - quote.total_cost) <= 1
            assert quote.duration >= BASE_DURATIONS[ProjectType(project_type)]
            assert all(item.cost >= 0 for item in quote.breakdown)
            assert abs(sum(item.cost for item in quote.breakdown) - quote.materials_cost) <= len(quote.breakdown)
            assert quote.valid_until == date(2024, 2, 14)

    def test_idempotent_with_frozen_clock(self, frozen_now):
        first = calculate_quote("platedakken", 80, "medium", "Mechelen", "urgent", now=frozen_now)
        second = calculate_quote("platedakken", 80, "medium", "Mechelen", "urgent", now=frozen_now)

        assert first.model_dump() == second.model_dump()

    def test_inputs_are_echoed(self, frozen_now):
        quote = calculate_quote("ramen-deuren", 12.5, "medium", "Lier", "asap", now=frozen_now)

        assert quote.project_type == "ramen-deuren"
        assert quote.size == 12.5
        assert quote.complexity == "medium"
        assert quote.location == "Lier"
        assert quote.urgency == "asap"


class TestResponseShape:
    """Tests for the API representation of a quote."""

    def test_camel_case_keys(self, frozen_now):
        body = calculate_quote("isolatiewerken", 100, "simple", None, "normal", now=frozen_now).to_response_dict()

        assert body["projectType"] == "isolatiewerken"
        assert body["totalCost"] == 4500
        assert body["materialsCost"] == 1800
        assert body["laborCost"] == 2700
        assert body["validUntil"] == "2024-02-14"
        assert body["breakdown"][0] == {"item": "Isolatiemateriaal", "cost": 1080}
        assert body["size"] == 100

    def test_calculate_from_request(self, frozen_now):
        request = ProjectRequest(projectType="tuinaanleg", size=100, complexity="simple", urgency="normal")
        quote = calculate_quote_for_request(request, now=frozen_now)

        assert quote.total_cost == 4000
        assert quote.duration == 3


class TestEnumParsing:
    """The explicit OTHER arm."""

    def test_parse_known_values(self):
        assert ProjectType.parse("ramen-deuren") is ProjectType.RAMEN_DEUREN
        assert Complexity.parse("complex") is Complexity.COMPLEX
        assert Urgency.parse("asap") is Urgency.ASAP

    def test_parse_unknown_values(self):
        assert ProjectType.parse("keuken") is ProjectType.OTHER
        assert ProjectType.parse(None) is ProjectType.OTHER
        assert Complexity.parse("") is Complexity.OTHER
        assert Urgency.parse("morgen") is Urgency.OTHER

    def test_known_excludes_other(self):
        assert ProjectType.OTHER not in ProjectType.known()
        assert len(ProjectType.known()) == 5
