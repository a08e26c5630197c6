"""
Unit tests for readiness scoring.

Run: pytest tests/unit/test_readiness_service.py -v
"""

import pytest
from datetime import date, datetime, timedelta, timezone

from services.readiness_service import (
    calculate_readiness_score,
    get_days_until_expiry,
    get_readiness_label,
    score_potentials,
    sort_by_readiness_score,
)
from tests.factories import TradePotentialFactory


# ===================
# COMPLETION
# ===================

class TestCompletionPoints:
    """Status alone, with no price or opportunity."""

    @pytest.mark.parametrize("status,expected", [
        ("complete", 40),
        ("missing_price", 20),
        ("missing_transport", 20),
        ("missing_both", 0),
    ])
    def test_status_points(self, now, status, expected):
        potential = TradePotentialFactory.create(status=status)

        assert calculate_readiness_score(potential, now=now) == expected

    def test_empty_potential_is_low_priority(self, now):
        """missing_both, no price, no opportunity scores 0."""
        potential = TradePotentialFactory.create(status="missing_both")

        score = calculate_readiness_score(potential, now=now)

        assert score == 0
        assert get_readiness_label(score).label == "Low Priority"


# ===================
# MARGIN
# ===================

class TestMarginPoints:
    """Margin = (offer - price) / offer."""

    @pytest.mark.parametrize("offer_price,expected", [
        (130, 30),    # 23.1%
        (125, 30),    # 20.0%
        (120, 25),    # 16.7%
        (112, 20),    # 10.7%
        (110, 10),    # 9.1%
        (105, 0),     # 4.8%
        (100, 0),     # 0%
        (90, 0),      # negative margin
    ])
    def test_margin_bands_with_offer(self, now, offer_price, expected):
        potential = TradePotentialFactory.create(
            status="missing_both",
            price_per_unit=100,
            offer_price=offer_price,
        )

        assert calculate_readiness_score(potential, now=now) == expected

    def test_exact_twenty_percent_counts_as_top_band(self, now):
        potential = TradePotentialFactory.create(price_per_unit=80, offer_price=100)

        assert calculate_readiness_score(potential, now=now) == 30

    def test_default_markup_without_offer(self, now):
        """No offer: assume 15% markup, which is a 13% margin."""
        potential = TradePotentialFactory.create(price_per_unit=100)

        assert calculate_readiness_score(potential, now=now) == 20

    def test_zero_offer_falls_back_to_markup(self, now):
        potential = TradePotentialFactory.create(price_per_unit=100, offer_price=0)

        assert calculate_readiness_score(potential, now=now) == 20

    def test_zero_price_skips_margin(self, now):
        potential = TradePotentialFactory.create(price_per_unit=0, offer_price=100)

        assert calculate_readiness_score(potential, now=now) == 0

    def test_negative_price_is_not_rejected(self, now):
        """Negative prices propagate arithmetically instead of raising."""
        potential = TradePotentialFactory.create(price_per_unit=-10)

        assert calculate_readiness_score(potential, now=now) == 20

    def test_margin_never_decreases_across_thresholds(self, now):
        offers = [100, 104, 106, 111, 118, 126, 200]
        scores = [
            calculate_readiness_score(
                TradePotentialFactory.create(price_per_unit=100, offer_price=offer),
                now=now,
            )
            for offer in offers
        ]

        assert scores == sorted(scores)


# ===================
# URGENCY
# ===================

class TestUrgencyPoints:
    """Days until the supplier price expires."""

    @pytest.mark.parametrize("days,expected", [
        (-5, 20),     # already expired
        (0, 20),
        (2, 20),
        (3, 20),
        (3.5, 15),    # rounds up to 4
        (7, 15),
        (8, 10),
        (14, 10),
        (15, 0),
        (60, 0),
    ])
    def test_urgency_bands(self, now, days, expected):
        potential = TradePotentialFactory.create(expires_in_days=days, now=now)

        assert calculate_readiness_score(potential, now=now) == expected

    def test_urgency_never_decreases_as_expiry_nears(self, now):
        days = [30, 15, 14, 8, 7, 4, 3, 1]
        scores = [
            calculate_readiness_score(
                TradePotentialFactory.create(expires_in_days=d, now=now),
                now=now,
            )
            for d in days
        ]

        assert scores == sorted(scores)

    def test_date_only_expiry_is_midnight_utc(self, now):
        """2025-06-03 00:00 is 1.5 days after 2025-06-01 12:00, rounded up to 2."""
        potential = TradePotentialFactory.create(valid_until="2025-06-03")

        assert calculate_readiness_score(potential, now=now) == 20

    def test_malformed_expiry_gives_no_bonus(self, now):
        potential = TradePotentialFactory.create(valid_until="not-a-date")

        assert calculate_readiness_score(potential, now=now) == 0

    def test_empty_expiry_gives_no_bonus(self, now):
        potential = TradePotentialFactory.create(price_per_unit=100, valid_until="")

        assert calculate_readiness_score(potential, now=now) == 20


class TestGetDaysUntilExpiry:
    """Tests for get_days_until_expiry()"""

    def test_rounds_partial_days_up(self, now):
        assert get_days_until_expiry(now + timedelta(hours=25), now=now) == 2

    def test_expired_is_negative(self, now):
        assert get_days_until_expiry(now - timedelta(days=3), now=now) == -3

    def test_accepts_date(self, now):
        assert get_days_until_expiry(date(2025, 6, 11), now=now) == 10

    def test_accepts_zulu_suffix(self, now):
        assert get_days_until_expiry("2025-06-05T12:00:00Z", now=now) == 4

    def test_naive_datetime_is_utc(self, now):
        assert get_days_until_expiry(datetime(2025, 6, 2, 12, 0), now=now) == 1

    @pytest.mark.parametrize("value", [None, "", "   ", "31/12/2025", "soon", 42])
    def test_unreadable_returns_none(self, now, value):
        assert get_days_until_expiry(value, now=now) is None


# ===================
# OPPORTUNITY
# ===================

class TestOpportunityAdjustments:
    """Existing and active opportunities."""

    def test_existing_opportunity_costs_ten(self, now):
        base = TradePotentialFactory.create(status="complete", price_per_unit=100)
        with_opportunity = TradePotentialFactory.create(
            status="complete", price_per_unit=100, has_opportunity=True
        )

        assert (
            calculate_readiness_score(base, now=now)
            - calculate_readiness_score(with_opportunity, now=now)
        ) == 10

    def test_active_opportunity_adds_five_back(self, now):
        inactive = TradePotentialFactory.create(status="complete", has_opportunity=True)
        active = TradePotentialFactory.create(
            status="complete", has_opportunity=True, is_active_opportunity=True
        )

        assert calculate_readiness_score(inactive, now=now) == 30
        assert calculate_readiness_score(active, now=now) == 35

    def test_score_is_clamped_at_zero(self, now):
        potential = TradePotentialFactory.create(status="missing_both", has_opportunity=True)

        assert calculate_readiness_score(potential, now=now) == 0


# ===================
# COMBINED
# ===================

class TestCombinedScore:
    """Full point system."""

    def test_hot_lead(self, now):
        """complete 40 + margin 23% 30 + expires in 2 days 20 = 90."""
        potential = TradePotentialFactory.create(
            status="complete",
            price_per_unit=100,
            offer_price=130,
            expires_in_days=2,
            now=now,
        )

        score = calculate_readiness_score(potential, now=now)

        assert score == 90
        assert get_readiness_label(score).label == "Hot Lead"

    def test_maximum_with_active_opportunity(self, now):
        """No upper clamp: 40 + 30 + 20 - 10 + 5 = 85."""
        potential = TradePotentialFactory.create(
            status="complete",
            price_per_unit=100,
            offer_price=150,
            expires_in_days=1,
            has_opportunity=True,
            is_active_opportunity=True,
            now=now,
        )

        assert calculate_readiness_score(potential, now=now) == 85

    def test_scoring_does_not_mutate_input(self, now):
        potential = TradePotentialFactory.create(status="complete", price_per_unit=100)
        before = potential.model_dump()

        calculate_readiness_score(potential, now=now)

        assert potential.model_dump() == before


# ===================
# LABELS
# ===================

class TestReadinessLabel:
    """Tests for get_readiness_label()"""

    @pytest.mark.parametrize("score,label", [
        (100, "Hot Lead"),
        (70, "Hot Lead"),
        (69, "High Priority"),
        (50, "High Priority"),
        (49, "Ready"),
        (30, "Ready"),
        (29, "Needs Work"),
        (10, "Needs Work"),
        (9, "Low Priority"),
        (0, "Low Priority"),
        (-5, "Low Priority"),
    ])
    def test_label_bands(self, score, label):
        assert get_readiness_label(score).label == label

    def test_label_carries_color(self):
        assert get_readiness_label(90).color == "text-red-600"


# ===================
# SORTING
# ===================

class TestSortByReadinessScore:
    """Tests for sort_by_readiness_score() and score_potentials()"""

    @pytest.fixture
    def potentials(self):
        return [
            TradePotentialFactory.create(id="a", status="missing_both"),
            TradePotentialFactory.create(id="b", status="complete"),
            TradePotentialFactory.create(id="c", status="missing_both"),
            TradePotentialFactory.create(id="d", status="missing_price"),
            TradePotentialFactory.create(id="e", status="missing_transport"),
        ]

    def test_descending_and_stable(self, now, potentials):
        result = sort_by_readiness_score(potentials, now=now)

        assert [p.id for p in result] == ["b", "d", "e", "a", "c"]

    def test_input_untouched(self, now, potentials):
        original_ids = [p.id for p in potentials]

        result = sort_by_readiness_score(potentials, now=now)

        assert result is not potentials
        assert [p.id for p in potentials] == original_ids

    def test_empty_input(self, now):
        assert sort_by_readiness_score([], now=now) == []

    def test_score_potentials_attaches_score_and_label(self, now, potentials):
        result = score_potentials(potentials, now=now)

        assert [p.id for p in result] == ["b", "d", "e", "a", "c"]
        assert [p.readiness_score for p in result] == [40, 20, 20, 0, 0]
        assert result[0].readiness.label == "Ready"
        assert result[-1].readiness.label == "Low Priority"
