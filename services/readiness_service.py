"""
Readiness scoring for trade potentials.

Turns a trade potential into a 0-100 sales-priority score:

    completion   complete +40, missing price/transport +20, missing both 0
    margin       >=20% +30, >=15% +25, >=10% +20, >=5% +10
    urgency      price expires in <=3 days +20, <=7 +15, <=14 +10
    opportunity  existing deal -10, still active +5

The total is clamped at 0. No upper clamp is applied; the point budget keeps
it within 100.

All functions here are pure: no I/O, no state, and no exceptions for missing
or malformed optional fields.
"""

import math
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Union

from models.trade_potential import (
    PotentialStatus,
    ReadinessLabel,
    ScoredTradePotential,
    TradePotential,
)

# Markup assumed when no explicit offer price exists yet
DEFAULT_MARKUP = 1.15

SECONDS_PER_DAY = 24 * 60 * 60

COMPLETION_POINTS = {
    PotentialStatus.COMPLETE: 40,
    PotentialStatus.MISSING_PRICE: 20,
    PotentialStatus.MISSING_TRANSPORT: 20,
    PotentialStatus.MISSING_BOTH: 0,
}

# (minimum margin percent, points), highest first; first match wins
MARGIN_THRESHOLDS = [
    (20, 30),
    (15, 25),
    (10, 20),
    (5, 10),
]

# (maximum days until expiry, points), most urgent first
URGENCY_THRESHOLDS = [
    (3, 20),
    (7, 15),
    (14, 10),
]

EXISTING_OPPORTUNITY_PENALTY = -10
ACTIVE_OPPORTUNITY_BONUS = 5

# Highest band first
READINESS_LABELS = [
    ReadinessLabel(label="Hot Lead", icon="🔥", color="text-red-600", min_score=70),
    ReadinessLabel(label="High Priority", icon="⭐", color="text-orange-600", min_score=50),
    ReadinessLabel(label="Ready", icon="✓", color="text-green-600", min_score=30),
    ReadinessLabel(label="Needs Work", icon="⏳", color="text-yellow-600", min_score=10),
    ReadinessLabel(label="Low Priority", icon="❌", color="text-gray-600", min_score=0),
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Read an expiry value as an aware UTC datetime.

    Date-only values are midnight UTC. Naive datetimes are taken as UTC.
    Returns None for anything that cannot be read as a date.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def get_days_until_expiry(
    valid_until: Union[str, date, datetime, None],
    now: Optional[datetime] = None
) -> Optional[int]:
    """
    Whole days until a price expires, rounded up.

    Negative when the price has already expired.

    Args:
        valid_until: Expiry as ISO string, date or datetime
        now: Reference time (defaults to current UTC time)

    Returns:
        Days until expiry, or None if valid_until is missing or unreadable
    """
    expiry = parse_timestamp(valid_until)
    if expiry is None:
        return None

    reference = parse_timestamp(now) if now is not None else _utcnow()
    delta_seconds = (expiry - reference).total_seconds()
    return math.ceil(delta_seconds / SECONDS_PER_DAY)


def _completion_points(potential: TradePotential) -> int:
    return COMPLETION_POINTS.get(potential.status, 0)


def _margin_points(potential: TradePotential) -> int:
    price = potential.supplier_price
    if price is None or not price.price_per_unit:
        return 0

    offer_price = None
    if potential.opportunity is not None:
        offer_price = potential.opportunity.offer_price
    if not offer_price:
        offer_price = price.price_per_unit * DEFAULT_MARKUP

    margin_percent = (offer_price - price.price_per_unit) / offer_price * 100

    for minimum, points in MARGIN_THRESHOLDS:
        if margin_percent >= minimum:
            return points
    return 0


def _urgency_points(potential: TradePotential, now: Optional[datetime]) -> int:
    price = potential.supplier_price
    if price is None or not price.valid_until:
        return 0

    days = get_days_until_expiry(price.valid_until, now=now)
    if days is None:
        return 0

    for maximum, points in URGENCY_THRESHOLDS:
        if days <= maximum:
            return points
    return 0


def calculate_readiness_score(
    potential: TradePotential,
    now: Optional[datetime] = None
) -> int:
    """
    Score a trade potential for sales priority.

    Args:
        potential: Trade potential to score
        now: Reference time for expiry urgency (defaults to current UTC time)

    Returns:
        Non-negative integer score (0-100 by point budget)
    """
    score = _completion_points(potential)
    score += _margin_points(potential)
    score += _urgency_points(potential, now)

    if potential.has_opportunity:
        score += EXISTING_OPPORTUNITY_PENALTY

    if potential.is_active_opportunity:
        score += ACTIVE_OPPORTUNITY_BONUS

    return max(0, score)


def get_readiness_label(score: float) -> ReadinessLabel:
    """
    Map a score to its readiness bucket.

    Args:
        score: Readiness score

    Returns:
        ReadinessLabel (Hot Lead, High Priority, Ready, Needs Work, Low Priority)
    """
    for band in READINESS_LABELS:
        if score >= band.min_score:
            return band
    return READINESS_LABELS[-1]


def sort_by_readiness_score(
    potentials: Iterable[TradePotential],
    now: Optional[datetime] = None
) -> list[TradePotential]:
    """
    Order potentials by descending readiness score.

    Returns a new list; the input is left untouched. Potentials with equal
    scores keep their original relative order.
    """
    reference = now or _utcnow()
    return sorted(
        potentials,
        key=lambda p: calculate_readiness_score(p, now=reference),
        reverse=True,
    )


def score_potentials(
    potentials: Iterable[TradePotential],
    now: Optional[datetime] = None
) -> list[ScoredTradePotential]:
    """
    Score, label and rank potentials in one pass.

    Each potential is scored once. Ties keep input order.

    Args:
        potentials: Potentials to rank
        now: Reference time shared by every record

    Returns:
        ScoredTradePotential list, highest score first
    """
    reference = now or _utcnow()

    scored = []
    for potential in potentials:
        score = calculate_readiness_score(potential, now=reference)
        scored.append(
            ScoredTradePotential(
                **potential.model_dump(),
                readiness_score=score,
                readiness=get_readiness_label(score),
            )
        )

    scored.sort(key=lambda p: p.readiness_score, reverse=True)
    return scored
