"""
Business logic services.

Each service handles one domain area.
"""

from services.readiness_service import (
    calculate_readiness_score,
    get_days_until_expiry,
    get_readiness_label,
    score_potentials,
    sort_by_readiness_score,
)
from services.trade_potential_service import TradePotentialService, get_trade_potential_service
from services.bot_service import BotService, get_bot_service

__all__ = [
    "calculate_readiness_score",
    "get_days_until_expiry",
    "get_readiness_label",
    "score_potentials",
    "sort_by_readiness_score",
    "TradePotentialService",
    "get_trade_potential_service",
    "BotService",
    "get_bot_service",
]
