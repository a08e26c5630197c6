"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.trade_potential import router as trade_potential_router
from routes.bot import router as bot_router

__all__ = [
    "trade_potential_router",
    "bot_router",
]
