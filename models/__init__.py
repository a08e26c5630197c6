"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
)
from models.trade_potential import (
    PotentialStatus,
    LogisticsSolution,
    DeliveryMode,
    AgentRef,
    CustomerRef,
    SupplierRef,
    ProductRef,
    SupplierPrice,
    TransportRouteRef,
    OpportunityRef,
    TradePotential,
    ReadinessLabel,
    ScoredTradePotential,
    TradePotentialSummary,
    TradePotentialListResponse,
    ScoreRequest,
    SupplierPriceCreate,
    SupplierPriceResponse,
)
from models.bot import (
    Intent,
    TaskStatus,
    MessageDirection,
    ParsedMessage,
    BotTaskCreate,
    BotTask,
    BotMessageCreate,
    IncomingWhatsAppMessage,
    BotWebhookResult,
    BotTestRequest,
    BotTestResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Trade potential
    "PotentialStatus",
    "LogisticsSolution",
    "DeliveryMode",
    "AgentRef",
    "CustomerRef",
    "SupplierRef",
    "ProductRef",
    "SupplierPrice",
    "TransportRouteRef",
    "OpportunityRef",
    "TradePotential",
    "ReadinessLabel",
    "ScoredTradePotential",
    "TradePotentialSummary",
    "TradePotentialListResponse",
    "ScoreRequest",
    "SupplierPriceCreate",
    "SupplierPriceResponse",

    # Bot
    "Intent",
    "TaskStatus",
    "MessageDirection",
    "ParsedMessage",
    "BotTaskCreate",
    "BotTask",
    "BotMessageCreate",
    "IncomingWhatsAppMessage",
    "BotWebhookResult",
    "BotTestRequest",
    "BotTestResponse",
]
