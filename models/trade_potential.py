"""
Trade potential models.

A trade potential is a candidate match between a customer need, a supplier
price and a transport route. Records are built per query by
TradePotentialService, scored on demand, and never persisted.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from pydantic import Field

from models.base import BaseSchema


class PotentialStatus(str, Enum):
    """Which pieces of the deal are already known."""

    COMPLETE = "complete"
    MISSING_PRICE = "missing_price"
    MISSING_TRANSPORT = "missing_transport"
    MISSING_BOTH = "missing_both"


class LogisticsSolution(str, Enum):
    """How goods get from the supplier hub to the customer."""

    SAME_LOCATION = "SAME_LOCATION"
    SUPPLIER_DELIVERY = "SUPPLIER_DELIVERY"
    THIRD_PARTY_TRANSPORT = "THIRD_PARTY_TRANSPORT"
    UNKNOWN = "UNKNOWN"


class DeliveryMode(str, Enum):
    """Incoterm-style terms a supplier quotes under."""

    EX_WORKS = "Ex Works"
    DELIVERY = "DELIVERY"
    TRANSIT = "TRANSIT"


class AgentRef(BaseSchema):
    """Staff member responsible for a customer."""

    id: str = ""
    name: str = ""
    role: str = ""


class CustomerRef(BaseSchema):
    """Customer side of a potential."""

    id: str
    name: str
    city: str = ""
    country: str = ""
    agent: AgentRef = Field(default_factory=AgentRef)


class SupplierRef(BaseSchema):
    """Supplier side of a potential."""

    id: str
    name: str
    city: str = ""
    country: str = ""
    default_hub_id: Optional[str] = None
    default_hub_name: Optional[str] = None


class ProductRef(BaseSchema):
    """Product and packaging spec being traded."""

    id: str
    name: str
    category: Optional[str] = None
    packaging_label: Optional[str] = None
    size_name: Optional[str] = None
    sold_by: Optional[str] = None
    spec_id: str


class SupplierPrice(BaseSchema):
    """
    Current supplier price for the spec.

    valid_until stays a raw string; the scorer decides how to read it.
    """

    id: Optional[str] = None
    price_per_unit: Optional[float] = Field(None, description="Supplier price per unit")
    currency: Optional[str] = None
    delivery_mode: Optional[str] = None
    hub_id: Optional[str] = None
    hub_name: Optional[str] = None
    valid_until: Optional[str] = Field(None, description="Price expiry (ISO date)")


class TransportRouteRef(BaseSchema):
    """Third-party route covering the potential."""

    id: str
    origin_hub_id: str
    destination_hub_id: str
    transporter_name: Optional[str] = None
    duration_days: Optional[int] = None
    price_per_pallet: Optional[float] = None


class OpportunityRef(BaseSchema):
    """Commercial opportunity already opened for the potential."""

    id: Optional[str] = None
    offer_price: Optional[float] = Field(None, description="Price offered to the customer")
    status: Optional[str] = None
    is_active: bool = False


class TradePotential(BaseSchema):
    """Candidate customer/supplier/route match."""

    id: str
    status: PotentialStatus
    customer: Optional[CustomerRef] = None
    supplier: Optional[SupplierRef] = None
    product: Optional[ProductRef] = None

    has_supplier_price: bool = False
    has_transport_route: bool = False
    supplier_price: Optional[SupplierPrice] = None
    transport_route: Optional[TransportRouteRef] = None

    opportunity: Optional[OpportunityRef] = None
    has_opportunity: bool = False
    is_active_opportunity: bool = False

    price_gap: bool = False
    transport_gap: bool = False
    completion_score: int = Field(0, ge=0, le=100)
    logistics_solution: Optional[LogisticsSolution] = None


class ReadinessLabel(BaseSchema):
    """Qualitative bucket for a readiness score."""

    label: str
    icon: str
    color: str
    min_score: int


class ScoredTradePotential(TradePotential):
    """Trade potential with its readiness score attached."""

    readiness_score: int = Field(..., ge=0)
    readiness: ReadinessLabel


class TradePotentialSummary(BaseSchema):
    """Counts by status over the whole matrix."""

    total: int = 0
    complete: int = 0
    missing_price: int = 0
    missing_transport: int = 0
    missing_both: int = 0
    completion_rate: float = Field(0.0, description="Percent of potentials that are complete")


class TradePotentialListResponse(BaseSchema):
    """Ranked potentials plus summary."""

    data: list[ScoredTradePotential]
    total: int
    summary: TradePotentialSummary


class ScoreRequest(BaseSchema):
    """Caller-supplied potentials to score."""

    potentials: list[TradePotential] = Field(default_factory=list)


class SupplierPriceCreate(BaseSchema):
    """New supplier price, filling a missing_price gap."""

    supplier_id: str = Field(..., min_length=1)
    product_packaging_spec_id: str = Field(..., min_length=1)
    hub_id: str = Field(..., min_length=1, description="Hub the price is quoted at")
    price_per_unit: float = Field(..., gt=0)
    currency: str = Field(..., min_length=3, max_length=3, description="ISO currency code")
    delivery_mode: DeliveryMode
    valid_until: date
    min_order_quantity: Optional[int] = Field(None, ge=1)
    is_active: bool = True


class SupplierPriceResponse(SupplierPriceCreate):
    """Stored supplier price."""

    id: str
    created_at: Optional[datetime] = None
