"""
Trade potential service.

Builds the customer x supplier matrix for every packaging spec a customer
needs and a supplier can deliver, works out whether a price and a transport
solution exist, and ranks the result by readiness score.

Tables read:
    customer_product_packaging_spec   customer needs (joined to customer/product)
    supplier_product_packaging_spec   supplier capabilities (active suppliers)
    current_supplier_prices           latest price per supplier/spec
    transporter_routes                active third-party routes
    customer_logistics_capabilities   Ex Works pickup / DELIVERY hubs
    customer_certifications           required certifications per customer
    supplier_certifications           held certifications per supplier
    opportunities                     deals already opened for a potential

Tables written:
    supplier_prices                   new supplier prices
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional
import structlog

from config import get_supabase_client
from models.trade_potential import (
    AgentRef,
    CustomerRef,
    LogisticsSolution,
    OpportunityRef,
    PotentialStatus,
    ProductRef,
    SupplierPrice,
    SupplierPriceCreate,
    SupplierPriceResponse,
    SupplierRef,
    TradePotential,
    TradePotentialListResponse,
    TradePotentialSummary,
    TransportRouteRef,
)
from services.readiness_service import parse_timestamp, score_potentials
from exceptions import DatabaseError, InvalidPotentialStatusError

logger = structlog.get_logger(__name__)

EX_WORKS = "Ex Works"
DELIVERY = "DELIVERY"

SUPPLIER_PRICES_TABLE = "supplier_prices"

CUSTOMER_NEEDS_SELECT = """
    customer_id,
    product_packaging_spec_id,
    customers!inner(id, name, city, country, staff(id, name, role)),
    product_packaging_specs!inner(
        id,
        products!inner(id, name, category, sold_by),
        packaging_options!inner(label),
        size_options!inner(name)
    )
"""

SUPPLIER_CAPABILITIES_SELECT = """
    supplier_id,
    product_packaging_spec_id,
    suppliers!inner(id, name, city, country, is_active)
"""

TRANSPORT_ROUTES_SELECT = """
    id,
    origin_hub_id,
    destination_hub_id,
    transport_duration_days,
    is_active,
    transporters!inner(name, is_active),
    transporter_route_price_bands(price_per_pallet, pallet_dimensions)
"""


def _status_for(has_price: bool, has_transport: bool) -> PotentialStatus:
    if has_price and has_transport:
        return PotentialStatus.COMPLETE
    if has_price:
        return PotentialStatus.MISSING_TRANSPORT
    if has_transport:
        return PotentialStatus.MISSING_PRICE
    return PotentialStatus.MISSING_BOTH


def _certification_valid(expires_at: Any, reference: datetime) -> bool:
    if not expires_at:
        return True
    expiry = parse_timestamp(expires_at)
    return expiry is not None and expiry > reference


def _cheapest_band(route: dict) -> Optional[float]:
    prices = [
        band["price_per_pallet"]
        for band in route.get("transporter_route_price_bands") or []
        if band.get("price_per_pallet") is not None
    ]
    return min(prices) if prices else None


def resolve_logistics(
    price: Optional[dict],
    customer_logistics: list[dict],
    routes: list[dict]
) -> tuple[bool, LogisticsSolution, Optional[dict]]:
    """
    Decide whether goods can reach the customer.

    Checked in order:
        1. Customer picks up Ex Works at, or takes delivery at, the price hub
        2. Supplier delivers to one of the customer's delivery hubs
        3. A third-party route runs from the price hub to a delivery hub

    Without a supplier price there is no hub to route from, so transport
    counts as available whenever any active route exists.

    Returns:
        (has_transport, solution, matching route row or None)
    """
    if not price or not price.get("hub_id"):
        return bool(routes), LogisticsSolution.UNKNOWN, None

    hub_id = price["hub_id"]

    same_location = any(
        (cap.get("mode") == EX_WORKS and cap.get("origin_hub_id") == hub_id)
        or (cap.get("mode") == DELIVERY and cap.get("destination_hub_id") == hub_id)
        for cap in customer_logistics
    )
    if same_location:
        return True, LogisticsSolution.SAME_LOCATION, None

    delivery_hubs = {
        cap["destination_hub_id"]
        for cap in customer_logistics
        if cap.get("mode") == DELIVERY and cap.get("destination_hub_id")
    }

    if price.get("delivery_mode") == DELIVERY and hub_id in delivery_hubs:
        return True, LogisticsSolution.SUPPLIER_DELIVERY, None

    for route in routes:
        if route.get("origin_hub_id") == hub_id and route.get("destination_hub_id") in delivery_hubs:
            return True, LogisticsSolution.THIRD_PARTY_TRANSPORT, route

    return False, LogisticsSolution.UNKNOWN, None


def attach_opportunities(
    potentials: list[TradePotential],
    opportunity_rows: Iterable[dict]
) -> list[TradePotential]:
    """
    Flag potentials that already have a commercial opportunity.

    Opportunities are matched on (customer_id, supplier_id, spec_id). An
    opportunity is active when is_active is set and it is not yet converted.

    Returns:
        New list; input potentials are not modified
    """
    by_key: dict[tuple, dict] = {}
    for row in opportunity_rows:
        key = (row.get("customer_id"), row.get("supplier_id"), row.get("product_packaging_spec_id"))
        by_key.setdefault(key, row)

    result = []
    for potential in potentials:
        if not (potential.customer and potential.supplier and potential.product):
            result.append(potential)
            continue

        key = (potential.customer.id, potential.supplier.id, potential.product.spec_id)
        row = by_key.get(key)
        if row is None:
            result.append(potential)
            continue

        is_active = bool(row.get("is_active")) and row.get("status") != "converted"
        result.append(
            potential.model_copy(update={
                "has_opportunity": True,
                "is_active_opportunity": is_active,
                "opportunity": OpportunityRef(
                    id=row.get("id"),
                    offer_price=row.get("offer_price"),
                    status=row.get("status"),
                    is_active=is_active,
                ),
            })
        )

    return result


def summarize(potentials: list[TradePotential]) -> TradePotentialSummary:
    """Count potentials per status."""
    total = len(potentials)
    counts = {status: 0 for status in PotentialStatus}
    for potential in potentials:
        counts[potential.status] += 1

    complete = counts[PotentialStatus.COMPLETE]
    return TradePotentialSummary(
        total=total,
        complete=complete,
        missing_price=counts[PotentialStatus.MISSING_PRICE],
        missing_transport=counts[PotentialStatus.MISSING_TRANSPORT],
        missing_both=counts[PotentialStatus.MISSING_BOTH],
        completion_rate=(complete / total * 100) if total else 0.0,
    )


class TradePotentialService:
    """
    Trade potential matrix and ranking.

    Reads everything up front, then matches in memory.
    """

    def __init__(self):
        self.db = get_supabase_client()

    def _fetch(self, table: str, select: str = "*", **filters: Any) -> list[dict]:
        """Select rows with equality filters."""
        try:
            query = self.db.table(table).select(select)
            for column, value in filters.items():
                query = query.eq(column.replace("__", "."), value)
            result = query.execute()
            return result.data or []
        except Exception as e:
            logger.error("trade_potential_fetch_failed", table=table, error=str(e))
            raise DatabaseError("select", str(e), details={"table": table})

    def _build_potential(
        self,
        need: dict,
        capability: dict,
        price: Optional[dict],
        has_transport: bool,
        solution: LogisticsSolution,
        route: Optional[dict]
    ) -> TradePotential:
        customer = need["customers"]
        spec = need["product_packaging_specs"]
        product = spec["products"]
        supplier = capability["suppliers"]
        staff = customer.get("staff") or {}
        has_price = price is not None

        return TradePotential(
            id=f"{customer['id']}-{supplier['id']}-{need['product_packaging_spec_id']}",
            status=_status_for(has_price, has_transport),
            customer=CustomerRef(
                id=customer["id"],
                name=customer["name"],
                city=customer.get("city") or "",
                country=customer.get("country") or "",
                agent=AgentRef(
                    id=staff.get("id") or "",
                    name=staff.get("name") or "",
                    role=staff.get("role") or "",
                ),
            ),
            supplier=SupplierRef(
                id=supplier["id"],
                name=supplier["name"],
                city=supplier.get("city") or "",
                country=supplier.get("country") or "",
                default_hub_id=price.get("hub_id") if price else None,
                default_hub_name=price.get("hub_name") if price else None,
            ),
            product=ProductRef(
                id=product["id"],
                name=product["name"],
                category=product.get("category"),
                packaging_label=(spec.get("packaging_options") or {}).get("label"),
                size_name=(spec.get("size_options") or {}).get("name"),
                sold_by=product.get("sold_by"),
                spec_id=spec["id"],
            ),
            has_supplier_price=has_price,
            has_transport_route=has_transport,
            supplier_price=SupplierPrice(
                id=price.get("id"),
                price_per_unit=price.get("price_per_unit"),
                currency=price.get("currency"),
                delivery_mode=price.get("delivery_mode"),
                hub_id=price.get("hub_id"),
                hub_name=price.get("hub_name"),
                valid_until=price.get("valid_until"),
            ) if price else None,
            transport_route=TransportRouteRef(
                id=route["id"],
                origin_hub_id=route["origin_hub_id"],
                destination_hub_id=route["destination_hub_id"],
                transporter_name=(route.get("transporters") or {}).get("name"),
                duration_days=route.get("transport_duration_days"),
                price_per_pallet=_cheapest_band(route),
            ) if route else None,
            price_gap=not has_price,
            transport_gap=not has_transport,
            completion_score=(50 if has_price else 0) + (50 if has_transport else 0),
            logistics_solution=solution,
        )

    def generate_matrix(self, now: Optional[datetime] = None) -> list[TradePotential]:
        """
        Build every customer need x capable supplier combination.

        Suppliers missing a certification the customer requires are skipped.
        A certification counts while it has no expiry or expires after now.

        Args:
            now: Reference time for certification expiry

        Returns:
            List of TradePotential, one per (customer, supplier, spec)

        Raises:
            DatabaseError: If any query fails
        """
        logger.info("generating_trade_potential_matrix")

        needs = self._fetch("customer_product_packaging_spec", CUSTOMER_NEEDS_SELECT)
        capabilities = self._fetch(
            "supplier_product_packaging_spec",
            SUPPLIER_CAPABILITIES_SELECT,
            suppliers__is_active=True,
        )
        prices = self._fetch("current_supplier_prices")
        routes = self._fetch(
            "transporter_routes",
            TRANSPORT_ROUTES_SELECT,
            is_active=True,
            transporters__is_active=True,
        )
        logistics = self._fetch("customer_logistics_capabilities")
        required_certs = self._fetch("customer_certifications", is_required=True)
        supplier_certs = self._fetch("supplier_certifications")

        reference = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
        held_certs: dict[str, set] = {}
        for cert in supplier_certs:
            if not _certification_valid(cert.get("expires_at"), reference):
                continue
            held_certs.setdefault(cert["supplier_id"], set()).add(cert["certification_id"])

        capabilities_by_spec: dict[str, list[dict]] = {}
        for capability in capabilities:
            capabilities_by_spec.setdefault(capability["product_packaging_spec_id"], []).append(capability)

        prices_by_key = {}
        for price in prices:
            prices_by_key.setdefault((price["supplier_id"], price["product_packaging_spec_id"]), price)

        potentials = []
        skipped = 0

        for need in needs:
            customer_id = need["customer_id"]
            spec_id = need["product_packaging_spec_id"]
            customer_logistics = [cap for cap in logistics if cap.get("customer_id") == customer_id]
            required = {
                req["certification_id"]
                for req in required_certs
                if req.get("customer_id") == customer_id
            }

            for capability in capabilities_by_spec.get(spec_id, []):
                supplier_id = capability["supplier_id"]

                if not required.issubset(held_certs.get(supplier_id, set())):
                    skipped += 1
                    continue

                price = prices_by_key.get((supplier_id, spec_id))
                has_transport, solution, route = resolve_logistics(price, customer_logistics, routes)

                potentials.append(
                    self._build_potential(need, capability, price, has_transport, solution, route)
                )

        summary = summarize(potentials)
        logger.info(
            "trade_potential_matrix_generated",
            total=summary.total,
            complete=summary.complete,
            missing_price=summary.missing_price,
            missing_transport=summary.missing_transport,
            missing_both=summary.missing_both,
            skipped_certification=skipped
        )

        return potentials

    def get_potentials(self, now: Optional[datetime] = None) -> list[TradePotential]:
        """Matrix with opportunity flags attached."""
        potentials = self.generate_matrix(now)
        opportunities = self._fetch("opportunities")
        return attach_opportunities(potentials, opportunities)

    def get_summary(self) -> TradePotentialSummary:
        """Status counts over the whole matrix."""
        return summarize(self.generate_matrix())

    def add_supplier_price(self, data: SupplierPriceCreate) -> SupplierPriceResponse:
        """
        Store a supplier price, closing a missing_price gap.

        The price shows up in the matrix once current_supplier_prices picks
        it up.

        Args:
            data: New price

        Returns:
            Stored SupplierPriceResponse

        Raises:
            DatabaseError: If the insert fails
        """
        logger.info(
            "adding_supplier_price",
            supplier_id=data.supplier_id,
            spec_id=data.product_packaging_spec_id,
            hub_id=data.hub_id
        )

        try:
            result = (
                self.db.table(SUPPLIER_PRICES_TABLE)
                .insert(data.model_dump(mode="json", exclude_none=True))
                .execute()
            )
        except Exception as e:
            logger.error(
                "supplier_price_insert_failed",
                supplier_id=data.supplier_id,
                error=str(e)
            )
            raise DatabaseError("insert", str(e), details={"table": SUPPLIER_PRICES_TABLE})

        if not result.data:
            raise DatabaseError("insert", "no row returned", details={"table": SUPPLIER_PRICES_TABLE})

        price = SupplierPriceResponse(**result.data[0])

        logger.info(
            "supplier_price_added",
            price_id=price.id,
            supplier_id=price.supplier_id,
            price_per_unit=price.price_per_unit
        )

        return price

    def get_ranked(
        self,
        status: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> TradePotentialListResponse:
        """
        Potentials ranked by readiness score.

        Args:
            status: Optional status filter; summary always covers all potentials
            now: Reference time for price and certification expiry

        Raises:
            InvalidPotentialStatusError: Unknown status filter
            DatabaseError: If any query fails
        """
        status_filter = None
        if status and status != "all":
            try:
                status_filter = PotentialStatus(status)
            except ValueError:
                raise InvalidPotentialStatusError(status, [s.value for s in PotentialStatus])

        potentials = self.get_potentials(now)
        summary = summarize(potentials)

        if status_filter is not None:
            potentials = [p for p in potentials if p.status == status_filter]

        ranked = score_potentials(potentials, now=now)

        logger.info(
            "trade_potentials_ranked",
            status=status_filter.value if status_filter else "all",
            count=len(ranked)
        )

        return TradePotentialListResponse(
            data=ranked,
            total=len(ranked),
            summary=summary,
        )


# Singleton instance
_trade_potential_service: Optional[TradePotentialService] = None


def get_trade_potential_service() -> TradePotentialService:
    """Get or create TradePotentialService instance."""
    global _trade_potential_service
    if _trade_potential_service is None:
        _trade_potential_service = TradePotentialService()
    return _trade_potential_service
