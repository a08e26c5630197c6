"""
Print the top trade potentials by readiness score.

Usage:
    python scripts/rank_trade_potentials.py [limit] [status]
"""

import sys
from pathlib import Path

# Add backend to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from services.trade_potential_service import get_trade_potential_service


def rank_trade_potentials(limit: int = 20, status: str = None):
    """Print ranked potentials and the matrix summary."""
    result = get_trade_potential_service().get_ranked(status=status)
    summary = result.summary

    print(f"Trade potentials: {summary.total} total, {summary.completion_rate:.0f}% complete")
    print(f"  complete: {summary.complete}")
    print(f"  missing price: {summary.missing_price}")
    print(f"  missing transport: {summary.missing_transport}")
    print(f"  missing both: {summary.missing_both}\n")

    for potential in result.data[:limit]:
        customer = potential.customer.name if potential.customer else "?"
        supplier = potential.supplier.name if potential.supplier else "?"
        product = potential.product.name if potential.product else "?"
        label = potential.readiness
        print(
            f"  {potential.readiness_score:>3} {label.icon} {label.label:<13} "
            f"{customer} <- {supplier}: {product}"
        )


if __name__ == "__main__":
    limit = int(sys.argv[1]) if len(sys.argv) > 1 else 20
    status = sys.argv[2] if len(sys.argv) > 2 else None
    rank_trade_potentials(limit, status)
