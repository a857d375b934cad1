"""
Quotation Pricing Engine.

Pure math — no database, no I/O. Weighted material cost, then margin inversion:

    total_cost        = sum(cost * percentage / 100)
    margin_multiplier = 1 / (1 - margin_percentage / 100)
    sale_price        = total_cost * margin_multiplier
    profit_margin     = sale_price - total_cost

Costs come from an injected lookup (material_id -> cost, or None when the
material does not exist). The caller persists the result; the cost snapshot
on each PricedLine is what gets stored with the quotation.
"""

import secrets
import string
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel

from .errors import EmptyAllocation, InvalidMargin, PercentageMismatch, UnresolvedMaterial
from .models import ProductType

CostLookup = Callable[[int], Optional[float]]

QUOTE_NUMBER_PREFIX = "COT-"
QUOTE_NUMBER_LENGTH = 9
_QUOTE_ALPHABET = string.ascii_uppercase + string.digits


class Allocation(BaseModel):
    """One draft row: a material (None until chosen) and its share of the product."""
    material_id: Optional[int] = None
    percentage: float = 0.0


class ProductInfo(BaseModel):
    name: str
    product_type: ProductType
    validity_days: int


class PricedLine(BaseModel):
    material_id: int
    percentage: float
    cost: float  # unit cost at pricing time


class PricedQuotation(BaseModel):
    quote_number: str
    product_name: str
    product_type: ProductType
    validity_days: int
    total_cost: float
    sale_price: float
    profit_margin: float
    margin_percentage: float
    lines: List[PricedLine]


def generate_quote_number() -> str:
    """COT- plus 9 uppercase alphanumerics. Unique with high probability only."""
    suffix = "".join(secrets.choice(_QUOTE_ALPHABET) for _ in range(QUOTE_NUMBER_LENGTH))
    return f"{QUOTE_NUMBER_PREFIX}{suffix}"


def percentage_total(allocations: Sequence[Allocation]) -> float:
    """Running sum of draft percentages, shown while the user composes a quote."""
    return sum(a.percentage for a in allocations)


class PricingEngine:
    """
    Validates a draft quotation and computes its figures.

    Validation runs in a fixed order and fails fast: empty list, unresolved
    materials, percentage sum, margin bounds. Nothing is computed until all
    four checks pass, so a 100% margin never reaches the division.
    """

    PERCENTAGE_TOLERANCE = 0.01
    MAX_MARGIN = 100.0

    def __init__(
        self,
        cost_lookup: CostLookup,
        quote_number_factory: Callable[[], str] = generate_quote_number,
    ):
        self.cost_lookup = cost_lookup
        self.quote_number_factory = quote_number_factory

    def price(
        self,
        product: ProductInfo,
        margin_percentage: float,
        allocations: Sequence[Allocation],
    ) -> PricedQuotation:
        costs = self._validate(margin_percentage, allocations)

        lines = [
            PricedLine(material_id=a.material_id, percentage=a.percentage, cost=cost)
            for a, cost in zip(allocations, costs)
        ]
        total_cost = self._total_cost(lines)
        margin_multiplier = 1 / (1 - margin_percentage / 100)
        sale_price = total_cost * margin_multiplier

        return PricedQuotation(
            quote_number=self.quote_number_factory(),
            product_name=product.name,
            product_type=product.product_type,
            validity_days=product.validity_days,
            total_cost=total_cost,
            sale_price=sale_price,
            profit_margin=sale_price - total_cost,
            margin_percentage=margin_percentage,
            lines=lines,
        )

    def preview(self, allocations: Sequence[Allocation]) -> dict:
        """
        Live totals for a draft. No invariant is enforced here — rows whose
        material is unset or unknown simply contribute nothing.
        """
        total_cost = 0.0
        for a in allocations:
            cost = self.cost_lookup(a.material_id) if a.material_id is not None else None
            if cost is not None:
                total_cost += cost * a.percentage / 100
        total_pct = percentage_total(allocations)
        return {
            "total_cost": total_cost,
            "percentage_total": total_pct,
            "percentage_ok": abs(total_pct - 100) <= self.PERCENTAGE_TOLERANCE,
        }

    def _validate(self, margin_percentage: float, allocations: Sequence[Allocation]) -> List[float]:
        """Returns the resolved cost of each allocation, in order."""
        if not allocations:
            raise EmptyAllocation()

        costs = []
        for a in allocations:
            cost = self.cost_lookup(a.material_id) if a.material_id is not None else None
            if cost is None:
                raise UnresolvedMaterial(a.material_id)
            costs.append(cost)

        total_pct = percentage_total(allocations)
        # Written as negations so NaN fails the check
        if not abs(total_pct - 100) <= self.PERCENTAGE_TOLERANCE:
            raise PercentageMismatch(total_pct)

        if not 0 <= margin_percentage < self.MAX_MARGIN:
            raise InvalidMargin(margin_percentage)

        return costs

    def _total_cost(self, lines: Sequence[PricedLine]) -> float:
        return sum(line.cost * line.percentage / 100 for line in lines)
