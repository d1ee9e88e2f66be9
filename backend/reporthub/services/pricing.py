from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional


@dataclass(frozen=True)
class Quote:
    pages: int
    print_side: str
    binding: bool
    cover: bool
    printing_cost: float
    addons_cost: float
    subtotal: float
    delivery_charge: float
    total: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class PriceEngine:
    """Rule-based pricing for printed reports.

    Page counts are validated where the form is submitted; the engine
    trusts its inputs.
    """

    DOUBLE_SIDED_RATE = 1
    SINGLE_SIDED_RATE = 2
    SINGLE_SIDED_BULK_RATE = 1.5
    SINGLE_SIDED_BULK_AFTER = 20

    ADDON_COST = {
        "binding": 5,  # spiral binding
        "cover": 3,  # plastic cover
    }

    QUOTE_DELIVERY_CHARGE = 15
    FREE_DELIVERY_ABOVE = 50

    # print orders placed on an existing report always pay the flat rate
    ORDER_DELIVERY_CHARGE = 50

    def printing_cost(self, pages: int, print_side: str) -> float:
        if print_side == "double":
            return pages * self.DOUBLE_SIDED_RATE
        if pages <= self.SINGLE_SIDED_BULK_AFTER:
            return pages * self.SINGLE_SIDED_RATE
        return pages * self.SINGLE_SIDED_BULK_RATE

    def addons_cost(self, binding: bool, cover: bool) -> float:
        cost = 0
        if binding:
            cost += self.ADDON_COST["binding"]
        if cover:
            cost += self.ADDON_COST["cover"]
        return cost

    def delivery_charge(self, subtotal: float) -> float:
        # threshold applies to the pre-delivery subtotal
        return 0 if subtotal > self.FREE_DELIVERY_ABOVE else self.QUOTE_DELIVERY_CHARGE

    def quote(
        self,
        pages: int,
        print_side: str = "double",
        binding: bool = True,
        cover: bool = True,
        on_price_change: Optional[Callable[[float], None]] = None,
    ) -> Quote:
        printing = self.printing_cost(pages, print_side)
        addons = self.addons_cost(binding, cover)
        subtotal = printing + addons
        delivery = self.delivery_charge(subtotal)
        total = subtotal + delivery

        if on_price_change is not None:
            on_price_change(total)

        return Quote(
            pages=pages,
            print_side=print_side,
            binding=binding,
            cover=cover,
            printing_cost=printing,
            addons_cost=addons,
            subtotal=subtotal,
            delivery_charge=delivery,
            total=total,
        )

    def order_total(self, report_price: float) -> Dict[str, float]:
        delivery = self.ORDER_DELIVERY_CHARGE
        return {
            "report_price": report_price,
            "delivery_charge": delivery,
            "total_amount": report_price + delivery,
        }
