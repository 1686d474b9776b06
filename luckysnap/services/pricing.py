from __future__ import annotations

from decimal import Decimal
from typing import Iterable


def order_total(ticket_price: Decimal, packs: Iterable[dict], quantity: int) -> Decimal:
    for pack in packs or []:
        if int(pack.get("q", 0)) == quantity:
            return Decimal(str(pack["price"])).quantize(Decimal("0.01"))
    return (Decimal(ticket_price) * quantity).quantize(Decimal("0.01"))
