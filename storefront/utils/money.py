# storefront/utils/money.py
from decimal import Decimal, ROUND_HALF_UP

Money = Decimal

HUNDRED = Decimal("100")


def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))


def round_money(x) -> Money:
    return D(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def discount_price(price, discount_percent) -> Money:
    """Price after discount, 0 when the product has no discount."""
    percent = D(discount_percent)
    if percent <= 0:
        return Decimal("0")
    return round_money(D(price) * (1 - percent / HUNDRED))
