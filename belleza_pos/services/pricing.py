# belleza_pos/services/pricing.py
"""Consulta de precios de artículos."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

# Factor fijo del 21%; no usa el tax_percentage de la categoría
TAX_FACTOR = Decimal("1.21")
CENTS = Decimal("0.01")


def tax_inclusive_price(price_entry) -> Decimal:
    return (price_entry.sale_price * TAX_FACTOR).quantize(CENTS, rounding=ROUND_HALF_UP)


def default_price_entry(article):
    """Precio del artículo en la lista predeterminada, o None."""
    for price in article.prices or []:
        if price.price_list is not None and price.price_list.is_default:
            return price
    return None


def default_sale_price(article) -> Optional[Decimal]:
    price = default_price_entry(article)
    return price.sale_price if price is not None else None
