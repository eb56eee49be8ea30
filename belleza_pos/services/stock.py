# belleza_pos/services/stock.py
"""Reglas de stock y vencimiento de artículos."""

import enum
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from belleza_pos.core.exceptions import BusinessRuleError

CRITICAL_EXPIRATION_DAYS = 7
UPCOMING_EXPIRATION_DAYS = 30


class AdjustmentKind(str, enum.Enum):
    INCREASE = "INCREASE"
    DECREASE = "DECREASE"
    SET = "SET"


class StockLevel(str, enum.Enum):
    UNTRACKED = "UNTRACKED"
    EMPTY = "EMPTY"
    CRITICAL = "CRITICAL"
    LOW = "LOW"
    OK = "OK"


class ExpirationState(str, enum.Enum):
    EXPIRED = "EXPIRED"
    CRITICAL = "CRITICAL"
    UPCOMING = "UPCOMING"
    OK = "OK"


def parse_adjustment_kind(kind: Union[str, AdjustmentKind]) -> AdjustmentKind:
    if isinstance(kind, AdjustmentKind):
        return kind
    try:
        return AdjustmentKind(str(kind).strip().upper())
    except ValueError:
        raise BusinessRuleError(f"Tipo de ajuste inválido: {kind}") from None


def adjust_stock(article, quantity: Decimal, kind: Union[str, AdjustmentKind]) -> Decimal:
    """
    Aplica un ajuste de stock y devuelve el nuevo stock actual.

    INCREASE suma, DECREASE resta (nunca por debajo de cero) y SET
    reemplaza el valor.
    """
    if not article.tracks_stock:
        raise BusinessRuleError("El artículo no tiene control de stock habilitado")

    kind = parse_adjustment_kind(kind)
    current = article.stock_current

    if kind is AdjustmentKind.INCREASE:
        new_stock = current + quantity
    elif kind is AdjustmentKind.DECREASE:
        new_stock = current - quantity
        if new_stock < 0:
            raise BusinessRuleError("No hay suficiente stock disponible")
    else:
        new_stock = quantity

    article.stock_current = new_stock
    return new_stock


def classify_stock_level(article) -> StockLevel:
    if not article.tracks_stock:
        return StockLevel.UNTRACKED

    current = article.stock_current
    minimum = article.stock_min
    if current == 0:
        return StockLevel.EMPTY
    if current < minimum:
        return StockLevel.CRITICAL
    # Igualdad exacta: stock == mínimo es LOW, no OK
    if current == minimum:
        return StockLevel.LOW
    return StockLevel.OK


def days_until_expiration(article, today: date) -> Optional[int]:
    if article.expiration_date is None:
        return None
    return (article.expiration_date - today).days


def classify_expiration(article, today: date) -> Optional[ExpirationState]:
    """Estado de vencimiento; None si el artículo no tiene fecha de vencimiento."""
    days = days_until_expiration(article, today)
    if days is None:
        return None
    if days < 0:
        return ExpirationState.EXPIRED
    if days <= CRITICAL_EXPIRATION_DAYS:
        return ExpirationState.CRITICAL
    if days <= UPCOMING_EXPIRATION_DAYS:
        return ExpirationState.UPCOMING
    return ExpirationState.OK
