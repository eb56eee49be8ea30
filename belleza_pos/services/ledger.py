# belleza_pos/services/ledger.py
"""
Reglas de la cuenta corriente de clientes.

Las funciones reciben el registro del cliente (modelo ORM u objeto con los
mismos atributos), lo modifican en memoria y dejan el commit al llamador.
"""

import enum
import logging
from decimal import Decimal

from belleza_pos.core.exceptions import BusinessRuleError
from belleza_pos.models.enums import CreditLimitType

logger = logging.getLogger(__name__)

UNLIMITED_CREDIT = Decimal("Infinity")
WARNING_RATIO = Decimal("0.8")


class CreditState(str, enum.Enum):
    NO_ACCOUNT = "NO_ACCOUNT"
    UNLIMITED = "UNLIMITED"
    EXCEEDED = "EXCEEDED"
    WARNING = "WARNING"
    NORMAL = "NORMAL"


def _is_unlimited(account) -> bool:
    return account.credit_limit_type == CreditLimitType.UNLIMITED


def compute_available_credit(account) -> Decimal:
    """Crédito disponible: infinito si es ilimitada, si no límite - saldo (puede ser negativo)."""
    if _is_unlimited(account):
        return UNLIMITED_CREDIT
    return account.credit_limit - account.balance


def classify_credit_state(account) -> CreditState:
    if not account.credit_enabled:
        return CreditState.NO_ACCOUNT
    if _is_unlimited(account):
        return CreditState.UNLIMITED
    if account.balance > account.credit_limit:
        return CreditState.EXCEEDED
    if account.balance > account.credit_limit * WARNING_RATIO:
        return CreditState.WARNING
    return CreditState.NORMAL


def _check_movement(account, amount: Decimal, label: str) -> None:
    if not account.credit_enabled:
        raise BusinessRuleError("El cliente no tiene cuenta corriente habilitada")
    if amount <= 0:
        raise BusinessRuleError(f"El monto {label} debe ser mayor a cero")


def apply_payment(account, amount: Decimal) -> Decimal:
    """
    Registra un pago y devuelve el nuevo saldo.

    El saldo nunca queda negativo: el excedente del pago se descarta,
    no se acumula como saldo a favor.
    """
    _check_movement(account, amount, "del pago")

    new_balance = account.balance - amount
    if new_balance < 0:
        logger.info("Pago de %s supera el saldo %s; el excedente se descarta", amount, account.balance)
        new_balance = Decimal("0")

    account.balance = new_balance
    return new_balance


def apply_sale(account, amount: Decimal) -> Decimal:
    """Registra una venta a cuenta corriente y devuelve el nuevo saldo."""
    _check_movement(account, amount, "de la venta")

    new_balance = account.balance + amount
    if not _is_unlimited(account) and new_balance > account.credit_limit:
        raise BusinessRuleError("La venta excede el límite de crédito del cliente")

    account.balance = new_balance
    return new_balance
