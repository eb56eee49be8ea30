# tests/test_ledger.py
"""Tests de las reglas de cuenta corriente."""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from belleza_pos.core.exceptions import BusinessRuleError
from belleza_pos.models.enums import CreditLimitType
from belleza_pos.services import ledger
from belleza_pos.services.ledger import CreditState


def make_account(balance="0", limit="1000", limit_type=CreditLimitType.LIMITED, enabled=True):
    return SimpleNamespace(
        credit_enabled=enabled,
        credit_limit_type=limit_type,
        credit_limit=Decimal(limit),
        balance=Decimal(balance),
    )


# -------------------------------------------------------------------
# Crédito disponible y estado
# -------------------------------------------------------------------

def test_available_credit_limited_account():
    assert ledger.compute_available_credit(make_account("300", "1000")) == Decimal("700")


def test_available_credit_can_be_negative():
    assert ledger.compute_available_credit(make_account("1200", "1000")) == Decimal("-200")


def test_available_credit_unlimited_account_is_infinite():
    account = make_account("5000", "0", CreditLimitType.UNLIMITED)
    assert ledger.compute_available_credit(account) == ledger.UNLIMITED_CREDIT


@pytest.mark.parametrize(
    "balance, expected",
    [
        ("0", CreditState.NORMAL),
        ("800", CreditState.NORMAL),  # 800 no es > 0.8 * 1000
        ("801", CreditState.WARNING),
        ("1000", CreditState.WARNING),
        ("1001", CreditState.EXCEEDED),
    ],
)
def test_classify_credit_state_limited(balance, expected):
    assert ledger.classify_credit_state(make_account(balance, "1000")) is expected


def test_classify_credit_state_without_account():
    assert ledger.classify_credit_state(make_account("5000", enabled=False)) is CreditState.NO_ACCOUNT


def test_classify_credit_state_unlimited():
    account = make_account("999999", "0", CreditLimitType.UNLIMITED)
    assert ledger.classify_credit_state(account) is CreditState.UNLIMITED


# -------------------------------------------------------------------
# Pagos
# -------------------------------------------------------------------

def test_apply_payment_reduces_balance():
    account = make_account("500")
    assert ledger.apply_payment(account, Decimal("200")) == Decimal("300")
    assert account.balance == Decimal("300")


def test_apply_payment_never_leaves_negative_balance():
    account = make_account("100")
    assert ledger.apply_payment(account, Decimal("250")) == Decimal("0")
    assert account.balance == Decimal("0")


@pytest.mark.parametrize("amount", ["0", "-10"])
def test_apply_payment_rejects_non_positive_amount(amount):
    account = make_account("100")
    with pytest.raises(BusinessRuleError, match="mayor a cero"):
        ledger.apply_payment(account, Decimal(amount))
    assert account.balance == Decimal("100")


def test_apply_payment_requires_credit_account():
    with pytest.raises(BusinessRuleError, match="cuenta corriente habilitada"):
        ledger.apply_payment(make_account("100", enabled=False), Decimal("10"))


# -------------------------------------------------------------------
# Ventas
# -------------------------------------------------------------------

def test_apply_sale_within_limit():
    account = make_account("400", "1000")
    assert ledger.apply_sale(account, Decimal("600")) == Decimal("1000")
    assert account.balance == Decimal("1000")


def test_apply_sale_over_limit_is_rejected_and_balance_unchanged():
    account = make_account("400", "1000")
    with pytest.raises(BusinessRuleError, match="límite de crédito"):
        ledger.apply_sale(account, Decimal("600.01"))
    assert account.balance == Decimal("400")


def test_apply_sale_unlimited_never_rejects():
    account = make_account("1000000", "0", CreditLimitType.UNLIMITED)
    assert ledger.apply_sale(account, Decimal("999999")) == Decimal("1999999")


def test_apply_sale_rejects_zero_amount():
    with pytest.raises(BusinessRuleError, match="de la venta debe ser mayor a cero"):
        ledger.apply_sale(make_account(), Decimal("0"))


def test_apply_sale_requires_credit_account():
    with pytest.raises(BusinessRuleError):
        ledger.apply_sale(make_account(enabled=False), Decimal("10"))
