# belleza_pos/api/v1/endpoints/customers.py
# type: ignore

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from belleza_pos.database import get_db
from belleza_pos.models.auth import User
from belleza_pos.models.customers import Customer
from belleza_pos.models.enums import CreditLimitType, UserRole
from belleza_pos.schemas.customers import (
    CustomerCreate, CustomerUpdate, CustomerInDB, CustomerSimple, AccountMovementRequest,
)
from belleza_pos.services import ledger
from belleza_pos.core.exceptions import BusinessRuleError, NotFoundError
from belleza_pos.api.v1.endpoints.auth import (
    require_roles, get_admin_user, get_management_user, get_sales_staff, get_any_staff,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Los pagos los registra caja; las ventas a cuenta, los vendedores
get_payment_staff = require_roles(UserRole.ADMIN, UserRole.MANAGER, UserRole.CASHIER)

CUSTOMER_NUMBER_FORMAT = "CLI{:06d}"


# ***************************************************************
# Helpers
# ***************************************************************

def get_customer_or_404(db: Session, customer_id: UUID, for_update: bool = False) -> Customer:
    query = db.query(Customer).filter(Customer.id == customer_id)
    if for_update:
        # Serializa los movimientos de cuenta corriente sobre el mismo cliente
        query = query.with_for_update()
    customer = query.first()
    if not customer:
        raise NotFoundError("Cliente", "id", customer_id)
    return customer


def _full_name(customer: Customer) -> str:
    return " ".join(part for part in (customer.first_name, customer.last_name) if part)


def _full_address(customer: Customer) -> str:
    street = " ".join(part for part in (customer.street, customer.street_number) if part)
    parts = [street, customer.city, customer.province]
    address = ", ".join(part for part in parts if part)
    if customer.postal_code:
        address = f"{address} ({customer.postal_code})" if address else customer.postal_code
    return address


def _available_credit(customer: Customer) -> Optional[Decimal]:
    """0 sin cuenta corriente, None si es ilimitada, si no límite - saldo."""
    if not customer.credit_enabled:
        return Decimal("0")
    available = ledger.compute_available_credit(customer)
    if available == ledger.UNLIMITED_CREDIT:
        return None
    return available


def customer_to_response(customer: Customer) -> CustomerInDB:
    return CustomerInDB(
        id=customer.id,
        customer_number=customer.customer_number,
        account_type=customer.account_type,
        first_name=customer.first_name,
        last_name=customer.last_name,
        full_name=_full_name(customer),
        document_type=customer.document_type,
        document_number=customer.document_number,
        phone=customer.phone,
        mobile=customer.mobile,
        email=customer.email,
        street=customer.street,
        street_number=customer.street_number,
        city=customer.city,
        province=customer.province,
        postal_code=customer.postal_code,
        full_address=_full_address(customer),
        credit_enabled=customer.credit_enabled,
        credit_limit_type=customer.credit_limit_type,
        credit_limit=customer.credit_limit,
        balance=customer.balance,
        available_credit=_available_credit(customer),
        credit_state=ledger.classify_credit_state(customer),
        payment_term_days=customer.payment_term_days,
        vat_condition=customer.vat_condition,
        notes=customer.notes,
        is_active=customer.is_active,
        created_at=customer.created_at,
        updated_at=customer.updated_at,
    )


def customer_to_simple(customer: Customer) -> CustomerSimple:
    return CustomerSimple(
        id=customer.id,
        customer_number=customer.customer_number,
        full_name=_full_name(customer),
        document_number=customer.document_number,
        phone=customer.phone,
        balance=customer.balance,
        is_active=customer.is_active,
    )


def _next_customer_number(db: Session) -> str:
    """Genera el próximo número libre: CLI000001, CLI000002, ..."""
    sequence = db.query(Customer).count() + 1
    number = CUSTOMER_NUMBER_FORMAT.format(sequence)
    # Puede haber huecos si se cargaron números a mano
    while db.query(Customer).filter(Customer.customer_number == number).first():
        sequence += 1
        number = CUSTOMER_NUMBER_FORMAT.format(sequence)
    return number


def _exists(db: Session, column, value) -> bool:
    return db.query(Customer).filter(column == value).first() is not None


# ***************************************************************
# 1. Alta y modificación
# ***************************************************************

@router.post("/", response_model=CustomerInDB, status_code=status.HTTP_201_CREATED)
def create_customer(
    customer_in: CustomerCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_sales_staff)
):
    logger.info("Creando cliente: %s %s", customer_in.first_name, customer_in.last_name or "")

    if customer_in.customer_number and _exists(db, Customer.customer_number, customer_in.customer_number):
        raise BusinessRuleError(f"El número de cliente ya existe: {customer_in.customer_number}")

    if customer_in.document_number and _exists(db, Customer.document_number, customer_in.document_number):
        raise BusinessRuleError(f"El documento ya está registrado: {customer_in.document_number}")

    if customer_in.email and _exists(db, Customer.email, customer_in.email):
        raise BusinessRuleError(f"El email ya está registrado: {customer_in.email}")

    data = customer_in.model_dump()
    data["customer_number"] = customer_in.customer_number or _next_customer_number(db)

    db_customer = Customer(**data, balance=Decimal("0"))
    db.add(db_customer)
    db.commit()
    db.refresh(db_customer)

    logger.info("Cliente creado exitosamente: %s", db_customer.customer_number)
    return customer_to_response(db_customer)


@router.patch("/{customer_id}", response_model=CustomerInDB)
def update_customer(
    customer_id: UUID,
    customer_in: CustomerUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_sales_staff)
):
    customer = get_customer_or_404(db, customer_id)
    update_data = customer_in.model_dump(exclude_unset=True)

    if update_data.get("email") and update_data["email"] != customer.email:
        if _exists(db, Customer.email, update_data["email"]):
            raise BusinessRuleError(f"El email ya está registrado: {update_data['email']}")

    for key, value in update_data.items():
        if value is not None:
            setattr(customer, key, value)

    db.commit()
    db.refresh(customer)

    logger.info("Cliente actualizado exitosamente: %s", customer_id)
    return customer_to_response(customer)


# ***************************************************************
# 2. Consultas
# ***************************************************************

@router.get("/", response_model=List[CustomerInDB])
def read_customers(
    db: Session = Depends(get_db),
    _: User = Depends(get_sales_staff),
    limit: int = Query(100, gt=0),
    skip: int = Query(0, ge=0),
):
    customers = db.query(Customer).order_by(Customer.customer_number).offset(skip).limit(limit).all()
    return [customer_to_response(customer) for customer in customers]


@router.get("/active", response_model=List[CustomerSimple])
def read_active_customers(db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    customers = db.query(Customer).filter(Customer.is_active.is_(True)).order_by(Customer.first_name).all()
    return [customer_to_simple(customer) for customer in customers]


@router.get("/search", response_model=List[CustomerSimple])
def search_customers(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    _: User = Depends(get_any_staff)
):
    """Busca por nombre, apellido o número de documento."""
    pattern = f"%{q}%"
    customers = (
        db.query(Customer)
        .filter(or_(
            Customer.first_name.ilike(pattern),
            Customer.last_name.ilike(pattern),
            Customer.document_number.ilike(pattern),
        ))
        .order_by(Customer.first_name)
        .all()
    )
    return [customer_to_simple(customer) for customer in customers]


def _credit_accounts(db: Session):
    return db.query(Customer).filter(Customer.credit_enabled.is_(True), Customer.is_active.is_(True))


@router.get("/credit-accounts", response_model=List[CustomerInDB])
def read_credit_account_customers(db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    customers = _credit_accounts(db).order_by(Customer.customer_number).all()
    return [customer_to_response(customer) for customer in customers]


@router.get("/credit-exceeded", response_model=List[CustomerInDB])
def read_customers_over_limit(db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    """Clientes con saldo mayor a su límite (las cuentas ilimitadas nunca exceden)."""
    customers = (
        _credit_accounts(db)
        .filter(
            Customer.credit_limit_type == CreditLimitType.LIMITED,
            Customer.balance > Customer.credit_limit,
        )
        .order_by(Customer.customer_number)
        .all()
    )
    return [customer_to_response(customer) for customer in customers]


@router.get("/pending-balance", response_model=List[CustomerInDB])
def read_customers_with_balance(db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    customers = _credit_accounts(db).filter(Customer.balance > 0).order_by(Customer.customer_number).all()
    return [customer_to_response(customer) for customer in customers]


@router.get("/number/{customer_number}", response_model=CustomerInDB)
def read_customer_by_number(customer_number: str, db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    customer = db.query(Customer).filter(Customer.customer_number == customer_number).first()
    if not customer:
        raise NotFoundError("Cliente", "número", customer_number)
    return customer_to_response(customer)


@router.get("/document/{document_number}", response_model=CustomerInDB)
def read_customer_by_document(document_number: str, db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    customer = db.query(Customer).filter(Customer.document_number == document_number).first()
    if not customer:
        raise NotFoundError("Cliente", "documento", document_number)
    return customer_to_response(customer)


@router.get("/exists/number/{customer_number}", response_model=bool)
def customer_number_exists(customer_number: str, db: Session = Depends(get_db), _: User = Depends(get_sales_staff)):
    return _exists(db, Customer.customer_number, customer_number)


@router.get("/exists/document/{document_number}", response_model=bool)
def document_exists(document_number: str, db: Session = Depends(get_db), _: User = Depends(get_sales_staff)):
    return _exists(db, Customer.document_number, document_number)


@router.get("/exists/email/{email}", response_model=bool)
def customer_email_exists(email: str, db: Session = Depends(get_db), _: User = Depends(get_sales_staff)):
    return _exists(db, Customer.email, email)


@router.get("/{customer_id}", response_model=CustomerInDB)
def read_customer(customer_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    return customer_to_response(get_customer_or_404(db, customer_id))


# ***************************************************************
# 3. Activar / Desactivar / Eliminar
# ***************************************************************

def _set_active(db: Session, customer_id: UUID, active: bool) -> Customer:
    customer = get_customer_or_404(db, customer_id)
    customer.is_active = active
    db.commit()
    db.refresh(customer)
    return customer


@router.patch("/{customer_id}/activate", response_model=CustomerInDB)
def activate_customer(customer_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    logger.info("Activando cliente: %s", customer_id)
    return customer_to_response(_set_active(db, customer_id, True))


@router.patch("/{customer_id}/deactivate", response_model=CustomerInDB)
def deactivate_customer(customer_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    logger.info("Desactivando cliente: %s", customer_id)
    return customer_to_response(_set_active(db, customer_id, False))


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    logger.info("Eliminando cliente (soft delete): %s", customer_id)
    _set_active(db, customer_id, False)


@router.delete("/{customer_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer_permanently(customer_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    customer = get_customer_or_404(db, customer_id)
    logger.warning("Eliminando cliente permanentemente: %s", customer_id)
    db.delete(customer)
    db.commit()


# ***************************************************************
# 4. Cuenta corriente
# ***************************************************************

@router.post("/{customer_id}/payments", response_model=CustomerInDB)
def register_payment(
    customer_id: UUID,
    movement: AccountMovementRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_payment_staff)
):
    """Registra un pago a cuenta corriente; el saldo nunca queda negativo."""
    customer = get_customer_or_404(db, customer_id, for_update=True)
    try:
        new_balance = ledger.apply_payment(customer, movement.amount)
    except BusinessRuleError:
        db.rollback()
        raise
    db.commit()
    db.refresh(customer)

    logger.info("Pago de %s registrado para cliente %s. Saldo: %s", movement.amount, customer_id, new_balance)
    return customer_to_response(customer)


@router.post("/{customer_id}/sales", response_model=CustomerInDB)
def register_sale(
    customer_id: UUID,
    movement: AccountMovementRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_sales_staff)
):
    """Registra una venta a cuenta corriente respetando el límite de crédito."""
    customer = get_customer_or_404(db, customer_id, for_update=True)
    try:
        new_balance = ledger.apply_sale(customer, movement.amount)
    except BusinessRuleError:
        db.rollback()
        logger.warning("Venta de %s rechazada para cliente %s", movement.amount, customer_id)
        raise
    db.commit()
    db.refresh(customer)

    logger.info("Venta de %s registrada para cliente %s. Saldo: %s", movement.amount, customer_id, new_balance)
    return customer_to_response(customer)
