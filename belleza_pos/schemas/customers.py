# belleza_pos/schemas/customers.py
# type: ignore

from pydantic import BaseModel, Field, field_serializer, ConfigDict
from typing import Optional
from uuid import UUID
from decimal import Decimal
from datetime import datetime

from belleza_pos.models.enums import AccountType, CreditLimitType
from belleza_pos.services.ledger import CreditState


class CustomerBase(BaseModel):
    first_name: str = Field(..., max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    document_type: Optional[str] = Field(None, max_length=20)
    document_number: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=20)
    mobile: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    street: Optional[str] = Field(None, max_length=150)
    street_number: Optional[str] = Field(None, max_length=10)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=10)
    notes: Optional[str] = None

class CustomerCreate(CustomerBase):
    # Si no se envía se genera automáticamente (CLI000001, CLI000002, ...)
    customer_number: Optional[str] = Field(None, max_length=20)
    account_type: AccountType = AccountType.INDIVIDUAL
    credit_enabled: bool = False
    credit_limit_type: CreditLimitType = CreditLimitType.LIMITED
    credit_limit: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    payment_term_days: int = Field(0, ge=0)
    vat_condition: str = Field("CONSUMIDOR_FINAL", max_length=30)
    is_active: bool = True

class CustomerUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    mobile: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    street: Optional[str] = Field(None, max_length=150)
    street_number: Optional[str] = Field(None, max_length=10)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=10)
    credit_enabled: Optional[bool] = None
    credit_limit_type: Optional[CreditLimitType] = None
    credit_limit: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    payment_term_days: Optional[int] = Field(None, ge=0)
    vat_condition: Optional[str] = Field(None, max_length=30)
    notes: Optional[str] = None
    is_active: Optional[bool] = None

class CustomerInDB(CustomerBase):
    id: UUID
    customer_number: str
    account_type: AccountType
    full_name: str
    full_address: str
    credit_enabled: bool
    credit_limit_type: CreditLimitType
    credit_limit: Decimal
    balance: Decimal
    # None cuando la cuenta es ilimitada
    available_credit: Optional[Decimal] = None
    credit_state: CreditState
    payment_term_days: int
    vat_condition: str
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_serializer('credit_limit', 'balance', 'available_credit')
    def serialize_decimal(self, value: Optional[Decimal]) -> Optional[float]:
        return float(value) if value is not None else None

class CustomerSimple(BaseModel):
    id: UUID
    customer_number: str
    full_name: str
    document_number: Optional[str] = None
    phone: Optional[str] = None
    balance: Decimal
    is_active: bool

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('balance')
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)

class AccountMovementRequest(BaseModel):
    """Monto de un pago o de una venta a cuenta corriente."""
    # Sin gt=0: el monto no positivo lo rechaza la regla de negocio (400)
    amount: Decimal = Field(..., decimal_places=2)
