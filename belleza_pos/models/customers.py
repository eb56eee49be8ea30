# belleza_pos/models/customers.py
# type: ignore

import uuid
from decimal import Decimal
from sqlalchemy import Column, String, Text, Boolean, Integer, Enum, Numeric, TIMESTAMP, Uuid
from datetime import datetime
from belleza_pos.database import Base
from belleza_pos.models.enums import AccountType, CreditLimitType


class Customer(Base):
    """Cliente, con cuenta corriente opcional."""
    __tablename__ = "customer"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    customer_number = Column(String(20), unique=True, index=True, nullable=False)
    account_type = Column(Enum(AccountType, native_enum=False, length=20), default=AccountType.INDIVIDUAL, nullable=False)

    # Datos personales
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=True)
    document_type = Column(String(20), nullable=True)  # DNI, CUIT, PASAPORTE, OTRO
    document_number = Column(String(20), unique=True, nullable=True)

    # Contacto
    phone = Column(String(20), nullable=True)
    mobile = Column(String(20), nullable=True)
    email = Column(String(100), unique=True, nullable=True)

    # Dirección
    street = Column(String(150), nullable=True)
    street_number = Column(String(10), nullable=True)
    city = Column(String(100), nullable=True)
    province = Column(String(100), nullable=True)
    postal_code = Column(String(10), nullable=True)

    # Cuenta corriente
    credit_enabled = Column(Boolean, default=False, nullable=False)
    credit_limit_type = Column(
        Enum(CreditLimitType, native_enum=False, length=20), default=CreditLimitType.LIMITED, nullable=False
    )
    credit_limit = Column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    balance = Column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    payment_term_days = Column(Integer, default=0, nullable=False)

    vat_condition = Column(String(30), default="CONSUMIDOR_FINAL", nullable=False)
    notes = Column(Text, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)
