# belleza_pos/models/enums.py
"""Enumeraciones cerradas del dominio."""

import enum

from belleza_pos.core.exceptions import BusinessRuleError


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    SELLER = "SELLER"
    CASHIER = "CASHIER"

    @property
    def description(self) -> str:
        return _ROLE_DESCRIPTIONS[self]

    @classmethod
    def parse(cls, value: str) -> "UserRole":
        """Convierte un texto en rol; un valor desconocido es un error de negocio."""
        try:
            return cls(value.strip().upper())
        except (ValueError, AttributeError):
            raise BusinessRuleError(f"Rol inválido: {value}") from None


_ROLE_DESCRIPTIONS = {
    UserRole.ADMIN: "Administrador",
    UserRole.MANAGER: "Gerente",
    UserRole.SELLER: "Vendedor",
    UserRole.CASHIER: "Cajero",
}


class SaleUnit(str, enum.Enum):
    UNIT = "UNIT"
    WEIGHT = "WEIGHT"


class CreditLimitType(str, enum.Enum):
    LIMITED = "LIMITED"
    UNLIMITED = "UNLIMITED"


class AccountType(str, enum.Enum):
    INDIVIDUAL = "INDIVIDUAL"
    COMPANY = "COMPANY"
