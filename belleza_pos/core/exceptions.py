# belleza_pos/core/exceptions.py
"""Excepciones propias de la aplicación."""

from typing import Any, Optional


class ApplicationError(Exception):
    """Base de los errores de la aplicación."""

    def __init__(self, message: str = "Ha ocurrido un error en la aplicación") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class BusinessRuleError(ApplicationError):
    """Una regla de negocio rechazó la operación (validación, límite, stock...)."""


class NotFoundError(ApplicationError):
    """El recurso referenciado no existe."""

    def __init__(self, resource: str, field: Optional[str] = None, value: Any = None) -> None:
        if field is None:
            message = resource
        else:
            message = f"{resource} no encontrado con {field}: '{value}'"
        super().__init__(message)
        self.resource = resource
        self.field = field
        self.value = value
