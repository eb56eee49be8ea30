# belleza_pos/schemas/platform.py
# type: ignore
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from uuid import UUID
from datetime import datetime

# ***************************************************************
# Schemas para BRANCH (Sucursal)
# ***************************************************************
class BranchBase(BaseModel):
    """Base para la creación y lectura de Sucursales."""
    name: str = Field(..., max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)

class BranchCreate(BranchBase):
    """Schema de entrada para crear una Sucursal."""
    pass

class BranchUpdate(BranchBase):
    """Schema de entrada para actualizar una Sucursal (todos opcionales)."""
    name: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None

class BranchInDB(BranchBase):
    """Schema de salida para una Sucursal."""
    id: UUID
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class BranchSimple(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)
