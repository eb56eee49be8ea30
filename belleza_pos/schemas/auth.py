# belleza_pos/schemas/auth.py
#type: ignore

from pydantic import BaseModel, Field, field_serializer, ConfigDict
from typing import Optional, List
from uuid import UUID
from datetime import datetime

from belleza_pos.models.enums import UserRole

# ***************************************************************
# 1. Schemas de Autenticación (JWT)
# ***************************************************************
class Token(BaseModel):
    """Modelo para la respuesta de un token de acceso."""
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    role: UserRole
    user_id: UUID
    username: str
    branch_id: Optional[UUID] = None
    branch_name: Optional[str] = None

class TokenPayload(BaseModel):
    """Modelo para la carga útil (payload) del JWT."""
    sub: Optional[str] = None
    exp: Optional[int] = None
    type: Optional[str] = None

class MessageResponse(BaseModel):
    message: str

# ***************************************************************
# 2. Schemas de Usuario (Request/Response)
# ***************************************************************
class UserBase(BaseModel):
    """Base para la creación y lectura de usuarios."""
    username: str = Field(..., min_length=3, max_length=50)
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    email: Optional[str] = Field(None, max_length=100)

    model_config = ConfigDict(from_attributes=True)


class UserCreate(UserBase):
    """Schema para la creación de un nuevo usuario (incluye password)."""
    password: str = Field(..., min_length=6)
    # El rol llega como texto y se valida contra el enum en el endpoint
    role: str
    branch_id: Optional[UUID] = None
    is_active: bool = True

class UserUpdate(BaseModel):
    """Schema para la actualización de un usuario (campos opcionales)."""
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=100)
    role: Optional[str] = None
    branch_id: Optional[UUID] = None
    is_active: Optional[bool] = None

class UserInDB(UserBase):
    """Schema para la representación del usuario desde la DB (sin hash)."""
    id: UUID
    role: UserRole
    role_description: str
    branch_id: Optional[UUID] = None
    branch_name: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

    @field_serializer('created_at', 'last_login')
    def serialize_datetime(self, value: Optional[datetime]) -> Optional[str]:
        """Convierte datetime de la base de datos a string ISO 8601 para la respuesta."""
        return value.isoformat() if value else None

class UserSimple(BaseModel):
    id: UUID
    username: str
    full_name: str
    role: UserRole
    is_active: bool

class UserLogin(BaseModel):
    """Schema para la solicitud de login."""
    username: str
    password: str

class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)
    confirm_password: str

class ResetPasswordRequest(BaseModel):
    new_password: str = Field(..., min_length=6)

# ***************************************************************
# 3. Schemas de Roles
# ***************************************************************
class RoleInDB(BaseModel):
    """Rol disponible en el sistema."""
    name: UserRole
    description: str

class RoleList(BaseModel):
    """Esquema para la respuesta del endpoint que lista todos los roles."""
    roles: List[RoleInDB]
