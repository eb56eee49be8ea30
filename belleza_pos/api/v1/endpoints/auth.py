# belleza_pos/api/v1/endpoints/auth.py
# type: ignore

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from belleza_pos.database import get_db
from belleza_pos.models.auth import User
from belleza_pos.models.enums import UserRole
from belleza_pos.schemas.auth import UserLogin, Token, UserInDB, MessageResponse
from belleza_pos.core.security import (
    verify_password,
    create_access_token,
    create_refresh_token,
    reusable_oauth2,
    decode_token,
    REFRESH_TOKEN_TYPE,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ***************************************************************
# Dependencias de autenticación y autorización (RBAC)
# ***************************************************************
def _load_active_user(db: Session, user_id: str) -> User:
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token no contiene ID de usuario.")

    user = db.query(User).filter(User.id == _as_uuid(user_id)).first()
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Usuario no encontrado o inactivo.")
    return user


def _as_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciales inválidas o token expirado.",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None


def get_current_user(
    db: Session = Depends(get_db), token: str = Depends(reusable_oauth2)
) -> User:
    """Decodifica el ACCESS token y busca al usuario en la DB."""
    token_data = decode_token(token)
    return _load_active_user(db, token_data.sub)


def get_user_from_refresh_token(token: str, db: Session) -> User:
    """Decodifica el token de refresco y busca al usuario. Lanza 401 si falla."""
    token_data = decode_token(token, expected_type=REFRESH_TOKEN_TYPE)
    return _load_active_user(db, token_data.sub)


def require_roles(*roles: UserRole):
    """Genera una dependencia que exige que el usuario tenga alguno de los roles indicados."""
    allowed = frozenset(roles)

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            names = ", ".join(role.value for role in roles)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Acceso denegado. Se requiere uno de los roles: {names}."
            )
        return current_user

    return dependency


# Combinaciones de roles usadas por los routers
get_admin_user = require_roles(UserRole.ADMIN)
get_management_user = require_roles(UserRole.ADMIN, UserRole.MANAGER)
get_sales_staff = require_roles(UserRole.ADMIN, UserRole.MANAGER, UserRole.SELLER)
get_any_staff = require_roles(*UserRole)


def user_to_response(user: User) -> UserInDB:
    """Mapea un User del ORM al schema de salida (sin el hash)."""
    return UserInDB(
        id=user.id,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        role=user.role,
        role_description=user.role.description,
        branch_id=user.branch_id,
        branch_name=user.branch.name if user.branch else None,
        is_active=user.is_active,
        last_login=user.last_login,
        created_at=user.created_at,
    )


def _build_token_response(user: User) -> dict:
    return {
        "access_token": create_access_token(subject=str(user.id)),
        "refresh_token": create_refresh_token(subject=str(user.id)),
        "token_type": "bearer",
        "role": user.role,
        "user_id": user.id,
        "username": user.username,
        "branch_id": user.branch_id,
        "branch_name": user.branch.name if user.branch else None,
    }


# ***************************************************************
# 1. Login
# ***************************************************************
@router.post("/login", response_model=Token)
def login_for_access_token(user_in: UserLogin, db: Session = Depends(get_db)):
    """Autentica un usuario y devuelve un token JWT y un Refresh Token."""
    user = db.query(User).filter(User.username == user_in.username).first()

    if not user or not verify_password(user_in.password, user.password_hash):
        logger.warning("Intento de login fallido para '%s'", user_in.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Nombre de usuario o contraseña incorrectos.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="La cuenta de usuario está inactiva.",
        )

    user.last_login = datetime.utcnow()
    db.commit()
    db.refresh(user)

    logger.info("Usuario autenticado exitosamente: %s", user.username)
    return _build_token_response(user)


# ***************************************************************
# 2. Refresh (con Token Rotation)
# ***************************************************************
@router.post("/refresh", response_model=Token)
def refresh_access_token(
    # Se espera el refresh_token en el header 'Authorization: Bearer <token>'
    refresh_token: str = Depends(reusable_oauth2),
    db: Session = Depends(get_db)
):
    """Devuelve un nuevo access_token y un nuevo refresh_token."""
    current_user = get_user_from_refresh_token(refresh_token, db)
    logger.info("Token refrescado para usuario: %s", current_user.username)
    return _build_token_response(current_user)


# ***************************************************************
# 3. Logout
# ***************************************************************
@router.post("/logout", response_model=MessageResponse)
def logout(current_user: User = Depends(get_current_user)):
    """Los tokens son stateless: el cliente simplemente los descarta."""
    logger.info("Logout de usuario: %s", current_user.username)
    return {"message": "Sesión cerrada exitosamente."}


# ***************************************************************
# 4. Usuario autenticado
# ***************************************************************
@router.get("/me", response_model=UserInDB)
def read_users_me(current_user: User = Depends(get_current_user)):
    """Obtiene la información del usuario autenticado."""
    return user_to_response(current_user)
