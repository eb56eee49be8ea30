# belleza_pos/api/v1/endpoints/users.py
# type: ignore

import logging

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from belleza_pos.database import get_db
from belleza_pos.models.auth import User
from belleza_pos.models.enums import UserRole
from belleza_pos.models.platform import Branch
from belleza_pos.schemas.auth import (
    UserCreate, UserInDB, UserUpdate, UserSimple, ChangePasswordRequest, ResetPasswordRequest, MessageResponse,
)
from belleza_pos.core.exceptions import BusinessRuleError, NotFoundError
from belleza_pos.core.security import get_password_hash, verify_password
from belleza_pos.api.v1.endpoints.auth import (
    get_current_user, get_admin_user, get_management_user, get_any_staff, user_to_response,
)

logger = logging.getLogger(__name__)

router = APIRouter()

MANAGEMENT_ROLES = (UserRole.ADMIN, UserRole.MANAGER)

# ***************************************************************
# DEPENDENCIAS DE PERMISOS Y ACCESO
# ***************************************************************

def get_user_or_404(db: Session, user_id: UUID) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("Usuario", "id", user_id)
    return user


def get_user_and_check_access(
    user_id: UUID,
    db: Session,
    current_user: User,
    is_update_or_delete: bool = False
) -> User:
    """
    Busca un usuario por ID y verifica que el usuario actual tenga permiso para acceder a él.
    """
    user = get_user_or_404(db, user_id)

    # 1. Regla Universal: Permiso de Auto-acceso (Lectura)
    if user.id == current_user.id and not is_update_or_delete:
        return user

    # A partir de aquí, el acceso a OTROS usuarios solo está permitido para Admin y Gerente.
    if current_user.role not in MANAGEMENT_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acceso denegado. No tienes permisos para acceder a otros usuarios."
        )

    # 2. Restricción de jerarquía: un Gerente no puede modificar administradores
    if (
        is_update_or_delete
        and current_user.role == UserRole.MANAGER
        and user.role == UserRole.ADMIN
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acceso denegado. No puedes modificar un usuario con rol 'ADMIN'."
        )

    return user


def _get_branch_or_404(db: Session, branch_id: UUID) -> Branch:
    branch = db.query(Branch).filter(Branch.id == branch_id).first()
    if not branch:
        raise NotFoundError("Sucursal", "id", branch_id)
    return branch


def _check_role_assignment(current_user: User, role: UserRole) -> None:
    if current_user.role == UserRole.MANAGER and role == UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Un Gerente no puede asignar el rol 'ADMIN'."
        )


def _to_simple(user: User) -> UserSimple:
    return UserSimple(
        id=user.id,
        username=user.username,
        full_name=f"{user.first_name} {user.last_name}",
        role=user.role,
        is_active=user.is_active,
    )


# ***************************************************************
# 1. Crear Usuario (POST /)
# ***************************************************************
@router.post("/", response_model=UserInDB, status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_management_user)
):
    """Crea un nuevo usuario. Un Gerente no puede crear administradores."""
    logger.info("Creando usuario: %s", user_in.username)

    # 1. Validar unicidad de username y email
    if db.query(User).filter(User.username == user_in.username).first():
        raise BusinessRuleError(f"El username ya está en uso: {user_in.username}")

    if user_in.email and db.query(User).filter(User.email == user_in.email).first():
        raise BusinessRuleError(f"El email ya está en uso: {user_in.email}")

    # 2. Validar rol (enum cerrado) y jerarquía
    role = UserRole.parse(user_in.role)
    _check_role_assignment(admin, role)

    # 3. Validar sucursal
    if user_in.branch_id:
        _get_branch_or_404(db, user_in.branch_id)

    db_user = User(
        username=user_in.username,
        password_hash=get_password_hash(user_in.password),
        first_name=user_in.first_name,
        last_name=user_in.last_name,
        email=user_in.email,
        role=role,
        branch_id=user_in.branch_id,
        is_active=user_in.is_active,
    )

    db.add(db_user)
    db.commit()
    db.refresh(db_user)

    logger.info("Usuario creado exitosamente con ID: %s", db_user.id)
    return user_to_response(db_user)


# ***************************************************************
# 2. Listados (GET /, /active, /by-role, /by-branch)
# ***************************************************************
@router.get("/", response_model=List[UserInDB])
def read_users(
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user),
    limit: int = Query(100, gt=0),
    skip: int = Query(0, ge=0),
):
    """Lista todos los usuarios (paginado)."""
    users = db.query(User).order_by(User.username).offset(skip).limit(limit).all()
    return [user_to_response(user) for user in users]


@router.get("/active", response_model=List[UserSimple])
def read_active_users(db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    users = db.query(User).filter(User.is_active.is_(True)).order_by(User.username).all()
    return [_to_simple(user) for user in users]


@router.get("/by-role/{role}", response_model=List[UserSimple])
def read_users_by_role(role: str, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    parsed_role = UserRole.parse(role)
    users = db.query(User).filter(User.role == parsed_role).order_by(User.username).all()
    return [_to_simple(user) for user in users]


@router.get("/by-branch/{branch_id}", response_model=List[UserSimple])
def read_users_by_branch(branch_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    """Usuarios activos asignados a una sucursal."""
    _get_branch_or_404(db, branch_id)
    users = (
        db.query(User)
        .filter(User.branch_id == branch_id, User.is_active.is_(True))
        .order_by(User.username)
        .all()
    )
    return [_to_simple(user) for user in users]


@router.get("/username/{username}", response_model=UserInDB)
def read_user_by_username(username: str, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    user = db.query(User).filter(User.username == username).first()
    if not user:
        raise NotFoundError("Usuario", "username", username)
    return user_to_response(user)


@router.get("/exists/username/{username}", response_model=bool)
def username_exists(username: str, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    return db.query(User).filter(User.username == username).first() is not None


@router.get("/exists/email/{email}", response_model=bool)
def email_exists(email: str, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    return db.query(User).filter(User.email == email).first() is not None


# ***************************************************************
# 3. Buscar Usuario por ID (GET /{user_id})
# ***************************************************************
@router.get("/{user_id}", response_model=UserInDB)
def read_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    # Usamos get_current_user para que un cajero pueda leer su propio perfil.
    current_user: User = Depends(get_current_user)
):
    """Obtiene la información de un usuario por su ID, respetando el RBAC."""
    db_user = get_user_and_check_access(user_id, db, current_user, is_update_or_delete=False)
    return user_to_response(db_user)


# ***************************************************************
# 4. Actualizar Usuario (PATCH /{user_id})
# ***************************************************************
@router.patch("/{user_id}", response_model=UserInDB)
def update_user(
    user_id: UUID,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_management_user)
):
    """Actualiza campos de un usuario, con restricciones de jerarquía."""
    logger.info("Actualizando usuario con ID: %s", user_id)
    db_user = get_user_and_check_access(user_id, db, current_user, is_update_or_delete=True)

    update_data = user_in.model_dump(exclude_unset=True)

    if update_data.get("email") and update_data["email"] != db_user.email:
        if db.query(User).filter(User.email == update_data["email"]).first():
            raise BusinessRuleError(f"El email ya está en uso: {update_data['email']}")

    if update_data.get("role") is not None:
        update_data["role"] = UserRole.parse(update_data["role"])
        _check_role_assignment(current_user, update_data["role"])

    if update_data.get("branch_id") is not None:
        _get_branch_or_404(db, update_data["branch_id"])

    for key, value in update_data.items():
        if value is not None:
            setattr(db_user, key, value)

    db.commit()
    db.refresh(db_user)

    logger.info("Usuario actualizado exitosamente: %s", user_id)
    return user_to_response(db_user)


# ***************************************************************
# 5. Activar / Desactivar / Eliminar
# ***************************************************************
def _set_active(user_id: UUID, active: bool, db: Session, current_user: User) -> User:
    db_user = get_user_and_check_access(user_id, db, current_user, is_update_or_delete=True)
    db_user.is_active = active
    db.commit()
    db.refresh(db_user)
    return db_user


@router.patch("/{user_id}/activate", response_model=UserInDB)
def activate_user(user_id: UUID, db: Session = Depends(get_db), current_user: User = Depends(get_management_user)):
    logger.info("Activando usuario: %s", user_id)
    return user_to_response(_set_active(user_id, True, db, current_user))


@router.patch("/{user_id}/deactivate", response_model=UserInDB)
def deactivate_user(user_id: UUID, db: Session = Depends(get_db), current_user: User = Depends(get_management_user)):
    logger.info("Desactivando usuario: %s", user_id)
    return user_to_response(_set_active(user_id, False, db, current_user))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: UUID, db: Session = Depends(get_db), admin: User = Depends(get_admin_user)):
    """Baja lógica: el usuario queda inactivo."""
    logger.info("Eliminando usuario (soft delete): %s", user_id)
    _set_active(user_id, False, db, admin)


@router.delete("/{user_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
def delete_user_permanently(user_id: UUID, db: Session = Depends(get_db), admin: User = Depends(get_admin_user)):
    logger.warning("Eliminando usuario permanentemente: %s", user_id)
    db_user = get_user_or_404(db, user_id)
    if db_user.id == admin.id:
        raise BusinessRuleError("No puedes eliminar tu propio usuario")

    db.delete(db_user)
    db.commit()


# ***************************************************************
# 6. Contraseñas
# ***************************************************************
@router.patch("/{user_id}/password", response_model=MessageResponse)
def change_password(
    user_id: UUID,
    request: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Cambio de contraseña propio (requiere la contraseña actual)."""
    if current_user.id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Solo puedes cambiar tu propia contraseña."
        )

    if not verify_password(request.current_password, current_user.password_hash):
        raise BusinessRuleError("La contraseña actual es incorrecta")

    if request.new_password != request.confirm_password:
        raise BusinessRuleError("Las contraseñas no coinciden")

    current_user.password_hash = get_password_hash(request.new_password)
    db.commit()

    logger.info("Contraseña cambiada para usuario: %s", current_user.username)
    return {"message": "Contraseña actualizada exitosamente."}


@router.patch("/{user_id}/password/reset", response_model=MessageResponse)
def reset_password(
    user_id: UUID,
    request: ResetPasswordRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_admin_user)
):
    db_user = get_user_or_404(db, user_id)
    db_user.password_hash = get_password_hash(request.new_password)
    db.commit()

    logger.info("Contraseña reseteada para usuario: %s", db_user.username)
    return {"message": "Contraseña reseteada exitosamente."}
