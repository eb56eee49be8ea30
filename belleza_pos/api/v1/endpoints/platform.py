# belleza_pos/api/v1/endpoints/platform.py
# type: ignore

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from belleza_pos.database import get_db
from belleza_pos.models.auth import User
from belleza_pos.models.enums import UserRole
from belleza_pos.models.platform import Branch
from belleza_pos.schemas.platform import BranchCreate, BranchInDB, BranchUpdate, BranchSimple
from belleza_pos.core.exceptions import BusinessRuleError, NotFoundError
from belleza_pos.api.v1.endpoints.auth import get_admin_user, get_management_user, get_any_staff

logger = logging.getLogger(__name__)

router = APIRouter()


# ***************************************************************
# Helpers
# ***************************************************************

def get_branch_or_404(db: Session, branch_id: UUID) -> Branch:
    branch = db.query(Branch).filter(Branch.id == branch_id).first()
    if not branch:
        raise NotFoundError("Sucursal", "id", branch_id)
    return branch


def _check_unique_name(db: Session, name: str) -> None:
    if db.query(Branch).filter(Branch.name == name).first():
        raise BusinessRuleError(f"Ya existe una sucursal con el nombre: {name}")


def _count_users(db: Session, branch_id: UUID, only_active: bool = False) -> int:
    query = db.query(User).filter(User.branch_id == branch_id)
    if only_active:
        query = query.filter(User.is_active.is_(True))
    return query.count()


def _check_no_active_users(db: Session, branch: Branch, action: str) -> None:
    if _count_users(db, branch.id, only_active=True) > 0:
        logger.warning("No se puede %s la sucursal %s: tiene usuarios activos", action, branch.id)
        raise BusinessRuleError(f"No se puede {action} la sucursal porque tiene usuarios activos asignados")


# ***************************************************************
# 1. Crear / Actualizar Sucursal
# ***************************************************************

@router.post("/", response_model=BranchInDB, status_code=status.HTTP_201_CREATED)
def create_branch(
    branch_in: BranchCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(get_admin_user)
):
    """Crea una nueva sucursal. Requiere ADMIN."""
    logger.info("Creando sucursal: %s", branch_in.name)
    _check_unique_name(db, branch_in.name)

    db_branch = Branch(**branch_in.model_dump())
    db.add(db_branch)
    db.commit()
    db.refresh(db_branch)

    logger.info("Sucursal creada exitosamente con ID: %s", db_branch.id)
    return db_branch


@router.patch("/{branch_id}", response_model=BranchInDB)
def update_branch(
    branch_id: UUID,
    branch_in: BranchUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_management_user)
):
    branch = get_branch_or_404(db, branch_id)
    update_data = branch_in.model_dump(exclude_unset=True)

    if update_data.get("name") and update_data["name"] != branch.name:
        _check_unique_name(db, update_data["name"])

    # Activar/desactivar sigue las reglas de /activate y /deactivate
    is_active = update_data.pop("is_active", None)
    if is_active is not None and is_active != branch.is_active:
        if current_user.role != UserRole.ADMIN:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Acceso denegado. Se requiere uno de los roles: ADMIN."
            )
        if not is_active:
            _check_no_active_users(db, branch, "desactivar")
        branch.is_active = is_active

    for key, value in update_data.items():
        if value is not None:
            setattr(branch, key, value)

    db.commit()
    db.refresh(branch)

    logger.info("Sucursal actualizada exitosamente: %s", branch_id)
    return branch


# ***************************************************************
# 2. Consultas
# ***************************************************************

@router.get("/", response_model=List[BranchInDB])
def read_branches(db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    return db.query(Branch).order_by(Branch.name).all()


@router.get("/active", response_model=List[BranchSimple])
def read_active_branches(db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    return db.query(Branch).filter(Branch.is_active.is_(True)).order_by(Branch.name).all()


@router.get("/name/{name}", response_model=BranchInDB)
def read_branch_by_name(name: str, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    branch = db.query(Branch).filter(Branch.name == name).first()
    if not branch:
        raise NotFoundError("Sucursal", "nombre", name)
    return branch


@router.get("/{branch_id}", response_model=BranchInDB)
def read_branch(branch_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    return get_branch_or_404(db, branch_id)


@router.get("/{branch_id}/users/count", response_model=int)
def count_branch_users(branch_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    """Cantidad de usuarios activos asignados a la sucursal."""
    get_branch_or_404(db, branch_id)
    return _count_users(db, branch_id, only_active=True)


# ***************************************************************
# 3. Activar / Desactivar / Eliminar
# ***************************************************************

@router.patch("/{branch_id}/activate", response_model=BranchInDB)
def activate_branch(branch_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    branch = get_branch_or_404(db, branch_id)
    branch.is_active = True
    db.commit()
    db.refresh(branch)
    logger.info("Sucursal activada: %s", branch_id)
    return branch


def _deactivate(db: Session, branch: Branch, action: str) -> None:
    _check_no_active_users(db, branch, action)
    branch.is_active = False
    db.commit()


@router.patch("/{branch_id}/deactivate", response_model=BranchInDB)
def deactivate_branch(branch_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    branch = get_branch_or_404(db, branch_id)
    _deactivate(db, branch, "desactivar")
    db.refresh(branch)
    logger.info("Sucursal desactivada: %s", branch_id)
    return branch


@router.delete("/{branch_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_branch(branch_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    """Baja lógica de la sucursal."""
    branch = get_branch_or_404(db, branch_id)
    _deactivate(db, branch, "eliminar")
    logger.info("Sucursal eliminada (soft delete): %s", branch_id)


@router.delete("/{branch_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
def delete_branch_permanently(branch_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    branch = get_branch_or_404(db, branch_id)

    if _count_users(db, branch_id) > 0:
        raise BusinessRuleError("No se puede eliminar permanentemente la sucursal porque tiene usuarios asignados")

    logger.warning("Eliminando sucursal permanentemente: %s", branch_id)
    db.delete(branch)
    db.commit()
