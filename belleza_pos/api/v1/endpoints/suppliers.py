# belleza_pos/api/v1/endpoints/suppliers.py
# type: ignore

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from belleza_pos.database import get_db
from belleza_pos.models.auth import User
from belleza_pos.models.inventory import ArticleSupplier, Supplier
from belleza_pos.schemas.inventory import SupplierCreate, SupplierUpdate, SupplierInDB
from belleza_pos.core.exceptions import BusinessRuleError, NotFoundError
from belleza_pos.api.v1.endpoints.auth import get_admin_user, get_management_user, get_any_staff

logger = logging.getLogger(__name__)

router = APIRouter()


def get_supplier_or_404(db: Session, supplier_id: UUID) -> Supplier:
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
    if not supplier:
        raise NotFoundError("Proveedor", "id", supplier_id)
    return supplier


def _check_unique(db: Session, tax_id: str = None, supplier_number: str = None) -> None:
    if tax_id and db.query(Supplier).filter(Supplier.tax_id == tax_id).first():
        raise BusinessRuleError(f"Ya existe un proveedor con el CUIT: {tax_id}")
    if supplier_number and db.query(Supplier).filter(Supplier.supplier_number == supplier_number).first():
        raise BusinessRuleError(f"Ya existe un proveedor con el número: {supplier_number}")


# ***************************************************************
# 1. Alta y modificación
# ***************************************************************

@router.post("/", response_model=SupplierInDB, status_code=status.HTTP_201_CREATED)
def create_supplier(
    supplier_in: SupplierCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    logger.info("Creando proveedor: %s", supplier_in.business_name)
    _check_unique(db, tax_id=supplier_in.tax_id, supplier_number=supplier_in.supplier_number)

    db_supplier = Supplier(**supplier_in.model_dump())
    db.add(db_supplier)
    db.commit()
    db.refresh(db_supplier)

    logger.info("Proveedor creado exitosamente con ID: %s", db_supplier.id)
    return db_supplier


@router.patch("/{supplier_id}", response_model=SupplierInDB)
def update_supplier(
    supplier_id: UUID,
    supplier_in: SupplierUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    supplier = get_supplier_or_404(db, supplier_id)
    update_data = supplier_in.model_dump(exclude_unset=True)

    _check_unique(
        db,
        tax_id=update_data.get("tax_id") if update_data.get("tax_id") != supplier.tax_id else None,
        supplier_number=(
            update_data.get("supplier_number")
            if update_data.get("supplier_number") != supplier.supplier_number else None
        ),
    )

    for key, value in update_data.items():
        if value is not None:
            setattr(supplier, key, value)

    db.commit()
    db.refresh(supplier)

    logger.info("Proveedor actualizado exitosamente: %s", supplier_id)
    return supplier


# ***************************************************************
# 2. Consultas
# ***************************************************************

@router.get("/", response_model=List[SupplierInDB])
def read_suppliers(
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user),
    limit: int = Query(100, gt=0),
    skip: int = Query(0, ge=0),
):
    return db.query(Supplier).order_by(Supplier.business_name).offset(skip).limit(limit).all()


@router.get("/active", response_model=List[SupplierInDB])
def read_active_suppliers(db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    return db.query(Supplier).filter(Supplier.is_active.is_(True)).order_by(Supplier.business_name).all()


@router.get("/search", response_model=List[SupplierInDB])
def search_suppliers(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    """Busca por razón social, nombre de fantasía o CUIT."""
    pattern = f"%{q}%"
    return (
        db.query(Supplier)
        .filter(or_(
            Supplier.business_name.ilike(pattern),
            Supplier.trade_name.ilike(pattern),
            Supplier.tax_id.ilike(pattern),
        ))
        .order_by(Supplier.business_name)
        .all()
    )


@router.get("/{supplier_id}", response_model=SupplierInDB)
def read_supplier(supplier_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    return get_supplier_or_404(db, supplier_id)


# ***************************************************************
# 3. Activar / Desactivar / Eliminar
# ***************************************************************

def _set_active(db: Session, supplier_id: UUID, active: bool) -> Supplier:
    supplier = get_supplier_or_404(db, supplier_id)
    supplier.is_active = active
    db.commit()
    db.refresh(supplier)
    return supplier


@router.patch("/{supplier_id}/activate", response_model=SupplierInDB)
def activate_supplier(supplier_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    logger.info("Activando proveedor: %s", supplier_id)
    return _set_active(db, supplier_id, True)


@router.patch("/{supplier_id}/deactivate", response_model=SupplierInDB)
def deactivate_supplier(supplier_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    logger.info("Desactivando proveedor: %s", supplier_id)
    return _set_active(db, supplier_id, False)


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_supplier(supplier_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    logger.info("Eliminando proveedor (soft delete): %s", supplier_id)
    _set_active(db, supplier_id, False)


@router.delete("/{supplier_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
def delete_supplier_permanently(supplier_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    supplier = get_supplier_or_404(db, supplier_id)

    if db.query(ArticleSupplier).filter(ArticleSupplier.supplier_id == supplier_id).count() > 0:
        raise BusinessRuleError("No se puede eliminar el proveedor porque tiene artículos asociados")

    logger.warning("Eliminando proveedor permanentemente: %s", supplier_id)
    db.delete(supplier)
    db.commit()
