# belleza_pos/api/v1/endpoints/categories.py
# type: ignore

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from belleza_pos.database import get_db
from belleza_pos.models.auth import User
from belleza_pos.models.inventory import Article, Category
from belleza_pos.schemas.inventory import CategoryCreate, CategoryUpdate, CategoryInDB, CategorySimple
from belleza_pos.core.exceptions import BusinessRuleError, NotFoundError
from belleza_pos.api.v1.endpoints.auth import (
    get_admin_user, get_management_user, get_sales_staff, get_any_staff,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_category_or_404(db: Session, category_id: UUID) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Rubro", "id", category_id)
    return category


def _count_articles(db: Session, category_id: UUID) -> int:
    return db.query(Article).filter(Article.category_id == category_id).count()


def category_to_response(db: Session, category: Category) -> CategoryInDB:
    response = CategoryInDB.model_validate(category)
    response.article_count = _count_articles(db, category.id)
    return response


def _check_unique_name(db: Session, name: str) -> None:
    if db.query(Category).filter(Category.name == name).first():
        raise BusinessRuleError(f"Ya existe un rubro con el nombre: {name}")


# ***************************************************************
# 1. Alta y modificación
# ***************************************************************

@router.post("/", response_model=CategoryInDB, status_code=status.HTTP_201_CREATED)
def create_category(
    category_in: CategoryCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    logger.info("Creando rubro: %s", category_in.name)
    _check_unique_name(db, category_in.name)

    db_category = Category(**category_in.model_dump())
    db.add(db_category)
    db.commit()
    db.refresh(db_category)

    logger.info("Rubro creado exitosamente con ID: %s", db_category.id)
    return category_to_response(db, db_category)


@router.patch("/{category_id}", response_model=CategoryInDB)
def update_category(
    category_id: UUID,
    category_in: CategoryUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    category = get_category_or_404(db, category_id)
    update_data = category_in.model_dump(exclude_unset=True)

    if update_data.get("name") and update_data["name"] != category.name:
        _check_unique_name(db, update_data["name"])

    for key, value in update_data.items():
        if value is not None:
            setattr(category, key, value)

    db.commit()
    db.refresh(category)

    logger.info("Rubro actualizado exitosamente: %s", category_id)
    return category_to_response(db, category)


# ***************************************************************
# 2. Consultas
# ***************************************************************

@router.get("/", response_model=List[CategoryInDB])
def read_categories(db: Session = Depends(get_db), _: User = Depends(get_sales_staff)):
    categories = db.query(Category).order_by(Category.name).all()
    return [category_to_response(db, category) for category in categories]


@router.get("/active", response_model=List[CategorySimple])
def read_active_categories(db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    return db.query(Category).filter(Category.is_active.is_(True)).order_by(Category.name).all()


@router.get("/name/{name}", response_model=CategoryInDB)
def read_category_by_name(name: str, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    category = db.query(Category).filter(Category.name == name).first()
    if not category:
        raise NotFoundError("Rubro", "nombre", name)
    return category_to_response(db, category)


@router.get("/{category_id}", response_model=CategoryInDB)
def read_category(category_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    return category_to_response(db, get_category_or_404(db, category_id))


# ***************************************************************
# 3. Activar / Desactivar / Eliminar
# ***************************************************************

def _set_active(db: Session, category_id: UUID, active: bool) -> Category:
    category = get_category_or_404(db, category_id)
    category.is_active = active
    db.commit()
    db.refresh(category)
    return category


@router.patch("/{category_id}/activate", response_model=CategoryInDB)
def activate_category(category_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    logger.info("Activando rubro: %s", category_id)
    return category_to_response(db, _set_active(db, category_id, True))


@router.patch("/{category_id}/deactivate", response_model=CategoryInDB)
def deactivate_category(category_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    logger.info("Desactivando rubro: %s", category_id)
    return category_to_response(db, _set_active(db, category_id, False))


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    logger.info("Eliminando rubro (soft delete): %s", category_id)
    _set_active(db, category_id, False)


@router.delete("/{category_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
def delete_category_permanently(category_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    category = get_category_or_404(db, category_id)

    if _count_articles(db, category_id) > 0:
        raise BusinessRuleError("No se puede eliminar el rubro porque tiene artículos asociados")

    logger.warning("Eliminando rubro permanentemente: %s", category_id)
    db.delete(category)
    db.commit()
