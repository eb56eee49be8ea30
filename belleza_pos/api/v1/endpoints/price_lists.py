# belleza_pos/api/v1/endpoints/price_lists.py
# type: ignore

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from belleza_pos.database import get_db
from belleza_pos.models.auth import User
from belleza_pos.models.enums import UserRole
from belleza_pos.models.inventory import ArticlePrice, PriceList
from belleza_pos.schemas.inventory import PriceListCreate, PriceListUpdate, PriceListInDB, PriceListSimple
from belleza_pos.core.exceptions import BusinessRuleError, NotFoundError
from belleza_pos.api.v1.endpoints.auth import (
    get_admin_user, get_management_user, get_sales_staff, get_any_staff,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_price_list_or_404(db: Session, price_list_id: UUID) -> PriceList:
    price_list = db.query(PriceList).filter(PriceList.id == price_list_id).first()
    if not price_list:
        raise NotFoundError("Lista de precios", "id", price_list_id)
    return price_list


def _count_articles(db: Session, price_list_id: UUID) -> int:
    return db.query(ArticlePrice).filter(ArticlePrice.price_list_id == price_list_id).count()


def price_list_to_response(db: Session, price_list: PriceList) -> PriceListInDB:
    response = PriceListInDB.model_validate(price_list)
    response.article_count = _count_articles(db, price_list.id)
    return response


def _check_unique_name(db: Session, name: str) -> None:
    if db.query(PriceList).filter(PriceList.name == name).first():
        raise BusinessRuleError(f"Ya existe una lista de precios con el nombre: {name}")


def _clear_default(db: Session, keep_id: Optional[UUID] = None) -> None:
    """Quita la marca de predeterminada a todas las listas salvo keep_id."""
    query = db.query(PriceList).filter(PriceList.is_default.is_(True))
    if keep_id is not None:
        query = query.filter(PriceList.id != keep_id)
    for price_list in query.all():
        price_list.is_default = False


def _check_can_be_default(is_active: bool) -> None:
    if not is_active:
        raise BusinessRuleError("No se puede marcar como predeterminada una lista inactiva")


def _check_not_default(price_list: PriceList, action: str) -> None:
    if price_list.is_default:
        logger.warning("Rechazado: %s la lista predeterminada %s", action, price_list.id)
        raise BusinessRuleError(f"No se puede {action} la lista predeterminada")


# ***************************************************************
# 1. Alta y modificación
# ***************************************************************

@router.post("/", response_model=PriceListInDB, status_code=status.HTTP_201_CREATED)
def create_price_list(
    price_list_in: PriceListCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_admin_user)
):
    logger.info("Creando lista de precios: %s", price_list_in.name)
    _check_unique_name(db, price_list_in.name)

    if price_list_in.is_default:
        _check_can_be_default(price_list_in.is_active)
        _clear_default(db)

    db_price_list = PriceList(**price_list_in.model_dump())
    db.add(db_price_list)
    db.commit()
    db.refresh(db_price_list)

    logger.info("Lista de precios creada exitosamente con ID: %s", db_price_list.id)
    return price_list_to_response(db, db_price_list)


@router.patch("/{price_list_id}", response_model=PriceListInDB)
def update_price_list(
    price_list_id: UUID,
    price_list_in: PriceListUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_management_user)
):
    price_list = get_price_list_or_404(db, price_list_id)
    update_data = {
        key: value for key, value in price_list_in.model_dump(exclude_unset=True).items()
        if value is not None
    }

    if update_data.get("name") and update_data["name"] != price_list.name:
        _check_unique_name(db, update_data["name"])

    # Mismas reglas que los endpoints /deactivate y /default
    if update_data.get("is_active") is False:
        _check_not_default(price_list, "desactivar")

    if update_data.get("is_default") and not price_list.is_default:
        if current_user.role != UserRole.ADMIN:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Acceso denegado. Se requiere uno de los roles: ADMIN."
            )
        _check_can_be_default(update_data.get("is_active", price_list.is_active))
        _clear_default(db, keep_id=price_list.id)

    for key, value in update_data.items():
        setattr(price_list, key, value)

    db.commit()
    db.refresh(price_list)

    logger.info("Lista de precios actualizada exitosamente: %s", price_list_id)
    return price_list_to_response(db, price_list)

# ***************************************************************
# 2. Consultas
# ***************************************************************

@router.get("/", response_model=List[PriceListInDB])
def read_price_lists(db: Session = Depends(get_db), _: User = Depends(get_sales_staff)):
    price_lists = db.query(PriceList).order_by(PriceList.name).all()
    return [price_list_to_response(db, price_list) for price_list in price_lists]


@router.get("/active", response_model=List[PriceListSimple])
def read_active_price_lists(db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    return db.query(PriceList).filter(PriceList.is_active.is_(True)).order_by(PriceList.name).all()


@router.get("/default", response_model=PriceListInDB)
def read_default_price_list(db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    price_list = db.query(PriceList).filter(PriceList.is_default.is_(True)).first()
    if not price_list:
        raise NotFoundError("No hay lista de precios predeterminada")
    return price_list_to_response(db, price_list)


@router.get("/name/{name}", response_model=PriceListInDB)
def read_price_list_by_name(name: str, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    price_list = db.query(PriceList).filter(PriceList.name == name).first()
    if not price_list:
        raise NotFoundError("Lista de precios", "nombre", name)
    return price_list_to_response(db, price_list)


@router.get("/{price_list_id}", response_model=PriceListInDB)
def read_price_list(price_list_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    return price_list_to_response(db, get_price_list_or_404(db, price_list_id))


# ***************************************************************
# 3. Lista predeterminada
# ***************************************************************

@router.patch("/{price_list_id}/default", response_model=PriceListInDB)
def set_default_price_list(price_list_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    price_list = get_price_list_or_404(db, price_list_id)

    _check_can_be_default(price_list.is_active)
    _clear_default(db, keep_id=price_list.id)
    price_list.is_default = True
    db.commit()
    db.refresh(price_list)

    logger.info("Lista de precios predeterminada: %s", price_list_id)
    return price_list_to_response(db, price_list)


# ***************************************************************
# 4. Activar / Desactivar / Eliminar
# ***************************************************************

@router.patch("/{price_list_id}/activate", response_model=PriceListInDB)
def activate_price_list(price_list_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    price_list = get_price_list_or_404(db, price_list_id)
    price_list.is_active = True
    db.commit()
    db.refresh(price_list)
    logger.info("Lista de precios activada: %s", price_list_id)
    return price_list_to_response(db, price_list)


def _deactivate(db: Session, price_list: PriceList, action: str) -> None:
    _check_not_default(price_list, action)
    price_list.is_active = False
    db.commit()


@router.patch("/{price_list_id}/deactivate", response_model=PriceListInDB)
def deactivate_price_list(price_list_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    price_list = get_price_list_or_404(db, price_list_id)
    _deactivate(db, price_list, "desactivar")
    db.refresh(price_list)
    logger.info("Lista de precios desactivada: %s", price_list_id)
    return price_list_to_response(db, price_list)


@router.delete("/{price_list_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_price_list(price_list_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    price_list = get_price_list_or_404(db, price_list_id)
    _deactivate(db, price_list, "eliminar")
    logger.info("Lista de precios eliminada (soft delete): %s", price_list_id)


@router.delete("/{price_list_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
def delete_price_list_permanently(price_list_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    price_list = get_price_list_or_404(db, price_list_id)

    if price_list.is_default:
        raise BusinessRuleError("No se puede eliminar la lista predeterminada")

    if _count_articles(db, price_list_id) > 0:
        raise BusinessRuleError("No se puede eliminar la lista porque tiene precios asociados")

    logger.warning("Eliminando lista de precios permanentemente: %s", price_list_id)
    db.delete(price_list)
    db.commit()
