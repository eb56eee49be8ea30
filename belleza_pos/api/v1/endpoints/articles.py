# belleza_pos/api/v1/endpoints/articles.py
# type: ignore

import logging
from datetime import date, timedelta

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from belleza_pos.database import get_db
from belleza_pos.models.auth import User
from belleza_pos.models.inventory import Article, ArticlePrice, ArticleSupplier, Category, PriceList, Supplier
from belleza_pos.schemas.inventory import (
    ArticleCreate, ArticleUpdate, ArticleInDB, ArticleSimple,
    PriceRequest, PriceInDB, ArticleSupplierRequest, ArticleSupplierInDB,
    StockAdjustmentRequest, StockQuantityRequest, LowStockArticle, ExpiringArticle,
)
from belleza_pos.services import pricing, stock
from belleza_pos.core.exceptions import BusinessRuleError, NotFoundError
from belleza_pos.api.v1.endpoints.auth import (
    get_admin_user, get_management_user, get_sales_staff, get_any_staff,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ***************************************************************
# Helpers de carga y mapeo
# ***************************************************************

def get_article_or_404(db: Session, article_id: UUID, for_update: bool = False) -> Article:
    query = db.query(Article).filter(Article.id == article_id)
    if for_update:
        # Bloquea la fila mientras dura la transacción de la solicitud
        query = query.with_for_update()
    article = query.first()
    if not article:
        raise NotFoundError("Artículo", "id", article_id)
    return article


def _get_category_or_404(db: Session, category_id: UUID) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Rubro", "id", category_id)
    return category


def _get_price_list_or_404(db: Session, price_list_id: UUID) -> PriceList:
    price_list = db.query(PriceList).filter(PriceList.id == price_list_id).first()
    if not price_list:
        raise NotFoundError("Lista de precios", "id", price_list_id)
    return price_list


def _get_supplier_or_404(db: Session, supplier_id: UUID) -> Supplier:
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
    if not supplier:
        raise NotFoundError("Proveedor", "id", supplier_id)
    return supplier


def price_to_response(price: ArticlePrice) -> PriceInDB:
    return PriceInDB(
        id=price.id,
        price_list_id=price.price_list_id,
        price_list_name=price.price_list.name,
        cost_price=price.cost_price,
        sale_price=price.sale_price,
        tax_inclusive_price=pricing.tax_inclusive_price(price),
        profit_percentage=price.profit_percentage,
        updated_at=price.updated_at,
    )


def supplier_link_to_response(link: ArticleSupplier) -> ArticleSupplierInDB:
    return ArticleSupplierInDB(
        id=link.id,
        supplier_id=link.supplier_id,
        business_name=link.supplier.business_name,
        trade_name=link.supplier.trade_name,
        cost=link.cost,
        is_default=link.is_default,
        updated_at=link.updated_at,
    )


def article_to_response(article: Article, today: date = None) -> ArticleInDB:
    """Mapea un Article al schema de salida con los estados calculados."""
    today = today or date.today()
    days = stock.days_until_expiration(article, today)

    return ArticleInDB(
        id=article.id,
        barcode=article.barcode,
        description=article.description,
        category_id=article.category_id,
        category_name=article.category.name if article.category else None,
        sale_unit=article.sale_unit,
        tracks_stock=article.tracks_stock,
        stock_current=article.stock_current,
        stock_min=article.stock_min,
        stock_max=article.stock_max,
        stock_level=stock.classify_stock_level(article),
        expiration_date=article.expiration_date,
        days_to_expiration=days,
        expiring_soon=days is not None and 0 <= days <= stock.UPCOMING_EXPIRATION_DAYS,
        image_url=article.image_url,
        publish_on_web=article.publish_on_web,
        on_sale=article.on_sale,
        is_active=article.is_active,
        prices=[price_to_response(price) for price in article.prices],
        suppliers=[supplier_link_to_response(link) for link in article.suppliers],
        created_at=article.created_at,
        updated_at=article.updated_at,
    )


def article_to_simple(article: Article) -> ArticleSimple:
    return ArticleSimple(
        id=article.id,
        barcode=article.barcode,
        description=article.description,
        category_name=article.category.name if article.category else None,
        sale_price=pricing.default_sale_price(article),
        stock_current=article.stock_current,
        is_active=article.is_active,
    )


def _check_unique_barcode(db: Session, barcode: str) -> None:
    if db.query(Article).filter(Article.barcode == barcode).first():
        raise BusinessRuleError(f"Ya existe un artículo con el código de barras: {barcode}")


def _build_price(db: Session, price_in: PriceRequest) -> ArticlePrice:
    _get_price_list_or_404(db, price_in.price_list_id)
    return ArticlePrice(**price_in.model_dump())


def _clear_default_supplier(article: Article) -> None:
    for link in article.suppliers:
        link.is_default = False


# ***************************************************************
# 1. Alta y modificación de artículos
# ***************************************************************

@router.post("/", response_model=ArticleInDB, status_code=status.HTTP_201_CREATED)
def create_article(
    article_in: ArticleCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    """Crea un artículo con sus precios y proveedores iniciales."""
    logger.info("Creando artículo con código de barras: %s", article_in.barcode)
    _check_unique_barcode(db, article_in.barcode)

    if article_in.category_id:
        _get_category_or_404(db, article_in.category_id)

    price_list_ids = [price.price_list_id for price in article_in.prices]
    if len(price_list_ids) != len(set(price_list_ids)):
        raise BusinessRuleError("Hay listas de precios repetidas en la solicitud")

    supplier_ids = [link.supplier_id for link in article_in.suppliers]
    if len(supplier_ids) != len(set(supplier_ids)):
        raise BusinessRuleError("El proveedor ya está asociado a este artículo")

    if sum(1 for link in article_in.suppliers if link.is_default) > 1:
        raise BusinessRuleError("Solo un proveedor puede ser el predeterminado")

    db_article = Article(**article_in.model_dump(exclude={"prices", "suppliers"}))

    for price_in in article_in.prices:
        db_article.prices.append(_build_price(db, price_in))

    for link_in in article_in.suppliers:
        _get_supplier_or_404(db, link_in.supplier_id)
        db_article.suppliers.append(ArticleSupplier(**link_in.model_dump()))

    db.add(db_article)
    db.commit()
    db.refresh(db_article)

    logger.info("Artículo creado exitosamente con ID: %s", db_article.id)
    return article_to_response(db_article)


@router.patch("/{article_id}", response_model=ArticleInDB)
def update_article(
    article_id: UUID,
    article_in: ArticleUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    article = get_article_or_404(db, article_id)
    update_data = article_in.model_dump(exclude_unset=True)

    if update_data.get("barcode") and update_data["barcode"] != article.barcode:
        _check_unique_barcode(db, update_data["barcode"])

    if update_data.get("category_id"):
        _get_category_or_404(db, update_data["category_id"])

    for key, value in update_data.items():
        # Estos campos admiten null explícito para limpiarlos
        if value is not None or key in ("category_id", "expiration_date", "image_url"):
            setattr(article, key, value)

    db.commit()
    db.refresh(article)

    logger.info("Artículo actualizado exitosamente: %s", article_id)
    return article_to_response(article)


# ***************************************************************
# 2. Consultas
# ***************************************************************

@router.get("/", response_model=List[ArticleInDB])
def read_articles(
    db: Session = Depends(get_db),
    _: User = Depends(get_sales_staff),
    limit: int = Query(100, gt=0),
    skip: int = Query(0, ge=0),
):
    articles = db.query(Article).order_by(Article.description).offset(skip).limit(limit).all()
    today = date.today()
    return [article_to_response(article, today) for article in articles]


@router.get("/active", response_model=List[ArticleSimple])
def read_active_articles(db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    """Listado simplificado de artículos activos con el precio de la lista predeterminada."""
    articles = db.query(Article).filter(Article.is_active.is_(True)).order_by(Article.description).all()
    return [article_to_simple(article) for article in articles]


@router.get("/search", response_model=List[ArticleSimple])
def search_articles(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    _: User = Depends(get_any_staff)
):
    """Busca artículos activos por descripción o código de barras."""
    pattern = f"%{q}%"
    articles = (
        db.query(Article)
        .filter(
            Article.is_active.is_(True),
            or_(Article.description.ilike(pattern), Article.barcode.ilike(pattern)),
        )
        .order_by(Article.description)
        .all()
    )
    return [article_to_simple(article) for article in articles]


@router.get("/on-sale", response_model=List[ArticleSimple])
def read_articles_on_sale(db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    articles = (
        db.query(Article)
        .filter(Article.is_active.is_(True), Article.on_sale.is_(True))
        .order_by(Article.description)
        .all()
    )
    return [article_to_simple(article) for article in articles]


@router.get("/web", response_model=List[ArticleSimple])
def read_web_articles(db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    """Artículos activos marcados para publicar en la web."""
    articles = (
        db.query(Article)
        .filter(Article.is_active.is_(True), Article.publish_on_web.is_(True))
        .order_by(Article.description)
        .all()
    )
    return [article_to_simple(article) for article in articles]


@router.get("/low-stock", response_model=List[LowStockArticle])
def read_low_stock_articles(db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    """Artículos activos con control de stock cuyo stock actual es menor o igual al mínimo."""
    articles = (
        db.query(Article)
        .filter(
            Article.is_active.is_(True),
            Article.tracks_stock.is_(True),
            Article.stock_current <= Article.stock_min,
        )
        .order_by(Article.description)
        .all()
    )
    return [
        LowStockArticle(
            id=article.id,
            barcode=article.barcode,
            description=article.description,
            stock_current=article.stock_current,
            stock_min=article.stock_min,
            shortfall=article.stock_min - article.stock_current,
            stock_level=stock.classify_stock_level(article),
        )
        for article in articles
    ]


def _to_expiring(article: Article, today: date) -> ExpiringArticle:
    return ExpiringArticle(
        id=article.id,
        barcode=article.barcode,
        description=article.description,
        expiration_date=article.expiration_date,
        days_remaining=stock.days_until_expiration(article, today),
        stock_current=article.stock_current,
        expiration_state=stock.classify_expiration(article, today),
    )


@router.get("/expirations/upcoming", response_model=List[ExpiringArticle])
def read_upcoming_expirations(
    days: int = Query(stock.UPCOMING_EXPIRATION_DAYS, ge=0),
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    """Artículos activos que vencen entre hoy y hoy + days."""
    today = date.today()
    articles = (
        db.query(Article)
        .filter(
            Article.is_active.is_(True),
            Article.expiration_date.isnot(None),
            Article.expiration_date >= today,
            Article.expiration_date <= today + timedelta(days=days),
        )
        .order_by(Article.expiration_date)
        .all()
    )
    return [_to_expiring(article, today) for article in articles]


@router.get("/expirations/expired", response_model=List[ExpiringArticle])
def read_expired_articles(db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    today = date.today()
    articles = (
        db.query(Article)
        .filter(
            Article.is_active.is_(True),
            Article.expiration_date.isnot(None),
            Article.expiration_date < today,
        )
        .order_by(Article.expiration_date)
        .all()
    )
    return [_to_expiring(article, today) for article in articles]


@router.get("/barcode/{barcode}", response_model=ArticleInDB)
def read_article_by_barcode(barcode: str, db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    article = db.query(Article).filter(Article.barcode == barcode).first()
    if not article:
        raise NotFoundError("Artículo", "código de barras", barcode)
    return article_to_response(article)


@router.get("/exists/barcode/{barcode}", response_model=bool)
def barcode_exists(barcode: str, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    return db.query(Article).filter(Article.barcode == barcode).first() is not None


@router.get("/by-category/{category_id}", response_model=List[ArticleSimple])
def read_articles_by_category(category_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_sales_staff)):
    _get_category_or_404(db, category_id)
    articles = (
        db.query(Article)
        .filter(Article.category_id == category_id, Article.is_active.is_(True))
        .order_by(Article.description)
        .all()
    )
    return [article_to_simple(article) for article in articles]


@router.get("/count/by-category/{category_id}", response_model=int)
def count_articles_by_category(category_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    _get_category_or_404(db, category_id)
    return db.query(Article).filter(Article.category_id == category_id).count()


@router.get("/{article_id}", response_model=ArticleInDB)
def read_article(article_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_any_staff)):
    return article_to_response(get_article_or_404(db, article_id))


# ***************************************************************
# 3. Activar / Desactivar / Eliminar
# ***************************************************************

def _set_active(db: Session, article_id: UUID, active: bool) -> Article:
    article = get_article_or_404(db, article_id)
    article.is_active = active
    db.commit()
    db.refresh(article)
    return article


@router.patch("/{article_id}/activate", response_model=ArticleInDB)
def activate_article(article_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    logger.info("Activando artículo: %s", article_id)
    return article_to_response(_set_active(db, article_id, True))


@router.patch("/{article_id}/deactivate", response_model=ArticleInDB)
def deactivate_article(article_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    logger.info("Desactivando artículo: %s", article_id)
    return article_to_response(_set_active(db, article_id, False))


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_article(article_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    logger.info("Eliminando artículo (soft delete): %s", article_id)
    _set_active(db, article_id, False)


@router.delete("/{article_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
def delete_article_permanently(article_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_admin_user)):
    """Elimina el artículo junto con sus precios y relaciones con proveedores."""
    article = get_article_or_404(db, article_id)
    logger.warning("Eliminando artículo permanentemente: %s", article_id)
    db.delete(article)
    db.commit()


# ***************************************************************
# 4. Precios por lista
# ***************************************************************

@router.get("/{article_id}/prices", response_model=List[PriceInDB])
def read_article_prices(article_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_sales_staff)):
    article = get_article_or_404(db, article_id)
    return [price_to_response(price) for price in article.prices]


@router.post("/{article_id}/prices", response_model=PriceInDB)
def upsert_article_price(
    article_id: UUID,
    price_in: PriceRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    """Crea o actualiza el precio del artículo en una lista."""
    article = get_article_or_404(db, article_id)
    _get_price_list_or_404(db, price_in.price_list_id)

    price = next((p for p in article.prices if p.price_list_id == price_in.price_list_id), None)
    if price is None:
        price = ArticlePrice(**price_in.model_dump())
        article.prices.append(price)
    else:
        price.sale_price = price_in.sale_price
        price.cost_price = price_in.cost_price
        price.profit_percentage = price_in.profit_percentage

    db.commit()
    db.refresh(price)

    logger.info("Precio actualizado para artículo %s en lista %s", article_id, price_in.price_list_id)
    return price_to_response(price)


@router.put("/{article_id}/prices", response_model=List[PriceInDB])
def replace_article_prices(
    article_id: UUID,
    prices_in: List[PriceRequest],
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    """Reemplaza todos los precios del artículo por los enviados."""
    article = get_article_or_404(db, article_id)

    price_list_ids = [price.price_list_id for price in prices_in]
    if len(price_list_ids) != len(set(price_list_ids)):
        raise BusinessRuleError("Hay listas de precios repetidas en la solicitud")

    new_prices = [_build_price(db, price_in) for price_in in prices_in]

    article.prices.clear()
    # Los borrados deben llegar a la DB antes que las nuevas filas (unique article/lista)
    db.flush()
    article.prices.extend(new_prices)

    db.commit()
    db.refresh(article)

    logger.info("Precios reemplazados para artículo %s (%d listas)", article_id, len(new_prices))
    return [price_to_response(price) for price in article.prices]


@router.delete("/{article_id}/prices/{price_list_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_article_price(
    article_id: UUID,
    price_list_id: UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    article = get_article_or_404(db, article_id)
    price = next((p for p in article.prices if p.price_list_id == price_list_id), None)
    if price is None:
        raise NotFoundError("Precio", "lista de precios", price_list_id)

    article.prices.remove(price)
    db.commit()
    logger.info("Precio eliminado para artículo %s en lista %s", article_id, price_list_id)


# ***************************************************************
# 5. Proveedores del artículo
# ***************************************************************

@router.get("/{article_id}/suppliers", response_model=List[ArticleSupplierInDB])
def read_article_suppliers(article_id: UUID, db: Session = Depends(get_db), _: User = Depends(get_management_user)):
    article = get_article_or_404(db, article_id)
    return [supplier_link_to_response(link) for link in article.suppliers]


@router.post("/{article_id}/suppliers", response_model=ArticleSupplierInDB, status_code=status.HTTP_201_CREATED)
def add_article_supplier(
    article_id: UUID,
    link_in: ArticleSupplierRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    article = get_article_or_404(db, article_id)
    _get_supplier_or_404(db, link_in.supplier_id)

    if any(link.supplier_id == link_in.supplier_id for link in article.suppliers):
        raise BusinessRuleError("El proveedor ya está asociado a este artículo")

    if link_in.is_default:
        _clear_default_supplier(article)

    link = ArticleSupplier(**link_in.model_dump())
    article.suppliers.append(link)
    db.commit()
    db.refresh(link)

    logger.info("Proveedor %s asociado al artículo %s", link_in.supplier_id, article_id)
    return supplier_link_to_response(link)


def _find_supplier_link(article: Article, supplier_id: UUID) -> ArticleSupplier:
    link = next((s for s in article.suppliers if s.supplier_id == supplier_id), None)
    if link is None:
        raise NotFoundError("Proveedor del artículo", "proveedor", supplier_id)
    return link


@router.patch("/{article_id}/suppliers/{supplier_id}/default", response_model=ArticleSupplierInDB)
def set_default_article_supplier(
    article_id: UUID,
    supplier_id: UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    article = get_article_or_404(db, article_id)
    link = _find_supplier_link(article, supplier_id)

    _clear_default_supplier(article)
    link.is_default = True
    db.commit()
    db.refresh(link)

    logger.info("Proveedor predeterminado del artículo %s: %s", article_id, supplier_id)
    return supplier_link_to_response(link)


@router.delete("/{article_id}/suppliers/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_article_supplier(
    article_id: UUID,
    supplier_id: UUID,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    article = get_article_or_404(db, article_id)
    article.suppliers.remove(_find_supplier_link(article, supplier_id))
    db.commit()
    logger.info("Proveedor %s desasociado del artículo %s", supplier_id, article_id)


# ***************************************************************
# 6. Stock
# ***************************************************************

def _apply_stock_change(db: Session, article_id: UUID, quantity, kind) -> Article:
    article = get_article_or_404(db, article_id, for_update=True)
    try:
        new_stock = stock.adjust_stock(article, quantity, kind)
    except BusinessRuleError:
        db.rollback()
        raise
    db.commit()
    db.refresh(article)
    logger.info("Stock del artículo %s (%s %s): %s", article_id, kind, quantity, new_stock)
    return article


@router.post("/{article_id}/stock/adjust", response_model=ArticleInDB)
def adjust_article_stock(
    article_id: UUID,
    request: StockAdjustmentRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    """Ajuste de stock: INCREASE, DECREASE o SET."""
    if request.reason:
        logger.info("Ajuste de stock del artículo %s, motivo: %s", article_id, request.reason)
    return article_to_response(_apply_stock_change(db, article_id, request.quantity, request.kind))


@router.post("/{article_id}/stock/increment", response_model=ArticleInDB)
def increment_article_stock(
    article_id: UUID,
    request: StockQuantityRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    return article_to_response(
        _apply_stock_change(db, article_id, request.quantity, stock.AdjustmentKind.INCREASE)
    )


@router.post("/{article_id}/stock/decrement", response_model=ArticleInDB)
def decrement_article_stock(
    article_id: UUID,
    request: StockQuantityRequest,
    db: Session = Depends(get_db),
    _: User = Depends(get_management_user)
):
    return article_to_response(
        _apply_stock_change(db, article_id, request.quantity, stock.AdjustmentKind.DECREASE)
    )
