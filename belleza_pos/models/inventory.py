# belleza_pos/models/inventory.py
# type: ignore

import uuid
from decimal import Decimal
from sqlalchemy import (
    Column, String, Text, Boolean, Date, Enum, ForeignKey, Numeric, TIMESTAMP, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import relationship
from datetime import datetime
from belleza_pos.database import Base
from belleza_pos.models.enums import SaleUnit


class Category(Base):
    """Rubro o categoría de artículos."""
    __tablename__ = "category"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    tax_percentage = Column(Numeric(5, 2), default=Decimal("21.00"), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    articles = relationship("Article", back_populates="category")


class PriceList(Base):
    """Lista de precios. Solo una puede ser la predeterminada."""
    __tablename__ = "price_list"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(50), unique=True, nullable=False)
    description = Column(String(255), nullable=True)
    is_default = Column(Boolean, default=False, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    prices = relationship("ArticlePrice", back_populates="price_list")


class Supplier(Base):
    """Proveedor de artículos."""
    __tablename__ = "supplier"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    supplier_number = Column(String(20), unique=True, nullable=True)
    business_name = Column(String(150), nullable=False)
    trade_name = Column(String(150), nullable=True)
    tax_id = Column(String(13), unique=True, nullable=False)

    phone = Column(String(20), nullable=True)
    mobile = Column(String(20), nullable=True)
    email = Column(String(100), nullable=True)
    website = Column(String(255), nullable=True)
    contact_person = Column(String(150), nullable=True)

    street = Column(String(150), nullable=True)
    street_number = Column(String(10), nullable=True)
    city = Column(String(100), nullable=True)
    province = Column(String(100), nullable=True)
    postal_code = Column(String(10), nullable=True)

    vat_condition = Column(String(30), nullable=True)
    notes = Column(Text, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    articles = relationship("ArticleSupplier", back_populates="supplier")


class Article(Base):
    """Artículo (producto) a la venta."""
    __tablename__ = "article"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    barcode = Column(String(50), unique=True, index=True, nullable=False)
    description = Column(String(255), nullable=False)
    category_id = Column(Uuid(as_uuid=True), ForeignKey("category.id"), nullable=True)

    sale_unit = Column(Enum(SaleUnit, native_enum=False, length=10), default=SaleUnit.UNIT, nullable=False)

    # NUMERIC(10,3): los artículos por peso admiten fracciones
    tracks_stock = Column(Boolean, default=False, nullable=False)
    stock_current = Column(Numeric(10, 3), default=Decimal("0"), nullable=False)
    stock_min = Column(Numeric(10, 3), default=Decimal("0"), nullable=False)
    stock_max = Column(Numeric(10, 3), default=Decimal("0"), nullable=False)

    expiration_date = Column(Date, nullable=True)
    image_url = Column(String(500), nullable=True)
    publish_on_web = Column(Boolean, default=False, nullable=False)
    on_sale = Column(Boolean, default=False, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("Category", back_populates="articles")
    prices = relationship("ArticlePrice", back_populates="article", cascade="all, delete-orphan")
    suppliers = relationship("ArticleSupplier", back_populates="article", cascade="all, delete-orphan")


class ArticlePrice(Base):
    """Precio de un artículo en una lista de precios."""
    __tablename__ = "article_price"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    article_id = Column(Uuid(as_uuid=True), ForeignKey("article.id", ondelete="CASCADE"), nullable=False)
    price_list_id = Column(Uuid(as_uuid=True), ForeignKey("price_list.id"), nullable=False)

    # NUMERIC(15,2) para precisión financiera
    cost_price = Column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    sale_price = Column(Numeric(15, 2), nullable=False)
    profit_percentage = Column(Numeric(5, 2), default=Decimal("0"), nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    article = relationship("Article", back_populates="prices")
    price_list = relationship("PriceList", back_populates="prices")

    __table_args__ = (
        UniqueConstraint("article_id", "price_list_id", name="uq_article_price_list"),
    )


class ArticleSupplier(Base):
    """Relación artículo-proveedor con el costo de compra."""
    __tablename__ = "article_supplier"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    article_id = Column(Uuid(as_uuid=True), ForeignKey("article.id", ondelete="CASCADE"), nullable=False)
    supplier_id = Column(Uuid(as_uuid=True), ForeignKey("supplier.id"), nullable=False)

    cost = Column(Numeric(15, 2), default=Decimal("0"), nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    article = relationship("Article", back_populates="suppliers")
    supplier = relationship("Supplier", back_populates="articles")

    __table_args__ = (
        UniqueConstraint("article_id", "supplier_id", name="uq_article_supplier"),
    )
