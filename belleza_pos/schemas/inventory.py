# belleza_pos/schemas/inventory.py
# type: ignore

from pydantic import BaseModel, Field, field_serializer, ConfigDict
from typing import List, Optional
from uuid import UUID
from decimal import Decimal
from datetime import date, datetime

from belleza_pos.models.enums import SaleUnit
from belleza_pos.services.stock import ExpirationState, StockLevel


# -------------------------------------------------------------------
# Categorías (Rubros)
# -------------------------------------------------------------------

class CategoryBase(BaseModel):
    name: str = Field(..., max_length=100)
    description: Optional[str] = None
    tax_percentage: Decimal = Field(Decimal("21.00"), ge=0, le=100, decimal_places=2)

class CategoryCreate(CategoryBase):
    pass

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    tax_percentage: Optional[Decimal] = Field(None, ge=0, le=100, decimal_places=2)
    is_active: Optional[bool] = None

class CategoryInDB(CategoryBase):
    id: UUID
    is_active: bool
    article_count: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('tax_percentage')
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)

class CategorySimple(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


# -------------------------------------------------------------------
# Listas de precios
# -------------------------------------------------------------------

class PriceListBase(BaseModel):
    name: str = Field(..., max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    is_default: bool = False

class PriceListCreate(PriceListBase):
    is_active: bool = True

class PriceListUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None

class PriceListInDB(PriceListBase):
    id: UUID
    is_active: bool
    article_count: int = 0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class PriceListSimple(BaseModel):
    id: UUID
    name: str
    is_default: bool

    model_config = ConfigDict(from_attributes=True)


# -------------------------------------------------------------------
# Proveedores
# -------------------------------------------------------------------

class SupplierBase(BaseModel):
    supplier_number: Optional[str] = Field(None, max_length=20)
    business_name: str = Field(..., max_length=150)
    trade_name: Optional[str] = Field(None, max_length=150)
    tax_id: str = Field(..., max_length=13, description="CUIT del proveedor (único)")
    phone: Optional[str] = Field(None, max_length=20)
    mobile: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=255)
    contact_person: Optional[str] = Field(None, max_length=150)
    street: Optional[str] = Field(None, max_length=150)
    street_number: Optional[str] = Field(None, max_length=10)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=10)
    vat_condition: Optional[str] = Field(None, max_length=30)
    notes: Optional[str] = None

class SupplierCreate(SupplierBase):
    pass

class SupplierUpdate(SupplierBase):
    business_name: Optional[str] = Field(None, max_length=150)
    tax_id: Optional[str] = Field(None, max_length=13)
    is_active: Optional[bool] = None

class SupplierInDB(SupplierBase):
    id: UUID
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# -------------------------------------------------------------------
# Precios y proveedores de un artículo
# -------------------------------------------------------------------

class PriceRequest(BaseModel):
    price_list_id: UUID
    sale_price: Decimal = Field(..., gt=0, decimal_places=2, description="Precio de venta (mayor a 0)")
    cost_price: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    profit_percentage: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)

class PriceInDB(BaseModel):
    id: UUID
    price_list_id: UUID
    price_list_name: str
    cost_price: Decimal
    sale_price: Decimal
    tax_inclusive_price: Decimal
    profit_percentage: Decimal
    updated_at: Optional[datetime] = None

    @field_serializer('cost_price', 'sale_price', 'tax_inclusive_price', 'profit_percentage')
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)

class ArticleSupplierRequest(BaseModel):
    supplier_id: UUID
    cost: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    is_default: bool = False

class ArticleSupplierInDB(BaseModel):
    id: UUID
    supplier_id: UUID
    business_name: str
    trade_name: Optional[str] = None
    cost: Decimal
    is_default: bool
    updated_at: Optional[datetime] = None

    @field_serializer('cost')
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)


# -------------------------------------------------------------------
# Artículos
# -------------------------------------------------------------------

class ArticleBase(BaseModel):
    barcode: str = Field(..., max_length=50)
    description: str = Field(..., max_length=255)
    category_id: Optional[UUID] = None
    sale_unit: SaleUnit = SaleUnit.UNIT
    tracks_stock: bool = False
    stock_current: Decimal = Field(Decimal("0"), ge=0)
    stock_min: Decimal = Field(Decimal("0"), ge=0)
    stock_max: Decimal = Field(Decimal("0"), ge=0)
    expiration_date: Optional[date] = None
    image_url: Optional[str] = Field(None, max_length=500)
    publish_on_web: bool = False
    on_sale: bool = False

class ArticleCreate(ArticleBase):
    is_active: bool = True
    prices: List[PriceRequest] = []
    suppliers: List[ArticleSupplierRequest] = []

class ArticleUpdate(BaseModel):
    barcode: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    category_id: Optional[UUID] = None
    sale_unit: Optional[SaleUnit] = None
    tracks_stock: Optional[bool] = None
    stock_current: Optional[Decimal] = Field(None, ge=0)
    stock_min: Optional[Decimal] = Field(None, ge=0)
    stock_max: Optional[Decimal] = Field(None, ge=0)
    expiration_date: Optional[date] = None
    image_url: Optional[str] = Field(None, max_length=500)
    publish_on_web: Optional[bool] = None
    on_sale: Optional[bool] = None
    is_active: Optional[bool] = None

class ArticleInDB(ArticleBase):
    id: UUID
    category_name: Optional[str] = None
    stock_level: StockLevel
    days_to_expiration: Optional[int] = None
    expiring_soon: bool = False
    is_active: bool
    prices: List[PriceInDB] = []
    suppliers: List[ArticleSupplierInDB] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_serializer('stock_current', 'stock_min', 'stock_max')
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)

class ArticleSimple(BaseModel):
    """Vista reducida con el precio de la lista predeterminada (si existe)."""
    id: UUID
    barcode: str
    description: str
    category_name: Optional[str] = None
    sale_price: Optional[Decimal] = None
    stock_current: Decimal
    is_active: bool

    @field_serializer('sale_price', 'stock_current')
    def serialize_decimal(self, value: Optional[Decimal]) -> Optional[float]:
        return float(value) if value is not None else None


# -------------------------------------------------------------------
# Stock y vencimientos
# -------------------------------------------------------------------

class StockAdjustmentRequest(BaseModel):
    quantity: Decimal = Field(..., ge=0)
    # INCREASE, DECREASE o SET; un tipo desconocido es un error de negocio (400)
    kind: str
    reason: Optional[str] = Field(None, max_length=255)

class StockQuantityRequest(BaseModel):
    quantity: Decimal = Field(..., gt=0, description="La cantidad debe ser mayor a cero")

class LowStockArticle(BaseModel):
    id: UUID
    barcode: str
    description: str
    stock_current: Decimal
    stock_min: Decimal
    shortfall: Decimal
    stock_level: StockLevel

    @field_serializer('stock_current', 'stock_min', 'shortfall')
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)

class ExpiringArticle(BaseModel):
    id: UUID
    barcode: str
    description: str
    expiration_date: date
    days_remaining: int
    stock_current: Decimal
    expiration_state: ExpirationState

    @field_serializer('stock_current')
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)
