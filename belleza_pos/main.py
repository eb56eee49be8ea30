# belleza_pos/main.py
# type: ignore

import logging
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from belleza_pos.core.config import settings
from belleza_pos.core.logger_config import setup_logging
from belleza_pos.core.exceptions import BusinessRuleError, NotFoundError
from belleza_pos.core.security import get_password_hash
from belleza_pos.database import Base, SessionLocal, engine

# ***************************************************************
# 1. Importar todos los modelos para que SQLAlchemy los registre
# ***************************************************************
from belleza_pos.models.auth import User  # Registra User
from belleza_pos.models.enums import UserRole
import belleza_pos.models.platform  # Registra Branch
import belleza_pos.models.inventory  # Registra Category, PriceList, Supplier, Article...
import belleza_pos.models.customers  # Registra Customer

# ***************************************************************
# 2. Importar los Routers de API
# ***************************************************************
from belleza_pos.api.v1.endpoints import auth
from belleza_pos.api.v1.endpoints import roles
from belleza_pos.api.v1.endpoints import users
from belleza_pos.api.v1.endpoints import platform
from belleza_pos.api.v1.endpoints import categories
from belleza_pos.api.v1.endpoints import price_lists
from belleza_pos.api.v1.endpoints import suppliers
from belleza_pos.api.v1.endpoints import articles
from belleza_pos.api.v1.endpoints import customers

setup_logging()
logger = logging.getLogger(__name__)

# Inicializar la aplicación FastAPI
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="v1",
    description="Backend del punto de venta para negocios de belleza: artículos, stock, precios y cuentas corrientes."
)


def create_tables():
    """Crea todas las tablas de la base de datos si no existen."""
    Base.metadata.create_all(bind=engine)


def seed_initial_admin():
    """Crea el administrador inicial si está configurado y todavía no existe."""
    username = settings.INITIAL_ADMIN_USERNAME
    password = settings.INITIAL_ADMIN_PASSWORD
    if not username or not password:
        return

    db = SessionLocal()
    try:
        if db.query(User).filter(User.username == username).first():
            return
        db.add(User(
            username=username,
            password_hash=get_password_hash(password),
            first_name="Administrador",
            last_name="Inicial",
            role=UserRole.ADMIN,
        ))
        db.commit()
        logger.info("Administrador inicial creado: %s", username)
    finally:
        db.close()


create_tables()
seed_initial_admin()


# ***************************************************************
# 3. Manejo global de errores
# ***************************************************************

def _error_body(status_code: int, message: str, request: Request) -> dict:
    return {
        "detail": message,
        "error": HTTPStatus(status_code).phrase,
        "path": request.url.path,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.warning("Recurso no encontrado: %s", exc.message)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=_error_body(status.HTTP_404_NOT_FOUND, exc.message, request),
    )


@app.exception_handler(BusinessRuleError)
async def business_rule_handler(request: Request, exc: BusinessRuleError):
    logger.warning("Regla de negocio rechazada en %s: %s", request.url.path, exc.message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(status.HTTP_400_BAD_REQUEST, exc.message, request),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Error no controlado en %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, "Ha ocurrido un error interno", request),
    )


# ***************************************************************
# 4. Incluir los Routers
# ***************************************************************
API = settings.API_V1_PREFIX

app.include_router(auth.router, tags=["Auth"], prefix=f"{API}/auth")
app.include_router(roles.router, tags=["Roles"], prefix=f"{API}/roles")
app.include_router(users.router, tags=["Users"], prefix=f"{API}/users")
app.include_router(platform.router, tags=["Branches"], prefix=f"{API}/branches")
app.include_router(categories.router, tags=["Categories"], prefix=f"{API}/categories")
app.include_router(price_lists.router, tags=["Price Lists"], prefix=f"{API}/price-lists")
app.include_router(suppliers.router, tags=["Suppliers"], prefix=f"{API}/suppliers")
app.include_router(articles.router, tags=["Articles"], prefix=f"{API}/articles")
app.include_router(customers.router, tags=["Customers"], prefix=f"{API}/customers")
