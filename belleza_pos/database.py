# belleza_pos/database.py

import logging
import sys

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from belleza_pos.core.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

if DATABASE_URL is None:
    logger.critical("FATAL ERROR: La variable de entorno 'DATABASE_URL' no se encontró.")
    sys.exit(1)

# SQLite necesita compartir la conexión entre los hilos del servidor
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)

# Sesión por solicitud (request) a la API
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base de la que heredan todos los modelos/tablas
Base = declarative_base()


def get_db():
    """Provee una sesión de base de datos a un endpoint de FastAPI."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
