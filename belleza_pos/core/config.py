# belleza_pos/core/config.py
"""Configuración de la aplicación y variables de entorno."""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()  # Carga las variables desde el archivo .env si existe


class Settings:
    PROJECT_NAME: str = "Belleza POS API"
    API_V1_PREFIX: str = "/api/v1"

    # Sin valor por defecto: database.py aborta el arranque si falta
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")

    # JWT (¡Cambia SECRET_KEY en producción!)
    SECRET_KEY: str = os.getenv("SECRET_KEY", "CAMBIAR_ESTA_CLAVE_SECRETA_EN_PRODUCCION")
    ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
    REFRESH_TOKEN_EXPIRE_DAYS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

    # Administrador inicial (solo se crea si ambos valores están definidos)
    INITIAL_ADMIN_USERNAME: Optional[str] = os.getenv("INITIAL_ADMIN_USERNAME")
    INITIAL_ADMIN_PASSWORD: Optional[str] = os.getenv("INITIAL_ADMIN_PASSWORD")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR


settings = Settings()
