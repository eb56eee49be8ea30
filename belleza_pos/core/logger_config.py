# belleza_pos/core/logger_config.py
"""Configuración de logging de la aplicación."""

import logging

from rich.logging import RichHandler

from belleza_pos.core.config import settings


def setup_logging() -> None:
    """Instala un único RichHandler en el logger raíz."""
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    rich_handler = RichHandler(
        show_time=True,
        show_level=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_word_wrap=True,
    )
    root_logger.handlers = [rich_handler]

    # Silenciar librerías verbosas
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
