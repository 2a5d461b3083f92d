# utils/logging_utils.py
"""
Helpers de logging compartidos.

get_logger configura el logger raíz una sola vez (nivel desde LOG_LEVEL)
y devuelve un logger con el nombre del módulo.
"""

import logging
import os
from typing import Optional

_LOGGER_INITIALISED = False


def configure_root_logger(level: Optional[int | str] = None) -> None:
    """Configura el logger raíz con un formato con fecha, solo la primera vez."""

    global _LOGGER_INITIALISED
    if _LOGGER_INITIALISED:
        return

    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
    if isinstance(level, str) and not isinstance(logging.getLevelName(level), int):
        # nombre de nivel desconocido (LOG_LEVEL=verbose): usamos INFO
        level = logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Devuelve el logger del módulo asegurando la configuración base."""

    configure_root_logger()
    return logging.getLogger(name)
