# looproute/core/logger.py
from loguru import logger
import sys

from looproute.core.config import settings

# Configure logger format
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "{message}",
    level=settings.LOG_LEVEL,
)

__all__ = ["logger"]
