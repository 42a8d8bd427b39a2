# src/chainforensics/utils/__init__.py
from .logger import get_logger, resolve_level
from .config import Config

__all__ = ['get_logger', 'resolve_level', 'Config']
