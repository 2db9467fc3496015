"""
Core Application Module
"""
from .config import AppConfig, config, get_config, ensure_directories

__all__ = ["AppConfig", "config", "get_config", "ensure_directories"]
