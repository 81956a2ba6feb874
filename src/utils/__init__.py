"""
Utility modules for the delivery quote backend
"""
from .config_loader import Settings, load_settings

__all__ = [
    'Settings',
    'load_settings',
]
