"""
Configuration modules for the territory server.
"""

from .config import Settings, settings

__all__ = ['Settings', 'settings']
