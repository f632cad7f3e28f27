"""
Core Database Components

- models: abstract base model classes
"""

from core.db.models import BaseModel

__all__ = ['BaseModel']
