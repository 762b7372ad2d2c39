"""
Repository layer.

    from villa_api.repositories import VillaRepository, ById, ByName
"""

from .base_repository import BaseRepository
from .filters import FieldEquals, ById, ByName
from .villa_repository import VillaRepository

__all__ = [
    "BaseRepository",
    "FieldEquals",
    "ById",
    "ByName",
    "VillaRepository",
]
