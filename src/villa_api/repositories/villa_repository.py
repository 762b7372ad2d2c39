"""
Villa repository.

Adds Villa-specific lookups on top of the generic `BaseRepository`:
`update()` never overwrites `created_date`, and `create()` stamps both timestamps.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from villa_api.models.villa import Villa
from .base_repository import BaseRepository
from .filters import ById, ByName


class VillaRepository(BaseRepository[Villa]):
    """Repository for Villa entity operations."""

    immutable_fields = ("id", "created_date")
    timestamp_fields = ("created_date", "updated_date")

    def __init__(self, db: AsyncSession):
        super().__init__(Villa, db)

    async def get_by_id(self, villa_id: int, tracked: bool = True) -> Villa | None:
        return await self.get(ById(villa_id), tracked=tracked)

    async def get_by_name(self, name: str, tracked: bool = True) -> Villa | None:
        return await self.get(ByName(name), tracked=tracked)

    async def name_exists(self, name: str) -> bool:
        """True when some villa already uses `name` (exact match)."""
        return await self.get_by_name(name, tracked=False) is not None
