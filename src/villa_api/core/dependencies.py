from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from villa_api.database.session import AsyncSessionMaker
from villa_api.repositories.villa_repository import VillaRepository
from villa_api.services.villa_service import VillaService


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    # One session (unit of work) per request, closed when the response is done
    async with AsyncSessionMaker() as session:
        yield session


def get_villa_repository(db: AsyncSession = Depends(get_db_session)) -> VillaRepository:
    return VillaRepository(db)


def get_villa_service(repository: VillaRepository = Depends(get_villa_repository)) -> VillaService:
    return VillaService(repository)
