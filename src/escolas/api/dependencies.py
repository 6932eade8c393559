from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from escolas.database.session import get_async_session
from escolas.repositories.escola_repository import EscolaRepository
from escolas.services.escola_service import EscolaService


async def get_escola_repository(db: AsyncSession = Depends(get_async_session)) -> EscolaRepository:
    # One repository (and session) per request
    return EscolaRepository(db)


async def get_escola_service(
    repository: EscolaRepository = Depends(get_escola_repository),
) -> EscolaService:
    return EscolaService(repository)
