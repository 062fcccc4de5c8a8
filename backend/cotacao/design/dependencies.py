from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cotacao.database import get_db_session
from cotacao.design.application.services import DesignSettingsService
from cotacao.design.domain.repositories import AbstractDesignSettingsRepository
from cotacao.design.infrastructure.persistence import SQLAlchemyDesignSettingsRepository

def get_design_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> AbstractDesignSettingsRepository:
    return SQLAlchemyDesignSettingsRepository(session)

DesignRepositoryDep = Annotated[AbstractDesignSettingsRepository, Depends(get_design_repository)]

def get_design_service(repository: DesignRepositoryDep) -> DesignSettingsService:
    """Fournit une instance de DesignSettingsService."""
    return DesignSettingsService(repository=repository)

DesignServiceDep = Annotated[DesignSettingsService, Depends(get_design_service)]
