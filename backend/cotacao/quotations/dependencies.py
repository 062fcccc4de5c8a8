from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cotacao.database import get_db_session
from cotacao.quotations.application.services import QuotationService
from cotacao.quotations.domain.repositories import AbstractQuotationRepository
from cotacao.quotations.infrastructure.persistence import SQLAlchemyQuotationRepository

def get_quotation_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> AbstractQuotationRepository:
    return SQLAlchemyQuotationRepository(session)

QuotationRepositoryDep = Annotated[AbstractQuotationRepository, Depends(get_quotation_repository)]

def get_quotation_service(repository: QuotationRepositoryDep) -> QuotationService:
    """Fournit une instance de QuotationService."""
    return QuotationService(repository=repository)

QuotationServiceDep = Annotated[QuotationService, Depends(get_quotation_service)]
