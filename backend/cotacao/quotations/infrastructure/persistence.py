import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cotacao.quotations.domain.entities import StoredQuotation
from cotacao.quotations.domain.exceptions import DuplicateQuotationNumberException
from cotacao.quotations.domain.repositories import AbstractQuotationRepository
from cotacao.quotations.models import QuotationDB

logger = logging.getLogger(__name__)

class SQLAlchemyQuotationRepository(AbstractQuotationRepository):
    """Implémentation SQLAlchemy du repository de cotações."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_row(self, quotation_id: int, user_id: int) -> Optional[QuotationDB]:
        stmt = select(QuotationDB).where(
            and_(QuotationDB.id == quotation_id, QuotationDB.user_id == user_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, quotation_id: int, user_id: int) -> Optional[StoredQuotation]:
        row = await self._get_row(quotation_id, user_id)
        if row is None:
            logger.debug(f"Cotação ID {quotation_id} non trouvée pour user {user_id}.")
            return None
        return StoredQuotation.model_validate(row)

    async def list_for_user(self, user_id: int) -> List[StoredQuotation]:
        stmt = (
            select(QuotationDB)
            .where(QuotationDB.user_id == user_id)
            .order_by(QuotationDB.created_at.desc(), QuotationDB.id.desc())
        )
        result = await self.session.execute(stmt)
        return [StoredQuotation.model_validate(row) for row in result.scalars().all()]

    async def add(self, quotation_data: Dict[str, Any]) -> StoredQuotation:
        row = QuotationDB(**quotation_data)
        self.session.add(row)
        try:
            await self.session.commit()
            await self.session.refresh(row)
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Erreur intégrité ajout cotação {quotation_data.get('quotation_number')} pour user {quotation_data.get('user_id')}: {e}")
            raise DuplicateQuotationNumberException(quotation_data.get("quotation_number", ""), original_exception=e)
        logger.info(f"Cotação {row.quotation_number} (ID {row.id}) ajoutée pour user {row.user_id}.")
        return StoredQuotation.model_validate(row)

    async def update_status(self, quotation_id: int, user_id: int, status: str) -> Optional[StoredQuotation]:
        row = await self._get_row(quotation_id, user_id)
        if row is None:
            logger.warning(f"Tentative MAJ statut cotação ID {quotation_id} non trouvée.")
            return None
        row.status = status
        row.updated_at = datetime.utcnow()
        await self.session.commit()
        await self.session.refresh(row)
        logger.info(f"Statut cotação ID {quotation_id} mis à jour à '{status}'.")
        return StoredQuotation.model_validate(row)

    async def delete(self, quotation_id: int, user_id: int) -> bool:
        row = await self._get_row(quotation_id, user_id)
        if row is None:
            return False
        await self.session.delete(row)
        await self.session.commit()
        logger.info(f"Cotação ID {quotation_id} supprimée.")
        return True

    async def update(self, quotation_id: int, user_id: int, changes: Dict[str, Any]) -> Optional[StoredQuotation]:
        row = await self._get_row(quotation_id, user_id)
        if row is None:
            logger.warning(f"Tentative MAJ cotação ID {quotation_id} non trouvée.")
            return None
        for field, value in changes.items():
            setattr(row, field, value)
        row.updated_at = datetime.utcnow()
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        logger.info(f"Cotação ID {quotation_id} mise à jour ({', '.join(sorted(changes)) or 'aucun champ'}).")
        return StoredQuotation.model_validate(row)

    async def last_number_with_prefix(self, prefix: str) -> Optional[str]:
        # Suffixes à 4 chiffres: l'ordre lexicographique suit l'ordre numérique
        stmt = select(func.max(QuotationDB.quotation_number)).where(
            QuotationDB.quotation_number.like(f"{prefix}%")
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
